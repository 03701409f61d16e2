"""Тесты статистики."""

import pytest

from app.domain.pull_requests.service import PullRequestService
from app.domain.stats.service import StatsService
from conftest import add_pr, add_team


@pytest.mark.asyncio
async def test_stats(session):
    await add_team(session, "backend", {"u1": True, "u2": True, "u3": True})
    await add_pr(session, "pr-1", "u1", ["u2", "u3"])
    await add_pr(session, "pr-2", "u2", ["u3"])
    await add_pr(session, "pr-3", "u3", [])
    await PullRequestService(session).merge_pr("pr-2")

    result = await StatsService(session).get_stats()

    assert result["pull_requests"] == {
        "total_prs": 3,
        "open_prs": 2,
        "merged_prs": 1,
        "prs_with_0_reviewers": 1,
        "prs_with_1_reviewer": 1,
        "prs_with_2_reviewers": 1,
        "avg_reviewers_per_pr": 1.0,
    }
    users = {u["user_id"]: u for u in result["users"]}
    assert users["u3"]["total_reviews"] == 2
    assert users["u3"]["open_reviews"] == 1
    assert users["u3"]["merged_reviews"] == 1
    assert users["u1"]["total_reviews"] == 0


@pytest.mark.asyncio
async def test_stats_cache_dropped_after_reassignment(session, mock_cache, rng):
    await add_team(session, "backend", {"u1": True, "u2": True, "u3": True})
    await add_pr(session, "pr-1", "u1", ["u2"])

    await StatsService(session).get_stats()
    assert "stats:get_stats" in mock_cache.store

    await PullRequestService(session, rng).reassign_reviewer("pr-1", "u2")
    assert "stats:get_stats" not in mock_cache.store

    users = {u["user_id"]: u for u in (await StatsService(session).get_stats())["users"]}
    assert users["u2"]["total_reviews"] == 0
    assert users["u3"]["total_reviews"] == 1
