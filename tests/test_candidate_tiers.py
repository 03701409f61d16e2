"""Тесты цепочки поиска кандидатов."""

from app.db.models import User
from app.domain.reviewers.tiers import first_candidates, replacement_tiers


class FakeUserRepository:
    """Справочник пользователей в памяти, запоминает обращения."""

    def __init__(self, users: list[User]):
        self.users = users
        self.calls = []

    async def get_team_members(self, team_name):
        self.calls.append(("team", team_name))
        return [u for u in self.users if u.team_name == team_name]

    async def get_active_users_excluding_teams(self, team_names):
        self.calls.append(("others", tuple(team_names)))
        return [u for u in self.users if u.is_active and u.team_name not in team_names]


def user(user_id, team, active=True):
    return User(user_id=user_id, username=user_id, team_name=team, is_active=active)


async def test_first_tier_wins_and_later_tiers_are_not_loaded():
    repo = FakeUserRepository([user("f1", "frontend"), user("f2", "frontend"), user("b2", "backend")])
    tiers = replacement_tiers(repo, "frontend", "backend")

    candidates, tier = await first_candidates(tiers, excluded={"f1"})

    assert candidates == ["f2"]
    assert tier == "reviewer_team"
    assert repo.calls == [("team", "frontend")]


async def test_falls_back_to_author_team_before_everyone_else():
    repo = FakeUserRepository(
        [
            user("f1", "frontend"),
            user("f2", "frontend", active=False),
            user("b1", "backend"),
            user("b2", "backend"),
            user("q1", "qa"),
        ]
    )
    tiers = replacement_tiers(repo, "frontend", "backend")

    candidates, tier = await first_candidates(tiers, excluded={"f1", "b1"})

    assert candidates == ["b2"]
    assert tier == "author_team"
    assert ("others", ("frontend", "backend")) not in repo.calls


async def test_same_team_skips_author_tier():
    repo = FakeUserRepository([user("b1", "backend"), user("b2", "backend"), user("q1", "qa")])
    tiers = replacement_tiers(repo, "backend", "backend")

    assert [t.name for t in tiers] == ["reviewer_team", "other_teams"]

    candidates, tier = await first_candidates(tiers, excluded={"b1", "b2"})
    assert candidates == ["q1"]
    assert tier == "other_teams"
    assert repo.calls[-1] == ("others", ("backend",))


async def test_no_candidates_anywhere():
    repo = FakeUserRepository([user("b1", "backend"), user("q1", "qa", active=False)])
    tiers = replacement_tiers(repo, "backend", "frontend")

    candidates, tier = await first_candidates(tiers, excluded={"b1"})

    assert candidates == []
    assert tier is None
