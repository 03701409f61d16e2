"""SQLAlchemy модели базы данных."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Table,
)
from sqlalchemy.orm import relationship

from app.core.database import Base

PR_STATUS_OPEN = "OPEN"
PR_STATUS_MERGED = "MERGED"

pr_reviewers = Table(
    "pr_reviewers",
    Base.metadata,
    Column(
        "pr_id",
        String(255),
        ForeignKey("pull_requests.pull_request_id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "reviewer_id",
        String(255),
        ForeignKey("users.user_id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("assigned_at", DateTime, default=datetime.utcnow, nullable=False),
    Index("idx_pr_reviewers_reviewer", "reviewer_id"),
)


class Team(Base):
    """Модель команды."""

    __tablename__ = "teams"
    __table_args__ = ({"comment": "Команды"},)

    team_name = Column(String(255), primary_key=True, comment="Название команды")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, comment="Дата создания")

    members = relationship("User", back_populates="team", order_by="User.user_id")


class User(Base):
    """Модель пользователя."""

    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_team_active", "team_name", "is_active"),
        {"comment": "Пользователи"},
    )

    user_id = Column(String(255), primary_key=True, comment="ID пользователя")
    username = Column(String(255), nullable=False, comment="Имя пользователя")
    team_name = Column(
        String(255),
        ForeignKey("teams.team_name", ondelete="CASCADE"),
        nullable=False,
        comment="Название команды",
    )
    is_active = Column(Boolean, default=True, nullable=False, comment="Флаг активности")

    team = relationship("Team", back_populates="members")

    def __repr__(self) -> str:
        return f"User({self.user_id!r}, team={self.team_name!r}, active={self.is_active})"


class PullRequest(Base):
    """Модель Pull Request. Ревьюверы хранятся в pr_reviewers."""

    __tablename__ = "pull_requests"
    __table_args__ = (
        CheckConstraint(
            f"status IN ('{PR_STATUS_OPEN}', '{PR_STATUS_MERGED}')", name="ck_pull_requests_status"
        ),
        Index("idx_pr_author", "author_id"),
        Index("idx_pr_status", "status"),
        {"comment": "Pull Request'ы"},
    )

    pull_request_id = Column(String(255), primary_key=True, comment="ID PR")
    pull_request_name = Column(String(500), nullable=False, comment="Название PR")
    author_id = Column(
        String(255),
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
        comment="ID автора",
    )
    status = Column(String(20), default=PR_STATUS_OPEN, nullable=False, comment="OPEN или MERGED")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, comment="Дата создания")
    merged_at = Column(DateTime, nullable=True, comment="Дата merge")

    @property
    def is_merged(self) -> bool:
        return self.status == PR_STATUS_MERGED
