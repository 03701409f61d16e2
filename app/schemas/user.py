"""Схемы для пользователей."""

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.pr import PullRequestShortSchema


class UserSchema(BaseModel):
    """Схема пользователя."""

    user_id: str
    username: str
    team_name: str
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class UserResponse(BaseModel):
    """Ответ с пользователем."""

    user: UserSchema


class SetIsActiveRequest(BaseModel):
    """Запрос на установку флага активности."""

    user_id: str = Field(min_length=1)
    is_active: bool


class GetReviewsResponse(BaseModel):
    """Ответ со списком PR'ов пользователя."""

    user_id: str
    pull_requests: list[PullRequestShortSchema]
