"""Request/response schemas for achievements and achievement progress."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from cpn.schemas import CamelModel


class AchievementResponse(CamelModel):
    id: str
    user_id: str
    achievement_type: str
    achievement_id: str
    tier: str
    title: str
    description: str = ""
    icon: str = ""
    points: int = 0
    unlocked_at: datetime | None = None
    created_at: datetime | None = None


class AchievementsListResponse(CamelModel):
    achievements: list[AchievementResponse]
    total_points: int


class UnlockAchievementRequest(CamelModel):
    achievement_type: str = Field(..., min_length=1, max_length=64)
    achievement_id: str = Field(..., min_length=1, max_length=64)
    tier: str = Field(..., min_length=1, max_length=16)
    title: str = Field(..., min_length=1, max_length=128)
    description: str = ""
    icon: str = Field("", max_length=32)
    points: int = Field(0, ge=0)


class AchievementProgressResponse(CamelModel):
    id: str
    user_id: str
    achievement_type: str
    current_value: float
    target_value: float
    last_checked: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProgressUpdateRequest(CamelModel):
    """All three fields are required; the router reports a single message when any is missing."""

    achievement_type: str | None = None
    current_value: float | None = None
    target_value: float | None = None
