"""Request/response schemas for the onboarding flow."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from cpn.schemas import CamelModel

FINAL_STEP = 5


class OnboardingStateResponse(CamelModel):
    id: str
    user_id: str
    current_step: int
    completed_steps: list[int] = []
    onboarding_data: dict[str, Any] = {}
    is_completed: bool = False
    completed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OnboardingUpdate(CamelModel):
    current_step: int | None = Field(None, ge=1, le=FINAL_STEP)
    completed_steps: list[int] | None = None
    onboarding_data: dict[str, Any] | None = None
    is_completed: bool | None = None


class OnboardingAction(CamelModel):
    action: str = ""
