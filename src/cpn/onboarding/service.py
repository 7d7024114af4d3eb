"""Onboarding state business logic."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, select

from cpn.db.models import OnboardingState, utcnow
from cpn.onboarding.schemas import FINAL_STEP, OnboardingUpdate

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def get_onboarding_state(db: AsyncSession, user_id: str) -> OnboardingState | None:
    result = await db.execute(select(OnboardingState).where(OnboardingState.user_id == user_id))
    return result.scalar_one_or_none()


async def get_or_create_onboarding_state(db: AsyncSession, user_id: str) -> OnboardingState:
    """Get the onboarding state, starting at step 1 if there is none."""
    state = await get_onboarding_state(db, user_id)
    if state is None:
        state = OnboardingState(user_id=user_id, current_step=1, completed_steps=[], onboarding_data={})
        db.add(state)
        await db.flush()
        await db.refresh(state)
    return state


async def update_onboarding_state(db: AsyncSession, user_id: str, data: OnboardingUpdate) -> OnboardingState:
    """
    Apply a partial update.

    Completing the flow stamps completed_at once; later updates keep the
    original timestamp.
    """
    state = await get_or_create_onboarding_state(db, user_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(state, field, value)

    if data.is_completed and state.completed_at is None:
        state.completed_at = utcnow()
        logger.info("onboarding_completed", user_id=user_id)

    await db.flush()
    await db.refresh(state)
    return state


async def complete_onboarding(db: AsyncSession, user_id: str) -> OnboardingState:
    return await update_onboarding_state(
        db, user_id, OnboardingUpdate(is_completed=True, current_step=FINAL_STEP)
    )


async def clear_onboarding_state(db: AsyncSession, user_id: str) -> None:
    """Delete the state so the flow starts over on the next read."""
    await db.execute(delete(OnboardingState).where(OnboardingState.user_id == user_id))
    await db.flush()
    logger.info("onboarding_cleared", user_id=user_id)
