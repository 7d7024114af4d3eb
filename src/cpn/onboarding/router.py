"""Onboarding router — /api/onboarding."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cpn.database import get_session
from cpn.db.models import User
from cpn.onboarding.schemas import OnboardingAction, OnboardingStateResponse, OnboardingUpdate
from cpn.onboarding.service import (
    clear_onboarding_state,
    complete_onboarding,
    get_or_create_onboarding_state,
    update_onboarding_state,
)
from cpn.schemas import SuccessResponse
from cpn.session.dependencies import get_current_user

logger = structlog.get_logger()

router = APIRouter(prefix="/api/onboarding", tags=["Onboarding"])


@router.get("", response_model=OnboardingStateResponse)
async def get_onboarding_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> OnboardingStateResponse:
    try:
        state = await get_or_create_onboarding_state(db, user.id)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("onboarding_fetch_failed", user_id=user.id, error=str(e))
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to fetch onboarding state") from e
    return OnboardingStateResponse.model_validate(state)


@router.put("", response_model=OnboardingStateResponse)
async def update_onboarding_endpoint(
    body: OnboardingUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> OnboardingStateResponse:
    """Partially update the onboarding state."""
    try:
        state = await update_onboarding_state(db, user.id, body)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("onboarding_update_failed", user_id=user.id, error=str(e))
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to update onboarding state") from e
    return OnboardingStateResponse.model_validate(state)


@router.post("", response_model=OnboardingStateResponse)
async def onboarding_action_endpoint(
    body: OnboardingAction,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> OnboardingStateResponse:
    """Run an onboarding action. Only "complete" is supported."""
    if body.action != "complete":
        raise HTTPException(status_code=400, detail="Invalid action")

    try:
        state = await complete_onboarding(db, user.id)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("onboarding_complete_failed", user_id=user.id, error=str(e))
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to complete onboarding") from e
    return OnboardingStateResponse.model_validate(state)


@router.delete("", response_model=SuccessResponse)
async def clear_onboarding_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse:
    try:
        await clear_onboarding_state(db, user.id)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("onboarding_clear_failed", user_id=user.id, error=str(e))
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to clear onboarding state") from e
    return SuccessResponse()
