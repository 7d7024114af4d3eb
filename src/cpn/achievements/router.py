"""Achievement endpoints — /api/achievements."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cpn.achievements.schemas import (
    AchievementProgressResponse,
    AchievementResponse,
    AchievementsListResponse,
    ProgressUpdateRequest,
    UnlockAchievementRequest,
)
from cpn.achievements.service import (
    AlreadyUnlockedError,
    list_achievements,
    list_progress,
    total_points,
    unlock_achievement,
    upsert_progress,
)
from cpn.database import get_session
from cpn.db.models import User
from cpn.session.dependencies import get_current_user

logger = structlog.get_logger()

router = APIRouter(prefix="/api/achievements", tags=["Achievements"])


@router.get("", response_model=AchievementsListResponse)
async def list_achievements_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> AchievementsListResponse:
    """Get unlocked achievements and their point total."""
    try:
        achievements = await list_achievements(db, user.id)
    except SQLAlchemyError as e:
        logger.error("achievements_fetch_failed", user_id=user.id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch achievements") from e
    return AchievementsListResponse(
        achievements=[AchievementResponse.model_validate(a) for a in achievements],
        total_points=total_points(achievements),
    )


@router.post("", response_model=AchievementResponse, status_code=201)
async def unlock_achievement_endpoint(
    body: UnlockAchievementRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> AchievementResponse:
    user_id = user.id
    try:
        achievement = await unlock_achievement(db, user_id, body)
        await db.commit()
    except AlreadyUnlockedError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except SQLAlchemyError as e:
        logger.error("achievement_unlock_failed", user_id=user_id, error=str(e))
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to unlock achievement") from e
    return AchievementResponse.model_validate(achievement)


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------


@router.get("/progress", response_model=list[AchievementProgressResponse])
async def list_progress_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[AchievementProgressResponse]:
    try:
        progress = await list_progress(db, user.id)
    except SQLAlchemyError as e:
        logger.error("achievement_progress_fetch_failed", user_id=user.id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch achievement progress") from e
    return [AchievementProgressResponse.model_validate(p) for p in progress]


@router.put("/progress", response_model=AchievementProgressResponse)
async def update_progress_endpoint(
    body: ProgressUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> AchievementProgressResponse:
    """Upsert progress toward one achievement type."""
    if not body.achievement_type or body.current_value is None or body.target_value is None:
        raise HTTPException(status_code=400, detail="Missing required fields")

    try:
        progress = await upsert_progress(
            db, user.id, body.achievement_type, body.current_value, body.target_value
        )
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("achievement_progress_update_failed", user_id=user.id, error=str(e))
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to update achievement progress") from e
    return AchievementProgressResponse.model_validate(progress)
