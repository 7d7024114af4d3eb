"""Achievement unlocks with duplicate prevention, and progress tracking."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cpn.achievements.schemas import UnlockAchievementRequest
from cpn.db.models import Achievement, AchievementProgress, utcnow

logger = logging.getLogger(__name__)


class AlreadyUnlockedError(ValueError):
    """The user already holds this achievement."""


async def list_achievements(db: AsyncSession, user_id: str) -> Sequence[Achievement]:
    """A user's unlocked achievements, most recent first."""
    result = await db.execute(
        select(Achievement)
        .where(Achievement.user_id == user_id)
        .order_by(Achievement.unlocked_at.desc())
    )
    return result.scalars().all()


def total_points(achievements: Sequence[Achievement]) -> int:
    return sum(a.points for a in achievements)


async def has_achievement(db: AsyncSession, user_id: str, achievement_id: str) -> bool:
    """Check if user already unlocked a specific achievement."""
    result = await db.execute(
        select(Achievement.id).where(
            Achievement.user_id == user_id,
            Achievement.achievement_id == achievement_id,
        )
    )
    return result.scalar_one_or_none() is not None


async def unlock_achievement(
    db: AsyncSession,
    user_id: str,
    data: UnlockAchievementRequest,
) -> Achievement:
    """Unlock an achievement for a user.

    Raises:
        AlreadyUnlockedError: If the (user, achievement_id) pair already exists,
            including when a concurrent request inserted it first.
    """
    if await has_achievement(db, user_id, data.achievement_id):
        raise AlreadyUnlockedError("Achievement already unlocked")

    now = utcnow()
    achievement = Achievement(
        user_id=user_id,
        achievement_type=data.achievement_type,
        achievement_id=data.achievement_id,
        tier=data.tier,
        title=data.title,
        description=data.description,
        icon=data.icon,
        points=data.points,
        unlocked_at=now,
        created_at=now,
    )
    db.add(achievement)

    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise AlreadyUnlockedError("Achievement already unlocked") from e

    logger.info("Achievement %s unlocked for user %s (+%d points)", data.achievement_id, user_id, data.points)
    return achievement


async def list_progress(db: AsyncSession, user_id: str) -> Sequence[AchievementProgress]:
    result = await db.execute(
        select(AchievementProgress)
        .where(AchievementProgress.user_id == user_id)
        .order_by(AchievementProgress.achievement_type)
    )
    return result.scalars().all()


async def upsert_progress(
    db: AsyncSession,
    user_id: str,
    achievement_type: str,
    current_value: float,
    target_value: float,
) -> AchievementProgress:
    """Insert or overwrite the progress row for (user, achievement_type)."""
    result = await db.execute(
        select(AchievementProgress).where(
            AchievementProgress.user_id == user_id,
            AchievementProgress.achievement_type == achievement_type,
        )
    )
    progress = result.scalar_one_or_none()

    now = utcnow()
    if progress is None:
        progress = AchievementProgress(user_id=user_id, achievement_type=achievement_type)
        db.add(progress)

    progress.current_value = current_value
    progress.target_value = target_value
    progress.last_checked = now

    await db.flush()
    await db.refresh(progress)
    return progress
