"""User settings business logic."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from cpn.db.models import UserSettings
from cpn.users.schemas import SettingsUpdate

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

_MERGED_FIELDS = ("privacy_settings", "notification_settings")


async def get_user_settings(db: AsyncSession, user_id: str) -> UserSettings:
    """Get user settings, creating defaults if they don't exist."""
    result = await db.execute(select(UserSettings).where(UserSettings.user_id == user_id))
    settings = result.scalar_one_or_none()

    if settings is None:
        settings = UserSettings(user_id=user_id)
        db.add(settings)
        await db.flush()
        await db.refresh(settings)
        logger.info("user_settings_created", user_id=user_id)

    return settings


async def update_user_settings(db: AsyncSession, user_id: str, data: SettingsUpdate) -> UserSettings:
    """
    Update user settings.

    Scalar fields are replaced; privacy and notification settings are merged
    so only the provided keys change.
    """
    settings = await get_user_settings(db, user_id)
    changes = data.model_dump(exclude_unset=True)

    for field in _MERGED_FIELDS:
        patch = changes.pop(field, None)
        if patch is not None:
            merged = dict(getattr(settings, field) or {})
            merged.update(patch)
            setattr(settings, field, merged)

    for field, value in changes.items():
        # avatar_url is the only nullable column
        if value is None and field != "avatar_url":
            continue
        setattr(settings, field, value)

    await db.flush()
    await db.refresh(settings)
    return settings
