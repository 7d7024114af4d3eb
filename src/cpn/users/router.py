"""User settings router — /api/settings."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cpn.database import get_session
from cpn.db.models import User
from cpn.session.dependencies import get_current_user
from cpn.users.schemas import SettingsResponse, SettingsUpdate
from cpn.users.service import get_user_settings, update_user_settings

logger = structlog.get_logger()

router = APIRouter(prefix="/api/settings", tags=["Settings"])


@router.get("", response_model=SettingsResponse)
async def get_settings_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> SettingsResponse:
    """Get user settings, creating the defaults on first access."""
    try:
        settings = await get_user_settings(db, user.id)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("settings_fetch_failed", user_id=user.id, error=str(e))
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to fetch settings") from e
    return SettingsResponse.model_validate(settings)


@router.put("", response_model=SettingsResponse)
async def update_settings_endpoint(
    body: SettingsUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> SettingsResponse:
    """Partially update settings."""
    try:
        settings = await update_user_settings(db, user.id, body)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("settings_update_failed", user_id=user.id, error=str(e))
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to update settings") from e
    return SettingsResponse.model_validate(settings)
