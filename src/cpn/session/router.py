"""Session endpoints — /api/session."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cpn.config import get_settings
from cpn.database import get_session
from cpn.session.schemas import SessionResponse
from cpn.session.service import get_or_create_session_user, get_user_by_session_token
from cpn.session.tokens import extract_session_token

logger = structlog.get_logger()

router = APIRouter(prefix="/api/session", tags=["Session"])


@router.post("", response_model=SessionResponse)
async def create_session(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_session),
) -> SessionResponse:
    """Return the caller's session, creating the user when the token is missing or stale."""
    token = extract_session_token(request)
    try:
        user, created = await get_or_create_session_user(db, token)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("session_create_failed", error=str(e))
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to create session") from e

    if created:
        response.status_code = 201
    if user.session_token != token:
        settings = get_settings()
        response.set_cookie(
            settings.session_cookie_name,
            user.session_token,
            max_age=settings.session_cookie_max_age_days * 24 * 60 * 60,
            path="/",
            samesite="lax",
            secure=settings.session_cookie_secure,
        )
    return SessionResponse(user_id=user.id, session_token=user.session_token)


@router.get("", response_model=SessionResponse)
async def get_current_session(
    request: Request,
    db: AsyncSession = Depends(get_session),
) -> SessionResponse:
    """Look up the caller's session without creating one."""
    token = extract_session_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="No session found")

    user = await get_user_by_session_token(db, token)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid session")
    return SessionResponse(user_id=user.id, session_token=user.session_token)
