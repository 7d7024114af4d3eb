"""FastAPI session dependencies."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cpn.database import get_session
from cpn.db.models import User
from cpn.session.service import get_user_by_session_token
from cpn.session.tokens import extract_session_token


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_session),
) -> User:
    """
    Resolve the session token to its user.

    Raises 401 when no token was sent or the token maps to no user.
    """
    token = extract_session_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="No session found")

    user = await get_user_by_session_token(db, token)
    if user is None:
        raise HTTPException(status_code=401, detail="No session found")
    return user
