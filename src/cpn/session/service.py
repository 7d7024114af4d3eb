"""Session user lookup and creation."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from cpn.db.models import User
from cpn.session.tokens import is_valid_session_token, new_session_token

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def get_user_by_session_token(db: AsyncSession, session_token: str) -> User | None:
    """Fetch the user mapped to a session token."""
    result = await db.execute(select(User).where(User.session_token == session_token))
    return result.scalar_one_or_none()


async def create_session_user(db: AsyncSession, session_token: str | None = None) -> User:
    """Create an anonymous free-tier user for a session token, minting one if needed."""
    if session_token is None or not is_valid_session_token(session_token):
        session_token = new_session_token()

    user = User(session_token=session_token, is_anonymous=True, subscription_tier="free")
    db.add(user)
    await db.flush()
    logger.info("session_user_created", user_id=user.id)
    return user


async def get_or_create_session_user(db: AsyncSession, session_token: str | None) -> tuple[User, bool]:
    """
    Resolve the session user, creating one when the token is absent or unknown.

    An unknown token is reused for the new user when it is a valid UUID, so a
    client that minted its own token keeps it.

    Returns:
        Tuple of (user, created).
    """
    if session_token:
        user = await get_user_by_session_token(db, session_token)
        if user is not None:
            return user, False
        logger.info("session_token_unknown")

    return await create_session_user(db, session_token), True
