"""Invite token generation for leaderboard groups.

Tokens are short alphanumeric codes (A-Z, 0-9), generated server-side with a
cryptographic random source. Lookups are case-insensitive.
"""

from __future__ import annotations

import secrets
import string

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cpn.config import get_settings
from cpn.db.models import LeaderboardGroup

INVITE_CHARSET = string.ascii_uppercase + string.digits  # A-Z, 0-9


def generate_invite_token(length: int | None = None) -> str:
    """Generate a cryptographically random invite token."""
    if length is None:
        length = get_settings().invite_token_length
    return "".join(secrets.choice(INVITE_CHARSET) for _ in range(length))


def normalize_invite_token(token: str) -> str:
    """Normalize an invite token for case-insensitive lookup."""
    return token.strip().upper()


async def generate_unique_invite_token(db: AsyncSession) -> str:
    """Generate an invite token that doesn't already exist in the database."""
    for _ in range(10):
        token = generate_invite_token()
        existing = await db.execute(
            select(LeaderboardGroup.id).where(LeaderboardGroup.invite_token == token)
        )
        if existing.scalar_one_or_none() is None:
            return token
    raise RuntimeError("Failed to generate unique invite token after 10 attempts")
