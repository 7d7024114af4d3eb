"""Leaderboard group business logic.

Rules:
- Groups are private and joined by a server-generated invite token
- The creator is the first member (username defaults to "Player")
- One membership per (group, user); member_count is kept in step
- Groups hold at most ``leaderboard_max_members`` members
- The last member leaving deletes the group
- Members push their own stats snapshot; the last write wins
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cpn.config import get_settings
from cpn.db.models import LeaderboardGroup, LeaderboardMembership, empty_stats_cache, is_uuid, utcnow
from cpn.leaderboards.invite_tokens import generate_unique_invite_token, normalize_invite_token
from cpn.leaderboards.ranking import rank_members
from cpn.leaderboards.schemas import LeaderboardMember, LeaderboardRanking
from cpn.metrics.schemas import LeaderboardStats

logger = logging.getLogger(__name__)

DEFAULT_USERNAME = "Player"
JOIN_FAILED = "Failed to join group. Invalid token or already a member."


class GroupNotFoundError(LookupError):
    """The group does not exist or the user is not a member of it."""


async def get_group(db: AsyncSession, group_id: str) -> LeaderboardGroup | None:
    if not is_uuid(group_id):
        return None
    result = await db.execute(select(LeaderboardGroup).where(LeaderboardGroup.id == group_id))
    return result.scalar_one_or_none()


async def get_membership(db: AsyncSession, group_id: str, user_id: str) -> LeaderboardMembership | None:
    """Get a user's membership in a group (if any)."""
    if not is_uuid(group_id):
        return None
    result = await db.execute(
        select(LeaderboardMembership).where(
            LeaderboardMembership.group_id == group_id,
            LeaderboardMembership.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def _require_membership(db: AsyncSession, group_id: str, user_id: str) -> LeaderboardMembership:
    membership = await get_membership(db, group_id, user_id)
    if membership is None:
        raise GroupNotFoundError("Group not found")
    return membership


async def list_my_groups(db: AsyncSession, user_id: str) -> Sequence[LeaderboardGroup]:
    """Groups the user belongs to, newest first."""
    result = await db.execute(
        select(LeaderboardGroup)
        .join(LeaderboardMembership, LeaderboardMembership.group_id == LeaderboardGroup.id)
        .where(LeaderboardMembership.user_id == user_id)
        .order_by(LeaderboardGroup.created_at.desc())
    )
    return result.scalars().all()


async def create_group(
    db: AsyncSession,
    user_id: str,
    name: str,
    username: str | None = None,
) -> LeaderboardGroup:
    """Create a new group. The creator becomes its first member."""
    name = name.strip()
    if not name:
        raise ValueError("Group name is required")

    now = utcnow()
    group = LeaderboardGroup(
        name=name,
        created_by=user_id,
        invite_token=await generate_unique_invite_token(db),
        is_private=True,
        member_count=1,
        created_at=now,
        updated_at=now,
    )
    db.add(group)
    await db.flush()

    db.add(
        LeaderboardMembership(
            group_id=group.id,
            user_id=user_id,
            username=(username or "").strip() or DEFAULT_USERNAME,
            stats_cache=empty_stats_cache(),
            joined_at=now,
            last_updated=now,
        )
    )
    await db.flush()

    logger.info("Leaderboard group created: %s (id=%s, owner=%s)", name, group.id, user_id)
    return group


async def join_group(
    db: AsyncSession,
    user_id: str,
    invite_token: str,
    username: str,
) -> LeaderboardMembership:
    """Join a group using an invite token."""
    username = username.strip()
    if not invite_token.strip() or not username:
        raise ValueError("Invite token and username are required")

    result = await db.execute(
        select(LeaderboardGroup).where(LeaderboardGroup.invite_token == normalize_invite_token(invite_token))
    )
    group = result.scalar_one_or_none()
    if group is None:
        raise ValueError(JOIN_FAILED)

    if await get_membership(db, group.id, user_id) is not None:
        raise ValueError(JOIN_FAILED)

    max_members = get_settings().leaderboard_max_members
    if group.member_count >= max_members:
        raise ValueError(f"This group is full ({max_members} members maximum)")

    now = utcnow()
    membership = LeaderboardMembership(
        group_id=group.id,
        user_id=user_id,
        username=username,
        stats_cache=empty_stats_cache(),
        joined_at=now,
        last_updated=now,
    )
    db.add(membership)

    group.member_count += 1
    group.updated_at = now

    await db.flush()
    logger.info("User %s joined leaderboard group %s via invite token", user_id, group.id)
    return membership


async def list_members(db: AsyncSession, group_id: str, user_id: str) -> Sequence[LeaderboardMembership]:
    """Members of a group the user belongs to, most recently updated first."""
    await _require_membership(db, group_id, user_id)
    result = await db.execute(
        select(LeaderboardMembership)
        .where(LeaderboardMembership.group_id == group_id)
        .order_by(LeaderboardMembership.last_updated.desc())
    )
    return result.scalars().all()


async def update_member_stats(
    db: AsyncSession,
    group_id: str,
    user_id: str,
    stats: LeaderboardStats,
) -> LeaderboardMembership:
    """Overwrite the user's cached stats in a group."""
    membership = await _require_membership(db, group_id, user_id)
    membership.stats_cache = stats.model_dump(by_alias=True)
    membership.last_updated = utcnow()
    await db.flush()
    return membership


async def leave_group(db: AsyncSession, group_id: str, user_id: str) -> None:
    """Leave a group, deleting it when no members remain."""
    membership = await _require_membership(db, group_id, user_id)
    group = await get_group(db, group_id)
    if group is None:
        raise GroupNotFoundError("Group not found")

    await db.delete(membership)
    group.member_count = max(group.member_count - 1, 0)
    if group.member_count == 0:
        await db.delete(group)
        logger.info("Leaderboard group %s deleted after last member left", group_id)
    else:
        group.updated_at = utcnow()

    await db.flush()
    logger.info("User %s left leaderboard group %s", user_id, group_id)


async def get_rankings(
    db: AsyncSession,
    group_id: str,
    user_id: str,
    sort_by: str = "efficiency",
) -> list[LeaderboardRanking]:
    """Rank a group's members by their cached stats."""
    memberships = await list_members(db, group_id, user_id)
    return rank_members([LeaderboardMember.model_validate(m) for m in memberships], sort_by)
