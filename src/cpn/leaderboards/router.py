"""Leaderboard endpoints — /api/leaderboards."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cpn.database import get_session
from cpn.db.models import User
from cpn.leaderboards.ranking import normalize_sort_by
from cpn.leaderboards.schemas import (
    CreateGroupRequest,
    JoinGroupRequest,
    LeaderboardGroupResponse,
    LeaderboardMember,
    LeaderboardRanking,
    UpdateStatsRequest,
)
from cpn.leaderboards.service import (
    GroupNotFoundError,
    create_group,
    get_rankings,
    join_group,
    leave_group,
    list_members,
    list_my_groups,
    update_member_stats,
)
from cpn.schemas import SuccessResponse
from cpn.session.dependencies import get_current_user

logger = structlog.get_logger()

router = APIRouter(prefix="/api/leaderboards", tags=["Leaderboards"])


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------


@router.get("", response_model=list[LeaderboardGroupResponse])
async def list_groups_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[LeaderboardGroupResponse]:
    """List the groups the session user belongs to."""
    try:
        groups = await list_my_groups(db, user.id)
    except SQLAlchemyError as e:
        logger.error("leaderboards_fetch_failed", user_id=user.id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch leaderboards") from e
    return [LeaderboardGroupResponse.model_validate(g) for g in groups]


@router.post("", response_model=LeaderboardGroupResponse, status_code=201)
async def create_group_endpoint(
    body: CreateGroupRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> LeaderboardGroupResponse:
    """Create a group with the caller as its first member."""
    user_id = user.id
    try:
        group = await create_group(db, user_id, body.name, body.username)
        await db.commit()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except SQLAlchemyError as e:
        logger.error("leaderboard_create_failed", user_id=user_id, error=str(e))
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to create leaderboard group") from e
    return LeaderboardGroupResponse.model_validate(group)


@router.post("/join", response_model=LeaderboardMember, status_code=201)
async def join_group_endpoint(
    body: JoinGroupRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> LeaderboardMember:
    """Join a group by invite token."""
    user_id = user.id
    try:
        membership = await join_group(db, user_id, body.invite_token, body.username)
        await db.commit()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except SQLAlchemyError as e:
        logger.error("leaderboard_join_failed", user_id=user_id, error=str(e))
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to join leaderboard group") from e
    return LeaderboardMember.model_validate(membership)


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------


@router.get("/{group_id}", response_model=list[LeaderboardMember])
async def list_members_endpoint(
    group_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[LeaderboardMember]:
    try:
        members = await list_members(db, group_id, user.id)
    except GroupNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except SQLAlchemyError as e:
        logger.error("leaderboard_members_fetch_failed", group_id=group_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch leaderboard members") from e
    return [LeaderboardMember.model_validate(m) for m in members]


@router.put("/{group_id}", response_model=SuccessResponse)
async def update_stats_endpoint(
    group_id: str,
    body: UpdateStatsRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse:
    """Push the caller's stats snapshot into the group."""
    if body.stats is None:
        raise HTTPException(status_code=400, detail="Stats are required")

    try:
        await update_member_stats(db, group_id, user.id, body.stats)
        await db.commit()
    except GroupNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except SQLAlchemyError as e:
        logger.error("leaderboard_stats_update_failed", group_id=group_id, error=str(e))
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to update leaderboard stats") from e
    return SuccessResponse()


@router.delete("/{group_id}", response_model=SuccessResponse)
async def leave_group_endpoint(
    group_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse:
    try:
        await leave_group(db, group_id, user.id)
        await db.commit()
    except GroupNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except SQLAlchemyError as e:
        logger.error("leaderboard_leave_failed", group_id=group_id, error=str(e))
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to leave leaderboard group") from e
    return SuccessResponse()


@router.get("/{group_id}/rankings", response_model=list[LeaderboardRanking])
async def rankings_endpoint(
    group_id: str,
    sort_by: str = Query("efficiency", alias="sortBy"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[LeaderboardRanking]:
    """Rank the group's members by efficiency, costPerNut or totalNuts."""
    try:
        sort_by = normalize_sort_by(sort_by)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    try:
        return await get_rankings(db, group_id, user.id, sort_by)
    except GroupNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except SQLAlchemyError as e:
        logger.error("leaderboard_rankings_failed", group_id=group_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch leaderboard rankings") from e
