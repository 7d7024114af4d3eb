"""Request/response models for leaderboard groups."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from cpn.metrics.schemas import LeaderboardStats
from cpn.schemas import CamelModel


class LeaderboardGroupResponse(CamelModel):
    id: str
    name: str
    created_by: str
    invite_token: str
    is_private: bool
    member_count: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LeaderboardMember(CamelModel):
    id: str
    group_id: str
    user_id: str
    username: str
    stats_cache: LeaderboardStats = LeaderboardStats()
    joined_at: datetime | None = None
    last_updated: datetime | None = None
    created_at: datetime | None = None


class LeaderboardRanking(CamelModel):
    rank: int
    member: LeaderboardMember
    change: int = 0


class CreateGroupRequest(CamelModel):
    name: str = ""
    username: str | None = Field(None, max_length=64)


class JoinGroupRequest(CamelModel):
    invite_token: str = ""
    username: str = Field("", max_length=64)


class UpdateStatsRequest(CamelModel):
    stats: LeaderboardStats | None = None
