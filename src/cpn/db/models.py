"""ORM models for the CPN schema.

Column names mirror the snake_case tables created by Alembic revision
001_initial_schema. Types are kept portable (generic Uuid, JSON with a JSONB
variant) so the same models run on PostgreSQL and on SQLite in tests.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cpn.db.base import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")


def _uuid() -> str:
    return str(uuid.uuid4())


def is_uuid(value: str) -> bool:
    """Primary keys are UUIDs; anything else cannot match a row."""
    try:
        uuid.UUID(value)
    except (TypeError, ValueError):
        return False
    return True


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Anonymous user identified by a per-client session token."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=_uuid)
    session_token: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    auth_provider_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    subscription_tier: Mapped[str] = mapped_column(String(16), nullable=False, default="free")
    is_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    girls: Mapped[list[Girl]] = relationship("Girl", back_populates="user", passive_deletes=True)
    settings: Mapped[UserSettings | None] = relationship("UserSettings", back_populates="user", uselist=False)


# ---------------------------------------------------------------------------
# Girls & data entries
# ---------------------------------------------------------------------------


class Girl(Base):
    """A tracked profile owned by exactly one user."""

    __tablename__ = "girls"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    nationality: Mapped[str] = mapped_column(String(64), nullable=False)
    ethnicity: Mapped[str | None] = mapped_column(String(64), nullable=True)
    hair_color: Mapped[str | None] = mapped_column(String(32), nullable=True)
    location_city: Mapped[str | None] = mapped_column(String(128), nullable=True)
    location_country: Mapped[str | None] = mapped_column(String(128), nullable=True)
    rating: Mapped[float] = mapped_column(Float, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    user: Mapped[User] = relationship("User", back_populates="girls")


class DataEntry(Base):
    """A dated spend/time/activity record against a girl."""

    __tablename__ = "data_entries"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    girl_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("girls.id", ondelete="CASCADE"), nullable=False, index=True
    )
    entry_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    amount_spent: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    number_of_nuts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


# ---------------------------------------------------------------------------
# Settings & onboarding
# ---------------------------------------------------------------------------


def default_privacy_settings() -> dict[str, Any]:
    return {
        "leaderboardVisibility": "friends",
        "showRealName": False,
        "showProfileStats": True,
        "allowInvitations": True,
        "shareAchievements": True,
        "shareSpendingData": False,
        "shareEfficiencyMetrics": True,
        "shareActivityFrequency": False,
        "anonymousMode": False,
    }


def default_notification_settings() -> dict[str, Any]:
    return {
        "leaderboardUpdates": True,
        "achievementUnlocks": True,
        "weeklySummaries": True,
        "monthlySummaries": False,
        "emailNotifications": False,
    }


class UserSettings(Base):
    """Per-user display, theme, date/time, privacy and notification preferences."""

    __tablename__ = "user_settings"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    display_name: Mapped[str] = mapped_column(String(64), nullable=False, default="CPN User")
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    theme: Mapped[str] = mapped_column(String(16), nullable=False, default="dark")
    accent_color: Mapped[str] = mapped_column(String(16), nullable=False, default="yellow")
    compact_mode: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    animations_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    date_format: Mapped[str] = mapped_column(String(16), nullable=False, default="MM/DD/YYYY")
    time_format: Mapped[str] = mapped_column(String(8), nullable=False, default="12h")
    week_start: Mapped[str] = mapped_column(String(8), nullable=False, default="monday")
    privacy_settings: Mapped[dict[str, Any]] = mapped_column(
        JSONType, nullable=False, default=default_privacy_settings
    )
    notification_settings: Mapped[dict[str, Any]] = mapped_column(
        JSONType, nullable=False, default=default_notification_settings
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    user: Mapped[User] = relationship("User", back_populates="settings")


class OnboardingState(Base):
    """Progress through the onboarding flow."""

    __tablename__ = "onboarding_state"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    current_step: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    completed_steps: Mapped[list[int]] = mapped_column(JSONType, nullable=False, default=list)
    onboarding_data: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


# ---------------------------------------------------------------------------
# Achievements
# ---------------------------------------------------------------------------


class Achievement(Base):
    """An achievement unlocked by a user."""

    __tablename__ = "achievements"
    __table_args__ = (UniqueConstraint("user_id", "achievement_id", name="achievements_user_achievement_key"),)

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    achievement_type: Mapped[str] = mapped_column(String(64), nullable=False)
    achievement_id: Mapped[str] = mapped_column(String(64), nullable=False)
    tier: Mapped[str] = mapped_column(String(16), nullable=False)
    title: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    icon: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unlocked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class AchievementProgress(Base):
    """Running progress toward an achievement type."""

    __tablename__ = "achievement_progress"
    __table_args__ = (UniqueConstraint("user_id", "achievement_type", name="achievement_progress_user_type_key"),)

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    achievement_type: Mapped[str] = mapped_column(String(64), nullable=False)
    current_value: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    target_value: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    last_checked: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


# ---------------------------------------------------------------------------
# Leaderboards
# ---------------------------------------------------------------------------


class LeaderboardGroup(Base):
    """A small private group comparing cached stats, joined by invite token."""

    __tablename__ = "leaderboard_groups"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    created_by: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    invite_token: Mapped[str] = mapped_column(String(16), unique=True, nullable=False)
    is_private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    member_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


def empty_stats_cache() -> dict[str, float]:
    return {
        "totalSpent": 0,
        "totalNuts": 0,
        "costPerNut": 0,
        "totalTime": 0,
        "totalGirls": 0,
        "efficiency": 0,
    }


class LeaderboardMembership(Base):
    """Group membership with a denormalized snapshot of the member's stats."""

    __tablename__ = "leaderboard_memberships"
    __table_args__ = (UniqueConstraint("group_id", "user_id", name="leaderboard_memberships_group_user_key"),)

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=_uuid)
    group_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("leaderboard_groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    username: Mapped[str] = mapped_column(String(64), nullable=False)
    stats_cache: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=empty_stats_cache)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
