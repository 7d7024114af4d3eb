"""Request/response schemas for user settings."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import Field

from cpn.schemas import CamelModel

Theme = Literal["dark", "darker", "midnight"]
AccentColor = Literal["yellow", "blue", "green", "red"]
DateFormat = Literal["MM/DD/YYYY", "DD/MM/YYYY", "YYYY-MM-DD"]
TimeFormat = Literal["12h", "24h"]
WeekStart = Literal["sunday", "monday"]


class SettingsResponse(CamelModel):
    id: str
    user_id: str
    display_name: str
    avatar_url: str | None = None
    theme: str
    accent_color: str
    compact_mode: bool
    animations_enabled: bool
    date_format: str
    time_format: str
    week_start: str
    privacy_settings: dict[str, Any]
    notification_settings: dict[str, Any]
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SettingsUpdate(CamelModel):
    """Partial update. The two JSON documents are merged key by key."""

    display_name: str | None = Field(None, min_length=1, max_length=64)
    avatar_url: str | None = None
    theme: Theme | None = None
    accent_color: AccentColor | None = None
    compact_mode: bool | None = None
    animations_enabled: bool | None = None
    date_format: DateFormat | None = None
    time_format: TimeFormat | None = None
    week_start: WeekStart | None = None
    privacy_settings: dict[str, Any] | None = None
    notification_settings: dict[str, Any] | None = None
