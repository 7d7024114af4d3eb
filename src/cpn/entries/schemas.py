"""Request/response models for data entries."""

from __future__ import annotations

import datetime as dt

from pydantic import Field

from cpn.schemas import CamelModel


class DataEntry(CamelModel):
    id: str
    girl_id: str
    date: dt.date
    amount_spent: float = 0
    duration_minutes: int = 0
    number_of_nuts: int = 0
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None


class DataEntryCreate(CamelModel):
    girl_id: str = Field(..., min_length=1)
    date: dt.date
    amount_spent: float = Field(..., ge=0)
    duration_minutes: int = Field(..., ge=0)
    number_of_nuts: int = Field(..., ge=0)


class DataEntryUpdate(CamelModel):
    """Partial update. Only fields present in the body are applied."""

    girl_id: str | None = Field(None, min_length=1)
    date: dt.date | None = None
    amount_spent: float | None = Field(None, ge=0)
    duration_minutes: int | None = Field(None, ge=0)
    number_of_nuts: int | None = Field(None, ge=0)
