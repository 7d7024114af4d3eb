"""Request/response models for girl profiles."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from cpn.schemas import CamelModel


class Location(CamelModel):
    city: str | None = None
    country: str | None = None


class Girl(CamelModel):
    id: str
    name: str
    age: int
    nationality: str
    ethnicity: str | None = None
    hair_color: str | None = None
    location: Location | None = None
    rating: float
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


class GirlCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=128)
    age: int = Field(..., ge=18, le=120)
    nationality: str = Field(..., min_length=1, max_length=64)
    ethnicity: str | None = Field(None, max_length=64)
    hair_color: str | None = Field(None, max_length=32)
    location: Location | None = None
    rating: float = Field(..., ge=0, le=10)
    is_active: bool = True


class GirlUpdate(CamelModel):
    """Partial update. Only fields present in the body are applied."""

    name: str | None = Field(None, min_length=1, max_length=128)
    age: int | None = Field(None, ge=18, le=120)
    nationality: str | None = Field(None, min_length=1, max_length=64)
    ethnicity: str | None = Field(None, max_length=64)
    hair_color: str | None = Field(None, max_length=32)
    location: Location | None = None
    rating: float | None = Field(None, ge=0, le=10)
    is_active: bool | None = None
