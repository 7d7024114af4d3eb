"""Girl profile business logic. Every query is scoped to the owning user."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import delete, select

from cpn.db.models import DataEntry, Girl, is_uuid
from cpn.girls.schemas import GirlCreate, GirlUpdate, Location

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

# Columns that cannot be cleared by an explicit null in an update body.
_NON_NULLABLE = frozenset({"name", "age", "nationality", "rating", "is_active"})


def _location_columns(location: Location | None) -> dict[str, str | None]:
    """Flatten the nested location into its two columns."""
    return {
        "location_city": (location.city or None) if location else None,
        "location_country": (location.country or None) if location else None,
    }


async def list_girls(db: AsyncSession, user_id: str) -> Sequence[Girl]:
    """All of a user's girls, newest first."""
    result = await db.execute(
        select(Girl).where(Girl.user_id == user_id).order_by(Girl.created_at.desc())
    )
    return result.scalars().all()


async def get_girl(db: AsyncSession, user_id: str, girl_id: str) -> Girl | None:
    """Fetch one girl if it exists and belongs to the user."""
    if not is_uuid(girl_id):
        return None
    result = await db.execute(
        select(Girl).where(Girl.id == girl_id).where(Girl.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def create_girl(db: AsyncSession, user_id: str, data: GirlCreate) -> Girl:
    """Create a girl owned by the user."""
    girl = Girl(
        user_id=user_id,
        name=data.name,
        age=data.age,
        nationality=data.nationality,
        ethnicity=data.ethnicity or None,
        hair_color=data.hair_color or None,
        rating=data.rating,
        is_active=data.is_active,
        **_location_columns(data.location),
    )
    db.add(girl)
    await db.flush()
    logger.info("girl_created", user_id=user_id, girl_id=girl.id)
    return girl


async def update_girl(db: AsyncSession, girl: Girl, data: GirlUpdate) -> Girl:
    """Apply only the fields present in the update body."""
    changes: dict[str, Any] = data.model_dump(exclude_unset=True, exclude={"location"})
    for field, value in changes.items():
        if value is None and field in _NON_NULLABLE:
            continue
        setattr(girl, field, value)
    if "location" in data.model_fields_set:
        for column, value in _location_columns(data.location).items():
            setattr(girl, column, value)

    await db.flush()
    await db.refresh(girl)
    return girl


async def delete_girl(db: AsyncSession, girl: Girl) -> None:
    """Delete a girl and her data entries.

    The foreign key cascades on PostgreSQL; entries are also removed explicitly
    so backends without enforced foreign keys end up in the same state.
    """
    await db.execute(delete(DataEntry).where(DataEntry.girl_id == girl.id))
    await db.delete(girl)
    await db.flush()
    logger.info("girl_deleted", user_id=girl.user_id, girl_id=girl.id)
