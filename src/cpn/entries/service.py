"""Data entry business logic.

An entry's girl must belong to the same user as the entry; creating an entry
for, or re-pointing one at, a girl the user does not own is rejected.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import select

from cpn.db.models import DataEntry, is_uuid
from cpn.entries.schemas import DataEntryCreate, DataEntryUpdate
from cpn.girls.service import get_girl

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

# Update body field -> column attribute.
_UPDATE_COLUMNS = {
    "girl_id": "girl_id",
    "date": "entry_date",
    "amount_spent": "amount_spent",
    "duration_minutes": "duration_minutes",
    "number_of_nuts": "number_of_nuts",
}


class GirlNotFoundError(ValueError):
    """The referenced girl does not exist or belongs to another user."""


async def list_entries(
    db: AsyncSession,
    user_id: str,
    girl_id: str | None = None,
) -> Sequence[DataEntry]:
    """A user's entries, most recent date first, optionally for one girl."""
    stmt = select(DataEntry).where(DataEntry.user_id == user_id)
    if girl_id is not None:
        if not is_uuid(girl_id):
            return []
        stmt = stmt.where(DataEntry.girl_id == girl_id)
    result = await db.execute(stmt.order_by(DataEntry.entry_date.desc(), DataEntry.created_at.desc()))
    return result.scalars().all()


async def get_entry(db: AsyncSession, user_id: str, entry_id: str) -> DataEntry | None:
    if not is_uuid(entry_id):
        return None
    result = await db.execute(
        select(DataEntry).where(DataEntry.id == entry_id).where(DataEntry.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def _require_own_girl(db: AsyncSession, user_id: str, girl_id: str) -> None:
    if await get_girl(db, user_id, girl_id) is None:
        raise GirlNotFoundError("Girl not found")


async def create_entry(db: AsyncSession, user_id: str, data: DataEntryCreate) -> DataEntry:
    """
    Create an entry against one of the user's girls.

    Raises:
        GirlNotFoundError: If the girl is unknown or owned by someone else.
    """
    await _require_own_girl(db, user_id, data.girl_id)

    entry = DataEntry(
        user_id=user_id,
        girl_id=data.girl_id,
        entry_date=data.date,
        amount_spent=data.amount_spent,
        duration_minutes=data.duration_minutes,
        number_of_nuts=data.number_of_nuts,
    )
    db.add(entry)
    await db.flush()
    logger.info("data_entry_created", user_id=user_id, entry_id=entry.id, girl_id=data.girl_id)
    return entry


async def update_entry(
    db: AsyncSession,
    user_id: str,
    entry: DataEntry,
    data: DataEntryUpdate,
) -> DataEntry:
    """
    Apply only the fields present in the update body.

    Raises:
        GirlNotFoundError: If the entry is re-pointed at a girl the user does not own.
    """
    changes: dict[str, Any] = {
        field: value for field, value in data.model_dump(exclude_unset=True).items() if value is not None
    }
    if "girl_id" in changes and changes["girl_id"] != entry.girl_id:
        await _require_own_girl(db, user_id, changes["girl_id"])

    for field, value in changes.items():
        setattr(entry, _UPDATE_COLUMNS[field], value)

    await db.flush()
    await db.refresh(entry)
    return entry


async def delete_entry(db: AsyncSession, entry: DataEntry) -> None:
    await db.delete(entry)
    await db.flush()
    logger.info("data_entry_deleted", user_id=entry.user_id, entry_id=entry.id)
