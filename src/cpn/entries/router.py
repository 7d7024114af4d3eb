"""Data entry endpoints — /api/data-entries."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cpn.database import get_session
from cpn.db import models
from cpn.entries.schemas import DataEntry, DataEntryCreate, DataEntryUpdate
from cpn.entries.service import (
    GirlNotFoundError,
    create_entry,
    delete_entry,
    get_entry,
    list_entries,
    update_entry,
)
from cpn.schemas import SuccessResponse
from cpn.session.dependencies import get_current_user

logger = structlog.get_logger()

router = APIRouter(prefix="/api/data-entries", tags=["Data Entries"])


def entry_response(entry: models.DataEntry) -> DataEntry:
    return DataEntry(
        id=entry.id,
        girl_id=entry.girl_id,
        date=entry.entry_date,
        amount_spent=entry.amount_spent,
        duration_minutes=entry.duration_minutes,
        number_of_nuts=entry.number_of_nuts,
        created_at=entry.created_at,
        updated_at=entry.updated_at,
    )


@router.get("", response_model=list[DataEntry])
async def list_entries_endpoint(
    girl_id: str | None = Query(None, alias="girlId"),
    user: models.User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[DataEntry]:
    """List the session user's entries, optionally for a single girl."""
    try:
        entries = await list_entries(db, user.id, girl_id)
    except SQLAlchemyError as e:
        logger.error("data_entries_fetch_failed", user_id=user.id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch data entries") from e
    return [entry_response(e) for e in entries]


@router.post("", response_model=DataEntry, status_code=201)
async def create_entry_endpoint(
    body: DataEntryCreate,
    user: models.User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> DataEntry:
    """Create a data entry for one of the user's girls."""
    try:
        entry = await create_entry(db, user.id, body)
        await db.commit()
    except GirlNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except SQLAlchemyError as e:
        logger.error("data_entry_create_failed", user_id=user.id, error=str(e))
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to create data entry") from e
    return entry_response(entry)


@router.get("/{entry_id}", response_model=DataEntry)
async def get_entry_endpoint(
    entry_id: str,
    user: models.User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> DataEntry:
    entry = await get_entry(db, user.id, entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Data entry not found")
    return entry_response(entry)


@router.put("/{entry_id}", response_model=DataEntry)
async def update_entry_endpoint(
    entry_id: str,
    body: DataEntryUpdate,
    user: models.User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> DataEntry:
    """Partially update a data entry."""
    entry = await get_entry(db, user.id, entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Data entry not found")

    try:
        entry = await update_entry(db, user.id, entry, body)
        await db.commit()
    except GirlNotFoundError as e:
        await db.rollback()
        raise HTTPException(status_code=404, detail=str(e)) from e
    except SQLAlchemyError as e:
        logger.error("data_entry_update_failed", entry_id=entry_id, error=str(e))
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to update data entry") from e
    return entry_response(entry)


@router.delete("/{entry_id}", response_model=SuccessResponse)
async def delete_entry_endpoint(
    entry_id: str,
    user: models.User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse:
    entry = await get_entry(db, user.id, entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Data entry not found")

    try:
        await delete_entry(db, entry)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("data_entry_delete_failed", entry_id=entry_id, error=str(e))
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to delete data entry") from e
    return SuccessResponse()
