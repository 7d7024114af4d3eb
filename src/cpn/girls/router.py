"""Girl profile endpoints — /api/girls."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cpn.database import get_session
from cpn.db import models
from cpn.girls.schemas import Girl, GirlCreate, GirlUpdate, Location
from cpn.girls.service import create_girl, delete_girl, get_girl, list_girls, update_girl
from cpn.schemas import SuccessResponse
from cpn.session.dependencies import get_current_user

logger = structlog.get_logger()

router = APIRouter(prefix="/api/girls", tags=["Girls"])


def girl_response(girl: models.Girl) -> Girl:
    """Build the camelCase Girl from its row, nesting the location columns."""
    location = None
    if girl.location_city or girl.location_country:
        location = Location(city=girl.location_city, country=girl.location_country)
    return Girl(
        id=girl.id,
        name=girl.name,
        age=girl.age,
        nationality=girl.nationality,
        ethnicity=girl.ethnicity,
        hair_color=girl.hair_color,
        location=location,
        rating=girl.rating,
        is_active=girl.is_active,
        created_at=girl.created_at,
        updated_at=girl.updated_at,
    )


@router.get("", response_model=list[Girl])
async def list_girls_endpoint(
    user: models.User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[Girl]:
    """List the session user's girls, newest first."""
    try:
        girls = await list_girls(db, user.id)
    except SQLAlchemyError as e:
        logger.error("girls_fetch_failed", user_id=user.id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch girls") from e
    return [girl_response(g) for g in girls]


@router.post("", response_model=Girl, status_code=201)
async def create_girl_endpoint(
    body: GirlCreate,
    user: models.User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> Girl:
    """Create a girl."""
    try:
        girl = await create_girl(db, user.id, body)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("girl_create_failed", user_id=user.id, error=str(e))
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to create girl") from e
    return girl_response(girl)


@router.get("/{girl_id}", response_model=Girl)
async def get_girl_endpoint(
    girl_id: str,
    user: models.User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> Girl:
    """Get one girl."""
    girl = await get_girl(db, user.id, girl_id)
    if girl is None:
        raise HTTPException(status_code=404, detail="Girl not found")
    return girl_response(girl)


@router.put("/{girl_id}", response_model=Girl)
async def update_girl_endpoint(
    girl_id: str,
    body: GirlUpdate,
    user: models.User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> Girl:
    """Partially update a girl."""
    girl = await get_girl(db, user.id, girl_id)
    if girl is None:
        raise HTTPException(status_code=404, detail="Girl not found")

    try:
        girl = await update_girl(db, girl, body)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("girl_update_failed", girl_id=girl_id, error=str(e))
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to update girl") from e
    return girl_response(girl)


@router.delete("/{girl_id}", response_model=SuccessResponse)
async def delete_girl_endpoint(
    girl_id: str,
    user: models.User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse:
    """Delete a girl and her data entries."""
    girl = await get_girl(db, user.id, girl_id)
    if girl is None:
        raise HTTPException(status_code=404, detail="Girl not found")

    try:
        await delete_girl(db, girl)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("girl_delete_failed", girl_id=girl_id, error=str(e))
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to delete girl") from e
    return SuccessResponse()
