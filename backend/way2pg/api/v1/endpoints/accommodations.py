from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from way2pg.core.database import get_db
from way2pg.schemas.accommodation import AccommodationResponse
from way2pg.services.accommodation_service import accommodation_service

router = APIRouter()


@router.get("", response_model=List[AccommodationResponse])
async def list_accommodations(db: AsyncSession = Depends(get_db)):
    """Public listings of approved owners, newest first"""
    return await accommodation_service.list_public_accommodations(db)


@router.get("/{accommodation_id}", response_model=AccommodationResponse)
async def get_accommodation(accommodation_id: str, db: AsyncSession = Depends(get_db)):
    return await accommodation_service.get_public_accommodation(db, accommodation_id)
