from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from way2pg.api.v1.forms import read_listing_request
from way2pg.core.database import get_db
from way2pg.modules.auth.dependencies import AuthContext, require_admin
from way2pg.schemas.accommodation import AccommodationCreate, AccommodationResponse
from way2pg.schemas.auth import MessageResponse
from way2pg.services.accommodation_service import accommodation_service

router = APIRouter()


@router.get("", response_model=List[AccommodationResponse])
async def list_all_accommodations(
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Every listing, including those of unapproved owners"""
    return await accommodation_service.list_all_accommodations(db)


@router.post("", response_model=AccommodationResponse, status_code=status.HTTP_201_CREATED)
async def create_accommodation_for_owner(
    request: Request,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Same payload as the owner endpoint plus `owner_id`"""
    data, files = await read_listing_request(request, AccommodationCreate)
    return await accommodation_service.create_accommodation(db, auth.user, data, files)


@router.delete("/{accommodation_id}", response_model=MessageResponse)
async def delete_accommodation(
    accommodation_id: str,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await accommodation_service.delete_accommodation(db, auth.user, accommodation_id)
    return MessageResponse(message="Accommodation deleted successfully")
