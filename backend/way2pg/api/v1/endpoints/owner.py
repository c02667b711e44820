from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from way2pg.api.v1.forms import read_listing_request
from way2pg.core.database import get_db
from way2pg.modules.auth.dependencies import AuthContext, require_owner
from way2pg.schemas.accommodation import (
    AccommodationCreate,
    AccommodationUpdate,
    AccommodationResponse,
)
from way2pg.schemas.auth import MessageResponse
from way2pg.schemas.booking import OwnerBookingResponse
from way2pg.services.accommodation_service import accommodation_service
from way2pg.services.booking_service import booking_service

router = APIRouter()


@router.get("/accommodations", response_model=List[AccommodationResponse])
async def list_my_accommodations(
    auth: AuthContext = Depends(require_owner),
    db: AsyncSession = Depends(get_db)
):
    return await accommodation_service.list_owner_accommodations(db, auth.user)


@router.post("/accommodations", response_model=AccommodationResponse, status_code=status.HTTP_201_CREATED)
async def create_accommodation(
    request: Request,
    auth: AuthContext = Depends(require_owner),
    db: AsyncSession = Depends(get_db)
):
    """Multipart form with up to 10 `images` files, or a JSON body without images"""
    data, files = await read_listing_request(request, AccommodationCreate)
    return await accommodation_service.create_accommodation(db, auth.user, data, files)


@router.put("/accommodations/{accommodation_id}", response_model=AccommodationResponse)
async def update_accommodation(
    accommodation_id: str,
    request: Request,
    auth: AuthContext = Depends(require_owner),
    db: AsyncSession = Depends(get_db)
):
    data, files = await read_listing_request(request, AccommodationUpdate)
    return await accommodation_service.update_accommodation(db, auth.user, accommodation_id, data, files)


@router.delete("/accommodations/{accommodation_id}", response_model=MessageResponse)
async def delete_accommodation(
    accommodation_id: str,
    auth: AuthContext = Depends(require_owner),
    db: AsyncSession = Depends(get_db)
):
    await accommodation_service.delete_accommodation(db, auth.user, accommodation_id)
    return MessageResponse(message="Accommodation deleted successfully")


@router.get("/bookings", response_model=List[OwnerBookingResponse])
async def list_incoming_bookings(
    auth: AuthContext = Depends(require_owner),
    db: AsyncSession = Depends(get_db)
):
    """Requests students made against this owner's listings"""
    bookings = await booking_service.list_owner_bookings(db, auth.user)
    return [OwnerBookingResponse.from_booking(booking) for booking in bookings]
