from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from way2pg.core.database import get_db
from way2pg.modules.auth.dependencies import AuthContext, require_student
from way2pg.schemas.booking import BookingCreate, BookingResponse
from way2pg.services.booking_service import booking_service

router = APIRouter()


@router.get("/bookings", response_model=List[BookingResponse])
async def list_my_bookings(
    auth: AuthContext = Depends(require_student),
    db: AsyncSession = Depends(get_db)
):
    bookings = await booking_service.list_student_bookings(db, auth.user)
    return [BookingResponse.from_booking(booking) for booking in bookings]


@router.post("/book", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    data: BookingCreate,
    auth: AuthContext = Depends(require_student),
    db: AsyncSession = Depends(get_db)
):
    """Send an interest request; one pending request per listing"""
    booking = await booking_service.create_booking(db, auth.user, data.accommodation, data.message)
    return BookingResponse.from_booking(booking)


@router.put("/bookings/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: str,
    auth: AuthContext = Depends(require_student),
    db: AsyncSession = Depends(get_db)
):
    booking = await booking_service.cancel_booking(db, auth.user, booking_id)
    return BookingResponse.from_booking(booking)
