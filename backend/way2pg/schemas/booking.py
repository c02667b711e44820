from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime

from way2pg.models.booking import BookingStatus
from way2pg.schemas.accommodation import AccommodationSnapshot


class BookingCreate(BaseModel):
    accommodation: str = Field(..., min_length=1, description="Accommodation ID")
    message: Optional[str] = Field(None, max_length=2000)

    @field_validator("message")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class StudentContact(BaseModel):
    id: str
    name: str
    phone_number: str
    email: Optional[str] = None

    class Config:
        from_attributes = True


class BookingResponse(BaseModel):
    id: str
    student: str
    accommodation: AccommodationSnapshot
    status: BookingStatus
    message: str
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_booking(cls, booking) -> "BookingResponse":
        return cls(
            id=booking.id,
            student=booking.student_id,
            accommodation=AccommodationSnapshot.model_validate(booking.accommodation),
            status=booking.status,
            message=booking.message,
            cancelled_at=booking.cancelled_at,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )


class OwnerBookingResponse(BookingResponse):
    """Booking as seen by the accommodation's owner"""
    student_contact: StudentContact

    @classmethod
    def from_booking(cls, booking) -> "OwnerBookingResponse":
        base = BookingResponse.from_booking(booking)
        return cls(
            **base.model_dump(),
            student_contact=StudentContact.model_validate(booking.student),
        )
