"""
Booking Service - student requests against accommodations

Handles:
- Creating a pending request (one pending request per student and listing)
- Cancelling a pending request
- Listing a student's requests and an owner's incoming requests
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from way2pg.core.exceptions import (
    AccommodationNotFoundError,
    BookingNotFoundError,
    DuplicateRequestError,
)
from way2pg.core.logging_config import logger
from way2pg.core.types import is_valid_uuid
from way2pg.models.accommodation import Accommodation
from way2pg.models.booking import Booking, BookingStatus, DEFAULT_BOOKING_MESSAGE
from way2pg.models.user import User
from way2pg.services.email_service import email_service


class BookingService:
    """Service for the booking lifecycle"""

    def __init__(self, mailer=None):
        self.mailer = mailer or email_service

    async def get_student_booking(self, db: AsyncSession, student: User, booking_id: str) -> Booking:
        """
        Fetch a booking that belongs to `student`.

        A booking owned by someone else is reported exactly like a missing one.
        """
        if not is_valid_uuid(booking_id):
            raise BookingNotFoundError(booking_id)
        result = await db.execute(
            select(Booking).where(Booking.id == booking_id, Booking.student_id == student.id)
        )
        booking = result.scalar_one_or_none()
        if not booking:
            raise BookingNotFoundError(booking_id)
        return booking

    async def find_pending(self, db: AsyncSession, student_id: str, accommodation_id: str) -> Optional[Booking]:
        result = await db.execute(
            select(Booking).where(
                Booking.student_id == student_id,
                Booking.accommodation_id == accommodation_id,
                Booking.status == BookingStatus.PENDING,
            )
        )
        return result.scalars().first()

    async def create_booking(
        self,
        db: AsyncSession,
        student: User,
        accommodation_id: str,
        message: Optional[str] = None,
    ) -> Booking:
        """
        Create a pending booking.

        The duplicate check and the insert are two separate statements; two
        concurrent identical requests can both succeed.
        """
        accommodation = None
        if is_valid_uuid(accommodation_id):
            result = await db.execute(select(Accommodation).where(Accommodation.id == accommodation_id))
            accommodation = result.scalar_one_or_none()
        if not accommodation:
            raise AccommodationNotFoundError(accommodation_id)

        if await self.find_pending(db, student.id, accommodation.id):
            logger.log_booking_event(
                "create", booking_id="-", success=False, reason="duplicate_pending",
                accommodation_id=accommodation.id,
            )
            raise DuplicateRequestError()

        booking = Booking(
            student=student,
            accommodation=accommodation,
            status=BookingStatus.PENDING,
            message=message or DEFAULT_BOOKING_MESSAGE,
        )
        db.add(booking)
        await db.commit()

        logger.log_booking_event("create", booking_id=booking.id, accommodation_id=accommodation.id)

        await self.notify_owner(booking)
        return booking

    async def notify_owner(self, booking: Booking) -> bool:
        """Best effort; the booking stands whether or not the mail goes out"""
        owner = booking.accommodation.owner
        student = booking.student
        sent = await self.mailer.send_owner_notification(
            owner.email if owner else None,
            student_name=student.name,
            student_phone=student.phone_number,
            student_email=student.email,
            accommodation_name=booking.accommodation.name,
        )
        if not sent:
            logger.warning(f"[Booking] Owner notification not delivered for booking {booking.id}")
        return sent

    async def cancel_booking(self, db: AsyncSession, student: User, booking_id: str) -> Booking:
        booking = await self.get_student_booking(db, student, booking_id)
        booking.cancel()
        booking.updated_at = datetime.utcnow()
        await db.commit()

        logger.log_booking_event("cancel", booking_id=booking.id)
        return booking

    async def list_student_bookings(self, db: AsyncSession, student: User) -> List[Booking]:
        """Newest first"""
        result = await db.execute(
            select(Booking)
            .where(Booking.student_id == student.id)
            .order_by(Booking.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_owner_bookings(self, db: AsyncSession, owner: User) -> List[Booking]:
        """Requests across every listing the owner holds, newest first"""
        result = await db.execute(
            select(Booking)
            .join(Accommodation, Booking.accommodation_id == Accommodation.id)
            .where(Accommodation.owner_id == owner.id)
            .order_by(Booking.created_at.desc())
        )
        return list(result.scalars().all())


# Singleton instance
booking_service = BookingService()
