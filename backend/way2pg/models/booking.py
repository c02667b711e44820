from sqlalchemy import Column, DateTime, Enum as SQLEnum, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from way2pg.core.database import Base
from way2pg.core.exceptions import AlreadyCancelledError, InvalidTransitionError
from way2pg.core.types import GUID, generate_uuid

DEFAULT_BOOKING_MESSAGE = "I am interested in this accommodation. Please share more details."


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    # Declared for the owner-side flow; nothing transitions into it yet
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


# Reachable transitions. CONFIRMED has no inbound edge.
ALLOWED_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: set(),
    BookingStatus.CANCELLED: set(),
}


class Booking(Base):
    """A student's interest request against one accommodation"""
    __tablename__ = "bookings"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("users.id"), nullable=False, index=True)
    accommodation_id = Column(GUID, ForeignKey("accommodations.id"), nullable=False, index=True)

    # No unique index on (student, accommodation, pending): the duplicate
    # check in booking_service is read-then-write.
    status = Column(SQLEnum(BookingStatus), default=BookingStatus.PENDING, nullable=False)
    message = Column(Text, default=DEFAULT_BOOKING_MESSAGE, nullable=False)
    cancelled_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    student = relationship("User", back_populates="bookings", lazy="selectin")
    accommodation = relationship("Accommodation", back_populates="bookings", lazy="selectin")

    def can_transition_to(self, target: BookingStatus) -> bool:
        return target in ALLOWED_TRANSITIONS.get(BookingStatus(self.status), set())

    def cancel(self) -> None:
        """pending -> cancelled. A second cancel is an error, not a no-op."""
        if self.status == BookingStatus.CANCELLED:
            raise AlreadyCancelledError()
        if not self.can_transition_to(BookingStatus.CANCELLED):
            raise InvalidTransitionError(BookingStatus(self.status).value, BookingStatus.CANCELLED.value)
        self.status = BookingStatus.CANCELLED
        self.cancelled_at = datetime.utcnow()

    def __repr__(self):
        return f"<Booking {self.id} {self.status}>"
