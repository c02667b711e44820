# Re-export all models for convenient imports
from way2pg.models.user import User, UserRole, StudentProfile, OwnerProfile, AdminProfile
from way2pg.models.accommodation import (
    Accommodation,
    AccommodationImage,
    AccommodationType,
    AccommodationStatus,
    RoomType,
    GenderPolicy,
    Furnishing,
)
from way2pg.models.booking import Booking, BookingStatus, DEFAULT_BOOKING_MESSAGE

__all__ = [
    # User
    "User",
    "UserRole",
    "StudentProfile",
    "OwnerProfile",
    "AdminProfile",
    # Accommodation
    "Accommodation",
    "AccommodationImage",
    "AccommodationType",
    "AccommodationStatus",
    "RoomType",
    "GenderPolicy",
    "Furnishing",
    # Booking
    "Booking",
    "BookingStatus",
    "DEFAULT_BOOKING_MESSAGE",
]
