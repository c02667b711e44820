from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum, Integer, Float, Text, JSON, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from way2pg.core.database import Base
from way2pg.core.types import GUID, generate_uuid


class AccommodationType(str, enum.Enum):
    APARTMENT = "apartment"
    HOUSE = "house"
    HOSTEL = "hostel"
    PG = "pg"
    STUDIO = "studio"
    SUITE = "suite"
    DORM = "dorm"


class RoomType(str, enum.Enum):
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    STUDIO = "studio"


class GenderPolicy(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"
    ANY = "any"


class Furnishing(str, enum.Enum):
    FURNISHED = "furnished"
    SEMI_FURNISHED = "semi-furnished"
    UNFURNISHED = "unfurnished"


class AccommodationStatus(str, enum.Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    MAINTENANCE = "maintenance"


class Accommodation(Base):
    """A PG/hostel listing owned by exactly one owner"""
    __tablename__ = "accommodations"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    owner_id = Column(GUID, ForeignKey("users.id"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    address = Column(String(500), nullable=False)
    city = Column(String(100), nullable=False)
    map_link = Column(String(1000), nullable=True)

    price = Column(Float, nullable=False)
    security_deposit = Column(Float, nullable=False)
    maintenance_charges = Column(Float, default=0, nullable=False)
    food_available = Column(Boolean, default=False, nullable=False)
    food_price = Column(Float, nullable=True)  # monthly, only when food is available
    electricity_included = Column(Boolean, default=False, nullable=False)
    water_included = Column(Boolean, default=False, nullable=False)
    notice_period = Column(Integer, default=30, nullable=False)  # days

    type = Column(SQLEnum(AccommodationType), nullable=False)
    room_type = Column(SQLEnum(RoomType), nullable=False)
    gender = Column(SQLEnum(GenderPolicy), nullable=False)
    furnishing = Column(SQLEnum(Furnishing), nullable=False)
    capacity = Column(Integer, nullable=False)
    status = Column(SQLEnum(AccommodationStatus), default=AccommodationStatus.AVAILABLE, nullable=False)

    amenities = Column(JSON, default=list, nullable=False)
    rules = Column(JSON, default=list, nullable=False)
    rating = Column(Float, default=4.5, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = relationship("User", back_populates="accommodations", lazy="selectin")
    images = relationship(
        "AccommodationImage",
        back_populates="accommodation",
        cascade="all, delete-orphan",
        order_by="AccommodationImage.position",
        lazy="selectin",
    )
    bookings = relationship("Booking", back_populates="accommodation", passive_deletes=True)

    @property
    def is_publicly_visible(self) -> bool:
        return self.owner is not None and bool(self.owner.is_approved)

    def __repr__(self):
        return f"<Accommodation {self.name}>"


class AccommodationImage(Base):
    """Externally hosted image; `public_id` is the media host's delete handle"""
    __tablename__ = "accommodation_images"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    accommodation_id = Column(GUID, ForeignKey("accommodations.id", ondelete="CASCADE"), nullable=False, index=True)
    url = Column(String(1000), nullable=False)
    public_id = Column(String(500), nullable=False)
    position = Column(Integer, default=0, nullable=False)

    accommodation = relationship("Accommodation", back_populates="images")

    def __repr__(self):
        return f"<AccommodationImage {self.public_id}>"
