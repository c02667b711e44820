from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Any
from datetime import datetime
import json

from way2pg.models.accommodation import (
    AccommodationType,
    AccommodationStatus,
    RoomType,
    GenderPolicy,
    Furnishing,
)


def parse_string_list(v: Any) -> List[str]:
    """Accept a list, a JSON array string, or a comma-separated string"""
    if v is None or v == "":
        return []
    if isinstance(v, str):
        v = v.strip()
        if v.startswith('['):
            try:
                v = json.loads(v)
            except json.JSONDecodeError:
                raise ValueError("Expected a JSON array of strings")
        else:
            v = v.split(',')
    if not isinstance(v, (list, tuple, set)):
        raise ValueError("Expected a list of strings")
    seen = []
    for item in v:
        item = str(item).strip()
        if item and item not in seen:
            seen.append(item)
    return seen


class ImageRef(BaseModel):
    url: str
    public_id: str

    class Config:
        from_attributes = True


class AccommodationFields(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1, max_length=500)
    city: str = Field(..., min_length=1, max_length=100)
    price: float = Field(..., ge=0)
    type: AccommodationType
    room_type: RoomType
    gender: GenderPolicy
    furnishing: Furnishing
    capacity: int = Field(..., ge=1)
    security_deposit: float = Field(..., ge=0)
    amenities: List[str] = []
    rules: List[str] = []
    map_link: Optional[str] = None
    food_available: bool = False
    food_price: Optional[float] = Field(None, ge=0)
    maintenance_charges: float = Field(0, ge=0)
    electricity_included: bool = False
    water_included: bool = False
    notice_period: int = Field(30, ge=0)

    @field_validator("amenities", "rules", mode="before")
    @classmethod
    def split_lists(cls, v):
        return parse_string_list(v)

    @model_validator(mode="after")
    def drop_food_price_without_food(self):
        if not self.food_available:
            self.food_price = None
        return self


class AccommodationCreate(AccommodationFields):
    # Only honoured for admins creating a listing on an owner's behalf
    owner_id: Optional[str] = None


class AccommodationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1, max_length=500)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, ge=0)
    type: Optional[AccommodationType] = None
    room_type: Optional[RoomType] = None
    gender: Optional[GenderPolicy] = None
    furnishing: Optional[Furnishing] = None
    capacity: Optional[int] = Field(None, ge=1)
    security_deposit: Optional[float] = Field(None, ge=0)
    amenities: Optional[List[str]] = None
    rules: Optional[List[str]] = None
    map_link: Optional[str] = None
    food_available: Optional[bool] = None
    food_price: Optional[float] = Field(None, ge=0)
    maintenance_charges: Optional[float] = Field(None, ge=0)
    electricity_included: Optional[bool] = None
    water_included: Optional[bool] = None
    notice_period: Optional[int] = Field(None, ge=0)
    status: Optional[AccommodationStatus] = None
    # public_ids of existing images to release
    removed_images: List[str] = []

    @field_validator("amenities", "rules", mode="before")
    @classmethod
    def split_lists(cls, v):
        if v is None:
            return None
        return parse_string_list(v)

    @field_validator("removed_images", mode="before")
    @classmethod
    def split_removed(cls, v):
        return parse_string_list(v)


class OwnerSummary(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    is_approved: bool

    class Config:
        from_attributes = True


class AccommodationResponse(AccommodationFields):
    id: str
    owner_id: str
    owner: Optional[OwnerSummary] = None
    images: List[ImageRef] = []
    status: AccommodationStatus
    rating: float
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AccommodationSnapshot(BaseModel):
    """What a booking shows of its accommodation"""
    id: str
    name: str
    address: str
    images: List[ImageRef] = []

    class Config:
        from_attributes = True
