from dataclasses import dataclass
from typing import Union
from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from way2pg.core.database import Base
from way2pg.core.exceptions import ValidationError
from way2pg.core.types import GUID, generate_uuid


class UserRole(str, enum.Enum):
    """User roles"""
    STUDENT = "student"
    OWNER = "owner"
    ADMIN = "admin"


@dataclass(frozen=True)
class StudentProfile:
    role = UserRole.STUDENT


@dataclass(frozen=True)
class AdminProfile:
    role = UserRole.ADMIN


@dataclass(frozen=True)
class OwnerProfile:
    """Owners carry business details and an admin-controlled approval flag"""
    company_name: str
    business_registration: str
    is_approved: bool
    role = UserRole.OWNER


RoleProfile = Union[StudentProfile, OwnerProfile, AdminProfile]


def default_approval(role: UserRole) -> bool:
    """Owners start unapproved; every other role is approved on creation"""
    return role is not UserRole.OWNER


class User(Base):
    """User model, keyed by normalized phone number"""
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(50), nullable=False)
    phone_number = Column(String(20), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=True)
    hashed_password = Column(String(255), nullable=False)

    role = Column(SQLEnum(UserRole), default=UserRole.STUDENT, nullable=False)

    # Owner-only
    company_name = Column(String(255), nullable=True)
    business_registration = Column(String(255), nullable=True)
    is_approved = Column(Boolean, nullable=False)

    # Advisory only; not checked at login. Both codes share one expiry.
    is_phone_verified = Column(Boolean, default=False, nullable=False)
    is_email_verified = Column(Boolean, default=False, nullable=False)
    email_verification_code = Column(String(6), nullable=True)
    phone_verification_code = Column(String(6), nullable=True)
    verification_code_expires = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    accommodations = relationship("Accommodation", back_populates="owner", passive_deletes=True)
    bookings = relationship("Booking", back_populates="student", passive_deletes=True)

    def __init__(self, **kwargs):
        role = UserRole(kwargs.get("role") or UserRole.STUDENT)
        kwargs["role"] = role
        if role is UserRole.OWNER:
            if not (kwargs.get("company_name") or "").strip() or not (kwargs.get("business_registration") or "").strip():
                raise ValidationError("Company name and business registration are required for owners")
        else:
            kwargs["company_name"] = None
            kwargs["business_registration"] = None
        if kwargs.get("is_approved") is None:
            kwargs["is_approved"] = default_approval(role)
        super().__init__(**kwargs)

    @property
    def profile(self) -> RoleProfile:
        """Role-specific view of the user; every role is handled explicitly"""
        if self.role is UserRole.STUDENT:
            return StudentProfile()
        if self.role is UserRole.ADMIN:
            return AdminProfile()
        if self.role is UserRole.OWNER:
            return OwnerProfile(
                company_name=self.company_name or "",
                business_registration=self.business_registration or "",
                is_approved=bool(self.is_approved),
            )
        raise ValueError(f"Unknown role: {self.role!r}")

    @property
    def can_operate(self) -> bool:
        """False only for owners still waiting on admin approval"""
        profile = self.profile
        if isinstance(profile, OwnerProfile):
            return profile.is_approved
        return True

    def approve(self) -> None:
        if self.role is not UserRole.OWNER:
            raise ValidationError("Only owners require approval")
        self.is_approved = True

    @property
    def role_value(self) -> str:
        return self.role.value if isinstance(self.role, UserRole) else str(self.role)

    def __repr__(self):
        return f"<User {self.phone_number} ({self.role_value})>"
