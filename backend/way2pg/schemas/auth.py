from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime
import re

from way2pg.models.user import UserRole
from way2pg.utils.phone import normalize_phone_number

# At least 8 characters with upper, lower, digit and one of !@#$%^&*
PASSWORD_PATTERN = re.compile(r"^(?=.*\d)(?=.*[a-z])(?=.*[A-Z])(?=.*[!@#$%^&*]).{8,}$")
PASSWORD_RULES = (
    "Password must contain at least 8 characters, one uppercase letter, "
    "one lowercase letter, one number and one special character"
)


def check_password_strength(value: str) -> str:
    if not PASSWORD_PATTERN.match(value or ""):
        raise ValueError(PASSWORD_RULES)
    return value


class PhoneNumberMixin(BaseModel):
    phone_number: str

    @field_validator("phone_number")
    @classmethod
    def normalize_phone(cls, v: str) -> str:
        return normalize_phone_number(v)


class SignupRequest(PhoneNumberMixin):
    name: str = Field(..., min_length=2, max_length=50)
    email: Optional[EmailStr] = None
    password: str
    role: UserRole = UserRole.STUDENT
    company_name: Optional[str] = None
    business_registration: Optional[str] = None
    admin_code: Optional[str] = None
    # Phone ownership is proven client-side before signup
    is_phone_verified: bool = False

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else None

    @field_validator("password")
    @classmethod
    def strong_password(cls, v: str) -> str:
        return check_password_strength(v)

    @model_validator(mode="after")
    def validate_owner_fields(self):
        """Owners must provide business details"""
        if self.role is UserRole.OWNER:
            missing = []
            if not (self.company_name or "").strip():
                missing.append("company name")
            if not (self.business_registration or "").strip():
                missing.append("business registration")
            if missing:
                raise ValueError(f"Required fields for owners: {', '.join(missing)}")
        return self


class LoginRequest(BaseModel):
    # Normalized by the service so a bad number reads as bad credentials
    phone_number: str
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    token: str
    role: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    id: str
    name: str
    phone_number: str
    email: Optional[str] = None
    role: UserRole
    is_approved: bool
    is_phone_verified: bool
    is_email_verified: bool
    company_name: Optional[str] = None
    business_registration: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class VerifyEmailRequest(BaseModel):
    code: str = Field(..., min_length=1)


class VerifyPhoneRequest(BaseModel):
    code: str = Field(..., min_length=1)


class PhoneVerificationResponse(BaseModel):
    message: str
    success: bool = True
    code: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    phone_number: Optional[str] = None
    email: Optional[EmailStr] = None

    @model_validator(mode="after")
    def one_identifier(self):
        if not self.phone_number and not self.email:
            raise ValueError("Phone number or email is required")
        return self


class ResetPasswordRequest(BaseModel):
    token: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def strong_password(cls, v: str) -> str:
        return check_password_strength(v)


class MessageResponse(BaseModel):
    message: str
    success: bool = True
