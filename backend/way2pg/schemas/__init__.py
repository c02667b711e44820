# Pydantic schemas
from way2pg.schemas.auth import (
    SignupRequest,
    LoginRequest,
    TokenResponse,
    UserResponse,
    VerifyEmailRequest,
    VerifyPhoneRequest,
    PhoneVerificationResponse,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    MessageResponse,
)
from way2pg.schemas.accommodation import (
    ImageRef,
    AccommodationCreate,
    AccommodationUpdate,
    AccommodationResponse,
    AccommodationSnapshot,
    OwnerSummary,
)
from way2pg.schemas.booking import (
    BookingCreate,
    BookingResponse,
    OwnerBookingResponse,
    StudentContact,
)
from way2pg.schemas.admin import DashboardStats, AdminUsersResponse
