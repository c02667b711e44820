from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from way2pg.core.config import settings
from way2pg.core.database import get_db
from way2pg.core.logging_config import logger, set_user_id
from way2pg.core.rate_limiter import auth_rate_limit
from way2pg.core.security import issue_token
from way2pg.modules.auth.dependencies import AuthContext, get_current_user
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
from way2pg.services.user_service import user_service

router = APIRouter()

RESET_REQUESTED_MESSAGE = "If an account with those details exists, a password reset email has been sent."


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
@auth_rate_limit()
async def signup(
    request: Request,
    data: SignupRequest,
    db: AsyncSession = Depends(get_db)
):
    """Create an account and return a token straight away"""
    user = await user_service.register_user(db, data)
    set_user_id(user.id)
    return TokenResponse(token=issue_token(user.id, user.role_value), role=user.role_value)


@router.post("/login", response_model=TokenResponse)
@auth_rate_limit()
async def login(
    request: Request,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """Phone number + password. Unapproved owners are refused."""
    user = await user_service.authenticate(db, credentials.phone_number, credentials.password)
    set_user_id(user.id)
    return TokenResponse(token=issue_token(user.id, user.role_value), role=user.role_value)


@router.post("/admin-login", response_model=TokenResponse)
@auth_rate_limit()
async def admin_login(
    request: Request,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    user = await user_service.authenticate(db, credentials.phone_number, credentials.password, admin_only=True)
    set_user_id(user.id)
    return TokenResponse(token=issue_token(user.id, user.role_value), role=user.role_value)


@router.get("/me", response_model=UserResponse)
async def get_me(auth: AuthContext = Depends(get_current_user)):
    return auth.user


@router.post("/send-email-verification", response_model=MessageResponse)
@auth_rate_limit()
async def send_email_verification(
    request: Request,
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    sent = await user_service.send_email_verification(db, auth.user)
    if not sent:
        logger.warning(f"[Auth] Verification code for user {auth.user_id} was not delivered")
    return MessageResponse(message="Verification code sent", success=sent)


@router.post("/verify-email", response_model=MessageResponse)
@auth_rate_limit()
async def verify_email(
    request: Request,
    data: VerifyEmailRequest,
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await user_service.verify_email(db, auth.user, data.code)
    return MessageResponse(message="Email verified successfully")


@router.post("/send-phone-verification", response_model=PhoneVerificationResponse)
@auth_rate_limit()
async def send_phone_verification(
    request: Request,
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """No SMS provider yet: the code comes back in the body unless disabled"""
    code = await user_service.send_phone_verification(db, auth.user)
    return PhoneVerificationResponse(
        message="Verification code sent",
        code=code if settings.PHONE_CODE_IN_RESPONSE else None,
    )


@router.post("/verify-phone", response_model=MessageResponse)
@auth_rate_limit()
async def verify_phone(
    request: Request,
    data: VerifyPhoneRequest,
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await user_service.verify_phone(db, auth.user, data.code)
    return MessageResponse(message="Phone number verified successfully")


@router.post("/forgot-password", response_model=MessageResponse)
@auth_rate_limit()
async def forgot_password(
    request: Request,
    data: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db)
):
    """Always answers the same way so accounts cannot be enumerated"""
    await user_service.request_password_reset(db, phone_number=data.phone_number, email=data.email)
    return MessageResponse(message=RESET_REQUESTED_MESSAGE)


@router.post("/reset-password", response_model=MessageResponse)
@auth_rate_limit()
async def reset_password(
    request: Request,
    data: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db)
):
    await user_service.reset_password(db, data.token, data.new_password)
    return MessageResponse(message="Password has been reset successfully")
