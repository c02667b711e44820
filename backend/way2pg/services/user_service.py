"""
User Service - accounts, credentials and admin operations

Handles:
- Signup and login (phone number + password)
- Owner approval and user deletion (with cascade)
- Dashboard counts
- Email and phone verification codes, password reset
"""

from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession

from way2pg.core.config import settings
from way2pg.core.exceptions import (
    AdminCodeError,
    ApprovalPendingError,
    ConflictError,
    InvalidCredentialsError,
    InvalidTokenError,
    UserNotFoundError,
    ValidationError,
)
from way2pg.core.logging_config import logger
from way2pg.core.security import (
    generate_verification_code,
    get_password_hash,
    issue_password_reset_token,
    password_reset_token_matches,
    read_password_reset_token,
    verify_password,
)
from way2pg.core.types import is_valid_uuid
from way2pg.models.accommodation import Accommodation
from way2pg.models.booking import Booking
from way2pg.models.user import User, UserRole
from way2pg.schemas.admin import DashboardStats
from way2pg.schemas.auth import SignupRequest
from way2pg.services.accommodation_service import accommodation_service
from way2pg.services.email_service import email_service
from way2pg.utils.phone import normalize_phone_number

INVALID_RESET_TOKEN = "Invalid or expired reset token"


class UserService:
    """Service for user accounts"""

    def __init__(self, mailer=None, accommodations=None):
        self.mailer = mailer or email_service
        self.accommodations = accommodations or accommodation_service

    # ==================== LOOKUPS ====================

    async def get_user(self, db: AsyncSession, user_id: str) -> User:
        if not is_valid_uuid(user_id):
            raise UserNotFoundError(user_id)
        result = await db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if not user:
            raise UserNotFoundError(user_id)
        return user

    async def get_by_phone(self, db: AsyncSession, phone_number: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.phone_number == phone_number))
        return result.scalar_one_or_none()

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    # ==================== SIGNUP / LOGIN ====================

    async def register_user(self, db: AsyncSession, data: SignupRequest) -> User:
        """Create a user from a validated signup request (phone already normalized)"""
        if data.role is UserRole.ADMIN:
            if not settings.ADMIN_SIGNUP_CODE or data.admin_code != settings.ADMIN_SIGNUP_CODE:
                raise AdminCodeError()

        if await self.get_by_phone(db, data.phone_number):
            raise ConflictError("Phone number already registered", field="phone_number")
        if data.email and await self.get_by_email(db, data.email):
            raise ConflictError("Email already registered", field="email")

        user = User(
            name=data.name,
            phone_number=data.phone_number,
            email=data.email,
            hashed_password=get_password_hash(data.password),
            role=data.role,
            company_name=data.company_name,
            business_registration=data.business_registration,
            is_phone_verified=data.is_phone_verified,
        )
        db.add(user)
        await db.commit()

        logger.log_auth_event("signup", success=True, phone_number=user.phone_number, role=user.role_value)
        return user

    async def authenticate(
        self,
        db: AsyncSession,
        phone_number: str,
        password: str,
        admin_only: bool = False,
    ) -> User:
        """
        Check credentials. Unknown phone and wrong password are indistinguishable
        to the caller; so is a non-admin using the admin login.
        """
        event = "admin_login" if admin_only else "login"
        try:
            user = await self.get_by_phone(db, normalize_phone_number(phone_number))
        except ValueError:
            user = None

        if not user or not verify_password(password, user.hashed_password):
            logger.log_auth_event(event, success=False, phone_number=phone_number, reason="bad_credentials")
            raise InvalidCredentialsError()
        if admin_only and user.role is not UserRole.ADMIN:
            logger.log_auth_event(event, success=False, phone_number=phone_number, reason="not_admin")
            raise InvalidCredentialsError()
        if not user.can_operate:
            logger.log_auth_event(event, success=False, phone_number=phone_number, reason="approval_pending")
            raise ApprovalPendingError()

        logger.log_auth_event(event, success=True, phone_number=user.phone_number)
        return user

    # ==================== ADMIN ====================

    async def approve_owner(self, db: AsyncSession, user_id: str) -> User:
        user = await self.get_user(db, user_id)
        if user.role is not UserRole.OWNER:
            raise UserNotFoundError(user_id)
        user.approve()
        user.updated_at = datetime.utcnow()
        await db.commit()
        logger.info(f"[Admin] Approved owner {user.id}")
        return user

    async def delete_user(self, db: AsyncSession, user_id: str) -> User:
        """Owners lose their listings (with bookings and images) first"""
        user = await self.get_user(db, user_id)

        if user.role is UserRole.OWNER:
            result = await db.execute(select(Accommodation).where(Accommodation.owner_id == user.id))
            for accommodation in result.scalars().all():
                await self.accommodations.cascade_delete(db, accommodation)

        await db.execute(delete(Booking).where(Booking.student_id == user.id))
        await db.delete(user)
        await db.commit()

        logger.info(f"[Admin] Deleted user {user.id} ({user.role_value})")
        return user

    async def dashboard_stats(self, db: AsyncSession) -> DashboardStats:
        async def count(stmt) -> int:
            return (await db.execute(stmt)).scalar_one()

        return DashboardStats(
            total_users=await count(select(func.count(User.id))),
            pending_approvals=await count(
                select(func.count(User.id)).where(
                    User.role == UserRole.OWNER, User.is_approved.is_(False)
                )
            ),
            total_accommodations=await count(select(func.count(Accommodation.id))),
            total_bookings=await count(select(func.count(Booking.id))),
        )

    async def list_users(self, db: AsyncSession) -> List[User]:
        result = await db.execute(select(User).order_by(User.created_at.desc()))
        return list(result.scalars().all())

    # ==================== VERIFICATION CODES ====================

    @staticmethod
    def check_code(user: User, stored_code: Optional[str], code: str) -> None:
        """Missing, expired and mismatched codes are all 400s"""
        if not stored_code or not user.verification_code_expires:
            raise ValidationError("Please request a new verification code", field="code")
        if datetime.utcnow() > user.verification_code_expires:
            raise ValidationError("Verification code has expired", field="code")
        if code.strip() != stored_code:
            raise ValidationError("Invalid verification code", field="code")

    async def send_email_verification(self, db: AsyncSession, user: User) -> bool:
        if not user.email:
            raise ValidationError("No email address on this account", field="email")
        if user.is_email_verified:
            raise ValidationError("Email is already verified", field="email")

        user.email_verification_code = generate_verification_code()
        user.verification_code_expires = datetime.utcnow() + timedelta(
            minutes=settings.EMAIL_VERIFICATION_EXPIRE_MINUTES
        )
        await db.commit()

        return await self.mailer.send_email_verification_code(
            user.email, user.name, user.email_verification_code
        )

    async def verify_email(self, db: AsyncSession, user: User, code: str) -> User:
        if user.is_email_verified:
            raise ValidationError("Email is already verified", field="code")
        self.check_code(user, user.email_verification_code, code)

        user.is_email_verified = True
        user.email_verification_code = None
        user.verification_code_expires = None
        await db.commit()
        return user

    async def send_phone_verification(self, db: AsyncSession, user: User) -> str:
        """Store a fresh code and return it; delivery is up to the caller"""
        if user.is_phone_verified:
            raise ValidationError("Phone number is already verified", field="phone_number")

        user.phone_verification_code = generate_verification_code()
        user.verification_code_expires = datetime.utcnow() + timedelta(
            minutes=settings.PHONE_VERIFICATION_EXPIRE_MINUTES
        )
        await db.commit()

        logger.log_auth_event("phone_code_issued", success=True, phone_number=user.phone_number)
        return user.phone_verification_code

    async def verify_phone(self, db: AsyncSession, user: User, code: str) -> User:
        if user.is_phone_verified:
            raise ValidationError("Phone number is already verified", field="code")
        self.check_code(user, user.phone_verification_code, code)

        user.is_phone_verified = True
        user.phone_verification_code = None
        user.verification_code_expires = None
        await db.commit()

        logger.log_auth_event("phone_verified", success=True, phone_number=user.phone_number)
        return user

    # ==================== PASSWORD RESET ====================

    async def request_password_reset(
        self,
        db: AsyncSession,
        phone_number: Optional[str] = None,
        email: Optional[str] = None,
    ) -> bool:
        """
        Mail a reset link if the account exists and has an email.

        The HTTP layer answers the same way whatever this returns.
        """
        user = None
        if email:
            user = await self.get_by_email(db, email)
        if not user and phone_number:
            try:
                user = await self.get_by_phone(db, normalize_phone_number(phone_number))
            except ValueError:
                user = None

        if not user or not user.email:
            logger.info("[Auth] Password reset requested for unknown or email-less account")
            return False

        token = issue_password_reset_token(user.id, user.hashed_password)
        return await self.mailer.send_password_reset_email(user.email, user.name, token)

    async def reset_password(self, db: AsyncSession, token: str, new_password: str) -> User:
        """Tokens stop working once the password they were issued for changes"""
        try:
            claims = read_password_reset_token(token)
        except InvalidTokenError as e:
            logger.log_auth_event("password_reset", success=False, reason=e.message)
            raise ValidationError(INVALID_RESET_TOKEN, field="token") from e

        user = None
        if is_valid_uuid(claims["user_id"]):
            result = await db.execute(select(User).where(User.id == claims["user_id"]))
            user = result.scalar_one_or_none()
        if not user or not password_reset_token_matches(claims["fingerprint"], user.hashed_password):
            logger.log_auth_event("password_reset", success=False, reason="stale_or_unknown")
            raise ValidationError(INVALID_RESET_TOKEN, field="token")

        user.hashed_password = get_password_hash(new_password)
        user.updated_at = datetime.utcnow()
        await db.commit()

        logger.log_auth_event("password_reset", success=True, phone_number=user.phone_number)
        return user


# Singleton instance
user_service = UserService()
