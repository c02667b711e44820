from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Dict, Any
import hashlib
import hmac
import secrets

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError
import bcrypt

from way2pg.core.config import settings
from way2pg.core.exceptions import (
    InvalidTokenError,
    TokenExpiredError,
    MalformedTokenError,
)

# Claim names shared with the frontend
USER_ID_CLAIM = "userId"
ROLE_CLAIM = "role"
PASSWORD_RESET_PURPOSE = "password_reset"


@dataclass(frozen=True)
class TokenClaims:
    """Identity asserted by a verified access token"""
    user_id: str
    role: str
    expires_at: Optional[datetime] = None


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password"""
    if not hashed_password:
        return False
    # Bcrypt has a 72 byte limit - truncate password if necessary
    password_bytes = plain_password.encode('utf-8')[:72]
    try:
        return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def get_password_hash(password: str) -> str:
    """Hash password with configurable rounds (BCRYPT_ROUNDS in .env)"""
    password_bytes = password.encode('utf-8')[:72]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS))
    return hashed.decode('utf-8')


def issue_token(user_id: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Mint an access token asserting `{userId, role}`.

    The auth dependency re-checks the embedded role against the stored role
    on every request.
    """
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {
        USER_ID_CLAIM: str(user_id),
        ROLE_CLAIM: str(role),
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Check signature and expiry, returning the raw payload"""
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError as e:
        raise InvalidTokenError(f"Invalid token: {e}")


def verify_token(token: str) -> TokenClaims:
    """
    Verify an access token.

    Raises TokenExpiredError / InvalidTokenError for bad tokens and
    MalformedTokenError when either identity claim is missing.
    """
    if not token:
        raise InvalidTokenError("Empty token")

    payload = decode_token(token)

    # Purpose-scoped tokens (password reset) are never access tokens
    if payload.get("purpose"):
        raise InvalidTokenError("Not an access token")

    missing = [claim for claim in (USER_ID_CLAIM, ROLE_CLAIM) if not payload.get(claim)]
    if missing:
        raise MalformedTokenError(missing)

    exp = payload.get("exp")
    return TokenClaims(
        user_id=str(payload[USER_ID_CLAIM]),
        role=str(payload[ROLE_CLAIM]),
        expires_at=datetime.utcfromtimestamp(exp) if isinstance(exp, (int, float)) else None,
    )


def _password_fingerprint(hashed_password: str) -> str:
    # Changes whenever the password changes, so reset tokens are single use
    return hashlib.sha256((hashed_password or "").encode("utf-8")).hexdigest()[:16]


def issue_password_reset_token(user_id: str, hashed_password: str) -> str:
    """One-off token for the forgot-password flow"""
    expire = datetime.utcnow() + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES)
    to_encode = {
        USER_ID_CLAIM: str(user_id),
        "purpose": PASSWORD_RESET_PURPOSE,
        "pwd": _password_fingerprint(hashed_password),
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def read_password_reset_token(token: str) -> Dict[str, str]:
    """Return `{user_id, fingerprint}` for a valid reset token"""
    payload = decode_token(token)
    if payload.get("purpose") != PASSWORD_RESET_PURPOSE or not payload.get(USER_ID_CLAIM):
        raise InvalidTokenError("Not a password reset token")
    return {"user_id": str(payload[USER_ID_CLAIM]), "fingerprint": str(payload.get("pwd", ""))}


def password_reset_token_matches(fingerprint: str, hashed_password: str) -> bool:
    return hmac.compare_digest(fingerprint, _password_fingerprint(hashed_password))


def generate_verification_code() -> str:
    """6 digit numeric code for email verification"""
    return f"{secrets.randbelow(900000) + 100000}"
