from dataclasses import dataclass
from typing import Optional, Iterable, FrozenSet

from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from way2pg.core.database import get_db
from way2pg.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    MalformedTokenError,
    RoleMismatchError,
)
from way2pg.core.logging_config import logger, set_user_id
from way2pg.core.security import verify_token
from way2pg.core.types import is_valid_uuid
from way2pg.models.user import User, UserRole

# Only used so the OpenAPI docs show the bearer scheme; the header is parsed below
security = HTTPBearer(auto_error=False)

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class AuthContext:
    """Resolved identity attached to an authenticated request"""
    user_id: str
    role: UserRole
    user: User


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an `Authorization: Bearer <token>` header value"""
    if not authorization:
        return None
    token = authorization.strip()
    if token.startswith(BEARER_PREFIX):
        token = token[len(BEARER_PREFIX):]
    return token.strip() or None


def ensure_role_is_current(token_role: str, user: User) -> None:
    """
    Staleness check: the role cached in the token must equal the stored role.

    Tokens embed the role at issuance; an admin can change it afterwards.
    A token whose cached role is out of date is rejected outright.
    """
    if token_role != user.role_value:
        raise RoleMismatchError(token_role, user.role_value)


async def resolve_user(token: Optional[str], db: AsyncSession) -> AuthContext:
    """Turn a raw bearer token into a live AuthContext, or raise AuthenticationError"""
    if not token:
        raise AuthenticationError("Missing bearer token")

    claims = verify_token(token)

    if not is_valid_uuid(claims.user_id):
        raise MalformedTokenError(reason="userId is not a valid id")

    result = await db.execute(select(User).where(User.id == claims.user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise AuthenticationError("User not found")

    ensure_role_is_current(claims.role, user)

    return AuthContext(user_id=user.id, role=user.role, user=user)


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    _credentials=Security(security),
) -> AuthContext:
    """
    Authenticate the request.

    Every failure, including unexpected ones, surfaces as AuthenticationError
    so callers only ever see the generic "Please authenticate" response.
    """
    try:
        token = extract_bearer_token(request.headers.get("Authorization"))
        auth = await resolve_user(token, db)
    except AuthenticationError as e:
        logger.log_auth_event(
            event="authenticate",
            success=False,
            reason=e.message,
            code=e.code,
            http_path=request.url.path,
        )
        raise
    except Exception as e:
        logger.log_error_with_context(e, context="authenticate")
        raise AuthenticationError("Unexpected error during authentication") from e

    request.state.auth = auth
    request.state.user_id = auth.user_id
    set_user_id(auth.user_id)
    return auth


def check_roles(auth: Optional[AuthContext], allowed: FrozenSet[UserRole]) -> AuthContext:
    """Pure role gate: no identity -> 401, role outside `allowed` -> 403"""
    if auth is None:
        raise AuthenticationError("No authenticated identity on request")
    if auth.role not in allowed:
        raise AuthorizationError.for_roles(role.value for role in _ordered(allowed))
    return auth


def _ordered(roles: Iterable[UserRole]):
    order = list(UserRole)
    return sorted(roles, key=order.index)


def require_roles(*roles):
    """
    Build a dependency that admits only the given roles.

    Usage:
        @router.get("/bookings")
        async def list_bookings(auth: AuthContext = Depends(require_roles("student"))):
            ...
    """
    if not roles:
        raise ValueError("require_roles needs at least one role")
    allowed = frozenset(UserRole(role) for role in roles)

    async def role_gate(auth: AuthContext = Depends(get_current_user)) -> AuthContext:
        return check_roles(auth, allowed)

    role_gate.allowed_roles = allowed
    return role_gate


require_student = require_roles(UserRole.STUDENT)
require_owner = require_roles(UserRole.OWNER)
require_admin = require_roles(UserRole.ADMIN)
require_owner_or_admin = require_roles(UserRole.OWNER, UserRole.ADMIN)
