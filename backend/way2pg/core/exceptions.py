"""
Custom Exceptions for Way2PG
============================

Every failure a route can surface is one of these. The API layer turns them
into JSON responses in `way2pg.main`; nothing else should build error bodies.

Usage:
    from way2pg.core.exceptions import BookingNotFoundError

    if not booking:
        raise BookingNotFoundError(booking_id)

Authentication failures carry a specific `code` for logging, but are always
rendered to the caller with the same generic message (see `public_dict`).
"""

from typing import Optional, Any, Dict, Iterable


class Way2PGError(Exception):
    """Base exception for all Way2PG errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }

    def public_dict(self) -> Dict[str, Any]:
        """Body returned to API callers"""
        body: Dict[str, Any] = {"message": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


# ============================================
# Authentication & Authorization Errors
# ============================================

GENERIC_AUTH_MESSAGE = "Please authenticate"


class AuthenticationError(Way2PGError):
    """Request could not be tied to a live user (401)"""

    status_code = 401

    def __init__(self, reason: str = "Authentication failed"):
        super().__init__(reason, code="AUTH_FAILED")

    def public_dict(self) -> Dict[str, Any]:
        # Which check failed is never disclosed
        return {"message": GENERIC_AUTH_MESSAGE, "code": "AUTH_FAILED"}


class InvalidTokenError(AuthenticationError):
    """JWT signature invalid or token malformed"""

    def __init__(self, reason: str = "Invalid token"):
        super().__init__(reason)
        self.code = "INVALID_TOKEN"


class TokenExpiredError(InvalidTokenError):
    """JWT token has expired"""

    def __init__(self):
        super().__init__("Token has expired")
        self.code = "TOKEN_EXPIRED"


class MalformedTokenError(AuthenticationError):
    """Token verified but its identity claims are missing or unusable"""

    def __init__(self, missing: Iterable[str] = (), reason: Optional[str] = None):
        missing = list(missing)
        detail = f"missing: {', '.join(missing)}" if missing else reason
        super().__init__("Invalid token structure" + (f" ({detail})" if detail else ""))
        self.code = "MALFORMED_TOKEN"


class RoleMismatchError(AuthenticationError):
    """Role embedded in the token no longer matches the user's stored role"""

    def __init__(self, token_role: str, current_role: str):
        super().__init__(f"Token role mismatch: token={token_role} current={current_role}")
        self.code = "ROLE_MISMATCH"


class InvalidCredentialsError(Way2PGError):
    """Phone number / password pair did not match a user"""

    status_code = 401

    def __init__(self):
        super().__init__("Invalid credentials", code="INVALID_CREDENTIALS")


class AuthorizationError(Way2PGError):
    """Authenticated, but the role is not permitted (403)"""

    status_code = 403

    def __init__(self, message: str = "Access denied"):
        super().__init__(message, code="FORBIDDEN")

    @classmethod
    def for_roles(cls, roles: Iterable[str]) -> "AuthorizationError":
        return cls("Access denied. Role required: " + " or ".join(roles))


class ApprovalPendingError(AuthorizationError):
    """Owner account has not been approved by an admin yet"""

    def __init__(self):
        super().__init__("Your account is pending approval")
        self.code = "APPROVAL_PENDING"


class AdminCodeError(AuthorizationError):
    """Admin signup attempted without the configured signup code"""

    def __init__(self):
        super().__init__("Invalid admin code")
        self.code = "INVALID_ADMIN_CODE"


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(Way2PGError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: Optional[str] = None):
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_id": str(resource_id)} if resource_id else None
        )


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: Optional[str] = None):
        super().__init__("User", user_id)


class AccommodationNotFoundError(ResourceNotFoundError):
    def __init__(self, accommodation_id: Optional[str] = None):
        super().__init__("Accommodation", accommodation_id)


class BookingNotFoundError(ResourceNotFoundError):
    """Booking absent, or owned by another student (indistinguishable on purpose)"""

    def __init__(self, booking_id: Optional[str] = None):
        super().__init__("Booking", booking_id)


# ============================================
# Validation / State Errors (400-type)
# ============================================

class ValidationError(Way2PGError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class ConflictError(Way2PGError):
    """A unique field is already taken"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="ALREADY_EXISTS", details=details)


class DuplicateRequestError(Way2PGError):
    """Student already holds a pending booking for this accommodation"""

    status_code = 400

    def __init__(self):
        super().__init__(
            "You already have a pending request for this accommodation",
            code="DUPLICATE_REQUEST"
        )


class AlreadyCancelledError(Way2PGError):
    """Cancelling a booking that is already cancelled"""

    status_code = 400

    def __init__(self):
        super().__init__("Booking is already cancelled", code="ALREADY_CANCELLED")


class InvalidTransitionError(Way2PGError):
    """Booking status change not allowed from the current state"""

    status_code = 400

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Cannot move booking from '{current}' to '{target}'",
            code="INVALID_TRANSITION",
            details={"current": current, "target": target}
        )


# ============================================
# External service errors
# ============================================

class MediaHostError(Way2PGError):
    """Upload to / deletion from the media host failed"""

    status_code = 502

    def __init__(self, message: str, public_id: Optional[str] = None):
        super().__init__(message, code="MEDIA_HOST_ERROR")
        if public_id:
            self.details["public_id"] = public_id


def error_response(error: Way2PGError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return error.public_dict()
