# Authentication module

from way2pg.modules.auth.dependencies import (
    AuthContext,
    get_current_user,
    require_roles,
    require_student,
    require_owner,
    require_admin,
    require_owner_or_admin,
)

__all__ = [
    "AuthContext",
    "get_current_user",
    "require_roles",
    "require_student",
    "require_owner",
    "require_admin",
    "require_owner_or_admin",
]
