"""
Role/status access decisions.

Two layers use this module. The perimeter middleware only knows whether a
session cookie is present, so it calls ``perimeter_decision``. Route
dependencies load the user and call ``decide_access`` with the real role and
status.
"""
import enum
from typing import Optional

from app.models.user import UserRole, UserStatus


class ResourceClass(enum.IntEnum):
    PUBLIC = 0
    USER = 1
    PROVIDER = 2
    ADMIN = 3


class AccessDecision(str, enum.Enum):
    ALLOW = "allow"
    DENY = "deny"
    REDIRECT_TO_LOGIN = "redirect_to_login"


ROLE_RANK = {
    UserRole.USER: ResourceClass.USER,
    UserRole.PROVIDER: ResourceClass.PROVIDER,
    UserRole.ADMIN: ResourceClass.ADMIN,
}

ACTIVE_STATUSES = (UserStatus.ACTIVE, UserStatus.WARNED)

PUBLIC_PATHS = (
    "/",
    "/auth/login",
    "/auth/signup",
    "/auth/forgot-password",
    "/auth/reset-password",
    "/docs",
    "/redoc",
    "/openapi.json",
)
PUBLIC_PREFIXES = ("/api/auth/", "/docs/")

USER_PREFIXES = (
    "/user/dashboard",
    "/user/notes",
    "/user/account",
    "/api/notes/view",
)

PROVIDER_PREFIXES = (
    "/provider/dashboard",
    "/provider/notes",
    "/provider/earnings",
    "/api/notes/create",
    "/api/notes/edit",
)

ADMIN_PREFIXES = (
    "/admin/dashboard",
    "/admin/users",
    "/admin/providers",
    "/admin/notes",
    "/api/admin",
)


def classify_path(path: str) -> ResourceClass:
    if path in PUBLIC_PATHS or path.startswith(PUBLIC_PREFIXES):
        return ResourceClass.PUBLIC
    if path.startswith(ADMIN_PREFIXES):
        return ResourceClass.ADMIN
    if path.startswith(PROVIDER_PREFIXES):
        return ResourceClass.PROVIDER
    # listed user paths and anything unlisted both need a signed-in user
    return ResourceClass.USER


def decide_access(
    role: Optional[UserRole],
    status: Optional[UserStatus],
    resource: ResourceClass,
    has_session: bool,
) -> AccessDecision:
    if resource == ResourceClass.PUBLIC:
        return AccessDecision.ALLOW
    if not has_session or role is None:
        return AccessDecision.REDIRECT_TO_LOGIN
    if status not in ACTIVE_STATUSES:
        return AccessDecision.DENY
    if ROLE_RANK.get(role, ResourceClass.PUBLIC) >= resource:
        return AccessDecision.ALLOW
    return AccessDecision.DENY


def perimeter_decision(path: str, has_session_cookie: bool) -> AccessDecision:
    """Coarse edge check: session presence only, role is checked per route."""
    if classify_path(path) == ResourceClass.PUBLIC or has_session_cookie:
        return AccessDecision.ALLOW
    return AccessDecision.REDIRECT_TO_LOGIN
