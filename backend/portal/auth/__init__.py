"""Portal authentication: Starlette backend, user model, and route capability gate."""

from portal.auth.backend import SESSION_COOKIE_NAME, SessionCookieBackend
from portal.auth.models import AuthenticatedUser
from portal.auth.policy import (
    Capability,
    Outcome,
    admin_only,
    caller_identity,
    decide,
    members_only,
    public_route,
    validate_route_auth_policy,
)

__all__ = [
    "SESSION_COOKIE_NAME",
    "AuthenticatedUser",
    "Capability",
    "Outcome",
    "SessionCookieBackend",
    "admin_only",
    "caller_identity",
    "decide",
    "members_only",
    "public_route",
    "validate_route_auth_policy",
]
