"""Route capability gate for fail-closed authorization.

Every route declares the capability it requires by wrapping its endpoint
with ``public_route``, ``members_only`` or ``admin_only``. The wrapper
classifies the caller per request and either proceeds, redirects to the
login page, or raises ForbiddenError. The wrappers also set the
``AUTH_POLICY_ATTR`` marker so that startup validation can verify every
route has an explicit capability.
"""

from __future__ import annotations

import functools
import inspect
from enum import StrEnum
from typing import TYPE_CHECKING

from starlette.authentication import has_required_scope
from starlette.responses import RedirectResponse
from starlette.routing import Mount, Route

from accounts.auth.errors import ForbiddenError
from accounts.auth.models import Role

if TYPE_CHECKING:
    from collections.abc import Callable
    from typing import Any

    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.routing import BaseRoute

    from accounts.auth.models import AuthSession

AUTH_POLICY_ATTR = "__auth_policy__"
LOGIN_PATH = "/login"


class Capability(StrEnum):
    PUBLIC = "public"
    AUTHENTICATED_ANY = "authenticated_any"
    AUTHENTICATED_ADMIN = "authenticated_admin"


class Outcome(StrEnum):
    PROCEED = "proceed"
    REDIRECT_LOGIN = "redirect_login"
    FORBIDDEN = "forbidden"


def decide(capability: Capability, identity: AuthSession | None) -> Outcome:
    """Map a required capability and a resolved caller to exactly one outcome."""
    if capability == Capability.PUBLIC:
        return Outcome.PROCEED
    if identity is None:
        return Outcome.REDIRECT_LOGIN
    if capability == Capability.AUTHENTICATED_ADMIN and identity.role != Role.ADMIN:
        return Outcome.FORBIDDEN
    return Outcome.PROCEED


def caller_identity(request: Request) -> AuthSession | None:
    """Return the session snapshot resolved by the auth backend, or None."""
    if not has_required_scope(request, ["authenticated"]):
        return None
    return request.user.session


def _login_redirect() -> RedirectResponse:
    """Relative redirect, so the Host header cannot steer it elsewhere."""
    return RedirectResponse(url=LOGIN_PATH, status_code=303)


def _check(request: Request, capability: Capability) -> Response | None:
    """Return a response that replaces the endpoint's, or None to proceed."""
    outcome = decide(capability, caller_identity(request))
    if outcome == Outcome.REDIRECT_LOGIN:
        return _login_redirect()
    if outcome == Outcome.FORBIDDEN:
        raise ForbiddenError
    return None


def _guard(endpoint: Callable[..., Any], capability: Capability) -> Callable[..., Any]:
    """Wrap a sync or async endpoint with the capability check.

    Returns a thin wrapper so the marker lives on the wrapper, not on the
    original callable. This prevents accidental policy leakage when the
    same function object is reused on another route without wrapping.
    """
    if inspect.iscoroutinefunction(endpoint):

        @functools.wraps(endpoint)
        async def async_wrapper(request: Request, **kwargs: str) -> Response:
            denied = _check(request, capability)
            if denied is not None:
                return denied
            return await endpoint(request, **kwargs)

        setattr(async_wrapper, AUTH_POLICY_ATTR, capability)
        return async_wrapper

    @functools.wraps(endpoint)
    def sync_wrapper(request: Request, **kwargs: str) -> Response:
        denied = _check(request, capability)
        if denied is not None:
            return denied
        return endpoint(request, **kwargs)

    setattr(sync_wrapper, AUTH_POLICY_ATTR, capability)
    return sync_wrapper


def public_route(endpoint: Callable[..., Any]) -> Callable[..., Any]:
    """Mark endpoint as explicitly public (no auth required)."""
    return _guard(endpoint, Capability.PUBLIC)


def members_only(endpoint: Callable[..., Any]) -> Callable[..., Any]:
    """Require a valid session; redirect unauthenticated callers to login."""
    return _guard(endpoint, Capability.AUTHENTICATED_ANY)


def admin_only(endpoint: Callable[..., Any]) -> Callable[..., Any]:
    """Require an admin session.

    Unauthenticated callers are redirected to login; authenticated
    non-admins get ForbiddenError (rendered as 403 by the app).
    """
    return _guard(endpoint, Capability.AUTHENTICATED_ADMIN)


def validate_route_auth_policy(routes: list[BaseRoute]) -> None:
    """Verify every Route has a capability marker. Mount routes are exempt.

    Raises RuntimeError listing all unclassified routes if any are found.
    """
    unclassified: list[str] = []
    for route in routes:
        if isinstance(route, Mount):
            continue
        if isinstance(route, Route) and not hasattr(route.endpoint, AUTH_POLICY_ATTR):
            name = route.name or getattr(route.endpoint, "__name__", "unknown")
            unclassified.append(f"{route.path} ({name})")

    if unclassified:
        details = ", ".join(unclassified)
        msg = f"Unclassified routes missing auth policy: {details}"
        raise RuntimeError(msg)
