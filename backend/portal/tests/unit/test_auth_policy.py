"""Tests for the route capability gate and route validation."""

from __future__ import annotations

import pytest
from starlette.applications import Starlette
from starlette.authentication import AuthCredentials, UnauthenticatedUser
from starlette.requests import Request
from starlette.responses import RedirectResponse
from starlette.routing import Mount, Route

from accounts.auth.errors import ForbiddenError
from accounts.auth.models import AuthSession, Role
from portal.auth.models import AuthenticatedUser
from portal.auth.policy import (
    AUTH_POLICY_ATTR,
    Capability,
    Outcome,
    admin_only,
    caller_identity,
    decide,
    members_only,
    public_route,
    validate_route_auth_policy,
)


def _session(role: Role = Role.USER) -> AuthSession:
    return AuthSession(
        session_id="token",
        user_id="u1",
        username="alice",
        role=role,
        created_at=0.0,
        expires_at=3600.0,
    )


def _make_request(role: Role | None = None) -> Request:
    """Build a real Starlette Request as the auth middleware would leave it."""
    if role is None:
        auth, user = AuthCredentials(), UnauthenticatedUser()
    else:
        scopes = ["authenticated", "admin"] if role == Role.ADMIN else ["authenticated"]
        auth, user = AuthCredentials(scopes), AuthenticatedUser(_session(role))
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/some-page",
        "query_string": b"",
        "headers": [],
        "root_path": "",
        "server": ("testserver", 80),
        "scheme": "http",
        "app": Starlette(),
        "auth": auth,
        "user": user,
    }
    return Request(scope)


async def _dummy_handler(request: Request) -> str:
    return "ok"


def _sync_dummy_handler(request: Request) -> str:
    return "ok"


class TestDecide:
    @pytest.mark.parametrize(
        ("capability", "role", "expected"),
        [
            (Capability.PUBLIC, None, Outcome.PROCEED),
            (Capability.PUBLIC, Role.USER, Outcome.PROCEED),
            (Capability.PUBLIC, Role.ADMIN, Outcome.PROCEED),
            (Capability.AUTHENTICATED_ANY, None, Outcome.REDIRECT_LOGIN),
            (Capability.AUTHENTICATED_ANY, Role.USER, Outcome.PROCEED),
            (Capability.AUTHENTICATED_ANY, Role.ADMIN, Outcome.PROCEED),
            (Capability.AUTHENTICATED_ADMIN, None, Outcome.REDIRECT_LOGIN),
            (Capability.AUTHENTICATED_ADMIN, Role.USER, Outcome.FORBIDDEN),
            (Capability.AUTHENTICATED_ADMIN, Role.ADMIN, Outcome.PROCEED),
        ],
    )
    def test_outcome_table(self, capability, role, expected) -> None:
        identity = None if role is None else _session(role)
        assert decide(capability, identity) == expected


class TestCallerIdentity:
    def test_unauthenticated_is_none(self) -> None:
        assert caller_identity(_make_request()) is None

    def test_authenticated_returns_session(self) -> None:
        identity = caller_identity(_make_request(Role.USER))
        assert identity == _session(Role.USER)


class TestMembersOnly:
    async def test_unauthenticated_redirects_to_login(self) -> None:
        result = await members_only(_dummy_handler)(_make_request())

        assert isinstance(result, RedirectResponse)
        assert result.status_code == 303
        assert result.headers["location"] == "/login"

    @pytest.mark.parametrize("role", [Role.USER, Role.ADMIN])
    async def test_any_session_passes_through(self, role) -> None:
        assert await members_only(_dummy_handler)(_make_request(role)) == "ok"

    def test_sync_unauthenticated_redirects_to_login(self) -> None:
        result = members_only(_sync_dummy_handler)(_make_request())

        assert isinstance(result, RedirectResponse)
        assert result.headers["location"] == "/login"


class TestAdminOnly:
    async def test_unauthenticated_redirects_to_login(self) -> None:
        result = await admin_only(_dummy_handler)(_make_request())

        assert isinstance(result, RedirectResponse)
        assert result.headers["location"] == "/login"

    async def test_non_admin_forbidden(self) -> None:
        with pytest.raises(ForbiddenError):
            await admin_only(_dummy_handler)(_make_request(Role.USER))

    async def test_admin_passes_through(self) -> None:
        assert await admin_only(_dummy_handler)(_make_request(Role.ADMIN)) == "ok"

    def test_sync_non_admin_forbidden(self) -> None:
        with pytest.raises(ForbiddenError):
            admin_only(_sync_dummy_handler)(_make_request(Role.USER))


class TestPublicRoute:
    async def test_does_not_block_unauthenticated(self) -> None:
        assert await public_route(_dummy_handler)(_make_request()) == "ok"

    def test_sync_does_not_block_unauthenticated(self) -> None:
        assert public_route(_sync_dummy_handler)(_make_request()) == "ok"


class TestMarker:
    @pytest.mark.parametrize(
        ("wrapper", "capability"),
        [
            (public_route, Capability.PUBLIC),
            (members_only, Capability.AUTHENTICATED_ANY),
            (admin_only, Capability.AUTHENTICATED_ADMIN),
        ],
    )
    def test_wrapper_carries_capability(self, wrapper, capability) -> None:
        assert getattr(wrapper(_dummy_handler), AUTH_POLICY_ATTR) == capability

    def test_original_endpoint_not_marked(self) -> None:
        admin_only(_dummy_handler)
        assert not hasattr(_dummy_handler, AUTH_POLICY_ATTR)


def _make_handler() -> object:
    """Return a fresh async handler with no attributes from prior tests."""

    async def handler(request: Request) -> str:
        return "ok"

    return handler


class TestValidateRouteAuthPolicy:
    def test_all_routes_classified_passes(self) -> None:
        routes = [
            Route("/a", public_route(_make_handler()), methods=["GET"], name="a"),
            Route("/b", members_only(_make_handler()), methods=["GET"], name="b"),
            Route("/c", admin_only(_make_handler()), methods=["GET"], name="c"),
        ]

        validate_route_auth_policy(routes)

    def test_unclassified_route_raises_runtime_error(self) -> None:
        routes = [
            Route("/ok", public_route(_make_handler()), methods=["GET"], name="ok"),
            Route("/bad", _make_handler(), methods=["GET"], name="bad"),
        ]

        with pytest.raises(RuntimeError, match=r"Unclassified routes missing auth policy: /bad \(bad\)"):
            validate_route_auth_policy(routes)

    def test_mount_is_exempt(self) -> None:
        routes = [
            Route("/a", public_route(_make_handler()), methods=["GET"], name="a"),
            Mount("/static", app=Starlette(), name="static"),
        ]

        validate_route_auth_policy(routes)

    def test_multiple_unclassified_routes_all_reported(self) -> None:
        routes = [
            Route("/x", _make_handler(), methods=["GET"], name="x"),
            Route("/y", _make_handler(), methods=["GET"], name="y"),
        ]

        with pytest.raises(RuntimeError) as exc_info:
            validate_route_auth_policy(routes)

        assert "/x (x)" in str(exc_info.value)
        assert "/y (y)" in str(exc_info.value)
