"""Starlette AuthenticationBackend that resolves the session cookie."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.authentication import AuthCredentials, AuthenticationBackend

from portal.auth.models import AuthenticatedUser

if TYPE_CHECKING:
    from starlette.requests import HTTPConnection

    from accounts.auth.service import AuthService

SESSION_COOKIE_NAME = "session_id"


class SessionCookieBackend(AuthenticationBackend):
    """Authenticate requests via the ``session_id`` cookie.

    Valid sessions get the ``authenticated`` scope, plus ``admin`` when the
    session snapshot carries the admin role. Missing, unknown, or expired
    tokens leave the request unauthenticated.
    """

    def __init__(self, auth_service: AuthService) -> None:
        self._auth_service = auth_service

    async def authenticate(
        self,
        conn: HTTPConnection,
    ) -> tuple[AuthCredentials, AuthenticatedUser] | None:
        session = await self._auth_service.resolve(conn.cookies.get(SESSION_COOKIE_NAME))
        if session is None:
            return None
        scopes = ["authenticated"]
        if session.is_admin:
            scopes.append("admin")
        return AuthCredentials(scopes), AuthenticatedUser(session)
