"""User model for Starlette AuthenticationMiddleware integration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.authentication import BaseUser

from accounts.auth.models import Role

if TYPE_CHECKING:
    from accounts.auth.models import AuthSession


class AuthenticatedUser(BaseUser):
    """Authenticated caller for Starlette's request.user.

    Wraps the session snapshot, so ``role`` reflects the role at login time.
    """

    def __init__(self, session: AuthSession) -> None:
        self._session = session

    @property
    def is_authenticated(self) -> bool:  # pragma: no cover
        return True

    @property
    def display_name(self) -> str:  # pragma: no cover
        return self._session.username

    @property
    def identity(self) -> str:
        return self._session.user_id

    @property
    def username(self) -> str:
        return self._session.username

    @property
    def is_admin(self) -> bool:
        return self._session.role == Role.ADMIN

    @property
    def session(self) -> AuthSession:
        return self._session
