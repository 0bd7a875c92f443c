"""Auth service coordinating signup, login, and session management."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from accounts.auth.errors import ForbiddenError, InvalidCredentialsError, NotFoundError, ValidationError

if TYPE_CHECKING:
    from accounts.auth.credentials import CredentialStore
    from accounts.auth.models import AuthSession, User
    from accounts.auth.sessions import SessionManager

logger = structlog.get_logger()


class AuthService:
    """Coordinate user signup, login, and session validation.

    There is no lockout or attempt counting on failed logins.
    """

    def __init__(self, credentials: CredentialStore, sessions: SessionManager) -> None:
        self._credentials = credentials
        self._sessions = sessions

    async def signup(self, username: str, email: str, password: str) -> AuthSession:
        """Create a user account and log it in."""
        user = await self._credentials.create_user(username, email, password)
        return await self._sessions.create(user)

    async def login(self, email: str, password: str) -> AuthSession:
        """Validate credentials and create a session."""
        user = await self._authenticate(email, password)
        session = await self._sessions.create(user)
        logger.info("user logged in", user_id=user.user_id)
        return session

    async def admin_login(self, email: str, password: str) -> AuthSession:
        """Validate credentials, require the admin role, and create a session."""
        user = await self._authenticate(email, password)
        if not user.is_admin:
            logger.info("admin login rejected for non-admin", user_id=user.user_id)
            raise ForbiddenError("You are not an admin.")
        session = await self._sessions.create(user)
        logger.info("admin logged in", user_id=user.user_id)
        return session

    async def resolve(self, token: str | None) -> AuthSession | None:
        """Return the session if valid and not expired, otherwise None."""
        return await self._sessions.resolve(token)

    async def logout(self, token: str | None) -> None:
        """Destroy a session."""
        session = await self._sessions.resolve(token)
        await self._sessions.destroy(token)
        if session is not None:
            logger.info("user logged out", user_id=session.user_id)

    async def _authenticate(self, email: str, password: str) -> User:
        if not email.strip() or not password:
            raise ValidationError("Email and password are required.")
        try:
            user = await self._credentials.find_by_email(email)
        except NotFoundError:
            # Unknown emails cost one verify, same as a wrong password.
            await self._credentials.verify_decoy(password)
            logger.info("login failed")
            raise InvalidCredentialsError from None
        if not await self._credentials.verify_password(user, password):
            logger.info("login failed", user_id=user.user_id)
            raise InvalidCredentialsError
        return user
