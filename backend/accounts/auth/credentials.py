"""Credential store: user creation with hashed passwords, lookups, and role updates."""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING
from uuid import uuid4

import structlog

from accounts.auth.errors import NotFoundError, ValidationError
from accounts.auth.models import User

if TYPE_CHECKING:
    from accounts.auth.models import Role
    from accounts.auth.password import PasswordHasher
    from accounts.auth.repository import UserRepository

PASSWORD_MAX_BYTES = 72  # bcrypt rejects longer inputs

logger = structlog.get_logger()


class CredentialStore:
    """Create and look up users on top of a UserRepository.

    Uniqueness of username and email is left to the repository's storage
    constraints; this class never pre-checks for existing records.
    """

    def __init__(self, user_repo: UserRepository, *, password_hasher: PasswordHasher) -> None:
        self._user_repo = user_repo
        self._hasher = password_hasher
        self._decoy_hash: str | None = None

    async def create_user(self, username: str, email: str, password: str) -> User:
        """Validate, hash, and insert a new user with the default role.

        Raises ValidationError for missing fields and DuplicateKeyError
        (username reported before email) when the insert collides.
        """
        username = username.strip()
        email = email.strip()
        _validate_signup_fields(username, email, password)

        user = User(
            user_id=str(uuid4()),
            username=username,
            email=email,
            password_hash=await self._hasher.hash(password),
        )
        await self._user_repo.create_user(user)
        logger.info("user created", user_id=user.user_id, username=user.username)
        return user

    async def find_by_email(self, email: str) -> User:
        user = await self._user_repo.get_by_email(email.strip())
        if user is None:
            raise NotFoundError("No user with that email")
        return user

    async def get_user(self, user_id: str) -> User:
        user = await self._user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User '{user_id}' not found")
        return user

    async def list_users(self) -> list[User]:
        return await self._user_repo.list_users()

    async def set_role(self, user_id: str, role: Role) -> User:
        """Set a user's role. Setting the current role again is a no-op success."""
        user = await self._user_repo.set_role(user_id, role)
        if user is None:
            raise NotFoundError(f"User '{user_id}' not found")
        return user

    async def verify_password(self, user: User, password: str) -> bool:
        return await self._hasher.verify(password, user.password_hash)

    async def verify_decoy(self, password: str) -> None:
        """Run a verify of the same cost as a real one against a hash no password matches."""
        if self._decoy_hash is None:
            self._decoy_hash = await self._hasher.hash(secrets.token_urlsafe(16))
        await self._hasher.verify(password, self._decoy_hash)


def _validate_signup_fields(username: str, email: str, password: str) -> None:
    if not username or not email or not password:
        raise ValidationError("All fields are required.")
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValidationError(f"Password must not exceed {PASSWORD_MAX_BYTES} bytes when encoded.")
