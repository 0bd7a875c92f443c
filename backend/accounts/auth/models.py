"""User account and session models for authentication."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Self

from pydantic import BaseModel, model_validator


class Role(StrEnum):
    USER = "user"
    ADMIN = "admin"


class User(BaseModel, frozen=True):
    """User account stored in the user repository."""

    user_id: str
    username: str
    email: str
    password_hash: str  # bcrypt hash, never the plaintext
    role: Role = Role.USER

    @model_validator(mode="after")
    def _validate_required_fields(self) -> Self:
        if not self.username or not self.email:
            raise ValueError("Users must have a username and an email")
        if not self.password_hash:
            raise ValueError("Users must have a password hash")
        return self

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass
class AuthSession:
    """Server-side session for authenticated users.

    ``user_id``, ``username`` and ``role`` are a snapshot taken at login and
    are not refreshed when the user's role changes later.
    """

    session_id: str  # opaque token, stored in cookie
    user_id: str
    username: str
    role: Role
    created_at: float  # time.time()
    expires_at: float  # time.time() + TTL

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
