"""Auth error taxonomy.

Route handlers catch these and decide how much to show the client:
validation, duplicate and credential errors go back into the form,
ForbiddenError renders the "not authorized" page, InternalError is
rendered generically.
"""

from __future__ import annotations


class AuthError(Exception):
    """Authentication or authorization failure."""


class ValidationError(AuthError):
    """A required field is missing or empty."""


class DuplicateKeyError(AuthError):
    """A unique field (username or email) is already taken."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"{field.capitalize()} already exists.")


class InvalidCredentialsError(AuthError):
    """Unknown email or password mismatch. Deliberately does not say which."""

    def __init__(self, message: str = "Invalid credentials.") -> None:
        super().__init__(message)


class ForbiddenError(AuthError):
    """Authenticated, but the caller's role is not sufficient."""

    def __init__(self, message: str = "You are not authorized.") -> None:
        super().__init__(message)


class NotFoundError(AuthError):
    """The target user does not exist."""


class InternalError(AuthError):
    """Storage or hashing failure not otherwise classified."""
