"""Authentication and authorization: credentials, sessions, and roles."""

from accounts.auth.credentials import CredentialStore
from accounts.auth.errors import (
    AuthError,
    DuplicateKeyError,
    ForbiddenError,
    InternalError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from accounts.auth.models import AuthSession, Role, User
from accounts.auth.password import BcryptHasher, PasswordHasher, SimpleHasher, get_hasher
from accounts.auth.repository import UserRepository
from accounts.auth.roles import AdminRoleManager
from accounts.auth.service import AuthService
from accounts.auth.session_store import InMemorySessionStore, SessionStore
from accounts.auth.sessions import DEFAULT_SESSION_TTL_SECONDS, SessionManager
from accounts.auth.settings import AuthSettings

__all__ = [
    "DEFAULT_SESSION_TTL_SECONDS",
    "AdminRoleManager",
    "AuthError",
    "AuthService",
    "AuthSession",
    "AuthSettings",
    "BcryptHasher",
    "CredentialStore",
    "DuplicateKeyError",
    "ForbiddenError",
    "InMemorySessionStore",
    "InternalError",
    "InvalidCredentialsError",
    "NotFoundError",
    "PasswordHasher",
    "Role",
    "SessionManager",
    "SessionStore",
    "SimpleHasher",
    "User",
    "UserRepository",
    "ValidationError",
    "get_hasher",
]
