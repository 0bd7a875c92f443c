"""Auth settings for the portal: secrets, storage, session lifetime, and cookies."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class AuthSettings(BaseSettings):
    model_config = {"env_prefix": "AUTH_"}

    # HMAC key for session token digests -- required, no default.
    # The application fails to start if AUTH_SESSION_SECRET is not set.
    session_secret: str = Field(min_length=1)

    # SQLite database file path (users and sessions)
    database_path: str = "backend/storage.db"

    session_ttl_seconds: int = Field(default=3600, gt=0)

    password_hasher: Literal["bcrypt", "simple"] = "bcrypt"
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    environment: Literal["development", "production", "test"] = "development"

    @property
    def cookie_secure(self) -> bool:
        """Secure cookies only in production; local dev runs over plain HTTP."""
        return self.environment == "production"

    @property
    def cookie_samesite(self) -> Literal["lax", "none"]:
        return "none" if self.environment == "production" else "lax"
