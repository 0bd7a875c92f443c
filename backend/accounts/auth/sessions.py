"""Session lifecycle: create, resolve, and destroy token-bound sessions."""

from __future__ import annotations

import dataclasses
import hashlib
import hmac
import secrets
import time
from typing import TYPE_CHECKING

import structlog

from accounts.auth.models import AuthSession

if TYPE_CHECKING:
    from accounts.auth.models import User
    from accounts.auth.session_store import SessionStore

DEFAULT_SESSION_TTL_SECONDS = 3600  # 1 hour
TOKEN_BYTES = 32

logger = structlog.get_logger()


class SessionManager:
    """Issue and validate opaque session tokens backed by a SessionStore.

    The token handed to the client is random; the store only ever sees an
    HMAC-SHA256 digest of it, so reading the session table does not yield
    usable cookies.
    """

    def __init__(
        self,
        store: SessionStore,
        secret: str,
        ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS,
    ) -> None:
        if not secret:
            raise ValueError("session secret must not be empty")
        self._store = store
        self._secret = secret.encode()
        self._ttl_seconds = ttl_seconds

    async def create(self, user: User) -> AuthSession:
        """Create a session holding a snapshot of ``user``. The token is ``session_id``."""
        token = secrets.token_urlsafe(TOKEN_BYTES)
        now = time.time()
        key = self._key(token)
        record = AuthSession(
            session_id=key,
            user_id=user.user_id,
            username=user.username,
            role=user.role,
            created_at=now,
            expires_at=now + self._ttl_seconds,
        )
        await self._store.save(key, record)
        logger.debug("session created", user_id=user.user_id)
        return dataclasses.replace(record, session_id=token)

    async def resolve(self, token: str | None) -> AuthSession | None:
        """Return the session snapshot for a valid token, otherwise None."""
        if not token:
            return None
        key = self._key(token)
        record = await self._store.get(key)
        if record is None:
            return None
        if time.time() >= record.expires_at:
            await self._store.delete(key)
            return None
        return dataclasses.replace(record, session_id=token)

    async def destroy(self, token: str | None) -> None:
        """Remove a session. Unknown, expired, or empty tokens are ignored."""
        if not token:
            return
        await self._store.delete(self._key(token))

    def _key(self, token: str) -> str:
        return hmac.new(self._secret, token.encode(), hashlib.sha256).hexdigest()
