"""Session store interface, in-memory implementation, and periodic expiry cleanup."""

from __future__ import annotations

import asyncio
import contextlib
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from accounts.auth.models import AuthSession

CLEANUP_INTERVAL_SECONDS = 300  # 5 minutes

logger = structlog.get_logger()


class SessionStore(ABC):
    """Keyed storage for server-side sessions.

    Keys are opaque strings chosen by the caller (SessionManager stores an
    HMAC digest of the cookie token, never the token itself). Each operation
    is atomic for a single key; there is no cross-key locking.

    The store evicts expired records in the background; callers still check
    ``expires_at`` on every read.
    Call start_cleanup() on app startup and stop_cleanup() on shutdown.
    """

    def __init__(self) -> None:
        self._cleanup_task: asyncio.Task[None] | None = None

    @abstractmethod
    async def save(self, key: str, session: AuthSession) -> None: ...

    @abstractmethod
    async def get(self, key: str) -> AuthSession | None: ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a session. Unknown keys are ignored."""

    @abstractmethod
    async def cleanup_expired(self, now: float) -> int:
        """Remove sessions with ``expires_at <= now``. Return how many were removed."""

    def start_cleanup(self) -> None:
        """Start the periodic cleanup background task."""
        if self._cleanup_task is not None and not self._cleanup_task.done():
            return
        self._cleanup_task = asyncio.create_task(self._cleanup_loop())

    async def stop_cleanup(self) -> None:
        """Stop the periodic cleanup background task."""
        if self._cleanup_task is not None:
            self._cleanup_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._cleanup_task
            self._cleanup_task = None

    async def _cleanup_loop(self) -> None:
        """Periodically remove expired sessions."""
        while True:
            await asyncio.sleep(CLEANUP_INTERVAL_SECONDS)
            removed = await self.cleanup_expired(time.time())
            if removed:
                logger.info("cleaned up expired sessions", count=removed)


class InMemorySessionStore(SessionStore):
    """In-memory session store.

    Sessions are ephemeral: server restart means re-login, and sessions are
    not shared between processes. Use SqliteSessionStore for that.
    """

    def __init__(self) -> None:
        super().__init__()
        self._sessions: dict[str, AuthSession] = {}

    async def save(self, key: str, session: AuthSession) -> None:
        self._sessions[key] = session

    async def get(self, key: str) -> AuthSession | None:
        return self._sessions.get(key)

    async def delete(self, key: str) -> None:
        self._sessions.pop(key, None)

    async def cleanup_expired(self, now: float) -> int:
        expired = [key for key, s in self._sessions.items() if now >= s.expires_at]
        for key in expired:
            del self._sessions[key]
        return len(expired)
