"""SQLite-backed session store shared by every process using the same database."""

from __future__ import annotations

import dataclasses
import json
from typing import TYPE_CHECKING

from accounts.auth.models import AuthSession, Role
from accounts.auth.session_store import SessionStore

if TYPE_CHECKING:
    from accounts.db.connection import Database


class SqliteSessionStore(SessionStore):
    """Persist sessions in the ``sessions`` table.

    Each operation is a single committed statement, so a read after a
    completed save or delete on the same key always sees its effect.
    """

    def __init__(self, db: Database) -> None:
        super().__init__()
        self._db = db

    async def save(self, key: str, session: AuthSession) -> None:
        conn = self._db.connection
        conn.execute(
            "INSERT OR REPLACE INTO sessions (key, user_id, expires_at, data) VALUES (?, ?, ?, ?)",
            (key, session.user_id, session.expires_at, json.dumps(dataclasses.asdict(session))),
        )
        conn.commit()

    async def get(self, key: str) -> AuthSession | None:
        row = self._db.connection.execute("SELECT data FROM sessions WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        data = json.loads(row[0])
        data["role"] = Role(data["role"])
        return AuthSession(**data)

    async def delete(self, key: str) -> None:
        conn = self._db.connection
        conn.execute("DELETE FROM sessions WHERE key = ?", (key,))
        conn.commit()

    async def cleanup_expired(self, now: float) -> int:
        conn = self._db.connection
        cursor = conn.execute("DELETE FROM sessions WHERE expires_at <= ?", (now,))
        conn.commit()
        return cursor.rowcount
