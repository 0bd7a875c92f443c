"""SQLite-backed user repository."""

from __future__ import annotations

import asyncio
import json
import sqlite3
from typing import TYPE_CHECKING

import structlog

from accounts.auth.errors import DuplicateKeyError, InternalError
from accounts.auth.models import Role, User
from accounts.auth.repository import UserRepository

if TYPE_CHECKING:
    from accounts.db.connection import Database

logger = structlog.get_logger()


class SqliteUserRepository(UserRepository):
    """SQLite implementation of UserRepository.

    Uses a single INSERT under an asyncio lock to avoid race windows
    between existence checks and inserts. Relies on the unique indexes on
    username and email and maps IntegrityError to DuplicateKeyError.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    async def create_user(self, user: User) -> None:
        """Insert a user. Raises DuplicateKeyError on a username or email collision."""
        async with self._lock:
            conn = self._db.connection
            try:
                conn.execute(
                    "INSERT INTO users (id, username, email, data) VALUES (?, ?, ?, ?)",
                    (user.user_id, user.username, user.email, user.model_dump_json()),
                )
                conn.commit()
            except sqlite3.IntegrityError as exc:
                conn.rollback()
                if "users.id" in str(exc).lower():
                    raise InternalError(f"User id '{user.user_id}' collided") from exc
                # Both fields may collide; username is reported first.
                field = "username" if self._username_taken(user.username) else "email"
                logger.info("signup rejected, duplicate field", field=field)
                raise DuplicateKeyError(field) from exc
            except sqlite3.Error as exc:
                conn.rollback()
                raise InternalError("Failed to store user") from exc

    async def get_by_id(self, user_id: str) -> User | None:
        row = self._db.connection.execute("SELECT data FROM users WHERE id = ?", (user_id,)).fetchone()
        return _row_to_user(row)

    async def get_by_email(self, email: str) -> User | None:
        """Look up a user by email (case-insensitive)."""
        row = self._db.connection.execute(
            "SELECT data FROM users WHERE email = ? COLLATE NOCASE",
            (email,),
        ).fetchone()
        return _row_to_user(row)

    async def list_users(self) -> list[User]:
        rows = self._db.connection.execute("SELECT data FROM users ORDER BY username COLLATE NOCASE").fetchall()
        return [User.model_validate(json.loads(row[0])) for row in rows]

    async def set_role(self, user_id: str, role: Role) -> User | None:
        async with self._lock:
            user = await self.get_by_id(user_id)
            if user is None:
                return None
            if user.role == role:
                return user
            updated = user.model_copy(update={"role": role})
            conn = self._db.connection
            conn.execute("UPDATE users SET data = ? WHERE id = ?", (updated.model_dump_json(), user_id))
            conn.commit()
            return updated

    def _username_taken(self, username: str) -> bool:
        row = self._db.connection.execute(
            "SELECT 1 FROM users WHERE username = ? COLLATE NOCASE",
            (username,),
        ).fetchone()
        return row is not None


def _row_to_user(row: tuple[str] | None) -> User | None:
    if row is None:
        return None
    return User.model_validate(json.loads(row[0]))
