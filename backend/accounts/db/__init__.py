"""SQLite database layer: connection management and store implementations."""

from accounts.db.connection import Database
from accounts.db.session_store import SqliteSessionStore
from accounts.db.user_repository import SqliteUserRepository

__all__ = [
    "Database",
    "SqliteSessionStore",
    "SqliteUserRepository",
]
