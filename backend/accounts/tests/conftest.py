"""Shared fixtures for accounts tests: a temp SQLite database and the auth components on top of it."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from accounts.auth.credentials import CredentialStore
from accounts.auth.password import SimpleHasher
from accounts.auth.roles import AdminRoleManager
from accounts.auth.service import AuthService
from accounts.auth.session_store import InMemorySessionStore
from accounts.auth.sessions import SessionManager
from accounts.db import Database, SqliteUserRepository

if TYPE_CHECKING:
    from pathlib import Path

TEST_SESSION_SECRET = "test-session-secret"


@pytest.fixture
def db(tmp_path: Path):
    database = Database(tmp_path / "test.db")
    database.connect()
    yield database
    database.close()


@pytest.fixture
def user_repo(db: Database) -> SqliteUserRepository:
    return SqliteUserRepository(db)


@pytest.fixture
def credentials(user_repo: SqliteUserRepository) -> CredentialStore:
    return CredentialStore(user_repo, password_hasher=SimpleHasher())


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def sessions(session_store: InMemorySessionStore) -> SessionManager:
    return SessionManager(session_store, secret=TEST_SESSION_SECRET)


@pytest.fixture
def auth_service(credentials: CredentialStore, sessions: SessionManager) -> AuthService:
    return AuthService(credentials, sessions)


@pytest.fixture
def role_manager(credentials: CredentialStore) -> AdminRoleManager:
    return AdminRoleManager(credentials)
