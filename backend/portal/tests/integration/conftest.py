"""Shared fixtures for portal integration tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from starlette.testclient import TestClient

from accounts.auth.models import Role
from accounts.auth.settings import AuthSettings
from portal.server.app import create_app
from portal.server.csrf import CSRF_COOKIE_NAME
from portal.server.settings import PortalServerSettings

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    import httpx
    from starlette.applications import Starlette

TEST_SESSION_SECRET = "portal-test-secret"


@pytest.fixture
def static_dir(tmp_path: Path) -> Path:
    images = tmp_path / "public" / "images"
    images.mkdir(parents=True)
    for name in ("img1.jpg", "img2.jpg", "img3.jpg"):
        (images / name).write_bytes(b"\xff\xd8\xff\xe0fake-jpeg")
    return tmp_path / "public"


@pytest.fixture
def make_app(tmp_path: Path, static_dir: Path) -> Callable[..., Starlette]:
    def _make(**auth_overrides: object) -> Starlette:
        auth_settings = AuthSettings(
            session_secret=TEST_SESSION_SECRET,
            database_path=str(tmp_path / "storage.db"),
            password_hasher="simple",
            **auth_overrides,
        )
        return create_app(settings=PortalServerSettings(static_dir=str(static_dir)), auth_settings=auth_settings)

    return _make


@pytest.fixture
def app(make_app: Callable[..., Starlette]) -> Starlette:
    return make_app()


@pytest.fixture
def client(app: Starlette) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


def _csrf_token(client: TestClient, page: str) -> str:
    client.get(page)
    token = client.cookies.get(CSRF_COOKIE_NAME)
    assert token is not None
    return token


@pytest.fixture
def signup() -> Callable[..., httpx.Response]:
    """Submit the signup form (GET for the CSRF token, then POST)."""

    def _signup(client: TestClient, username: str, email: str, password: str = "pw123") -> httpx.Response:
        csrf = _csrf_token(client, "/signup")
        return client.post(
            "/signup",
            data={"username": username, "email": email, "password": password, "csrf_token": csrf},
            follow_redirects=False,
        )

    return _signup


@pytest.fixture
def login() -> Callable[..., httpx.Response]:
    """Submit the user login form."""

    def _login(client: TestClient, email: str, password: str = "pw123") -> httpx.Response:
        csrf = _csrf_token(client, "/login")
        return client.post(
            "/login",
            data={"email": email, "password": password, "csrf_token": csrf},
            follow_redirects=False,
        )

    return _login


@pytest.fixture
def admin_login() -> Callable[..., httpx.Response]:
    """Submit the admin login form on the home page."""

    def _admin_login(client: TestClient, email: str, password: str = "pw123") -> httpx.Response:
        csrf = _csrf_token(client, "/")
        return client.post(
            "/admin-login",
            data={"email": email, "password": password, "csrf_token": csrf},
            follow_redirects=False,
        )

    return _admin_login


@pytest.fixture
def grant_admin(client: TestClient) -> Callable[[str], str]:
    """Promote the account with the given email directly in storage; return its user id."""

    def _grant(email: str) -> str:
        credentials = client.app.state.credentials
        user = client.portal.call(credentials.find_by_email, email)
        client.portal.call(credentials.set_role, user.user_id, Role.ADMIN)
        return user.user_id

    return _grant


@pytest.fixture
def user_id_for(client: TestClient) -> Callable[[str], str]:
    def _lookup(email: str) -> str:
        return client.portal.call(client.app.state.credentials.find_by_email, email).user_id

    return _lookup


@pytest.fixture
def role_of(client: TestClient) -> Callable[[str], Role]:
    def _role(user_id: str) -> Role:
        return client.portal.call(client.app.state.credentials.get_user, user_id).role

    return _role
