"""Auth endpoints: signup, login, admin login, and logout."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.responses import PlainTextResponse, RedirectResponse, Response

from accounts.auth.errors import DuplicateKeyError, ForbiddenError, InvalidCredentialsError, ValidationError
from portal.auth.backend import SESSION_COOKIE_NAME
from portal.server.csrf import csrf_is_valid
from portal.views.handlers import render_form

if TYPE_CHECKING:
    from starlette.datastructures import FormData
    from starlette.requests import Request

    from accounts.auth.models import AuthSession
    from accounts.auth.service import AuthService
    from accounts.auth.settings import AuthSettings


def _csrf_failure() -> Response:
    return PlainTextResponse("CSRF validation failed", status_code=403)


def _field(form: FormData, name: str) -> str:
    value = form.get(name, "")
    return value if isinstance(value, str) else ""


def _redirect_with_session_cookie(session: AuthSession, url: str, auth_settings: AuthSettings) -> Response:
    """Redirect and set the session cookie."""
    response = RedirectResponse(url, status_code=303)
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session.session_id,
        httponly=True,
        samesite=auth_settings.cookie_samesite,
        secure=auth_settings.cookie_secure,
        max_age=auth_settings.session_ttl_seconds,
        path="/",
    )
    return response


async def signup_page(request: Request) -> Response:
    """GET /signup - render signup form."""
    return render_form(request, "signup.html")


async def signup(request: Request) -> Response:
    """POST /signup - create account, log it in, redirect to members."""
    auth_service: AuthService = request.app.state.auth_service
    form = await request.form()
    if not csrf_is_valid(request, form):
        return _csrf_failure()

    try:
        session = await auth_service.signup(_field(form, "username"), _field(form, "email"), _field(form, "password"))
    except (ValidationError, DuplicateKeyError) as e:
        return render_form(request, "signup.html", error=str(e))
    return _redirect_with_session_cookie(session, "/members", request.app.state.auth_settings)


async def login_page(request: Request) -> Response:
    """GET /login - render login form."""
    return render_form(request, "login.html")


async def login(request: Request) -> Response:
    """POST /login - validate credentials, set session cookie, redirect to members."""
    auth_service: AuthService = request.app.state.auth_service
    form = await request.form()
    if not csrf_is_valid(request, form):
        return _csrf_failure()

    try:
        session = await auth_service.login(_field(form, "email"), _field(form, "password"))
    except (ValidationError, InvalidCredentialsError) as e:
        return render_form(request, "login.html", error=str(e))
    return _redirect_with_session_cookie(session, "/members", request.app.state.auth_settings)


async def admin_login(request: Request) -> Response:
    """POST /admin-login - like login, but only admins get a session."""
    auth_service: AuthService = request.app.state.auth_service
    form = await request.form()
    if not csrf_is_valid(request, form):
        return _csrf_failure()

    try:
        session = await auth_service.admin_login(_field(form, "email"), _field(form, "password"))
    except (ValidationError, InvalidCredentialsError, ForbiddenError) as e:
        return render_form(request, "index.html", error=str(e))
    return _redirect_with_session_cookie(session, "/admin", request.app.state.auth_settings)


async def logout(request: Request) -> Response:
    """GET /logout - destroy the session, redirect home."""
    auth_service: AuthService = request.app.state.auth_service
    await auth_service.logout(request.cookies.get(SESSION_COOKIE_NAME))
    response = RedirectResponse("/", status_code=303)
    response.delete_cookie(key=SESSION_COOKIE_NAME, path="/")
    return response
