from __future__ import annotations

import contextlib
from http import HTTPStatus
from pathlib import Path
from typing import TYPE_CHECKING, cast

import structlog
from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware.authentication import AuthenticationMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Mount, Route
from starlette.staticfiles import StaticFiles

from accounts.auth import AdminRoleManager, AuthService, AuthSettings, CredentialStore, SessionManager
from accounts.auth.errors import ForbiddenError, InternalError, NotFoundError
from accounts.auth.password import get_hasher
from accounts.db import Database, SqliteSessionStore, SqliteUserRepository
from accounts.logging import setup_logging
from portal.auth.backend import SessionCookieBackend
from portal.auth.policy import admin_only, members_only, public_route, validate_route_auth_policy
from portal.server.middleware import SecurityHeadersMiddleware, SlashNormalizationMiddleware
from portal.server.settings import PortalServerSettings
from portal.views import (
    admin_login,
    admin_page,
    create_templates,
    demote_user,
    home_page,
    login,
    login_page,
    logout,
    members_page,
    promote_user,
    signup,
    signup_page,
)
from portal.views.handlers import render_error

logger = structlog.get_logger()

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from starlette.requests import Request

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again later."


async def _http_error_handler(request: Request, exc: Exception) -> Response:
    """Render 404s as the not-found page; other HTTP errors as plain text."""
    http_exc = cast("HTTPException", exc)
    if http_exc.status_code == HTTPStatus.NOT_FOUND:
        return request.app.state.templates.TemplateResponse(request, "404.html", {}, status_code=HTTPStatus.NOT_FOUND)
    if http_exc.status_code in {HTTPStatus.NO_CONTENT, HTTPStatus.NOT_MODIFIED}:
        return Response(status_code=http_exc.status_code, headers=http_exc.headers)
    return PlainTextResponse(http_exc.detail or "", status_code=http_exc.status_code, headers=http_exc.headers)


async def _forbidden_handler(request: Request, _exc: Exception) -> Response:
    logger.info("forbidden", path=request.url.path)
    return render_error(request, "You are not authorized.", HTTPStatus.FORBIDDEN)


async def _not_found_handler(request: Request, _exc: Exception) -> Response:
    return request.app.state.templates.TemplateResponse(request, "404.html", {}, status_code=HTTPStatus.NOT_FOUND)


async def _internal_error_handler(request: Request, exc: Exception) -> Response:
    """Log the failure and render a generic page without internal detail."""
    logger.error("unhandled error", path=request.url.path, exc_info=exc)
    return render_error(request, GENERIC_ERROR_MESSAGE, HTTPStatus.INTERNAL_SERVER_ERROR)


async def health(_request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


def create_app(
    settings: PortalServerSettings | None = None,
    auth_settings: AuthSettings | None = None,  # required in production (via get_app)
) -> Starlette:
    if settings is None:  # pragma: no cover
        settings = PortalServerSettings()
    if auth_settings is None:  # pragma: no cover
        auth_settings = AuthSettings()  # type: ignore[call-arg]

    static_dir = Path(settings.static_dir).resolve()

    routes = [
        Route("/", public_route(home_page), methods=["GET"], name="home_page"),
        Route("/health", public_route(health), methods=["GET"], name="health"),
        Route("/signup", public_route(signup_page), methods=["GET"], name="signup_page"),
        Route("/signup", public_route(signup), methods=["POST"], name="signup"),
        Route("/login", public_route(login_page), methods=["GET"], name="login_page"),
        Route("/login", public_route(login), methods=["POST"], name="login"),
        Route("/admin-login", public_route(admin_login), methods=["POST"], name="admin_login"),
        Route("/logout", public_route(logout), methods=["GET"], name="logout"),
        # Any valid session
        Route("/members", members_only(members_page), methods=["GET"], name="members_page"),
        # Admin sessions only
        Route("/admin", admin_only(admin_page), methods=["GET"], name="admin_page"),
        Route("/admin/promote/{user_id}", admin_only(promote_user), methods=["GET"], name="promote_user"),
        Route("/admin/demote/{user_id}", admin_only(demote_user), methods=["GET"], name="demote_user"),
    ]

    if static_dir.is_dir():
        routes.append(Mount("/static", app=StaticFiles(directory=str(static_dir)), name="static"))
    else:
        logger.warning("static directory not found, /static/ will not be served", path=str(static_dir))

    validate_route_auth_policy(routes)

    db = Database(auth_settings.database_path)
    db.connect()
    session_store = SqliteSessionStore(db)
    credentials = CredentialStore(
        SqliteUserRepository(db),
        password_hasher=get_hasher(auth_settings.password_hasher, rounds=auth_settings.bcrypt_rounds),
    )
    sessions = SessionManager(
        session_store,
        secret=auth_settings.session_secret,
        ttl_seconds=auth_settings.session_ttl_seconds,
    )
    auth_service = AuthService(credentials, sessions)

    @contextlib.asynccontextmanager
    async def lifespan(_app: Starlette) -> AsyncGenerator[None]:  # pragma: no cover
        session_store.start_cleanup()
        yield
        await session_store.stop_cleanup()
        db.close()

    app = Starlette(
        routes=routes,
        lifespan=lifespan,
        exception_handlers={
            HTTPException: _http_error_handler,
            ForbiddenError: _forbidden_handler,
            NotFoundError: _not_found_handler,
            InternalError: _internal_error_handler,
            Exception: _internal_error_handler,
        },
    )
    app.add_middleware(SlashNormalizationMiddleware)  # type: ignore[arg-type]
    app.add_middleware(AuthenticationMiddleware, backend=SessionCookieBackend(auth_service))  # type: ignore[arg-type]
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.allowed_hosts)  # type: ignore[arg-type]
    app.add_middleware(SecurityHeadersMiddleware)  # type: ignore[arg-type]

    app.state.db = db
    app.state.settings = settings
    app.state.auth_settings = auth_settings
    app.state.templates = create_templates()
    app.state.credentials = credentials
    app.state.sessions = sessions
    app.state.auth_service = auth_service
    app.state.role_manager = AdminRoleManager(credentials)

    logger.info("portal server ready", environment=auth_settings.environment)
    return app


def get_app() -> Starlette:  # pragma: no cover
    """Factory function for uvicorn --factory portal.server.app:get_app."""
    s = PortalServerSettings()
    auth = AuthSettings()  # ty: ignore[missing-argument]
    setup_logging(log_dir=s.log_dir)
    return create_app(settings=s, auth_settings=auth)
