"""Portal page handlers: home, members, and the admin user list."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from starlette.responses import RedirectResponse
from starlette.templating import Jinja2Templates

from portal.auth.policy import caller_identity
from portal.server.csrf import get_or_create_csrf_token, set_csrf_cookie

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response

    from accounts.auth.credentials import CredentialStore
    from accounts.auth.roles import AdminRoleManager

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

MEMBER_IMAGES = ["img1.jpg", "img2.jpg", "img3.jpg"]


def create_templates() -> Jinja2Templates:
    """Create Jinja2 template engine for portal HTML templates."""
    return Jinja2Templates(directory=str(TEMPLATES_DIR))


def render_form(
    request: Request,
    template: str,
    *,
    error: str | None = None,
    status_code: int = 200,
) -> Response:
    """Render a form page with a CSRF token, issuing the cookie if needed."""
    templates: Jinja2Templates = request.app.state.templates
    csrf_token, is_new = get_or_create_csrf_token(request)
    response = templates.TemplateResponse(
        request,
        template,
        {"error": error, "csrf_token": csrf_token},
        status_code=status_code,
    )
    if is_new:
        auth_settings = request.app.state.auth_settings
        set_csrf_cookie(response, csrf_token, cookie_secure=auth_settings.cookie_secure)
    return response


def render_error(request: Request, message: str, status_code: int) -> Response:
    templates: Jinja2Templates = request.app.state.templates
    return templates.TemplateResponse(request, "error.html", {"message": message}, status_code=status_code)


async def home_page(request: Request) -> Response:
    """GET / - home page with the admin login form."""
    return render_form(request, "index.html")


async def members_page(request: Request) -> Response:
    """GET /members - members view with the image grid."""
    templates: Jinja2Templates = request.app.state.templates
    return templates.TemplateResponse(
        request,
        "members.html",
        {"user": request.user, "images": MEMBER_IMAGES},
    )


async def admin_page(request: Request) -> Response:
    """GET /admin - list every user with promote/demote links."""
    templates: Jinja2Templates = request.app.state.templates
    credentials: CredentialStore = request.app.state.credentials
    users = await credentials.list_users()
    return templates.TemplateResponse(
        request,
        "admin.html",
        {"user": request.user, "users": users},
    )


async def promote_user(request: Request) -> Response:
    """GET /admin/promote/{user_id} - grant the admin role."""
    role_manager: AdminRoleManager = request.app.state.role_manager
    await role_manager.promote(caller_identity(request), request.path_params["user_id"])
    return RedirectResponse("/admin", status_code=303)


async def demote_user(request: Request) -> Response:
    """GET /admin/demote/{user_id} - revoke the admin role."""
    role_manager: AdminRoleManager = request.app.state.role_manager
    await role_manager.demote(caller_identity(request), request.path_params["user_id"])
    return RedirectResponse("/admin", status_code=303)
