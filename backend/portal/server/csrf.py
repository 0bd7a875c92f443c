"""CSRF protection for the signup and login forms (double-submit cookie).

Form pages issue a random token in a cookie and a hidden field; the POST
handler accepts the form only when both values match.
"""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from starlette.datastructures import FormData
    from starlette.requests import Request
    from starlette.responses import Response

CSRF_COOKIE_NAME = "csrf_token"
CSRF_FORM_FIELD = "csrf_token"


def get_or_create_csrf_token(request: Request) -> tuple[str, bool]:
    """Return the CSRF token from the cookie, or generate a new one.

    Returns (token, is_new) where is_new indicates a cookie must be set.
    """
    token = request.cookies.get(CSRF_COOKIE_NAME)
    if token:
        return token, False
    return secrets.token_urlsafe(32), True


def set_csrf_cookie(response: Response, token: str, *, cookie_secure: bool) -> None:
    response.set_cookie(
        key=CSRF_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=cookie_secure,
        path="/",
    )


def csrf_is_valid(request: Request, form_data: FormData) -> bool:
    """Check that the form CSRF token matches the cookie token."""
    cookie_token = request.cookies.get(CSRF_COOKIE_NAME)
    form_token = form_data.get(CSRF_FORM_FIELD)
    if not cookie_token or not form_token or not isinstance(form_token, str):
        return False
    return secrets.compare_digest(cookie_token, form_token)
