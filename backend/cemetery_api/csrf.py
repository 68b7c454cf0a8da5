"""Double-submit-cookie CSRF protection.

Issuance runs on every request and sets an HttpOnly cookie when the client
has none. Verification runs as a dependency on state-changing routers and
requires the header value to equal the cookie value.
"""
from __future__ import annotations

import logging
import secrets

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from .errors import ForbiddenError

logger = logging.getLogger(__name__)

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
EXEMPT_PATH_MARKERS = ("/health", "/ready", "/live")

MISSING_MESSAGE = "CSRF token missing. Please refresh the page and try again."
INVALID_MESSAGE = "CSRF token invalid. Please refresh the page and try again."


def generate_csrf_token() -> str:
    """256-bit random token, hex encoded."""
    return secrets.token_hex(32)


def is_exempt(method: str, path: str) -> bool:
    return method.upper() in SAFE_METHODS or any(marker in path for marker in EXEMPT_PATH_MARKERS)


class CSRFCookieMiddleware(BaseHTTPMiddleware):
    """Issue the CSRF cookie when it is absent; never overwrite an existing one."""

    def __init__(self, app, *, cookie_name: str, max_age: int, secure: bool) -> None:
        super().__init__(app)
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.secure = secure

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        existing = request.cookies.get(self.cookie_name)
        token = existing or generate_csrf_token()
        request.state.csrf_token = token

        response = await call_next(request)
        if not existing:
            response.set_cookie(
                self.cookie_name,
                token,
                max_age=self.max_age,
                httponly=True,
                samesite="strict",
                secure=self.secure,
                path="/",
            )
        return response


def current_csrf_token(request: Request) -> str:
    """Token for this client: the cookie value, or the one minted for this request."""
    token = getattr(request.state, "csrf_token", None)
    if not token:
        settings = request.app.state.settings
        token = request.cookies.get(settings.CSRF_COOKIE_NAME) or generate_csrf_token()
        request.state.csrf_token = token
    return token


def verify_csrf(request: Request) -> None:
    """Dependency for state-changing routes."""
    if is_exempt(request.method, request.url.path):
        return

    settings = request.app.state.settings
    cookie_token = request.cookies.get(settings.CSRF_COOKIE_NAME)
    header_token = request.headers.get(settings.CSRF_HEADER_NAME)

    if not cookie_token or not header_token:
        logger.warning("CSRF token missing on %s %s", request.method, request.url.path)
        raise ForbiddenError(MISSING_MESSAGE, code="CSRF_TOKEN_MISSING")
    if not secrets.compare_digest(cookie_token.encode(), header_token.encode()):
        logger.warning("CSRF token mismatch on %s %s", request.method, request.url.path)
        raise ForbiddenError(INVALID_MESSAGE, code="CSRF_TOKEN_INVALID")
