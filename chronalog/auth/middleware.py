"""Authentication middleware for FastAPI."""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from chronalog.auth.sessions import SESSION_COOKIE, verify_session
from chronalog.config import settings
from chronalog.models.common import ErrorResponse

logger = logging.getLogger(__name__)

# Paths that need a signed-in maintainer
ADMIN_PATHS_PREFIX = "/api/changelog/admin"
ADMIN_PATHS = {"/api/changelog/save"}


def is_admin_path(path: str) -> bool:
    return path in ADMIN_PATHS or path.startswith(ADMIN_PATHS_PREFIX)


class AuthMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request.state.user = None

        cookie = request.cookies.get(SESSION_COOKIE)
        if cookie:
            request.state.user = verify_session(cookie, settings.app_secret_key)
            if request.state.user is None:
                logger.debug("Ignoring invalid or expired session cookie")

        if request.state.user is None and is_admin_path(request.url.path):
            return JSONResponse(
                status_code=401,
                content=ErrorResponse.of("UNAUTHORIZED", "Authentication required. Please sign in with GitHub."),
            )

        return await call_next(request)
