# src/datafix/auth/middleware.py
"""Authentication middleware for the DataFix API."""

import logging

from fastapi import Request
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.errors import DataFixError
from .session import resolve_session

logger = logging.getLogger(__name__)

SESSION_COOKIE = "datafix_session"

# Public routes that don't need auth
PUBLIC_ROUTES = [
    "/health",
    "/auth/login",
    "/docs",
    "/openapi.json",
]


def extract_token(request: Request):
    """Bearer token from the Authorization header, else the session cookie."""
    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return request.cookies.get(SESSION_COOKIE)


class AuthMiddleware(BaseHTTPMiddleware):
    """Resolve the caller's session on every non-public route."""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        # Allow public routes
        for route in PUBLIC_ROUTES:
            if path == route or path.startswith(route + "/"):
                return await call_next(request)

        try:
            session = await run_in_threadpool(resolve_session, extract_token(request))
        except DataFixError as e:
            from ..api.responses import APIException
            logger.info(f"Rejected request to {path}: {e.message}")
            return APIException.from_domain_error(e).to_response()

        # Add session to request state
        request.state.session = session
        return await call_next(request)
