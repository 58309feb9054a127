"""
Authentication middleware - validates authentication before request processing.

Public endpoints (health checks, docs) are excluded from authentication
requirements. Authenticated requests carry ``request.state.user_id`` and
``request.state.role``.
"""
import logging

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ..api.schemas.common import ErrorResponse
from ..core.auth import get_auth_service

logger = logging.getLogger(__name__)


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """
    Middleware to enforce authentication on all non-public endpoints.
    """

    PUBLIC_PATHS = {
        "/",
        "/favicon.ico",
        "/docs",
        "/redoc",
        "/openapi.json",
        "/health",
        "/health/live",
        "/health/ready",
    }

    PUBLIC_PATH_PREFIXES = {
        "/docs",
        "/redoc",
    }

    def is_public_endpoint(self, path: str) -> bool:
        """Check if endpoint is public and doesn't require authentication."""
        normalized_path = path.rstrip("/") or "/"

        if normalized_path in self.PUBLIC_PATHS:
            return True

        for prefix in self.PUBLIC_PATH_PREFIXES:
            if path.startswith(prefix + "/"):
                return True

        return False

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or self.is_public_endpoint(request.url.path):
            return await call_next(request)

        auth_service = get_auth_service()
        api_key = request.headers.get("X-API-Key")
        auth_header = request.headers.get("Authorization")

        try:
            user = auth_service.get_user_from_request(api_key=api_key, auth_header=auth_header)
        except HTTPException as e:
            logger.warning(
                f"Authentication failed for {request.method} {request.url.path}: {e.detail} "
                f"(IP: {request.client.host if request.client else 'unknown'})"
            )
            return JSONResponse(
                status_code=401,
                content=ErrorResponse(
                    error="UNAUTHORIZED",
                    message="Authentication required for this endpoint",
                    request_id=getattr(request.state, "request_id", None) or "",
                    details={
                        "path": request.url.path,
                        "method": request.method,
                        "hint": "Provide X-API-Key header or Authorization Bearer token",
                    },
                ).model_dump(),
                headers={"WWW-Authenticate": "Bearer"},
            )

        request.state.user_id = user.user_id
        request.state.role = user.role
        logger.debug(f"Authenticated user: {user.user_id} accessing {request.url.path}")
        return await call_next(request)
