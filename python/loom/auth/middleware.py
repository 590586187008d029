"""Authentication middleware for FastAPI.

Provides:
- AuthMiddleware: Global middleware for bearer token verification and actor resolution
- get_actor: Dependency for accessing the authenticated actor
"""

import logging
from collections.abc import Awaitable, Callable
from uuid import UUID

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from loom.auth.actor import Actor
from loom.auth.verifier import TokenVerifier
from loom.errors import ApiError, ApiErrorCode
from loom.responses import error_response

logger = logging.getLogger(__name__)

# Header names
AUTHORIZATION_HEADER = "authorization"

# Paths that don't require authentication
PUBLIC_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

ActorLoader = Callable[[UUID], Awaitable[Actor | None]]


class AuthMiddleware(BaseHTTPMiddleware):
    """Authentication middleware for FastAPI.

    Order of checks:
    1. Skip if public path
    2. Extract and parse bearer token
    3. Verify token via TokenVerifier
    4. Resolve the actor via the actor loader
    5. Attach Actor to request state
    """

    def __init__(
        self,
        app: ASGIApp,
        verifier: TokenVerifier,
        actor_loader: ActorLoader,
    ):
        """Initialize the auth middleware.

        Args:
            app: The ASGI application.
            verifier: TokenVerifier implementation for JWT verification.
            actor_loader: Coroutine function(user_id) -> Actor | None.
                          None means the user is unknown or suspended.
        """
        super().__init__(app)
        self.verifier = verifier
        self.actor_loader = actor_loader

    async def dispatch(self, request: Request, call_next) -> JSONResponse:
        """Process the request through auth checks."""
        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        token = self._bearer_token(request.headers.get(AUTHORIZATION_HEADER))
        if token is None:
            reason = "missing_header" if AUTHORIZATION_HEADER not in request.headers else (
                "invalid_header_format"
            )
            return self._reject(request, reason)

        try:
            payload = self.verifier.verify(token)
        except ApiError as e:
            return _error_json_response(e.code, e.message, e.status_code)

        user_id = UUID(payload["sub"])

        try:
            actor = await self.actor_loader(user_id)
        except Exception:
            logger.exception("actor_resolution_failed", extra={"user_id": str(user_id)})
            return _error_json_response(ApiErrorCode.E_INTERNAL, "Internal server error", 500)

        if actor is None:
            return self._reject(request, "unknown_or_suspended_user")

        request.state.actor = actor

        return await call_next(request)

    @staticmethod
    def _bearer_token(auth_header: str | None) -> str | None:
        """Return the token of a "Bearer <token>" header (case-insensitive scheme)."""
        if not auth_header:
            return None
        scheme, _, token = auth_header.partition(" ")
        if scheme.lower() != "bearer":
            return None
        return token.strip() or None

    @staticmethod
    def _reject(request: Request, reason: str) -> JSONResponse:
        logger.warning(
            "auth_failure",
            extra={"reason": reason, "request_path": request.url.path},
        )
        message = (
            "Authentication required"
            if reason in ("missing_header", "unknown_or_suspended_user")
            else "Invalid authorization header format"
        )
        return _error_json_response(ApiErrorCode.E_UNAUTHENTICATED, message, 401)


def _error_json_response(code: ApiErrorCode, message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(code, message),
    )


def get_actor(request: Request) -> Actor:
    """FastAPI dependency to get the authenticated actor.

    Raises:
        ApiError: If the actor is not set (middleware didn't run or path is public).
    """
    actor = getattr(request.state, "actor", None)
    if actor is None:
        raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Authentication required")
    return actor

