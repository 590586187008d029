"""FastAPI application creation and configuration.

This module creates and configures the FastAPI application instance.
It registers exception handlers, auth middleware, request-id middleware, and routes.

Middleware Ordering (Critical):
- Middleware runs in reverse order of registration
- RequestIDMiddleware is added LAST so it runs FIRST (outermost)
- This ensures all requests (including auth failures) get X-Request-ID

Actual execution order per request:
1. RequestIDMiddleware (sets request_id, starts timer)
2. AuthMiddleware (verifies token, sets actor)
3. Route handler
4. AuthMiddleware (returns response)
5. RequestIDMiddleware (logs, sets response header)
"""

from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from loom.api.routes import create_api_router
from loom.auth.actor import Actor, load_actor
from loom.auth.middleware import AuthMiddleware
from loom.auth.verifier import JwtVerifier
from loom.config import get_settings
from loom.db.engine import dispose_engine
from loom.db.session import get_session_factory, reset_session_factory
from loom.errors import ApiError, ApiErrorCode
from loom.logging import configure_logging, get_logger
from loom.middleware.request_id import RequestIDMiddleware
from loom.responses import (
    api_error_handler,
    error_response,
    http_exception_handler,
    unhandled_exception_handler,
)

logger = get_logger(__name__)


def create_actor_loader():
    """Create an actor loader that opens its own database session.

    The loader is called by the auth middleware for each authenticated request.
    """

    async def load(user_id: UUID) -> Actor | None:
        session_factory = get_session_factory()
        async with session_factory() as session:
            return await load_actor(session, user_id)

    return load


def create_token_verifier() -> JwtVerifier:
    """Create the HS256 token verifier from settings."""
    settings = get_settings()

    return JwtVerifier(
        secret=settings.auth_jwt_secret,  # type: ignore[arg-type]
        issuer=settings.normalized_issuer,
        audiences=settings.audience_list,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle resources.

    The database engine is created lazily on first use and disposed here.
    """
    yield

    await dispose_engine()
    reset_session_factory()
    logger.info("db_engine_disposed")


def create_app(
    skip_auth_middleware: bool = False,
    token_verifier=None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        skip_auth_middleware: If True, skip adding auth middleware (for testing).
        token_verifier: Optional custom token verifier (for testing).

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()
    configure_logging(json_format=settings.log_json)

    app = FastAPI(
        title="Loom API",
        description="Mention suggestions for the Loom workspace",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Register exception handlers
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors (including malformed JSON)."""
        return JSONResponse(
            status_code=400,
            content=error_response(ApiErrorCode.E_INVALID_REQUEST, "Invalid request body"),
        )

    # Use router factory to avoid import-time settings loading
    app.include_router(create_api_router())

    # Add auth middleware (runs on all requests except public paths)
    if not skip_auth_middleware:
        verifier = token_verifier or create_token_verifier()

        app.add_middleware(
            AuthMiddleware,
            verifier=verifier,
            actor_loader=create_actor_loader(),
        )

        logger.info("auth_middleware_enabled", env=settings.loom_env.value)

    return app


def add_request_id_middleware(app: FastAPI, log_requests: bool = True) -> None:
    """Add request-id middleware to the app.

    This should be called AFTER all other middleware is added, so it runs FIRST.
    This ensures every response includes X-Request-ID, including auth failures.

    Args:
        app: The FastAPI application.
        log_requests: Whether to log access entries for each request.
    """
    app.add_middleware(RequestIDMiddleware, log_requests=log_requests)
    logger.info("request_id_middleware_enabled")
