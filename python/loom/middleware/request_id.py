"""X-Request-ID middleware for request correlation and access logging.

This middleware:
- Accepts a well-formed incoming X-Request-ID or generates a new one
- Attaches the ID to request state and to the logging context
- Echoes the ID in response headers
- Emits one access log entry per request

Must be added last so it wraps the auth middleware; auth failures then
still carry X-Request-ID.
"""

import re
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from loom.logging import clear_request_context, get_logger, set_request_context

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128

# Alphanumeric plus dots, hyphens and underscores
VALID_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,128}$")

logger = get_logger(__name__)


def resolve_request_id(incoming: str | None) -> str:
    """Return the incoming request ID if acceptable, otherwise a fresh UUID4.

    UUID-shaped IDs are lowercased so that log correlation is case-insensitive.
    """
    if not incoming or len(incoming.encode("utf-8")) > MAX_REQUEST_ID_LENGTH:
        return str(uuid.uuid4())
    if not VALID_REQUEST_ID_PATTERN.match(incoming):
        return str(uuid.uuid4())
    try:
        return str(uuid.UUID(incoming)) if len(incoming) == 36 else incoming
    except ValueError:
        return incoming


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware for X-Request-ID handling and access logging.

    Args:
        app: The ASGI application.
        log_requests: If True, log access entries for each request.
    """

    def __init__(self, app, log_requests: bool = True):
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start_time = time.monotonic()

        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        set_request_context(request_id, path=request.url.path, method=request.method)

        try:
            response = await call_next(request)

            # Actor is only present when auth middleware accepted the request
            actor = getattr(request.state, "actor", None)
            if actor is not None:
                set_request_context(request_id, user_id=str(actor.id))

            response.headers[REQUEST_ID_HEADER] = request_id

            if self.log_requests:
                duration_ms = (time.monotonic() - start_time) * 1000
                logger.info(
                    "request_completed",
                    status_code=response.status_code,
                    duration_ms=round(duration_ms, 2),
                )

            return response

        except Exception:
            logger.exception("request_failed")
            raise

        finally:
            clear_request_context()
