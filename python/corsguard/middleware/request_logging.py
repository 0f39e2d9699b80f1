"""Request/response logging middleware with X-Request-ID correlation.

This middleware:
- Extracts or generates a unique request ID for each request
- Validates and normalizes incoming request IDs
- Attaches the ID to request state and the logging context
- Logs one entry when the request arrives (method, path, Origin)
- Logs one entry after the response is produced, including the CORS
  headers that were attached
- Echoes the ID in response headers

Middleware Ordering (Critical):
- Must be added LAST to run FIRST (outermost), so it also observes responses
  short-circuited by CORSMiddleware (OPTIONS -> 204)
"""

import re
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from corsguard.cors.headers import CORS_RESPONSE_HEADERS
from corsguard.logging import clear_request_context, get_logger, set_request_context

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128

# Allows alphanumeric, dots, hyphens, underscores
VALID_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,128}$")

UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)

logger = get_logger(__name__)


def is_valid_uuid(value: str) -> bool:
    """Check if value is a valid UUID string."""
    return bool(UUID_PATTERN.match(value))


def is_valid_request_id(value: str) -> bool:
    """Check if value is a valid request ID.

    A request ID is valid if it is at most 128 bytes and is either a UUID or
    matches the alphanumeric pattern.
    """
    if len(value.encode("utf-8")) > MAX_REQUEST_ID_LENGTH:
        return False

    return is_valid_uuid(value) or bool(VALID_REQUEST_ID_PATTERN.match(value))


def normalize_request_id(value: str) -> str:
    """Lowercase UUIDs; preserve other valid IDs as-is."""
    if is_valid_uuid(value):
        return value.lower()
    return value


def generate_request_id() -> str:
    """Generate a new UUID v4 request ID."""
    return str(uuid.uuid4())


def cors_headers_of(response: Response) -> dict[str, str]:
    """Extract the CORS headers present on a response, for logging."""
    return {
        name: response.headers[name] for name in CORS_RESPONSE_HEADERS if name in response.headers
    }


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for X-Request-ID handling and request/response logging.

    Args:
        app: The ASGI application.
        log_requests: If True, emit started/completed entries for each request.
        log_headers: If True, include the full request and response header
            sets in those entries.
    """

    def __init__(self, app, log_requests: bool = True, log_headers: bool = False):
        super().__init__(app)
        self.log_requests = log_requests
        self.log_headers = log_headers

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Process request with request ID handling and logging."""
        start_time = time.monotonic()

        incoming_id = request.headers.get(REQUEST_ID_HEADER)
        if incoming_id and is_valid_request_id(incoming_id):
            request_id = normalize_request_id(incoming_id)
        else:
            request_id = generate_request_id()

        request.state.request_id = request_id

        set_request_context(
            request_id,
            path=request.url.path,
            method=request.method,
            origin=request.headers.get("origin"),
        )

        if self.log_requests:
            extra = {"request_headers": dict(request.headers)} if self.log_headers else {}
            logger.info("http.request.started", **extra)

        try:
            response = await call_next(request)

            response.headers[REQUEST_ID_HEADER] = request_id

            if self.log_requests:
                duration_ms = (time.monotonic() - start_time) * 1000
                extra = {"response_headers": dict(response.headers)} if self.log_headers else {}
                logger.info(
                    "http.request.completed",
                    status_code=response.status_code,
                    duration_ms=round(duration_ms, 2),
                    cors_headers=cors_headers_of(response),
                    **extra,
                )

            return response

        except Exception:
            # Log and re-raise - unhandled_exception_handler will catch this
            logger.exception("http.request.failed")
            raise

        finally:
            clear_request_context()
