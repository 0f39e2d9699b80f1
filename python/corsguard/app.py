"""FastAPI application creation and configuration.

This module creates and configures the FastAPI application instance.
It compiles the CORS policy, registers exception handlers, CORS middleware,
request-logging middleware, and routes.

CORS Policy:
- Compiled once from settings before the app object exists
- An invalid configuration (credentials with "*", negative max-age) raises
  CORSConfigError out of create_app, so the server never starts with it

Middleware Ordering (Critical):
- Middleware runs in reverse order of registration
- RequestLoggingMiddleware is added LAST so it runs FIRST (outermost)
- This ensures OPTIONS requests answered by CORSMiddleware are still logged
  and still get X-Request-ID

Actual execution order per request:
1. RequestLoggingMiddleware (sets request_id, logs arrival, starts timer)
2. CORSMiddleware (answers OPTIONS with 204, or forwards and decorates)
3. Route handler
4. RequestLoggingMiddleware (logs completion, sets response header)

Unhandled exceptions:
- CORSMiddleware renders them as the 500 E_INTERNAL envelope, so the
  response keeps its CORS headers and X-Request-ID
- unhandled_exception_handler (Starlette's ServerErrorMiddleware, outermost)
  covers anything raised outside the CORS layer
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from corsguard.api.routes import create_api_router
from corsguard.config import Settings, get_settings
from corsguard.cors import CORSPolicy, build_policy
from corsguard.errors import ApiError, ApiErrorCode
from corsguard.logging import configure_logging, get_logger
from corsguard.middleware.cors import CORSMiddleware
from corsguard.middleware.request_logging import RequestLoggingMiddleware
from corsguard.responses import (
    api_error_handler,
    error_response,
    http_exception_handler,
    unhandled_exception_handler,
)

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    cors_policy: CORSPolicy | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use (defaults to get_settings()).
        cors_policy: Pre-compiled policy; compiled from settings when omitted.

    Returns:
        Configured FastAPI application instance.

    Raises:
        CORSConfigError: If the CORS settings cannot be compiled.
    """
    settings = settings or get_settings()
    configure_logging(json_format=settings.log_json)

    policy = cors_policy if cors_policy is not None else build_policy(settings.cors_config())

    app = FastAPI(
        title="corsguard",
        description="CORS policy enforcement demo service",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.cors_policy = policy

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors."""
        return JSONResponse(
            status_code=400,
            content=error_response(ApiErrorCode.E_INVALID_REQUEST, "Invalid request"),
        )

    app.include_router(create_api_router())

    app.add_middleware(CORSMiddleware, policy=policy)
    logger.info(
        "cors_middleware_enabled",
        env=settings.corsguard_env.value,
        allow_all=policy.allows_any_origin,
        allow_credentials=policy.allow_credentials,
    )

    return app


def add_request_logging_middleware(
    app: FastAPI,
    log_requests: bool = True,
    log_headers: bool | None = None,
) -> None:
    """Add request-logging middleware to the app.

    This should be called AFTER all other middleware is added, so it runs FIRST.

    Args:
        app: The FastAPI application.
        log_requests: Whether to log started/completed entries for each request.
        log_headers: Log full header sets; defaults to the LOG_REQUEST_HEADERS setting.
    """
    if log_headers is None:
        log_headers = app.state.settings.log_request_headers

    app.add_middleware(RequestLoggingMiddleware, log_requests=log_requests, log_headers=log_headers)
    logger.info("request_logging_middleware_enabled", log_headers=log_headers)
