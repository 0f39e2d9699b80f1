"""Test helpers for building apps and inspecting CORS responses.

Provides:
- Settings construction with test defaults
- A minimal app wrapped in CORSMiddleware for end-to-end policy tests
- Header extraction helpers
"""

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from fastapi.testclient import TestClient

from corsguard.config import Settings
from corsguard.cors import CORSConfig, build_policy
from corsguard.cors.headers import CORS_RESPONSE_HEADERS
from corsguard.middleware.cors import CORSMiddleware


def make_settings(**overrides) -> Settings:
    """Build a Settings instance with test defaults + overrides (env var names)."""
    defaults = {
        "CORSGUARD_ENV": "test",
        "CORS_ALLOW_ORIGINS": "https://example.com, https://allowed.com",
        "CORS_ALLOW_CREDENTIALS": True,
        "CORS_ALLOW_HEADERS": "Content-Type",
        "CORS_EXPOSE_HEADERS": "X-Custom",
        "CORS_ALLOW_METHODS": "GET, POST",
        "CORS_MAX_AGE": 0,
    }
    defaults.update(overrides)
    return Settings(**defaults)


def make_cors_app(**config) -> FastAPI:
    """Build a minimal app with CORSMiddleware configured from CORSConfig kwargs.

    Routes:
        GET/POST /          -> 200 "ok"
        GET /teapot         -> 418 "short and stout"
        GET /exposed        -> 200 with an X-Custom header of its own
    """
    app = FastAPI()

    @app.get("/")
    async def root() -> PlainTextResponse:
        return PlainTextResponse("ok")

    @app.post("/")
    async def create() -> PlainTextResponse:
        return PlainTextResponse("created", status_code=201)

    @app.get("/teapot")
    async def teapot() -> PlainTextResponse:
        return PlainTextResponse("short and stout", status_code=418)

    @app.get("/exposed")
    async def exposed() -> PlainTextResponse:
        return PlainTextResponse("ok", headers={"X-Custom": "value", "Vary": "Accept-Encoding"})

    # Compile eagerly: starlette builds the middleware stack lazily
    app.add_middleware(CORSMiddleware, policy=build_policy(CORSConfig(**config)))
    return app


def make_cors_client(**config) -> TestClient:
    """TestClient around make_cors_app."""
    return TestClient(make_cors_app(**config))


def cors_headers(response) -> dict[str, str]:
    """Return the CORS headers present on a response (case-insensitive lookup)."""
    return {
        name: response.headers[name] for name in CORS_RESPONSE_HEADERS if name in response.headers
    }
