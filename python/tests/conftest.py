"""Pytest configuration and fixtures for corsguard tests.

Test isolation strategy:
- Settings are built explicitly per test (never read from the process env)
- The settings cache is cleared around every test
- log_sink captures structlog events for assertions on log output
"""

import sys
from collections.abc import Generator
from pathlib import Path

# Add repo root to sys.path for importing top-level packages (e.g., apps)
_repo_root = Path(__file__).parent.parent.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

import pytest
import structlog
from fastapi.testclient import TestClient

from corsguard.app import add_request_logging_middleware, create_app
from corsguard.config import Settings, clear_settings_cache
from tests.helpers import make_settings


@pytest.fixture
def settings() -> Settings:
    """Settings with the default test CORS configuration."""
    return make_settings()


@pytest.fixture
def app(settings: Settings):
    """Full application with CORS and request-logging middleware."""
    app = create_app(settings)
    add_request_logging_middleware(app, log_requests=False)
    return app


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Provide a FastAPI test client for the full application."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def log_sink():
    """Configure structlog to capture events into a list.

    Returns a list that will contain all emitted log event dicts.
    After the test, structlog is reset to its previous configuration.
    """
    events: list[dict] = []
    original_config = structlog.get_config()

    def capture_processor(logger, method_name, event_dict):
        events.append(event_dict.copy())
        raise structlog.DropEvent

    structlog.configure(
        processors=[capture_processor],
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    yield events

    structlog.configure(**original_config)


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset the settings cache before each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
