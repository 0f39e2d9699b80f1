"""Thin API launcher.

This is the uvicorn entrypoint. All application logic lives in the corsguard package.
Run with: uvicorn main:app --reload
Or directly: python apps/api/main.py (binds HOST:PORT from settings)

Note: The app instance is created here (not in corsguard.app) to avoid import-time
side effects. This allows tests to import create_app with their own settings.
A CORS configuration error raised by create_app aborts startup.
"""

import uvicorn

from corsguard.app import add_request_logging_middleware, create_app
from corsguard.config import get_settings

# Create the application instance
app = create_app()
# Add request-logging middleware LAST so it runs FIRST (outermost)
add_request_logging_middleware(app)

__all__ = ["app"]


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
