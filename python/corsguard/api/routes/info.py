"""Service info endpoint.

Reports the framework version and the CORS configuration the process was
started with, so a browser client can see which policy it is talking to.
"""

import time
from importlib.metadata import PackageNotFoundError, version

from fastapi import APIRouter, Request

from corsguard.responses import success_response

router = APIRouter()

FRAMEWORK_DISTRIBUTION = "fastapi"


def get_framework_version() -> str:
    """Return the installed FastAPI version, or "unknown"."""
    try:
        return version(FRAMEWORK_DISTRIBUTION)
    except PackageNotFoundError:
        return "unknown"


@router.get("/")
async def service_info(request: Request) -> dict:
    """Describe the running service.

    Only serializable, as-configured CORS settings are exposed.
    """
    settings = request.app.state.settings
    return success_response(
        {
            "message": "corsguard running on FastAPI",
            "version": get_framework_version(),
            "config": settings.cors_summary(),
            "timestamp": int(time.time()),
        }
    )
