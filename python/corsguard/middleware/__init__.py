"""Middleware modules for the corsguard API."""

from corsguard.middleware.cors import CORSMiddleware
from corsguard.middleware.request_logging import REQUEST_ID_HEADER, RequestLoggingMiddleware

__all__ = ["CORSMiddleware", "RequestLoggingMiddleware", "REQUEST_ID_HEADER"]
