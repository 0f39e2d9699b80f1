"""Application settings loaded from environment variables.

Environment Configuration:
    CORSGUARD_ENV: Deployment environment (local | test | staging | prod)
    HOST / PORT: Bind address for the uvicorn launcher
    LOG_REQUEST_HEADERS: Include full request/response header sets in request logs

CORS Configuration (compiled once at startup; invalid combinations abort startup):
    CORS_ALLOW_ORIGINS: Comma-separated origins, "*" for any (empty also allows any)
    CORS_ALLOW_CREDENTIALS: Emit Access-Control-Allow-Credentials (not allowed with "*")
    CORS_ALLOW_HEADERS: Comma-separated headers; empty derives them from the preflight
    CORS_EXPOSE_HEADERS: Comma-separated headers scripts may read
    CORS_ALLOW_METHODS: Comma-separated methods; empty uses GET, POST, HEAD, OPTIONS
    CORS_MAX_AGE: Preflight cache lifetime in seconds (0 = not advertised)
    CORS_ORIGIN_MATCHING: normalized | exact
    CORS_PREFLIGHT_HEADERS: safelist | echo
"""

from enum import Enum
from functools import lru_cache
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

from corsguard.cors import CORSConfig, OriginMatching, PreflightHeaderPolicy


class Environment(str, Enum):
    """Valid deployment environments."""

    LOCAL = "local"
    TEST = "test"
    STAGING = "staging"
    PROD = "prod"


class Settings(BaseSettings):
    """Application configuration.

    Settings are loaded from environment variables.
    Validation rules:
    - CORS_MAX_AGE must be >= 0
    - CORS_ORIGIN_MATCHING / CORS_PREFLIGHT_HEADERS must name a known mode

    The credentials + wildcard check belongs to the CORS policy itself and
    is enforced when create_app compiles it.
    """

    corsguard_env: Environment = Field(default=Environment.LOCAL, alias="CORSGUARD_ENV")
    host: str = Field(default="127.0.0.1", alias="HOST")
    port: int = Field(default=3000, alias="PORT")
    log_request_headers: bool = Field(default=False, alias="LOG_REQUEST_HEADERS")

    cors_allow_origins: str = Field(default="http://localhost:3000", alias="CORS_ALLOW_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_headers: str = Field(
        default=(
            "Origin, Accept, Content-Type, Content-Length, Accept-Encoding, "
            "X-CSRF-Token, Authorization, User-Agent"
        ),
        alias="CORS_ALLOW_HEADERS",
    )
    cors_expose_headers: str = Field(default="Origin, User-Agent", alias="CORS_EXPOSE_HEADERS")
    cors_allow_methods: str = Field(
        default="GET, POST, PUT, DELETE, OPTIONS, PATCH, HEAD", alias="CORS_ALLOW_METHODS"
    )
    cors_max_age: int = Field(default=0, alias="CORS_MAX_AGE")
    cors_origin_matching: OriginMatching = Field(
        default=OriginMatching.NORMALIZED, alias="CORS_ORIGIN_MATCHING"
    )
    cors_preflight_headers: PreflightHeaderPolicy = Field(
        default=PreflightHeaderPolicy.SAFELIST, alias="CORS_PREFLIGHT_HEADERS"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def validate_cors_settings(self) -> "Settings":
        """Reject values the CORS policy can never accept."""
        if self.cors_max_age < 0:
            raise ValueError(f"CORS_MAX_AGE must be >= 0, got {self.cors_max_age}")
        return self

    @property
    def log_json(self) -> bool:
        """JSON logs everywhere except local development."""
        return self.corsguard_env != Environment.LOCAL

    def cors_config(self) -> CORSConfig:
        """Build the raw CORS configuration from these settings."""
        return CORSConfig(
            allow_origins=self.cors_allow_origins,
            allow_credentials=self.cors_allow_credentials,
            allow_headers=self.cors_allow_headers,
            expose_headers=self.cors_expose_headers,
            allow_methods=self.cors_allow_methods,
            max_age=self.cors_max_age,
            origin_matching=self.cors_origin_matching,
            preflight_headers=self.cors_preflight_headers,
        )

    def cors_summary(self) -> dict[str, Any]:
        """Serializable CORS settings, as configured."""
        return {
            "allow_origins": self.cors_allow_origins,
            "allow_credentials": self.cors_allow_credentials,
            "allow_headers": self.cors_allow_headers,
            "expose_headers": self.cors_expose_headers,
            "allow_methods": self.cors_allow_methods,
            "max_age": self.cors_max_age,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Raises:
        ValidationError: If settings are missing or invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
