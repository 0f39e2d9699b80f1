"""Compiled CORS policy shared by every request.

The policy is built once by ``build_policy`` and then only read. All
comma-separated inputs are already split, and the header values that are
emitted on every request are pre-joined, so per-request work is limited to
set membership checks and dict construction.
"""

from dataclasses import dataclass, field
from enum import Enum

DEFAULT_ALLOW_METHODS: tuple[str, ...] = ("GET", "POST", "HEAD", "OPTIONS")


class OriginMatching(str, Enum):
    """How request origins are compared against the allow-list."""

    NORMALIZED = "normalized"  # scheme and host compared case-insensitively
    EXACT = "exact"


class PreflightHeaderPolicy(str, Enum):
    """How requested preflight headers are answered when no allow-list is pinned."""

    SAFELIST = "safelist"
    ECHO = "echo"


def join_values(values: tuple[str, ...]) -> str:
    """Join header tokens the way they are emitted on the wire."""
    return ", ".join(values)


@dataclass(frozen=True)
class CORSPolicy:
    """Immutable runtime CORS configuration.

    Attributes:
        allowed_origins: Origins permitted to read responses (normalized in
            NORMALIZED mode). Empty means every origin is allowed.
        allow_all: Wildcard ``*`` was configured; ``allowed_origins`` is ignored.
        allow_credentials: Emit ``Access-Control-Allow-Credentials: true``.
        allow_headers: Explicit allow-list; empty means derive from the preflight.
        expose_headers: Headers scripts may read from the response.
        allow_methods: Explicit method list; empty means DEFAULT_ALLOW_METHODS.
        max_age: Preflight cache lifetime in seconds; 0 disables the header.
        origin_matching: Origin comparison mode.
        preflight_headers: Requested-header answering policy.
    """

    allowed_origins: frozenset[str] = frozenset()
    allow_all: bool = False
    allow_credentials: bool = False
    allow_headers: tuple[str, ...] = ()
    expose_headers: tuple[str, ...] = ()
    allow_methods: tuple[str, ...] = ()
    max_age: int = 0
    origin_matching: OriginMatching = OriginMatching.NORMALIZED
    preflight_headers: PreflightHeaderPolicy = PreflightHeaderPolicy.SAFELIST

    allow_headers_value: str = field(init=False, repr=False)
    expose_headers_value: str = field(init=False, repr=False)
    allow_methods_value: str = field(init=False, repr=False)
    max_age_value: str = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "allow_headers_value", join_values(self.allow_headers))
        object.__setattr__(self, "expose_headers_value", join_values(self.expose_headers))
        object.__setattr__(
            self,
            "allow_methods_value",
            join_values(self.allow_methods or DEFAULT_ALLOW_METHODS),
        )
        object.__setattr__(self, "max_age_value", str(self.max_age) if self.max_age > 0 else "")

    @property
    def allows_any_origin(self) -> bool:
        """Whether every non-empty origin is accepted."""
        return self.allow_all or not self.allowed_origins
