"""Origin normalization and allow-list matching.

Key behaviors:
- A missing or empty Origin header is never blocked (same-origin or
  non-browser requests); it simply receives no allow-origin header
- The wildcard ``*`` and an empty allow-list both accept every origin
- Matching is set membership only, never substring or prefix matching
- The literal origin received is what gets echoed back, never ``*``
- In NORMALIZED mode scheme and host are lowercased before comparison;
  values that do not parse as ``scheme://host[:port]`` fall back to the
  lowercased literal
"""

from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlparse, urlunparse

from corsguard.cors.policy import CORSPolicy, OriginMatching


class MatchOutcome(str, Enum):
    """Result of checking a request origin against the policy."""

    ABSENT = "absent"
    ALLOWED = "allowed"
    DENIED = "denied"


@dataclass(frozen=True)
class OriginMatch:
    """Origin check result.

    Attributes:
        outcome: ABSENT, ALLOWED or DENIED.
        origin: The literal request origin to echo (set only when ALLOWED).
    """

    outcome: MatchOutcome
    origin: str | None = None

    @property
    def allowed(self) -> bool:
        return self.outcome is MatchOutcome.ALLOWED

    @property
    def denied(self) -> bool:
        return self.outcome is MatchOutcome.DENIED


ABSENT = OriginMatch(MatchOutcome.ABSENT)
DENIED = OriginMatch(MatchOutcome.DENIED)


def normalize_origin(value: str) -> str:
    """Normalize an origin for case-insensitive comparison.

    Lowercases scheme and host. Port, path and query are preserved as-is.

    Args:
        value: Raw origin string, e.g. ``https://Example.COM:8443``.

    Returns:
        The normalized origin, or ``value.lower()`` when it cannot be parsed
        as an absolute ``scheme://host`` URL.
    """
    try:
        parsed = urlparse(value)
    except ValueError:
        return value.lower()

    if not parsed.scheme or not parsed.netloc:
        return value.lower()

    # Only the host part of netloc is case-insensitive
    userinfo, at, host = parsed.netloc.rpartition("@")

    return urlunparse(
        (
            parsed.scheme.lower(),
            f"{userinfo}{at}{host.lower()}",
            parsed.path,
            parsed.params,
            parsed.query,
            parsed.fragment,
        )
    )


def comparable_origin(value: str, mode: OriginMatching) -> str:
    """Return the form of ``value`` stored in, and looked up against, the allow-list."""
    if mode is OriginMatching.EXACT:
        return value
    return normalize_origin(value)


def match_origin(origin: str | None, policy: CORSPolicy) -> OriginMatch:
    """Decide whether a request origin may read the response.

    Args:
        origin: Raw ``Origin`` header value, or None when absent.
        policy: The compiled CORS policy.

    Returns:
        OriginMatch carrying the literal origin when allowed.
    """
    if not origin:
        return ABSENT

    if policy.allows_any_origin:
        return OriginMatch(MatchOutcome.ALLOWED, origin)

    if comparable_origin(origin, policy.origin_matching) in policy.allowed_origins:
        return OriginMatch(MatchOutcome.ALLOWED, origin)

    return DENIED
