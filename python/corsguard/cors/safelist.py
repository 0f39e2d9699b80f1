"""Preflight request-header filtering.

Used only when no explicit ``allow_headers`` list is configured and the
preflight carries ``Access-Control-Request-Headers``.
"""

from corsguard.cors.policy import CORSPolicy, PreflightHeaderPolicy

# Header names that may be echoed back on a preflight without configuration
SAFE_HEADERS: frozenset[str] = frozenset(
    {
        "accept",
        "accept-language",
        "content-language",
        "content-type",
        "dpr",
        "downlink",
        "save-data",
        "viewport-width",
        "width",
        "authorization",
        "x-requested-with",
        "x-csrf-token",
    }
)


def filter_preflight_headers(requested: str, policy: CORSPolicy) -> str:
    """Compute the Access-Control-Allow-Headers value for a preflight.

    Under the SAFELIST policy, requested tokens are trimmed, lowercased and
    kept only if they appear in SAFE_HEADERS (request order preserved). When
    nothing survives, the requested value is echoed verbatim so clients that
    already sent the preflight keep working.

    Under the ECHO policy the requested value is returned unchanged.

    Args:
        requested: Raw ``Access-Control-Request-Headers`` value.
        policy: The compiled CORS policy.

    Returns:
        The header value to advertise.
    """
    if policy.preflight_headers is PreflightHeaderPolicy.ECHO:
        return requested

    safe = [
        token
        for token in (part.strip().lower() for part in requested.split(","))
        if token in SAFE_HEADERS
    ]

    if not safe:
        return requested

    return ", ".join(safe)
