"""CORS response header composition."""

from corsguard.cors.origins import OriginMatch
from corsguard.cors.policy import CORSPolicy
from corsguard.cors.safelist import filter_preflight_headers

ALLOW_ORIGIN = "Access-Control-Allow-Origin"
ALLOW_CREDENTIALS = "Access-Control-Allow-Credentials"
ALLOW_HEADERS = "Access-Control-Allow-Headers"
ALLOW_METHODS = "Access-Control-Allow-Methods"
EXPOSE_HEADERS = "Access-Control-Expose-Headers"
MAX_AGE = "Access-Control-Max-Age"
VARY = "Vary"

CORS_RESPONSE_HEADERS = (
    ALLOW_ORIGIN,
    ALLOW_CREDENTIALS,
    ALLOW_HEADERS,
    ALLOW_METHODS,
    EXPOSE_HEADERS,
    MAX_AGE,
)


def compose_headers(
    match: OriginMatch,
    policy: CORSPolicy,
    *,
    preflight: bool = False,
    requested_headers: str | None = None,
) -> dict[str, str]:
    """Build the CORS headers to attach to a response.

    A denied origin gets no headers at all. An allowed origin, or a request
    without an Origin header, gets the headers that apply to every request;
    only an allowed origin gets Access-Control-Allow-Origin.

    Args:
        match: Result of match_origin for this request.
        policy: The compiled CORS policy.
        preflight: Add preflight-only headers (derived allow-headers, max-age).
        requested_headers: ``Access-Control-Request-Headers`` value, if any.

    Returns:
        Header name to value, in emission order.
    """
    if match.denied:
        return {}

    headers: dict[str, str] = {}

    if match.allowed:
        headers[ALLOW_ORIGIN] = match.origin
        # The echoed value depends on the request
        headers[VARY] = "Origin"

    if policy.allow_credentials:
        headers[ALLOW_CREDENTIALS] = "true"

    if policy.allow_headers:
        headers[ALLOW_HEADERS] = policy.allow_headers_value
    elif preflight and requested_headers:
        headers[ALLOW_HEADERS] = filter_preflight_headers(requested_headers, policy)

    headers[ALLOW_METHODS] = policy.allow_methods_value

    if policy.expose_headers:
        headers[EXPOSE_HEADERS] = policy.expose_headers_value

    if preflight and policy.max_age_value:
        headers[MAX_AGE] = policy.max_age_value

    return headers
