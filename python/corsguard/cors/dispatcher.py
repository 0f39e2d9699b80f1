"""Request classification and the per-request CORS decision.

Request kinds:
- PREFLIGHT: OPTIONS with a non-empty Access-Control-Request-Method header.
  Always answered with 204; a denied origin is expressed only by the absence
  of CORS headers (the browser enforces it, not the server).
- OPTIONS: any other OPTIONS request. Answered with 204 carrying the headers
  that apply to every request.
- SIMPLE: everything else. CORS headers are added and the request is
  forwarded; the handler's status and body are untouched.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from corsguard.cors.headers import compose_headers
from corsguard.cors.origins import OriginMatch, match_origin
from corsguard.cors.policy import CORSPolicy

ORIGIN_HEADER = "origin"
REQUEST_METHOD_HEADER = "access-control-request-method"
REQUEST_HEADERS_HEADER = "access-control-request-headers"

NO_CONTENT = 204


class RequestKind(str, Enum):
    SIMPLE = "simple"
    PREFLIGHT = "preflight"
    OPTIONS = "options"


class Action(str, Enum):
    FORWARD = "forward"
    TERMINATE = "terminate"


@dataclass(frozen=True)
class RequestView:
    """The parts of an inbound request the CORS decision depends on."""

    method: str
    origin: str | None = None
    request_method: str | None = None
    request_headers: str | None = None

    @classmethod
    def from_headers(cls, method: str, headers: Mapping[str, str]) -> "RequestView":
        """Build a view from a case-insensitive header mapping (e.g. starlette Headers)."""
        return cls(
            method=method,
            origin=headers.get(ORIGIN_HEADER),
            request_method=headers.get(REQUEST_METHOD_HEADER),
            request_headers=headers.get(REQUEST_HEADERS_HEADER),
        )


@dataclass(frozen=True)
class CORSDecision:
    """What to do with a request and which headers to attach.

    Attributes:
        kind: How the request was classified.
        action: FORWARD to the next handler or TERMINATE here.
        match: Origin check result.
        headers: CORS headers to set on the response.
        status_code: Response status when terminating.
    """

    kind: RequestKind
    action: Action
    match: OriginMatch
    headers: dict[str, str] = field(default_factory=dict)
    status_code: int | None = None

    @property
    def terminates(self) -> bool:
        return self.action is Action.TERMINATE


def classify_request(view: RequestView) -> RequestKind:
    """Classify a request as preflight, plain OPTIONS or simple."""
    if view.method.upper() != "OPTIONS":
        return RequestKind.SIMPLE
    if view.request_method:
        return RequestKind.PREFLIGHT
    return RequestKind.OPTIONS


class CORSDispatcher:
    """Drives origin matching and header composition for each request.

    Holds only the immutable policy, so one instance can serve any number of
    concurrent requests.
    """

    def __init__(self, policy: CORSPolicy):
        self.policy = policy

    def dispatch(self, view: RequestView) -> CORSDecision:
        """Decide the CORS outcome for a single request."""
        kind = classify_request(view)
        match = match_origin(view.origin, self.policy)

        if kind is RequestKind.PREFLIGHT:
            headers = compose_headers(
                match,
                self.policy,
                preflight=True,
                requested_headers=view.request_headers,
            )
            return CORSDecision(kind, Action.TERMINATE, match, headers, NO_CONTENT)

        headers = compose_headers(match, self.policy)

        if kind is RequestKind.OPTIONS:
            return CORSDecision(kind, Action.TERMINATE, match, headers, NO_CONTENT)

        return CORSDecision(kind, Action.FORWARD, match, headers)
