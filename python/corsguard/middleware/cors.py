"""Pure ASGI CORS middleware.

- Does NOT use BaseHTTPMiddleware (buffers StreamingResponse, defeats incremental delivery).
- The policy is compiled once in __init__; an invalid configuration raises
  CORSConfigError there, so the app never starts serving with it.
- OPTIONS requests (preflight or plain) are answered here with 204.
- All other requests are forwarded; CORS headers are injected on the
  http.response.start message only.
- An unhandled exception raised before the response starts is turned into the
  500 E_INTERNAL envelope here, so it still carries the CORS headers and
  passes back through the request-logging middleware.
- Non-HTTP scopes (lifespan, websocket) pass through untouched.
"""

from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from corsguard.cors import CORSConfig, CORSDispatcher, CORSPolicy, RequestView, build_policy
from corsguard.cors.headers import VARY
from corsguard.logging import get_logger
from corsguard.responses import internal_error_response

logger = get_logger(__name__)


class CORSMiddleware:
    """Pure ASGI middleware applying a CORSPolicy to every HTTP request.

    Args:
        app: The ASGI application.
        policy: A pre-compiled policy. Takes precedence over ``config``.
        config: Raw configuration compiled with build_policy when no policy is given.
    """

    def __init__(
        self,
        app: ASGIApp,
        policy: CORSPolicy | None = None,
        config: CORSConfig | None = None,
    ):
        self.app = app
        self.policy = policy if policy is not None else build_policy(config or CORSConfig())
        self.dispatcher = CORSDispatcher(self.policy)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        view = RequestView.from_headers(scope["method"], Headers(scope=scope))
        decision = self.dispatcher.dispatch(view)

        if decision.match.denied:
            logger.debug("cors.origin.denied", kind=decision.kind.value)

        if decision.terminates:
            response = Response(status_code=decision.status_code, headers=decision.headers)
            await response(scope, receive, send)
            return

        response_started = False

        async def send_with_cors(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
                resp_headers = MutableHeaders(scope=message)
                for name, value in decision.headers.items():
                    if name == VARY:
                        resp_headers.add_vary_header(value)
                    else:
                        resp_headers[name] = value
            await send(message)

        try:
            await self.app(scope, receive, send_with_cors)
        except Exception as exc:
            # Nothing can be sent once the response has started
            if response_started:
                raise
            logger.exception("http.unhandled_exception", error=str(exc))
            await internal_error_response()(scope, receive, send_with_cors)
