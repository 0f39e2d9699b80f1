"""CORS configuration parsing and validation.

``build_policy`` turns a raw ``CORSConfig`` (comma-separated strings, as they
come from the environment) into the immutable ``CORSPolicy`` consulted on
every request.

Validation rules (all enforced at construction, never per request):
- ``allow_credentials`` combined with the ``*`` origin is rejected; browsers
  refuse credentialed responses for a wildcard origin
- ``max_age`` must be >= 0
- ``origin_matching`` and ``preflight_headers`` must name a known mode
"""

from collections.abc import Iterable
from dataclasses import dataclass

from corsguard.cors.origins import comparable_origin
from corsguard.cors.policy import CORSPolicy, OriginMatching, PreflightHeaderPolicy
from corsguard.logging import get_logger

logger = get_logger(__name__)

WILDCARD_ORIGIN = "*"

ListInput = str | Iterable[str]


class CORSConfigError(ValueError):
    """Raised when a CORS configuration cannot be compiled into a policy."""


@dataclass(frozen=True)
class CORSConfig:
    """Raw CORS configuration.

    List fields accept either a comma-separated string or an iterable of
    strings (each of which may itself contain commas).

    Attributes:
        allow_origins: Allowed origins; ``*`` allows all, empty allows all.
        allow_credentials: Whether credentialed requests are permitted.
        allow_headers: Headers advertised on preflight; empty derives them
            from the request.
        expose_headers: Headers scripts may read.
        allow_methods: Allowed methods; empty uses the defaults.
        max_age: Preflight cache lifetime in seconds (0 = not advertised).
        origin_matching: "normalized" or "exact".
        preflight_headers: "safelist" or "echo".
    """

    allow_origins: ListInput = ""
    allow_credentials: bool = False
    allow_headers: ListInput = ""
    expose_headers: ListInput = ""
    allow_methods: ListInput = ""
    max_age: int = 0
    origin_matching: OriginMatching | str = OriginMatching.NORMALIZED
    preflight_headers: PreflightHeaderPolicy | str = PreflightHeaderPolicy.SAFELIST


def split_list(value: ListInput | None) -> tuple[str, ...]:
    """Split comma-separated input into trimmed, non-empty tokens.

    Args:
        value: A string like ``"GET, POST"`` or an iterable of such strings.

    Returns:
        Tokens in input order.
    """
    if not value:
        return ()

    chunks = [value] if isinstance(value, str) else list(value)
    return tuple(
        token.strip() for chunk in chunks for token in chunk.split(",") if token.strip()
    )


def _coerce_mode(enum_cls, value, setting: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise CORSConfigError(
            f"CORS: invalid {setting} {value!r} (expected one of: {allowed})"
        ) from None


def build_policy(config: CORSConfig) -> CORSPolicy:
    """Compile a raw configuration into a runtime policy.

    Args:
        config: The raw configuration.

    Returns:
        The immutable CORSPolicy.

    Raises:
        CORSConfigError: If the configuration is invalid. Callers should let
            this abort startup rather than serve requests with a weaker policy.
    """
    origin_matching = _coerce_mode(OriginMatching, config.origin_matching, "origin_matching")
    preflight_headers = _coerce_mode(
        PreflightHeaderPolicy, config.preflight_headers, "preflight_headers"
    )

    origins = split_list(config.allow_origins)
    allow_all = WILDCARD_ORIGIN in origins

    if config.allow_credentials and allow_all:
        raise CORSConfigError("CORS: allow_credentials=True is incompatible with allow_origins='*'")

    if config.max_age < 0:
        raise CORSConfigError(f"CORS: max_age must be >= 0, got {config.max_age}")

    allowed_origins: frozenset[str] = frozenset()
    if not allow_all:
        allowed_origins = frozenset(comparable_origin(o, origin_matching) for o in origins)

    policy = CORSPolicy(
        allowed_origins=allowed_origins,
        allow_all=allow_all,
        allow_credentials=config.allow_credentials,
        allow_headers=split_list(config.allow_headers),
        expose_headers=split_list(config.expose_headers),
        allow_methods=split_list(config.allow_methods),
        max_age=config.max_age,
        origin_matching=origin_matching,
        preflight_headers=preflight_headers,
    )

    logger.info(
        "cors.policy.compiled",
        allow_all=policy.allow_all,
        allowed_origins=sorted(policy.allowed_origins),
        allow_credentials=policy.allow_credentials,
        max_age=policy.max_age,
        origin_matching=policy.origin_matching.value,
        preflight_headers=policy.preflight_headers.value,
    )

    return policy
