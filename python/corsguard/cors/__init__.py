"""CORS policy engine.

This module provides:
- Configuration parsing/validation into an immutable policy
- Origin matching and preflight header filtering
- Response header composition and the per-request decision
"""

from corsguard.cors.config import CORSConfig, CORSConfigError, build_policy, split_list
from corsguard.cors.dispatcher import (
    Action,
    CORSDecision,
    CORSDispatcher,
    RequestKind,
    RequestView,
    classify_request,
)
from corsguard.cors.headers import compose_headers
from corsguard.cors.origins import MatchOutcome, OriginMatch, match_origin, normalize_origin
from corsguard.cors.policy import (
    DEFAULT_ALLOW_METHODS,
    CORSPolicy,
    OriginMatching,
    PreflightHeaderPolicy,
)
from corsguard.cors.safelist import SAFE_HEADERS, filter_preflight_headers

__all__ = [
    "Action",
    "build_policy",
    "classify_request",
    "compose_headers",
    "CORSConfig",
    "CORSConfigError",
    "CORSDecision",
    "CORSDispatcher",
    "CORSPolicy",
    "DEFAULT_ALLOW_METHODS",
    "filter_preflight_headers",
    "match_origin",
    "MatchOutcome",
    "normalize_origin",
    "OriginMatch",
    "OriginMatching",
    "PreflightHeaderPolicy",
    "RequestKind",
    "RequestView",
    "SAFE_HEADERS",
    "split_list",
]
