"""Tests for preflight request-header filtering."""

import pytest

from corsguard.cors import SAFE_HEADERS, CORSConfig, build_policy, filter_preflight_headers


@pytest.fixture
def safelist_policy():
    return build_policy(CORSConfig())


@pytest.fixture
def echo_policy():
    return build_policy(CORSConfig(preflight_headers="echo"))


class TestSafeHeaders:
    def test_contents(self):
        assert SAFE_HEADERS == {
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

    def test_is_immutable(self):
        assert isinstance(SAFE_HEADERS, frozenset)
        assert not hasattr(SAFE_HEADERS, "add")


class TestFilterPreflightHeaders:
    def test_unsafe_tokens_dropped(self, safelist_policy):
        result = filter_preflight_headers("content-type, x-unsafe-header", safelist_policy)
        assert result == "content-type"

    def test_tokens_trimmed_and_lowercased(self, safelist_policy):
        result = filter_preflight_headers(" Content-Type ,AUTHORIZATION", safelist_policy)
        assert result == "content-type, authorization"

    def test_request_order_preserved(self, safelist_policy):
        result = filter_preflight_headers(
            "content-type, authorization, x-csrf-token, host", safelist_policy
        )
        assert result == "content-type, authorization, x-csrf-token"

    def test_nothing_safe_echoes_requested_value(self, safelist_policy):
        requested = "X-Custom-Header, Host"
        assert filter_preflight_headers(requested, safelist_policy) == requested

    def test_echo_policy_returns_verbatim(self, echo_policy):
        requested = "Content-Type, X-Unsafe-Header"
        assert filter_preflight_headers(requested, echo_policy) == requested
