"""
Tests for header sanitizing (outbound) and filtering (inbound).
"""
import httpx
import pytest

from relay.services.headers import (
    RELAYED_RESPONSE_HEADERS,
    build_upstream_headers,
    filter_response_headers,
    sanitize_header_text,
)


class TestSanitizeHeaderText:
    """Tests for sanitize_header_text."""

    def test_plain_text_unchanged(self):
        assert sanitize_header_text("Bearer abc123") == "Bearer abc123"

    def test_strips_crlf(self):
        assert sanitize_header_text("ok\r\nX-Injected: 1") == "okX-Injected: 1"

    def test_strips_lone_cr_and_lf(self):
        assert sanitize_header_text("a\rb\nc") == "abc"

    @pytest.mark.parametrize("value, expected", [
        (1, "1"),
        (1.5, "1.5"),
        (True, "true"),
        (False, "false"),
        (None, "null"),
        ({"a": 1}, '{"a":1}'),
        (["x", "y"], '["x","y"]'),
    ])
    def test_non_string_values_coerced(self, value, expected):
        """Non-string JSON values are coerced the way a browser would print them."""
        assert sanitize_header_text(value) == expected


class TestBuildUpstreamHeaders:
    """Tests for build_upstream_headers."""

    def test_forwards_allow_listed_headers(self):
        """Content-Type, Authorization and Accept are forwarded."""
        headers = build_upstream_headers({
            "content-type": "application/json",
            "authorization": "Bearer token123",
            "accept": "application/json",
        })

        assert headers["Content-Type"] == "application/json"
        assert headers["Authorization"] == "Bearer token123"
        assert headers["Accept"] == "application/json"

    def test_drops_other_inbound_headers(self):
        """Nothing outside the allow-list is forwarded automatically."""
        headers = build_upstream_headers({
            "cookie": "session=secret",
            "host": "relay.local",
            "x-forwarded-for": "10.0.0.1",
            "user-agent": "Mozilla/5.0",
            "accept": "*/*",
        })

        assert dict(headers) == {"accept": "*/*"}

    def test_inbound_lookup_is_case_insensitive(self):
        headers = build_upstream_headers({"AUTHORIZATION": "Basic dXNlcjpwYXNz"})
        assert headers["authorization"] == "Basic dXNlcjpwYXNz"

    def test_adds_custom_headers(self):
        headers = build_upstream_headers({}, {"X-Api-Key": "k-1", "X-Trace": "t-2"})

        assert headers["X-Api-Key"] == "k-1"
        assert headers["X-Trace"] == "t-2"

    def test_custom_header_overrides_allow_listed(self):
        """Custom entries replace inbound ones case-insensitively."""
        headers = build_upstream_headers(
            {"authorization": "Bearer inbound"},
            {"authorization": "Bearer custom"},
        )

        assert headers.get_list("Authorization") == ["Bearer custom"]

    def test_custom_header_keeps_caller_spelling(self):
        headers = build_upstream_headers({"accept": "*/*"}, {"ACCEPT": "text/plain"})

        assert [k for k, _ in headers.raw] == [b"ACCEPT"]

    def test_header_injection_neutralized(self):
        """CR/LF in custom names and values cannot smuggle extra header lines."""
        headers = build_upstream_headers({}, {
            "X-Custom": "ok\r\nX-Injected: 1",
            "X-Evil\r\nX-Other": "v",
        })

        assert headers["X-Custom"] == "okX-Injected: 1"
        assert headers["X-EvilX-Other"] == "v"
        assert "X-Injected" not in headers
        assert "X-Other" not in headers
        for name, value in headers.raw:
            assert b"\r" not in name and b"\n" not in name
            assert b"\r" not in value and b"\n" not in value

    @pytest.mark.parametrize("name", ["\r\n", "\n", "", "X Custom", "X-Custom:", "X-Ünicode", "X-Tab\t"])
    def test_invalid_custom_header_names_skipped(self, name):
        """Names that are empty after stripping CR/LF, or not tokens, are never sent."""
        headers = build_upstream_headers({"accept": "*/*"}, {name: "x", "X-Valid": "ok"})

        assert headers["X-Valid"] == "ok"
        assert headers["Accept"] == "*/*"
        assert len(headers) == 2
        for raw_name, _ in headers.raw:
            assert raw_name

    def test_non_string_custom_values(self):
        headers = build_upstream_headers({}, {"X-Count": 3, "X-Flag": True})

        assert headers["X-Count"] == "3"
        assert headers["X-Flag"] == "true"

    def test_no_custom_headers(self):
        assert len(build_upstream_headers({}, None)) == 0


class TestFilterResponseHeaders:
    """Tests for filter_response_headers."""

    def test_keeps_only_allow_listed(self):
        upstream = httpx.Headers({
            "Content-Type": "application/json",
            "X-Request-Id": "req-1",
            "X-RateLimit-Remaining": "99",
            "X-Secret": "abc",
            "Set-Cookie": "session=1",
            "Location": "http://internal/",
            "Access-Control-Allow-Origin": "*",
            "Cache-Control": "max-age=3600",
        })

        assert filter_response_headers(upstream) == {
            "content-type": "application/json",
            "x-request-id": "req-1",
            "x-ratelimit-remaining": "99",
        }

    def test_missing_headers_skipped(self):
        upstream = httpx.Headers({"X-Secret": "abc"})
        assert filter_response_headers(upstream) == {}

    def test_allow_list(self):
        assert RELAYED_RESPONSE_HEADERS == ("content-type", "x-request-id", "x-ratelimit-remaining")
