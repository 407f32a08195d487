"""
Header handling for relayed calls.

Outbound: only a fixed allow-list of the caller's own headers is forwarded,
plus the custom headers named in the relay payload with CR/LF stripped.
Inbound: only an allow-list of upstream response headers reaches the caller.
"""
from __future__ import annotations

import json
import re
from typing import Any, Dict, Mapping, Optional

import httpx

from relay.logging import get_logger

logger = get_logger(__name__)

# Caller headers forwarded upstream as-is
FORWARDED_REQUEST_HEADERS = ("Content-Type", "Authorization", "Accept")

# Upstream headers relayed back to the caller; everything else is dropped
RELAYED_RESPONSE_HEADERS = ("content-type", "x-request-id", "x-ratelimit-remaining")

_CRLF = re.compile(r"[\r\n]")

# RFC 9110 token characters, the only ones allowed in a header name
_HEADER_NAME_TOKEN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


def sanitize_header_text(value: Any) -> str:
    """Coerce a header name or value to text and strip every CR and LF."""
    if not isinstance(value, str):
        value = json.dumps(value, separators=(",", ":"))
    return _CRLF.sub("", value)


def build_upstream_headers(
    inbound_headers: Mapping[str, str],
    custom_headers: Optional[Mapping[str, Any]] = None,
) -> httpx.Headers:
    """
    Build the header set sent upstream.

    Custom headers override allow-listed ones case-insensitively, keeping
    the caller's spelling of the name. Custom entries whose name is empty
    after sanitizing, or not a valid token, are skipped.
    """
    headers = httpx.Headers(encoding="utf-8")
    lowered = {k.lower(): v for k, v in inbound_headers.items()}
    for name in FORWARDED_REQUEST_HEADERS:
        value = lowered.get(name.lower())
        if value:
            headers[name] = value

    for key, value in (custom_headers or {}).items():
        name = sanitize_header_text(key)
        if not _HEADER_NAME_TOKEN.match(name):
            logger.debug(f"Skipping custom header with invalid name {name!r}")
            continue
        headers[name] = sanitize_header_text(value)

    return headers


def filter_response_headers(headers: httpx.Headers) -> Dict[str, str]:
    """Keep only the allow-listed upstream response headers."""
    return {name: headers[name] for name in RELAYED_RESPONSE_HEADERS if name in headers}
