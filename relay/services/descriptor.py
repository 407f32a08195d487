"""
Request descriptor parser - turns an inbound relay call into a ProxyRequest.

Pure parsing: nothing here touches the network.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl

import httpx

from relay.errors import ValidationError
from relay.services.url_guard import validate_target_url

# RFC 9110 token characters
_METHOD_TOKEN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")

# Form keys like "headers[X-Api-Key]"
_FORM_NESTED_KEY = re.compile(r"^(\w+)\[([^\]]+)\]$")


@dataclass(frozen=True)
class ProxyRequest:
    """One outbound call, as described by the caller."""
    target_url: httpx.URL
    method: str
    headers: Dict[str, Any] = field(default_factory=dict)
    body: Optional[bytes] = None


def read_form_payload(raw: bytes) -> Dict[str, Any]:
    """
    Decode an urlencoded relay payload.

    Flat fields map to strings; bracketed keys such as ``headers[X-Api-Key]``
    are collected into a nested dict under ``headers``. The last value wins
    when a field repeats.

    Raises:
        ValidationError: If the body is not valid UTF-8
    """
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValidationError("invalid form payload", details=str(e))

    payload: Dict[str, Any] = {}
    for key, value in parse_qsl(text, keep_blank_values=True):
        nested = _FORM_NESTED_KEY.match(key)
        if nested:
            field_name, sub_key = nested.groups()
            group = payload.get(field_name)
            if not isinstance(group, dict):
                group = payload[field_name] = {}
            group[sub_key] = value
        else:
            payload[key] = value
    return payload


def read_payload(raw: bytes, content_type: Optional[str]) -> Dict[str, Any]:
    """
    Decode the inbound relay payload.

    JSON bodies and urlencoded form bodies are understood. Returns an empty
    dict for empty bodies, other content types, and JSON that is not an
    object.

    Raises:
        ValidationError: If the body claims to be JSON or a form but cannot be parsed
    """
    if not raw:
        return {}

    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if media_type == "application/x-www-form-urlencoded":
        return read_form_payload(raw)
    if media_type != "application/json" and not media_type.endswith("+json"):
        return {}

    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError("invalid json payload", details=str(e))

    return payload if isinstance(payload, dict) else {}


def encode_body(body: Any) -> bytes:
    """Strings are sent as-is; anything else as compact JSON text."""
    if isinstance(body, str):
        return body.encode("utf-8")
    return json.dumps(body, separators=(",", ":")).encode("utf-8")


def parse_descriptor(
    query_url: Optional[str],
    payload: Dict[str, Any],
    inbound_method: str,
    block_private_networks: bool = False,
) -> ProxyRequest:
    """
    Build a ProxyRequest from the inbound call.

    Args:
        query_url: The `url` query parameter, if any (takes precedence)
        payload: The decoded JSON payload (see read_payload)
        inbound_method: The HTTP method of the inbound call
        block_private_networks: Passed through to the SSRF guard

    Raises:
        ValidationError: Missing/invalid url or method
        SecurityError: Target host is blocked
    """
    raw_url = query_url or payload.get("url")
    if not raw_url:
        raise ValidationError("missing target url", details='provide "url" as a query parameter or payload field')

    target_url = validate_target_url(raw_url, block_private_networks=block_private_networks)

    method = payload.get("method") or inbound_method
    if not isinstance(method, str) or not _METHOD_TOKEN.match(method):
        raise ValidationError("invalid method")
    method = method.upper()

    headers = payload.get("headers")
    if not isinstance(headers, dict):
        headers = {}

    body = payload.get("body")
    encoded_body = None
    if method != "GET" and body is not None and body != "":
        encoded_body = encode_body(body)

    return ProxyRequest(
        target_url=target_url,
        method=method,
        headers=headers,
        body=encoded_body,
    )
