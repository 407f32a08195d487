"""
URL validator and SSRF guard - checks the target URL before any network I/O.

The blocklist check is an exact hostname match. It does not resolve DNS and
does not canonicalize alternative IPv4 encodings (decimal, octal, hex), so
names like ``127.1`` or ``localtest.me`` are not caught by it. Setting
RELAY_BLOCK_PRIVATE_NETWORKS additionally rejects IP literals that fall in
private, loopback or link-local ranges.
"""
from __future__ import annotations

import ipaddress

import httpx

from relay.errors import SecurityError, ValidationError

ALLOWED_SCHEMES = frozenset({"http", "https"})

# Hostnames in their URL form: IPv6 literals keep their brackets
BLOCKED_HOSTS = frozenset({"localhost", "127.0.0.1", "0.0.0.0", "[::1]"})


def url_hostname(url: httpx.URL) -> str:
    """
    Return the hostname in the form BLOCKED_HOSTS is written in.

    httpx strips the brackets from IPv6 literals; they are put back here
    (with the address compressed) so the value compares against BLOCKED_HOSTS.
    """
    host = url.host
    if ":" not in host:
        return host
    try:
        host = ipaddress.IPv6Address(host).compressed
    except ValueError:
        pass
    return f"[{host}]"


def display_url(url: httpx.URL) -> str:
    """Scheme, host, port and path only, for logs. Query and userinfo can carry credentials."""
    return f"{url.scheme}://{url.netloc.decode('ascii')}{url.path}"


def _is_private_address(host: str) -> bool:
    try:
        address = ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        # Not an IP literal; names are not resolved here
        return False

    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        address = address.ipv4_mapped

    return (
        address.is_private
        or address.is_loopback
        or address.is_link_local
        or address.is_reserved
        or address.is_multicast
        or address.is_unspecified
    )


def validate_target_url(raw_url: object, block_private_networks: bool = False) -> httpx.URL:
    """
    Parse and validate the URL the caller wants the relay to call.

    Args:
        raw_url: The target URL as supplied by the caller
        block_private_networks: Also reject private/loopback/link-local IP literals

    Returns:
        The parsed URL, safe to hand to the transport

    Raises:
        ValidationError: If the URL is malformed or its scheme is not http/https
        SecurityError: If the host is a blocked local address
    """
    if not isinstance(raw_url, str):
        raise ValidationError("invalid url")

    try:
        url = httpx.URL(raw_url)
    except (httpx.InvalidURL, TypeError, ValueError):
        raise ValidationError("invalid url")

    if url.scheme not in ALLOWED_SCHEMES:
        details = f"scheme '{url.scheme}' is not allowed" if url.scheme else "url must be absolute"
        raise ValidationError("unsupported scheme", details=details)

    if not url.host:
        raise ValidationError("invalid url")

    hostname = url_hostname(url)
    if hostname in BLOCKED_HOSTS:
        raise SecurityError("blocked local address")

    if block_private_networks and _is_private_address(hostname):
        raise SecurityError("blocked local address")

    return url
