"""
Proxy service - performs the single upstream exchange for a relay call.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Dict, Optional

import httpx

from relay.config import get_config
from relay.errors import UpstreamError, UpstreamTimeoutError
from relay.logging import get_logger
from relay.services.descriptor import ProxyRequest
from relay.services.headers import filter_response_headers
from relay.services.url_guard import display_url

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProxyResponse:
    """What the caller receives after a successful upstream exchange."""
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""


async def forward_request(
    proxy_request: ProxyRequest,
    headers: httpx.Headers,
    client: httpx.AsyncClient,
    deadline: Optional[float] = None,
) -> ProxyResponse:
    """
    Forward a relay call upstream and buffer the full response.

    The deadline covers connect, request write and receipt of the response
    headers. When it expires the pending exchange is cancelled, which closes
    the outbound connection. Exactly one attempt is made.

    Args:
        proxy_request: The parsed and validated call description
        headers: Sanitized outbound headers
        client: Shared HTTP client (redirects are not followed)
        deadline: Seconds allowed before the exchange is aborted
            (defaults to RELAY_TIMEOUT_SECONDS)

    Returns:
        The upstream status, allow-listed headers and raw body

    Raises:
        UpstreamTimeoutError: If the deadline or a transport timeout expires
        UpstreamError: On any other transport failure
    """
    if deadline is None:
        deadline = get_config().relay_timeout_seconds

    content = proxy_request.body if proxy_request.method != "GET" else None
    request = client.build_request(
        proxy_request.method,
        proxy_request.target_url,
        headers=headers,
        content=content,
    )

    response: httpx.Response | None = None
    try:
        response = await asyncio.wait_for(
            client.send(request, stream=True, follow_redirects=False),
            timeout=deadline,
        )
        body = await response.aread()
    except asyncio.TimeoutError:
        logger.error(
            f"Deadline of {deadline}s exceeded for "
            f"{proxy_request.method} {display_url(proxy_request.target_url)}"
        )
        raise UpstreamTimeoutError()
    except httpx.TimeoutException as e:
        logger.error(f"Timeout relaying to {display_url(proxy_request.target_url)}: {e!r}")
        raise UpstreamTimeoutError()
    except httpx.RequestError as e:
        logger.error(f"Connection error to {display_url(proxy_request.target_url)}: {e!r}")
        raise UpstreamError(details=str(e) or type(e).__name__)
    finally:
        if response is not None:
            await response.aclose()

    return ProxyResponse(
        status_code=response.status_code,
        headers=filter_response_headers(response.headers),
        body=body,
    )
