"""
Proxy router - relays one browser-described call to a third-party API.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Request, Response

from relay.config import get_config
from relay.errors import InternalError, PayloadTooLargeError, RelayError, error_response
from relay.logging import get_logger
from relay.services.descriptor import parse_descriptor, read_payload
from relay.services.headers import build_upstream_headers
from relay.services.proxy import forward_request
from relay.services.url_guard import display_url
from relay.state import app_state

logger = get_logger(__name__)

router = APIRouter(tags=["proxy"])

RELAY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


async def read_request_body(request: Request) -> bytes:
    """
    Read the inbound payload, enforcing the configured size limit.

    Raises:
        PayloadTooLargeError: If Content-Length or the actual body exceeds the limit
    """
    max_body_size = get_config().relay_max_body_size

    # Check Content-Length header first to reject oversized requests early
    content_length = request.headers.get("content-length")
    if content_length:
        try:
            if int(content_length) > max_body_size:
                raise PayloadTooLargeError()
        except ValueError:
            pass  # Invalid content-length header, will check actual body size

    body = await request.body()
    if len(body) > max_body_size:
        raise PayloadTooLargeError()
    return body


@router.api_route(
    "/api/proxy",
    methods=RELAY_METHODS,
    response_class=Response,
    responses={
        200: {"description": "Relayed upstream response: upstream status, allow-listed headers, raw body"},
        400: {"description": "Missing or invalid url, unsupported scheme, invalid method or JSON payload"},
        403: {"description": "Target is a blocked local address"},
        413: {"description": "Request body too large"},
        500: {"description": "Internal proxy error"},
        502: {"description": "Upstream connection failed"},
        504: {"description": "Upstream did not respond before the deadline"},
    },
)
async def proxy(request: Request, url: Optional[str] = None) -> Response:
    """
    Relay one outbound HTTP(S) call on behalf of the browser.

    **Target:** `url` query parameter, or `url` field of the JSON payload
    (the query parameter wins).

    **Optional JSON payload fields:**
    - `method`: overrides the inbound method
    - `headers`: custom headers to send upstream (CR/LF stripped)
    - `body`: string or JSON value, sent for non-GET methods only

    **Flow:**
    1. Parse the call description
    2. Validate the target URL (scheme, blocked hosts)
    3. Build sanitized upstream headers
    4. Forward with a hard deadline
    5. Relay status, allow-listed headers and body
    """
    config = get_config()
    try:
        raw = await read_request_body(request)
        payload = read_payload(raw, request.headers.get("content-type"))
        proxy_request = parse_descriptor(
            url,
            payload,
            request.method,
            block_private_networks=config.relay_block_private_networks,
        )
        headers = build_upstream_headers(request.headers, proxy_request.headers)

        if app_state.http_client is None:
            logger.error("HTTP client not initialized")
            raise InternalError()

        proxy_response = await forward_request(
            proxy_request,
            headers,
            app_state.http_client,
            deadline=config.relay_timeout_seconds,
        )
    except RelayError as e:
        if e.status_code < 500:
            logger.warning(f"Rejected relay call: {e.message} ({e.details or 'no details'})")
        return error_response(e)
    except Exception as e:
        logger.exception(f"Unexpected error relaying request: {e!r}")
        return error_response(e)

    logger.info(
        f"Relayed {proxy_request.method} {display_url(proxy_request.target_url)} -> "
        f"{proxy_response.status_code} ({len(proxy_response.body)} bytes)"
    )
    return Response(
        content=proxy_response.body,
        status_code=proxy_response.status_code,
        headers=proxy_response.headers,
    )
