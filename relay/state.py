"""
Application state - shared state initialized at startup.
"""
from __future__ import annotations

from http.cookiejar import CookieJar, DefaultCookiePolicy

import httpx

# httpx defaults that would otherwise reach the upstream on every call
CLIENT_DEFAULT_HEADERS = ("Accept", "Accept-Encoding", "User-Agent")


def create_http_client(timeout: float) -> httpx.AsyncClient:
    """
    Build the shared client used for upstream calls.

    Redirects are not followed, the pool has no connection cap, and the
    cookie jar refuses every cookie so nothing from one caller's exchange
    is replayed on another's. httpx's own default headers are removed, so
    the upstream only sees the headers the relay built for the call.
    """
    client = httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=False,
        limits=httpx.Limits(max_connections=None, max_keepalive_connections=20),
        cookies=CookieJar(policy=DefaultCookiePolicy(allowed_domains=[])),
    )
    for name in CLIENT_DEFAULT_HEADERS:
        del client.headers[name]
    return client


class AppState:
    """
    Application state container.
    Initialized at startup via lifespan, read by the relay route.
    """

    def __init__(self):
        self.http_client: httpx.AsyncClient | None = None


app_state = AppState()
