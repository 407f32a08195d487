"""
Shared test fixtures and helpers.
"""
from __future__ import annotations

import asyncio
from typing import Callable, Generator

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from relay.config import get_config
from relay.routers import internal, proxy
from relay.state import AppState, app_state, create_http_client


UPSTREAM_URL = "https://api.example.com/v1/items"


@pytest.fixture(autouse=True)
def fresh_config() -> Generator[None, None, None]:
    """Make every test read configuration from its own environment."""
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def relay_app() -> Generator[FastAPI, None, None]:
    """
    Create a test FastAPI app with the relay routes.
    The shared HTTP client is left unset; client fixtures install one.
    """
    original_client = app_state.http_client

    test_app = FastAPI()
    test_app.include_router(proxy.router)
    test_app.include_router(internal.router)

    yield test_app

    app_state.http_client = original_client


@pytest.fixture
def client(relay_app) -> TestClient:
    """
    Test client whose upstream calls go through the real client factory.
    Pair with the httpx_mock fixture to intercept the outbound transport.
    """
    app_state.http_client = create_http_client(5.0)
    return TestClient(relay_app)


@pytest.fixture
def client_with_transport(relay_app) -> Callable[[httpx.AsyncBaseTransport], TestClient]:
    """Build a test client whose upstream calls go to the given transport."""
    def _make(transport: httpx.AsyncBaseTransport) -> TestClient:
        app_state.http_client = httpx.AsyncClient(transport=transport, follow_redirects=False)
        return TestClient(relay_app)
    return _make


@pytest.fixture
def mock_app_state() -> Generator[AppState, None, None]:
    """Set up app_state with no HTTP client and restore it after the test."""
    original_client = app_state.http_client
    app_state.http_client = None

    yield app_state

    app_state.http_client = original_client


class HangingUpstream:
    """
    Mock transport handler that never answers.
    Records whether the pending exchange was cancelled (connection aborted).
    """

    def __init__(self, delay: float = 10.0):
        self.delay = delay
        self.started = False
        self.cancelled = False
        self.finished = False

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.started = True
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        self.finished = True
        return httpx.Response(200, content=b"too late")


@pytest.fixture
def hanging_upstream() -> HangingUpstream:
    return HangingUpstream()
