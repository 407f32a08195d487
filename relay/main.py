"""
Spec Editor Relay - outbound request relay for the browser spec editor.

Entry point for the FastAPI application.
"""
from __future__ import annotations

from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from relay.config import get_config
from relay.logging import get_logger
from relay.routers import internal, proxy
from relay.state import app_state, create_http_client

load_dotenv()

logger = get_logger(__name__)


def _init_http_client() -> None:
    """Initialize shared HTTP client for upstream requests."""
    timeout = get_config().relay_timeout_seconds
    app_state.http_client = create_http_client(timeout)
    logger.info(f"HTTP client initialized (deadline {timeout}s, redirects not followed)")


async def _shutdown_http_client() -> None:
    """Close the shared HTTP client."""
    if app_state.http_client:
        await app_state.http_client.aclose()
        app_state.http_client = None
        logger.info("HTTP client closed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - handles startup and shutdown."""
    _init_http_client()

    yield

    await _shutdown_http_client()

app = FastAPI(
    title="Spec Editor Relay",
    description="Relays 'Try it out' calls from the spec editor to third-party APIs",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(proxy.router)
app.include_router(internal.router)
