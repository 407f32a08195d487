#!/usr/bin/env python3
"""
Mock upstream API for trying out the relay by hand.

Every endpoint echoes back what it received, and sets a few response
headers so the relay's header allow-list can be observed:
- /echo             - any method, returns method, path, headers and body
- /status/{code}    - any method, responds with the given status code
- /slow/{seconds}   - sleeps before answering (deadline testing)

The relay refuses localhost and 127.0.0.1, so call this server through
another address of the machine (e.g. its LAN IP).

Run with: python scripts/mock_upstream.py
Listens on: http://0.0.0.0:9001
"""
from __future__ import annotations

import asyncio
import uuid
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import uvicorn

app = FastAPI(title="Mock Upstream API", description="Echo server for the spec editor relay")

ANY_METHOD = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def log_request(request: Request, body: bytes):
    """Log the incoming call."""
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] {request.method} {request.url.path} | {len(body)} bytes")


def echo_headers() -> dict:
    """Headers the relay should keep (first two) and drop (the rest)."""
    return {
        "X-Request-Id": str(uuid.uuid4()),
        "X-RateLimit-Remaining": "42",
        "X-Secret": "should-not-reach-the-browser",
        "Set-Cookie": "session=abc; Path=/",
    }


async def _echo(request: Request, status_code: int = 200) -> JSONResponse:
    body = await request.body()
    log_request(request, body)
    return JSONResponse(
        {
            "method": request.method,
            "path": request.url.path,
            "query": str(request.url.query),
            "headers": dict(request.headers),
            "body": body.decode("utf-8", errors="replace"),
        },
        status_code=status_code,
        headers=echo_headers(),
    )


@app.api_route("/echo", methods=ANY_METHOD)
async def echo(request: Request):
    """Echo the request back."""
    return await _echo(request)


@app.api_route("/status/{code}", methods=ANY_METHOD)
async def status(code: int, request: Request):
    """Echo the request back with the requested status code."""
    return await _echo(request, status_code=code)


@app.api_route("/slow/{seconds}", methods=ANY_METHOD)
async def slow(seconds: float, request: Request):
    """Wait before echoing, to exercise the relay deadline."""
    await asyncio.sleep(seconds)
    return await _echo(request)


@app.get("/health")
async def health():
    """Health check."""
    return {"status": "healthy", "server": "mock-upstream"}


if __name__ == "__main__":
    print("\nMock Upstream API")
    print("=" * 50)
    print("Listening on http://0.0.0.0:9001")
    print("Endpoints:")
    print("  ANY /echo            - echo request")
    print("  ANY /status/{code}   - echo with status code")
    print("  ANY /slow/{seconds}  - delayed echo")
    print("=" * 50 + "\n")

    uvicorn.run(app, host="0.0.0.0", port=9001, log_level="warning")
