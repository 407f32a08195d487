#!/usr/bin/env python3
"""
Send one call through the relay and print what comes back.

Usage:
    python scripts/try_relay.py https://httpbin.org/get
    python scripts/try_relay.py https://httpbin.org/post --method POST --body '{"a": 1}'
    python scripts/try_relay.py https://httpbin.org/headers -H "X-Trace: 1" -H "Accept: text/plain"
    python scripts/try_relay.py http://localhost/ --relay-url http://localhost:8000   # expect 403
"""
from __future__ import annotations

import argparse
import json
import sys

import httpx


def parse_header(raw: str) -> tuple[str, str]:
    """Split a 'Name: value' pair."""
    name, sep, value = raw.partition(":")
    if not sep:
        raise argparse.ArgumentTypeError(f"header must look like 'Name: value', got {raw!r}")
    return name.strip(), value.strip()


def send(relay_url: str, target: str, method: str, headers: dict, body: str | None) -> int:
    """Send the relay call and print the relayed response."""
    payload: dict = {"url": target, "method": method, "headers": headers}
    if body is not None:
        try:
            payload["body"] = json.loads(body)
        except json.JSONDecodeError:
            payload["body"] = body

    print(f"\n-> {method} {target} via {relay_url}/api/proxy")

    try:
        response = httpx.post(f"{relay_url}/api/proxy", json=payload, timeout=40.0)
    except httpx.RequestError as e:
        print(f"\nError: {e}")
        print("   Is the relay running? (fastapi dev relay/main.py)")
        return 1

    print(f"\n<- {response.status_code}")
    for name, value in response.headers.items():
        print(f"   {name}: {value}")
    print()
    print(response.text)
    return 0 if response.status_code < 400 else 2


def main():
    parser = argparse.ArgumentParser(description="Send a call through the spec editor relay")
    parser.add_argument("url", help="Target URL the relay should call")
    parser.add_argument("--method", "-X", default="GET", help="Upstream HTTP method")
    parser.add_argument("--header", "-H", action="append", type=parse_header, default=[], help="Custom header 'Name: value' (repeatable)")
    parser.add_argument("--body", "-d", help="Request body (JSON is sent as JSON, anything else as text)")
    parser.add_argument("--relay-url", default="http://localhost:8000", help="Relay base URL")

    args = parser.parse_args()

    sys.exit(send(args.relay_url, args.url, args.method.upper(), dict(args.header), args.body))


if __name__ == "__main__":
    main()
