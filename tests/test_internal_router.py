"""
Tests for the internal router - health check endpoint.
"""
from datetime import datetime

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from relay.routers import internal


@pytest.fixture
def app():
    """Create a test FastAPI app."""
    test_app = FastAPI()
    test_app.include_router(internal.router)
    return test_app


@pytest.fixture
def client(app):
    """Create a test client."""
    return TestClient(app)


class TestHealthEndpoint:
    """Tests for the /api/health endpoint."""

    def test_health_returns_200(self, client):
        """Health endpoint should return 200."""
        response = client.get("/api/health")
        assert response.status_code == 200

    def test_health_returns_status_ok(self, client):
        """Health endpoint should return ok status."""
        response = client.get("/api/health")
        assert response.json()["status"] == "ok"

    def test_health_timestamp_is_iso_utc(self, client):
        """Timestamp should be a timezone-aware ISO-8601 string."""
        response = client.get("/api/health")
        timestamp = datetime.fromisoformat(response.json()["timestamp"])
        assert timestamp.utcoffset() is not None
        assert timestamp.utcoffset().total_seconds() == 0
