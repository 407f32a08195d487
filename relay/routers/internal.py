"""
Internal router - health check.
"""
from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel, Field

router = APIRouter(tags=["internal"])


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(examples=["ok"])
    timestamp: str = Field(examples=["2026-01-01T12:00:00.000000+00:00"], description="Server time, ISO-8601 UTC")


@router.get("/api/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc).isoformat())
