"""
Relay error taxonomy and the mapping from failure kind to caller-visible response.

Validation and security failures are raised before any network access.
Upstream and timeout failures are raised only after the outbound exchange
has been torn down.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse


class RelayError(Exception):
    """Base class for every failure the relay reports to its caller."""

    status_code: int = 500
    default_message: str = "Internal proxy error"

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(RelayError):
    """Malformed or missing caller input."""
    status_code = 400
    default_message = "invalid request"


class PayloadTooLargeError(ValidationError):
    """Inbound payload exceeds the configured size limit."""
    status_code = 413
    default_message = "request body too large"


class SecurityError(RelayError):
    """Target address forbidden by policy."""
    status_code = 403
    default_message = "blocked local address"


class UpstreamError(RelayError):
    """Transport failure while talking to the target."""
    status_code = 502
    default_message = "proxy request failed"


class UpstreamTimeoutError(RelayError):
    """The upstream exchange did not complete within the deadline."""
    status_code = 504
    default_message = "proxy request timed out"


class InternalError(RelayError):
    status_code = 500
    default_message = "Internal proxy error"


def classify_error(error: BaseException) -> RelayError:
    """
    Map any exception to a RelayError.

    Relay errors are returned as-is; anything else is an unanticipated
    failure and becomes an InternalError without leaking its message.
    """
    if isinstance(error, RelayError):
        return error
    return InternalError()


def error_response(error: BaseException) -> JSONResponse:
    """Render a failure as a structured `{error, details?}` JSON response."""
    relay_error = classify_error(error)
    return JSONResponse(status_code=relay_error.status_code, content=relay_error.to_dict())
