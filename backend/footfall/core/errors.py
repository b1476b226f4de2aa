"""
Centralized error handling for footfall services and the API.
Domain exceptions raised by services plus a reusable mapper so routes stay thin.
"""
from __future__ import annotations

from fastapi import HTTPException

# ---------------------------------------------------------------------------
# Constants: status codes and user-facing messages
# ---------------------------------------------------------------------------

STATUS_BAD_REQUEST = 400
STATUS_NOT_FOUND = 404
STATUS_CONFLICT = 409
STATUS_INTERNAL_ERROR = 500

# One message for absent, inactive and foreign stores so existence never leaks
MSG_STORE_NOT_FOUND = "Store not found or access denied"
MSG_ALERT_NOT_FOUND = "Alert not found"
MSG_PERSISTENCE = "Could not save footfall data; retry the request"


class FootfallError(Exception):
    """Base class for errors raised by footfall services."""

    detail = "Footfall service error"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.detail)
        self.detail = detail or self.detail


class ValidationError(FootfallError):
    """Malformed or out-of-range input. Raised before any write."""

    detail = "Validation error"


class NotFoundOrDenied(FootfallError):
    """Store/alert absent, inactive, or owned by someone else."""

    detail = MSG_STORE_NOT_FOUND


class InvalidAlertTransition(FootfallError):
    """Alert status change not allowed from its current status."""

    detail = "Alert cannot move to that status"


class PersistenceFailure(FootfallError):
    """Durable write/read failed; the caller should retry the whole request."""

    detail = MSG_PERSISTENCE


class AlertSynthesisFailure(FootfallError):
    """Best-effort alert write failed after the sample was stored. Logged, never surfaced."""

    detail = "Alert synthesis failed"


# ---------------------------------------------------------------------------
# Error rules: (exception type, status_code). First match wins.
# Add new rules here instead of scattering checks in routes.
# ---------------------------------------------------------------------------

FOOTFALL_ERROR_RULES: list[tuple[type[FootfallError], int]] = [
    (ValidationError, STATUS_BAD_REQUEST),
    (NotFoundOrDenied, STATUS_NOT_FOUND),
    (InvalidAlertTransition, STATUS_CONFLICT),
    (PersistenceFailure, STATUS_INTERNAL_ERROR),
]


def footfall_error_to_http(exc: Exception) -> HTTPException:
    """
    Map an exception from a footfall service into an HTTPException.
    Uses FOOTFALL_ERROR_RULES for known error types; anything else is a 500 with a generic message.
    """
    for exc_type, status_code in FOOTFALL_ERROR_RULES:
        if isinstance(exc, exc_type):
            return HTTPException(status_code=status_code, detail=exc.detail)
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail="Internal server error")
