# backend/errors.py
from __future__ import annotations


class GemchatError(Exception):
    """Base class for every error the app raises on purpose."""

    status_code: int = 500
    public_message: str = "Internal server error"

    def __init__(self, message: str = "", *, details: str | None = None) -> None:
        super().__init__(message or self.public_message)
        self.details = details


class InputValidationError(GemchatError):
    """Empty or malformed request."""

    status_code = 400
    public_message = "Invalid request"


class UpstreamServiceError(GemchatError):
    """Generation or transcription backend failed."""

    status_code = 500
    public_message = "Upstream service failed"


class ServiceUnavailableError(GemchatError):
    """A service handle could not be initialized (usually a missing API key)."""

    status_code = 503
    public_message = "Service unavailable"


class DeviceAccessError(GemchatError):
    """Microphone unavailable or access denied."""

    public_message = "Microphone unavailable"


class PersistenceError(GemchatError):
    """Snapshot missing, unreadable or corrupt."""

    public_message = "Local snapshot unreadable"
