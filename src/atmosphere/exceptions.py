"""Custom exceptions for the atmosphere pipeline."""

from __future__ import annotations


class AtmosphereError(Exception):
    """Base exception for all atmosphere errors."""


class TransportError(AtmosphereError):
    """Base exception for failures while talking to an upstream source."""


class AtmosphereConnectionError(TransportError):
    """Raised when an upstream source cannot be reached."""


class AtmosphereTimeoutError(TransportError):
    """Raised when a request to an upstream source times out."""


class AtmosphereAPIError(TransportError):
    """Raised when an upstream source answers with a non-2xx status."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"HTTP {status_code}: {message}")


class EmptyResponseError(TransportError):
    """Raised when an upstream source answers with an empty body."""


class SchemaMismatchError(AtmosphereError):
    """Raised when a payload is present but lacks the expected fields."""
