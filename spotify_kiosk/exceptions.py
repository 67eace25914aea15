"""Custom exceptions for Spotify Kiosk with proper HTTP status codes."""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error responses."""

    KIOSK_ERROR = "KIOSK_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Credential exchange
    AUTH_ERROR = "AUTH_ERROR"
    AUTH_NOT_CONFIGURED = "AUTH_NOT_CONFIGURED"

    # Spotify Web API
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    UPSTREAM_UNAUTHORIZED = "UPSTREAM_UNAUTHORIZED"
    UPSTREAM_INVALID_RESPONSE = "UPSTREAM_INVALID_RESPONSE"

    # Network
    TRANSPORT_ERROR = "TRANSPORT_ERROR"

    CONFIG_ERROR = "CONFIG_ERROR"


class KioskException(Exception):
    """Base exception for kiosk errors with HTTP status code support.

    All custom exceptions inherit from this class so the API can answer
    every failure with the same error body.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.KIOSK_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        """Initialize kiosk exception.

        Args:
            message: Human-readable error message
            code: Error code from ErrorCode enum
            status_code: HTTP status code (default 500)
            details: Additional error context/details
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class AuthError(KioskException):
    """Spotify rejected the refresh token exchange, or credentials are missing."""

    def __init__(
        self,
        message: str = "Spotify authentication failed",
        code: ErrorCode = ErrorCode.AUTH_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, status_code=500, details=details)


class UpstreamError(KioskException):
    """Spotify Web API answered with a non-recoverable status."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UPSTREAM_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, status_code=500, details=details)


class TransportError(KioskException):
    """A remote or local endpoint could not be reached."""

    def __init__(self, message: str = "Connection error", details: dict[str, Any] | None = None):
        super().__init__(message, code=ErrorCode.TRANSPORT_ERROR, status_code=500, details=details)


class ConfigurationError(KioskException):
    """Configuration errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, code=ErrorCode.CONFIG_ERROR, status_code=500, details=details)
