"""Application-level exception types for TerminalTutor."""

from __future__ import annotations


class TutorError(Exception):
    """Base exception for TerminalTutor."""


class ConfigurationError(TutorError):
    """Base exception for configuration and startup validation errors."""


class ApiKeyNotConfiguredError(ConfigurationError):
    """Raised when an API key is required but missing."""


class ServiceError(TutorError):
    """Base exception for failures talking to the generative-language service."""

    kind = "service"


class TransportError(ServiceError):
    """Raised on connection, DNS or timeout failures."""

    kind = "transport"


class ApiStatusError(ServiceError):
    """Raised when the service answers with a non-success status code."""

    kind = "protocol"

    def __init__(self, status: int, service_message: str | None = None) -> None:
        self.status = status
        self.service_message = service_message
        message = f"API error: HTTP {status}"
        if service_message:
            message = f"{message} - {service_message}"
        super().__init__(message)


class ResponseStructureError(ServiceError):
    """Raised when a well-formed body lacks the candidate text path."""

    kind = "malformed"

    def __init__(self, message: str = "Invalid response structure") -> None:
        super().__init__(message)


class ResponseParseError(ServiceError):
    """Raised when a body cannot be decoded as JSON at all."""

    kind = "parse"

    def __init__(self, cause: Exception) -> None:
        self.cause = cause
        super().__init__(f"JSON parse error: {cause}")
