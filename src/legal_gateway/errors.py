from __future__ import annotations

from enum import Enum
from typing import ClassVar


class ErrorKind(str, Enum):
    NOT_CONFIGURED = "not_configured"
    TIMEOUT = "timeout"
    CONNECTION_FAILURE = "connection_failure"
    PROVIDER_ERROR = "provider_error"
    INVALID_RESPONSE_FORMAT = "invalid_response_format"
    INVALID_REQUEST = "invalid_request"


class GatewayError(Exception):
    """Base error for completion gateway failures."""

    kind: ClassVar[ErrorKind]


class NotConfiguredError(GatewayError):
    kind = ErrorKind.NOT_CONFIGURED

    def __init__(
        self,
        message: str = "No cloud AI provider configured. Please add API keys to your environment.",
    ):
        super().__init__(message)


class ConfigurationError(GatewayError):
    """Caller supplied messages or options the gateway cannot send."""

    kind = ErrorKind.INVALID_REQUEST


class RequestTimeoutError(GatewayError):
    kind = ErrorKind.TIMEOUT

    def __init__(self, provider_name: str, timeout_seconds: float, message: str | None = None):
        super().__init__(message or f"{provider_name} request timeout - please try again")
        self.provider_name = provider_name
        self.timeout_seconds = timeout_seconds


class ConnectionFailureError(GatewayError):
    kind = ErrorKind.CONNECTION_FAILURE

    def __init__(self, provider_name: str, message: str | None = None):
        super().__init__(
            message or f"Unable to connect to {provider_name} - please check your internet connection"
        )
        self.provider_name = provider_name


class ProviderError(GatewayError):
    """Upstream answered with a non-success status. `body` is the raw response text."""

    kind = ErrorKind.PROVIDER_ERROR

    def __init__(self, provider_name: str, status_code: int, body: str):
        super().__init__(f"{provider_name} API error ({status_code}): {body}")
        self.provider_name = provider_name
        self.status_code = status_code
        self.body = body


class InvalidResponseFormatError(GatewayError):
    kind = ErrorKind.INVALID_RESPONSE_FORMAT

    def __init__(self, provider_name: str, message: str | None = None):
        super().__init__(message or f"Invalid response format from {provider_name}")
        self.provider_name = provider_name
