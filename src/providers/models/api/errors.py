"""Error models for the provider adapter layer.

Every failure that leaves an adapter's public surface is a ``ProviderError``.
Raw HTTP, timeout and parsing exceptions are normalized into one before they
reach the caller.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Machine-readable provider error codes."""

    HTTP_ERROR = "HTTP_ERROR"
    TIMEOUT = "TIMEOUT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    INVALID_CONFIG = "INVALID_CONFIG"
    UNSUPPORTED_CAPABILITY = "UNSUPPORTED_CAPABILITY"
    UNSUPPORTED_PROVIDER = "UNSUPPORTED_PROVIDER"


class ProviderError(Exception):
    """Provider error with details."""

    def __init__(
        self,
        message: str,
        code: str = ErrorCode.UNKNOWN_ERROR,
        status: Optional[int] = None,
        provider_error: Any = None,
    ) -> None:
        """Initialize provider error.

        Args:
            message: Human-readable error message
            code: Error code, one of ``ErrorCode``
            status: HTTP status of the failed response, if any
            provider_error: Raw provider payload or diagnostic text
        """
        self.message = message
        self.code = code
        self.status = status
        self.provider_error = provider_error
        super().__init__(message)

    @property
    def is_auth_error(self) -> bool:
        return self.status in (401, 403)

    def to_details(self) -> Dict[str, Any]:
        """Return the diagnostic mapping used in test results and API errors."""
        code = self.code.value if isinstance(self.code, ErrorCode) else self.code
        return {
            "code": code,
            "status": self.status,
            "provider_error": self.provider_error,
        }

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, code={self.code!r}, "
            f"status={self.status!r})"
        )


class ConfigurationError(ProviderError):
    """Adapter configuration rejected at construction time."""

    def __init__(self, message: str, field: str) -> None:
        """Initialize configuration error.

        Args:
            message: Error message
            field: Config field that failed validation
        """
        super().__init__(
            message=message,
            code=ErrorCode.INVALID_CONFIG,
            provider_error={"field": field},
        )
        self.field = field


class UnsupportedCapabilityError(ProviderError):
    """Capability is not offered by the provider."""

    def __init__(self, provider: str, capability: str) -> None:
        super().__init__(
            message=f"{provider} does not support {capability} API",
            code=ErrorCode.UNSUPPORTED_CAPABILITY,
            provider_error={"provider": provider, "capability": capability},
        )
