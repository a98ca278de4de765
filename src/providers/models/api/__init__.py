"""Provider API error models package."""

from .errors import (
    ConfigurationError,
    ErrorCode,
    ProviderError,
    UnsupportedCapabilityError,
)

__all__ = [
    "ConfigurationError",
    "ErrorCode",
    "ProviderError",
    "UnsupportedCapabilityError",
]
