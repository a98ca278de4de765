"""Provider models package."""

from .api import (
    ConfigurationError,
    ErrorCode,
    ProviderError,
    UnsupportedCapabilityError,
)
from .chat import ChatMessage, ChatOptions, ProviderChatResponse, Usage
from .model import ModelInfo
from .provider import AuthMethod, ProviderCapability, ProviderConfig
from .test_result import TestResult

__all__ = [
    "AuthMethod",
    "ChatMessage",
    "ChatOptions",
    "ConfigurationError",
    "ErrorCode",
    "ModelInfo",
    "ProviderCapability",
    "ProviderChatResponse",
    "ProviderConfig",
    "ProviderError",
    "TestResult",
    "UnsupportedCapabilityError",
    "Usage",
]
