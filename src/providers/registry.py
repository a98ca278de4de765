"""Provider adapter registry."""
from typing import Dict, List, Optional, Type

import httpx

from core.logger import LoggerService
from .base import BaseProviderAdapter
from .constants import (
    PROVIDER_DEFAULT_BASE_URLS,
    PROVIDER_LOCAL,
    PROVIDER_NAMES,
    PROVIDER_OPENAI,
    PROVIDER_OTHER,
)
from .local import LocalModelAdapter
from .models import ErrorCode, ProviderCapability, ProviderConfig, ProviderError
from .openai import OpenAIAdapter


class ProviderRegistry:
    """Dispatch table from provider id to adapter class.

    Callers never branch on provider type: they hand a ``ProviderConfig`` to
    ``get_adapter`` and use the returned adapter. New providers are added by
    registering another adapter class.

    The table is filled once at startup; mutation is not synchronized.
    """

    def __init__(
        self,
        logger: LoggerService,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize registry.

        Args:
            logger: Logger service instance, also handed to created adapters
            transport: Optional HTTP transport handed to created adapters
        """
        self.logger = logger.get_logger(__name__)
        self.instance_logger = logger
        self._transport = transport
        self._adapters: Dict[str, Type[BaseProviderAdapter]] = {}

    def initialize(self) -> "ProviderRegistry":
        """Register the default adapters.

        Returns:
            The registry itself, for chaining
        """
        self.register_adapter(PROVIDER_OPENAI, OpenAIAdapter)
        self.register_adapter(PROVIDER_LOCAL, LocalModelAdapter)
        # Any other OpenAI API compatible endpoint
        self.register_adapter(PROVIDER_OTHER, OpenAIAdapter)
        return self

    def register_adapter(
        self, provider_id: str, adapter_class: Type[BaseProviderAdapter]
    ) -> None:
        """Bind ``provider_id`` to ``adapter_class``, replacing any earlier binding."""
        self._adapters[provider_id] = adapter_class
        self.logger.debug(
            "Registered provider adapter",
            extra={"provider_id": provider_id, "adapter": adapter_class.__name__},
        )

    def get_adapter(self, config: ProviderConfig) -> BaseProviderAdapter:
        """Create an adapter for ``config``.

        Args:
            config: Provider configuration

        Returns:
            New adapter instance

        Raises:
            ProviderError: If no adapter is registered for the provider, or
                the config fails validation
        """
        adapter_class = self._adapters.get(config.provider)
        if adapter_class is None:
            error_msg = f"No adapter registered for provider: {config.provider}"
            self.logger.error(error_msg, extra={"provider_id": config.provider})
            raise ProviderError(
                message=error_msg,
                code=ErrorCode.UNSUPPORTED_PROVIDER,
                provider_error={"provider_id": config.provider},
            )

        return adapter_class(
            config=config,
            logger=self.instance_logger,
            transport=self._transport,
        )

    def is_supported(self, provider_id: str) -> bool:
        return provider_id in self._adapters

    def get_supported_providers(self) -> List[str]:
        return list(self._adapters)

    def get_capability(self, provider_id: str) -> Optional[ProviderCapability]:
        """Describe a registered provider from its adapter's defaults."""
        adapter_class = self._adapters.get(provider_id)
        if adapter_class is None:
            return None

        return ProviderCapability(
            provider=provider_id,
            name=PROVIDER_NAMES.get(provider_id, adapter_class.PROVIDER_NAME),
            supports_chat=True,
            supports_embeddings=adapter_class.SUPPORTS_EMBEDDINGS,
            auth_methods=list(adapter_class.AUTH_METHODS),
            default_base_url=PROVIDER_DEFAULT_BASE_URLS.get(provider_id),
            default_chat_endpoint=adapter_class.DEFAULT_CHAT_ENDPOINT,
            default_embeddings_endpoint=adapter_class.DEFAULT_EMBEDDINGS_ENDPOINT,
            default_models_endpoint=adapter_class.DEFAULT_MODELS_ENDPOINT,
            default_model=adapter_class.DEFAULT_MODEL,
            default_embedding_model=adapter_class.DEFAULT_EMBEDDING_MODEL,
        )

    def get_capabilities(self) -> List[ProviderCapability]:
        return [
            capability
            for provider_id in sorted(self._adapters)
            if (capability := self.get_capability(provider_id)) is not None
        ]
