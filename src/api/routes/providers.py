"""Provider adapter router implementation."""
import hashlib

from fastapi import HTTPException, Request

from .base import BaseRouter
from api.schemas import (
    CapabilitiesResponse,
    ChatRequest,
    EmbeddingsRequest,
    EmbeddingsResponse,
    ModelsResponse,
    ProviderConnection,
    ProviderDefaults,
    ProviderDefaultsResponse,
    SupportedProvider,
    SupportedProvidersResponse,
)
from core.cache import RedisClient
from core.logger import LoggerService
from core.settings import Settings
from providers.base import BaseProviderAdapter
from providers.models import ModelInfo, ProviderChatResponse, TestResult
from providers.registry import ProviderRegistry


class ProvidersRouter(BaseRouter):
    """Router exposing the provider adapters over HTTP.

    Every request carries the full connection config; adapters are built per
    request and discarded afterwards.
    """

    def __init__(
        self,
        logger: LoggerService,
        settings: Settings,
        provider_registry: ProviderRegistry,
        cache: RedisClient,
    ):
        """Initialize router.

        Args:
            logger: Logger service instance
            settings: Application settings
            provider_registry: Registry used to build adapters
            cache: Cache for model listings
        """
        self.settings = settings
        self.provider_registry = provider_registry
        self.cache = cache
        super().__init__(logger=logger, prefix="/api/providers", tags=["providers"])

    def _setup_routes(self) -> None:
        self.router.add_api_route(
            "/supported",
            self.get_supported_providers,
            methods=["GET"],
            response_model=SupportedProvidersResponse,
            summary="List supported providers",
            operation_id="get_supported_providers_v1",
        )
        self.router.add_api_route(
            "/capabilities",
            self.get_capabilities,
            methods=["GET"],
            response_model=CapabilitiesResponse,
            summary="List provider capabilities",
            operation_id="get_provider_capabilities_v1",
        )
        self.router.add_api_route(
            "/{provider}/defaults",
            self.get_defaults,
            methods=["GET"],
            response_model=ProviderDefaultsResponse,
            summary="Get default configuration for a provider",
            operation_id="get_provider_defaults_v1",
            responses={404: {"description": "Provider is not registered"}},
        )
        self.router.add_api_route(
            "/test",
            self.test_connection,
            methods=["POST"],
            response_model=TestResult,
            summary="Test a provider connection",
            operation_id="test_provider_connection_v1",
        )
        self.router.add_api_route(
            "/models",
            self.list_models,
            methods=["POST"],
            response_model=ModelsResponse,
            summary="List models available to a connection",
            operation_id="list_provider_models_v1",
        )
        self.router.add_api_route(
            "/chat",
            self.chat,
            methods=["POST"],
            response_model=ProviderChatResponse,
            summary="Send a chat completion request",
            operation_id="create_provider_chat_v1",
        )
        self.router.add_api_route(
            "/embeddings",
            self.embeddings,
            methods=["POST"],
            response_model=EmbeddingsResponse,
            summary="Create an embedding",
            operation_id="create_provider_embedding_v1",
        )

    def _build_adapter(self, connection: ProviderConnection) -> BaseProviderAdapter:
        config = connection.to_provider_config(
            default_timeout=self.settings.PROVIDER_TIMEOUT,
            default_max_retries=self.settings.PROVIDER_MAX_RETRIES,
        )
        return self.provider_registry.get_adapter(config)

    async def get_supported_providers(self) -> SupportedProvidersResponse:
        return SupportedProvidersResponse(
            providers=[
                SupportedProvider(
                    provider=capability.provider,
                    supports_chat=capability.supports_chat,
                    supports_embeddings=capability.supports_embeddings,
                )
                for capability in self.provider_registry.get_capabilities()
            ]
        )

    async def get_capabilities(self) -> CapabilitiesResponse:
        return CapabilitiesResponse(capabilities=self.provider_registry.get_capabilities())

    async def get_defaults(self, provider: str) -> ProviderDefaultsResponse:
        """Return the suggested starting configuration for ``provider``.

        Raises:
            HTTPException: 404 when the provider is not registered
        """
        capability = self.provider_registry.get_capability(provider)
        if capability is None:
            raise HTTPException(status_code=404, detail=f"Unknown provider: {provider}")

        return ProviderDefaultsResponse(
            defaults=ProviderDefaults(
                provider=capability.provider,
                base_url=capability.default_base_url,
                chat_endpoint=capability.default_chat_endpoint,
                embeddings_endpoint=capability.default_embeddings_endpoint,
                models_endpoint=capability.default_models_endpoint,
                model_name=capability.default_model,
                embedding_model=capability.default_embedding_model,
                auth_method=capability.auth_methods[0],
                timeout_seconds=self.settings.PROVIDER_TIMEOUT,
                max_retries=self.settings.PROVIDER_MAX_RETRIES,
                capabilities={
                    "chat": capability.supports_chat,
                    "embeddings": capability.supports_embeddings,
                },
            )
        )

    async def test_connection(
        self, connection: ProviderConnection, request: Request
    ) -> TestResult:
        """Probe a provider connection.

        Probe failures come back as a ``failed`` result with status 200; only
        an unusable config is an HTTP error.
        """
        adapter = self._build_adapter(connection)
        result = await adapter.test_connection()
        self.logger.info(
            "Connection tested",
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "provider": connection.provider,
                "status": result.status,
                "response_time_ms": result.response_time_ms,
            },
        )
        return result

    @staticmethod
    def _models_cache_key(adapter: BaseProviderAdapter) -> str:
        """Cache key scoped to the credential as well as the endpoint.

        Connections that differ in key, auth method, custom headers or models
        path never share a cached listing.
        """
        config = adapter.config
        credential = hashlib.sha256(
            "\0".join(
                [
                    config.api_key,
                    config.auth_method,
                    config.models_endpoint or "",
                    repr(sorted(config.custom_headers.items())),
                ]
            ).encode()
        ).hexdigest()[:32]
        return f"models:{config.provider}:{config.base_url.rstrip('/')}:{credential}"

    async def list_models(self, connection: ProviderConnection) -> ModelsResponse:
        adapter = self._build_adapter(connection)
        cache_key = self._models_cache_key(adapter)
        cached = await self.cache.cache_get(cache_key)
        if cached is not None:
            return ModelsResponse(data=[ModelInfo.model_validate(m) for m in cached])

        models = await adapter.list_models()
        await self.cache.cache_set(
            cache_key,
            [model.model_dump() for model in models],
            expire=self.settings.MODELS_CACHE_TTL,
        )
        self.logger.debug(
            "Models fetched",
            extra={"provider": connection.provider, "count": len(models)},
        )
        return ModelsResponse(data=models)

    async def chat(self, chat_request: ChatRequest) -> ProviderChatResponse:
        adapter = self._build_adapter(chat_request.config)
        return await adapter.chat(chat_request.messages, chat_request.options)

    async def embeddings(self, embeddings_request: EmbeddingsRequest) -> EmbeddingsResponse:
        adapter = self._build_adapter(embeddings_request.config)
        embedding = await adapter.embeddings(embeddings_request.text)
        return EmbeddingsResponse(embedding=embedding, dimensions=len(embedding))
