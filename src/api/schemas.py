"""Request and response schemas for the provider API."""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from providers.models import (
    AuthMethod,
    ChatMessage,
    ChatOptions,
    ModelInfo,
    ProviderCapability,
    ProviderConfig,
)


class ProviderConnection(BaseModel):
    """Connection settings in the stored configuration shape."""

    provider: str = Field(description="Provider identifier")
    api_key: str = Field(description="API key, or 'none' for unauthenticated local servers")
    base_url: str = Field(description="Base URL for the provider's API")
    auth_method: AuthMethod = "bearer"
    chat_endpoint: Optional[str] = None
    embeddings_endpoint: Optional[str] = None
    models_endpoint: Optional[str] = None
    model_name: Optional[str] = None
    embedding_model: Optional[str] = None
    custom_headers: Optional[Dict[str, str]] = None
    timeout_seconds: Optional[float] = Field(None, ge=0)
    max_retries: Optional[int] = Field(None, ge=0)

    def to_provider_config(
        self, default_timeout: float, default_max_retries: int
    ) -> ProviderConfig:
        """Build an adapter config, filling omitted timing fields from defaults."""
        data = self.model_dump(exclude_none=True)
        data.setdefault("timeout_seconds", default_timeout)
        data.setdefault("max_retries", default_max_retries)
        return ProviderConfig.from_api_configuration(data)


class ChatRequest(BaseModel):
    config: ProviderConnection
    messages: List[ChatMessage] = Field(min_length=1)
    options: ChatOptions = Field(default_factory=ChatOptions)


class EmbeddingsRequest(BaseModel):
    config: ProviderConnection
    text: str


class EmbeddingsResponse(BaseModel):
    embedding: List[float]
    dimensions: int


class ModelsResponse(BaseModel):
    data: List[ModelInfo]


class SupportedProvider(BaseModel):
    provider: str
    supports_chat: bool
    supports_embeddings: bool


class SupportedProvidersResponse(BaseModel):
    providers: List[SupportedProvider]


class CapabilitiesResponse(BaseModel):
    capabilities: List[ProviderCapability]


class ProviderDefaults(BaseModel):
    """Suggested starting configuration for a provider."""

    provider: str
    base_url: Optional[str]
    chat_endpoint: Optional[str]
    embeddings_endpoint: Optional[str]
    models_endpoint: Optional[str]
    model_name: Optional[str]
    embedding_model: Optional[str]
    auth_method: AuthMethod
    timeout_seconds: float
    max_retries: int
    capabilities: Dict[str, bool]


class ProviderDefaultsResponse(BaseModel):
    defaults: ProviderDefaults
