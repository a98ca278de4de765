"""Provider models."""
from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

AuthMethod = Literal["bearer", "api-key", "custom"]

DEFAULT_MAX_RETRIES = 3
DEFAULT_TIMEOUT_SECONDS = 30


class ProviderConfig(BaseModel):
    """Provider configuration.

    Accepts both snake_case and camelCase keys, so stored configuration rows
    and client payloads validate the same way. Credentials and the base URL
    are checked when an adapter is built from the config, not here.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        frozen=True,
    )

    provider: str = Field(
        description="Provider identifier (e.g., 'openai', 'anthropic', 'local', 'other')"
    )
    api_key: str = Field(
        default="",
        description="API key; 'none' or empty disables auth for local providers",
    )
    base_url: str = Field(default="", description="Base URL for the provider's API")
    auth_method: AuthMethod = Field(
        default="bearer", description="How the API key is attached to requests"
    )
    chat_endpoint: Optional[str] = Field(None, description="Chat endpoint override")
    embeddings_endpoint: Optional[str] = Field(
        None, description="Embeddings endpoint override"
    )
    models_endpoint: Optional[str] = Field(
        None, description="Model listing endpoint override"
    )
    model_name: Optional[str] = Field(None, description="Chat model override")
    embedding_model: Optional[str] = Field(
        None, description="Embedding model override"
    )
    custom_headers: Dict[str, str] = Field(
        default_factory=dict,
        description="Extra headers merged into every request, winning on collision",
    )
    max_retries: int = Field(
        default=DEFAULT_MAX_RETRIES, ge=0, description="Attempts per request"
    )
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS, ge=0, description="Per-attempt timeout"
    )

    @field_validator("custom_headers", mode="before")
    @classmethod
    def none_headers_to_empty(cls, v: Optional[Dict[str, str]]) -> Dict[str, str]:
        return v or {}

    @property
    def effective_max_retries(self) -> int:
        """Attempt count; zero falls back to the default."""
        return self.max_retries or DEFAULT_MAX_RETRIES

    @property
    def effective_timeout(self) -> float:
        """Per-attempt timeout in seconds; zero falls back to the default."""
        return self.timeout_seconds or DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_api_configuration(cls, record: Mapping[str, Any]) -> "ProviderConfig":
        """Build a config from a stored ``api_configurations`` row.

        Columns that are NULL in storage fall back to the model defaults;
        columns unrelated to the adapter (ids, status, timestamps) are ignored.

        Args:
            record: Row mapping with a decrypted ``api_key``

        Returns:
            Provider config for adapter construction
        """
        fields = {name for name in cls.model_fields}
        data = {
            key: value
            for key, value in record.items()
            if key in fields and value is not None
        }
        return cls.model_validate(data)


class ProviderCapability(BaseModel):
    """Static capability and default-settings record for a provider id."""

    provider: str = Field(description="Provider identifier")
    name: str = Field(description="Human-readable provider name")
    supports_chat: bool = True
    supports_embeddings: bool = True
    auth_methods: List[AuthMethod] = Field(default_factory=lambda: ["bearer"])
    default_base_url: Optional[str] = None
    default_chat_endpoint: Optional[str] = None
    default_embeddings_endpoint: Optional[str] = None
    default_models_endpoint: Optional[str] = None
    default_model: Optional[str] = None
    default_embedding_model: Optional[str] = None
