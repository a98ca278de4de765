"""Application settings."""
from typing import List, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )
    """Application settings."""

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Project
    PROJECT_NAME: str = "radny-ai-gateway"
    VERSION: str = "0.1.0"

    # Host
    HOST: str = "0.0.0.0"
    PORT: int = 8900

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        """Validate CORS origins."""
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Cache
    ENABLE_CACHE: bool = False  # Feature toggle: when False, cache is a no-op
    CACHE_TTL: int = 60 * 60  # 1 hour
    CACHE_PREFIX: str = "cache"
    MODELS_CACHE_TTL: int = 600  # 10 minutes

    # Redis
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_USER: str = ""
    REDIS_PREFIX: str = "radny"
    REDIS_PASSWORD: str = ""

    @property
    def REDIS_URL(self) -> str:
        """Get Redis connection URL."""
        user_part = self.REDIS_USER or ""
        password_part = f":{self.REDIS_PASSWORD}" if self.REDIS_PASSWORD else ""

        credentials = ""
        if user_part or self.REDIS_PASSWORD:
            credentials = f"{user_part}{password_part}@"

        return f"redis://{credentials}{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # Provider Settings
    PROVIDER_TIMEOUT: int = 30  # seconds, per attempt
    PROVIDER_MAX_RETRIES: int = 3

    # Feature Flags
    ENABLE_ANTHROPIC: bool = False  # Register the Anthropic adapter
    ENABLE_GOOGLE: bool = False  # Register the Google Gemini adapter

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # Available formats: json, text, structured
    LOG_EXTRA_FIELDS: list[str] = []  # Additional fields for logs


settings = Settings()
