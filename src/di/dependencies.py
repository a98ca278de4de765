"""Dependency injection container."""
from typing import Optional

from dependency_injector import containers, providers
from redis.asyncio import Redis

from core.cache import RedisClient
from core.logger import LoggerService
from core.settings import Settings
from providers.anthropic import AnthropicAdapter
from providers.constants import PROVIDER_ANTHROPIC, PROVIDER_GOOGLE
from providers.google import GoogleGeminiAdapter
from providers.registry import ProviderRegistry


def create_redis(settings: Settings) -> Redis:
    """Create Redis connection.

    Args:
        settings: Application settings.

    Returns:
        Redis: Redis connection.
    """
    return Redis.from_url(
        str(settings.REDIS_URL),
        encoding="utf-8",
        decode_responses=True,
    )


def get_redis_connection(settings: Settings) -> Optional[Redis]:
    """Return Redis connection or None when ENABLE_CACHE is False (no connect)."""
    if not settings.ENABLE_CACHE:
        return None
    return create_redis(settings)


def create_provider_registry(
    logger: LoggerService, settings: Settings
) -> ProviderRegistry:
    """Build the process-wide adapter registry.

    Default bindings are always present; Anthropic and Google are opt-in
    through feature flags.
    """
    registry = ProviderRegistry(logger=logger).initialize()
    if settings.ENABLE_ANTHROPIC:
        registry.register_adapter(PROVIDER_ANTHROPIC, AnthropicAdapter)
    if settings.ENABLE_GOOGLE:
        registry.register_adapter(PROVIDER_GOOGLE, GoogleGeminiAdapter)

    logger.get_logger(__name__).info(
        "Provider registry initialized",
        extra={"providers": registry.get_supported_providers()},
    )
    return registry


class Container(containers.DeclarativeContainer):
    """Main application container."""

    # Settings
    settings = providers.Singleton(Settings)

    # Core services
    logger = providers.Singleton(LoggerService, settings_instance=settings)

    # Redis connection (None when ENABLE_CACHE=False; RedisClient then runs in stub mode)
    redis_connection = providers.Singleton(
        get_redis_connection,
        settings=settings,
    )
    redis_client = providers.Singleton(
        RedisClient,
        redis=redis_connection,
        logger=logger,
        settings=settings,
    )

    # Provider services
    provider_registry = providers.Singleton(
        create_provider_registry,
        logger=logger,
        settings=settings,
    )


container = Container()
