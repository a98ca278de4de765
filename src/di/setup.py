"""FastAPI dependency injection setup."""
from typing import Any, Callable, Dict, Optional, Type

from fastapi import FastAPI

from core.cache import RedisClient
from core.logger import LoggerService
from core.settings import Settings
from providers.registry import ProviderRegistry

from .dependencies import container


def setup_di(app: FastAPI) -> None:
    """Setup dependency injection for FastAPI application.

    Args:
        app: FastAPI application instance

    Raises:
        RuntimeError: If DI configuration fails
    """
    logger = container.logger().get_logger(__name__)
    try:
        logger.info("Starting dependency injection configuration")

        dependencies = get_di_dependencies()
        for dependency_type, provider in dependencies.items():
            app.dependency_overrides[dependency_type] = provider
            logger.debug("Registered dependency: %s" % dependency_type.__name__)

        logger.info("Dependency injection configuration completed successfully")
    except Exception as e:
        logger.error("Failed to configure dependency injection: %s" % str(e))
        cleanup_di(app)
        raise RuntimeError("Dependency injection configuration failed") from e


def cleanup_di(app: Optional[FastAPI] = None) -> None:
    """Cleanup dependency injection resources.

    This function is safe to call multiple times and will not raise exceptions.
    """
    logger = container.logger().get_logger(__name__)
    try:
        logger.info("Starting dependency injection cleanup")

        container.shutdown_resources()
        container.reset_singletons()

        if app:
            app.dependency_overrides.clear()

        logger.info("Dependency injection cleanup completed successfully")
    except Exception as e:
        logger.error("Error during DI cleanup: %s" % str(e), exc_info=True)


def get_di_dependencies() -> Dict[Type[Any], Callable[[], Any]]:
    """Map dependency types to the container providers that build them.

    Returns:
        Dict[Type[Any], Callable[[], Any]]: Dictionary mapping types to providers
    """
    return {
        Settings: container.settings.provider,
        LoggerService: container.logger.provider,
        RedisClient: container.redis_client.provider,
        ProviderRegistry: container.provider_registry.provider,
    }
