"""Radny AI gateway entry point."""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI

from app import RadnyGatewayApp
from core.settings import settings
from di import container
from di.setup import cleanup_di, setup_di


@asynccontextmanager
async def lifespan(app: RadnyGatewayApp) -> AsyncGenerator[None, None]:
    """Manage application lifespan.

    Args:
        app: FastAPI application instance

    Yields:
        None
    """
    app_logger = app.state.logger.get_logger(__name__)
    app_logger.info("Application configured successfully")

    if app.state.settings.ENABLE_CACHE:
        try:
            await app.state.redis_client.ping()
            app_logger.info("Redis client initialized successfully")
        except Exception as e:
            app_logger.error(
                "Failed to connect to Redis",
                extra={"error": str(e)},
            )
    else:
        app_logger.info("Redis disabled (ENABLE_CACHE=False), model cache in stub mode")

    try:
        yield
    finally:
        app_logger.info("Shutting down application")
        await app.state.redis_client.close()
        cleanup_di(app)


def init_app() -> FastAPI:
    """Initialize FastAPI application."""
    app = RadnyGatewayApp(lifespan=lifespan)

    setup_di(app)

    app.state.logger = container.logger()
    app.state.settings = container.settings()
    app.state.redis_client = container.redis_client()
    app.state.provider_registry = container.provider_registry()

    app.configure()
    return app


def get_app() -> FastAPI:
    """Factory function to create the FastAPI app."""
    return init_app()


if __name__ == "__main__":
    uvicorn.run(
        "main:get_app",
        factory=True,
        host=settings.HOST,
        port=int(settings.PORT),
        reload=settings.DEBUG,
    )
