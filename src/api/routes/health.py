"""Health check router implementation."""
from typing import Dict

from fastapi import Request

from .base import BaseRouter
from core.logger import LoggerService
from providers.registry import ProviderRegistry


class HealthRouter(BaseRouter):
    """Health check router implementation."""

    def __init__(self, logger: LoggerService, provider_registry: ProviderRegistry):
        """Initialize router.

        Args:
            logger: Logger service instance
            provider_registry: Registry whose bindings are reported
        """
        self.provider_registry = provider_registry
        super().__init__(logger=logger, tags=["health"])

    def _setup_routes(self) -> None:
        self.router.add_api_route(
            "/health",
            self.health_check,
            methods=["GET"],
            response_model=Dict[str, str],
            summary="Health Check",
            description="Health check endpoint to verify the service is running.",
            operation_id="get_health_status_v1",
            responses={
                200: {
                    "description": "Service is healthy",
                    "content": {
                        "application/json": {
                            "example": {"status": "healthy", "providers": "openai,local"}
                        }
                    },
                }
            },
        )

    async def health_check(self, request: Request) -> Dict[str, str]:
        """Report liveness and the registered provider ids.

        Args:
            request: FastAPI request object.

        Returns:
            A dictionary containing the health status.
        """
        self.logger.debug(
            "Health check requested",
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "client": request.client.host if request.client else None,
            },
        )
        return {
            "status": "healthy",
            "providers": ",".join(self.provider_registry.get_supported_providers()),
        }
