"""Radny AI gateway FastAPI application."""
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from api.middleware.error_handler import ErrorHandlerMiddleware, ErrorResponse
from api.middleware.request_id import RequestIDMiddleware
from api.routes.health import HealthRouter
from api.routes.providers import ProvidersRouter


class RadnyGatewayApp(FastAPI):
    """HTTP front for the provider adapter layer."""

    def __init__(
        self,
        lifespan: Optional[Callable] = None,
    ) -> None:
        """Initialize the application.

        Args:
            lifespan: Application lifespan manager
        """
        self._configured = False
        super().__init__(
            title="Radny AI Gateway",
            description="""
            # Provider Adapter API

            Uniform chat, embeddings and model listing across OpenAI, Anthropic,
            Google Gemini, local model servers and OpenAI-compatible endpoints.
            """,
            version="0.1.0",  # Updated in configure()
            docs_url="/docs",
            redoc_url="/redoc",
            lifespan=lifespan,
        )

        # Set by init_app() before configure()
        self.state.logger = None
        self.state.settings = None
        self.state.redis_client = None
        self.state.provider_registry = None

    def configure(self) -> None:
        """Configure middleware and routes after dependencies are set."""
        if self._configured:
            raise RuntimeError("Application is already configured")

        if not all(
            [
                self.state.logger,
                self.state.settings,
                self.state.redis_client,
                self.state.provider_registry,
            ]
        ):
            raise RuntimeError("Dependencies must be set before configuring the app.")

        logger = self.state.logger
        settings = self.state.settings
        app_logger = logger.get_logger(__name__)
        self.version = settings.VERSION

        app_logger.info(
            "Configuring CORS middleware",
            extra={"allowed_origins": settings.BACKEND_CORS_ORIGINS},
        )
        self.add_middleware(
            CORSMiddleware,
            allow_origins=settings.BACKEND_CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        # Last added runs first: request ids are assigned before errors are handled
        self.add_middleware(ErrorHandlerMiddleware, logger=logger, settings=settings)
        self.add_middleware(RequestIDMiddleware, logger=logger, settings=settings)

        health_router = HealthRouter(
            logger=logger, provider_registry=self.state.provider_registry
        )
        self.include_router(health_router.router)

        app_logger.info("Registering ProvidersRouter")
        providers_router = ProvidersRouter(
            logger=logger,
            settings=settings,
            provider_registry=self.state.provider_registry,
            cache=self.state.redis_client,
        )
        self.include_router(providers_router.router)

        self.add_exception_handler(HTTPException, self._http_exception_handler)
        self.add_exception_handler(
            RequestValidationError, self._validation_exception_handler
        )

        app_logger.info(
            "Application configuration completed",
            extra={
                "middleware_count": len(self.user_middleware),
                "router_count": len(self.router.routes),
                "providers": self.state.provider_registry.get_supported_providers(),
            },
        )
        self._configured = True

    async def _http_exception_handler(
        self, request: Request, exc: HTTPException
    ) -> JSONResponse:  # type: ignore
        """Handle HTTP exceptions.

        Args:
            request: FastAPI request
            exc: HTTP exception

        Returns:
            JSON response with error details
        """
        self.state.logger.get_logger(__name__).warning(
            "HTTP error occurred",
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "path": request.url.path,
                "method": request.method,
                "status_code": exc.status_code,
                "detail": exc.detail,
            },
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse.create(code=exc.status_code, message=str(exc.detail)),
        )

    async def _validation_exception_handler(
        self, request: Request, exc: RequestValidationError
    ) -> JSONResponse:  # type: ignore
        """Handle validation exceptions.

        Args:
            request: FastAPI request
            exc: Validation exception

        Returns:
            JSON response with validation errors
        """
        errors = [
            {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
            for error in exc.errors()
        ]
        self.state.logger.get_logger(__name__).warning(
            "Validation error",
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "path": request.url.path,
                "method": request.method,
                "errors": errors,
            },
        )
        return JSONResponse(
            status_code=422,
            content=ErrorResponse.create(
                code="VALIDATION_ERROR",
                message="Request validation error",
                details={"errors": errors},
            ),
        )
