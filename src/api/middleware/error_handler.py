"""Error handling middleware."""
from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from core.logger import LoggerService
from core.settings import Settings
from providers.models import ErrorCode, ProviderError

# HTTP status returned for each provider error code; anything else is a 500
ERROR_STATUS_CODES = {
    ErrorCode.INVALID_CONFIG: 400,
    ErrorCode.UNSUPPORTED_CAPABILITY: 400,
    ErrorCode.UNSUPPORTED_PROVIDER: 400,
    ErrorCode.TIMEOUT: 504,
    ErrorCode.HTTP_ERROR: 502,
}


def status_for_error(error: ProviderError) -> int:
    """Map a provider error to the HTTP status the gateway answers with."""
    try:
        code = ErrorCode(error.code)
    except ValueError:
        return 500
    return ERROR_STATUS_CODES.get(code, 500)


class ErrorResponse:
    """Error response body."""

    @staticmethod
    def create(
        code: Any,
        message: str,
        details: Optional[dict] = None,
    ) -> dict:
        """Create error response.

        Args:
            code: Error code
            message: Error message
            details: Optional error details

        Returns:
            Error response dictionary
        """
        return {
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
            }
        }


class ErrorHandlerMiddleware:
    """Middleware for handling errors.

    Catches exceptions escaping the routers, logs them and answers with the
    common error body:
    {
        "error": {
            "code": string,
            "message": string,
            "details": {
                "code"?: string,
                "status"?: number,
                "provider_error"?: unknown,
                "error"?: string
            }
        }
    }
    """

    def __init__(
        self,
        app: ASGIApp,
        logger: LoggerService,
        settings: Settings,
    ) -> None:
        """Initialize middleware.

        Args:
            app: ASGI application
            logger: Logger service
            settings: Application settings
        """
        self.app = app
        self.logger = logger.get_logger(__name__)
        self.settings = settings

    def _public_details(self, error: ProviderError) -> dict:
        """Error details safe to return to the caller.

        ``UNKNOWN_ERROR`` carries a server-side traceback, which only leaves
        the process in debug mode.
        """
        details = error.to_details()
        if details["code"] == ErrorCode.UNKNOWN_ERROR.value and not self.settings.DEBUG:
            details["provider_error"] = None
        return details

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Process the request.

        Args:
            scope: ASGI scope
            receive: ASGI receive function
            send: ASGI send function
        """
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        request_id = getattr(request.state, "request_id", None)

        try:
            self.logger.debug(
                "Processing request",
                extra={
                    "request_id": request_id,
                    "path": request.url.path,
                    "method": request.method,
                },
            )
            await self.app(scope, receive, send)
            return

        except ProviderError as e:
            details = self._public_details(e)
            status_code = status_for_error(e)
            log = self.logger.error if status_code >= 500 else self.logger.warning
            log(
                "Provider error",
                extra={
                    "request_id": request_id,
                    "path": request.url.path,
                    "method": request.method,
                    "error_code": details["code"],
                    "error_message": e.message,
                    "upstream_status": e.status,
                    "provider_error": e.provider_error,
                },
            )
            response = JSONResponse(
                status_code=status_code,
                content=ErrorResponse.create(
                    code=details["code"],
                    message=e.message,
                    details=details,
                ),
            )
            await response(scope, receive, send)
            return

        except Exception as e:
            self.logger.error(
                "Unexpected error",
                extra={
                    "request_id": request_id,
                    "path": request.url.path,
                    "method": request.method,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            response = JSONResponse(
                status_code=500,
                content=ErrorResponse.create(
                    code=ErrorCode.UNKNOWN_ERROR.value,
                    message="Internal server error",
                    details={"error": str(e)} if self.settings.DEBUG else None,
                ),
            )
            await response(scope, receive, send)
            return
