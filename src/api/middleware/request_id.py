"""Middleware that tags every request with an id and logs its outcome."""
import time
from typing import Optional
from uuid import uuid4

from fastapi import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from core.logger import LoggerService
from core.settings import Settings

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware:
    """Assign a request id, echo it back and log timing for each request.

    An incoming ``X-Request-ID`` header is reused so ids can be correlated
    with the caller's own logs.
    """

    # Seconds after which a request is logged as slow
    SLOW_REQUEST_THRESHOLD = 5.0

    def __init__(
        self,
        app: ASGIApp,
        logger: LoggerService,
        settings: Settings,
    ) -> None:
        """Initialize middleware.

        Args:
            app: ASGI application
            logger: Logger service for request/response logging
            settings: Settings instance
        """
        self.app = app
        self.logger = logger.get_logger(__name__)
        self.settings = settings

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id

        log_context = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
        }
        self.logger.info(
            "Incoming request",
            extra={
                **log_context,
                "content_length": request.headers.get("content-length", "0"),
                "client": request.client.host if request.client else None,
            },
        )

        status_code: Optional[int] = None
        start_time = time.monotonic()

        async def send_with_request_id(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                headers = list(message.get("headers", []))
                headers.append((REQUEST_ID_HEADER.encode(), request_id.encode()))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        except Exception as e:
            self.logger.error(
                "Request failed",
                extra={
                    **log_context,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "process_time_ms": int((time.monotonic() - start_time) * 1000),
                },
                exc_info=True,
            )
            raise

        process_time = time.monotonic() - start_time
        if process_time > self.SLOW_REQUEST_THRESHOLD:
            self.logger.warning(
                "Slow request detected",
                extra={**log_context, "process_time_ms": int(process_time * 1000)},
            )

        self.logger.info(
            "Request completed",
            extra={
                **log_context,
                "status_code": status_code,
                "process_time_ms": int(process_time * 1000),
            },
        )
