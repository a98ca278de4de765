"""Base provider adapter."""
import asyncio
import json
import time
import traceback
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

import httpx

from core.logger import LoggerService
from .models import (
    AuthMethod,
    ChatMessage,
    ChatOptions,
    ConfigurationError,
    ErrorCode,
    ModelInfo,
    ProviderChatResponse,
    ProviderConfig,
    ProviderError,
    TestResult,
)

# Statuses that no amount of retrying can fix
NON_RETRYABLE_STATUSES = (401, 403)


def drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``data`` without keys whose value is None."""
    return {key: value for key, value in data.items() if value is not None}


class BaseProviderAdapter(ABC):
    """Base class for all provider adapters.

    An adapter translates the provider-agnostic chat, embeddings and model
    listing calls into one provider's wire protocol. The base class owns
    what every protocol shares:
    - config validation at construction
    - header and URL composition
    - the HTTP request loop with per-attempt timeout and exponential backoff
    - normalization of every failure into ``ProviderError``

    Adapters hold no state between calls; each request opens its own HTTP
    exchange, so one instance can serve concurrent callers.
    """

    PROVIDER_NAME: ClassVar[str] = "Provider"
    DEFAULT_CHAT_ENDPOINT: ClassVar[Optional[str]] = None
    DEFAULT_EMBEDDINGS_ENDPOINT: ClassVar[Optional[str]] = None
    DEFAULT_MODELS_ENDPOINT: ClassVar[Optional[str]] = None
    DEFAULT_MODEL: ClassVar[Optional[str]] = None
    DEFAULT_EMBEDDING_MODEL: ClassVar[Optional[str]] = None
    DEFAULT_TEMPERATURE: ClassVar[float] = 0.7
    SUPPORTS_EMBEDDINGS: ClassVar[bool] = True
    AUTH_METHODS: ClassVar[Tuple[AuthMethod, ...]] = ("bearer", "api-key", "custom")

    def __init__(
        self,
        config: ProviderConfig,
        logger: LoggerService,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize adapter.

        Args:
            config: Provider configuration
            logger: Logger service instance
            transport: Optional transport for the HTTP clients the adapter opens

        Raises:
            ConfigurationError: If the API key or base URL is missing or invalid
        """
        self.config = config
        self.logger = logger.get_logger(type(self).__module__)
        self._transport = transport
        self._validate_config()

    def _validate_config(self) -> None:
        if not self.config.api_key:
            raise ConfigurationError("API key is required", field="api_key")

        if not self.config.base_url:
            raise ConfigurationError("Base URL is required", field="base_url")

        try:
            parsed = urlparse(self.config.base_url)
        except ValueError:
            parsed = None
        if parsed is None or not parsed.scheme or not parsed.netloc:
            raise ConfigurationError("Invalid base URL format", field="base_url")

    @property
    def model_name(self) -> str:
        return self.config.model_name or self.DEFAULT_MODEL or ""

    @property
    def embedding_model(self) -> str:
        return self.config.embedding_model or self.DEFAULT_EMBEDDING_MODEL or ""

    def build_headers(self) -> Dict[str, str]:
        """Build HTTP headers for requests.

        Custom headers from the config are applied last and win on collision.
        """
        headers: Dict[str, str] = {"Content-Type": "application/json"}

        if self.config.auth_method == "bearer":
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        elif self.config.auth_method == "api-key":
            headers["x-api-key"] = self.config.api_key

        headers.update(self.config.custom_headers)
        return headers

    def build_url(self, endpoint: str) -> str:
        """Join the base URL and an endpoint path."""
        base_url = self.config.base_url.rstrip("/")
        path = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        return f"{base_url}{path}"

    @staticmethod
    def backoff_delay(attempt: int) -> float:
        """Seconds to wait after a failed zero-based ``attempt``."""
        return float(2**attempt)

    async def make_request(
        self,
        url: str,
        method: str = "GET",
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Execute an HTTP request with retries.

        Args:
            url: Absolute request URL
            method: HTTP method
            json_body: Optional JSON request body

        Returns:
            Parsed JSON body of the first 2xx response

        Raises:
            ProviderError: On 401/403 immediately, otherwise the last error
                once all attempts are used
        """
        max_retries = self.config.effective_max_retries
        timeout = self.config.effective_timeout
        request_headers = self.build_headers()
        last_error: Optional[BaseException] = None

        for attempt in range(max_retries):
            try:
                self.logger.debug(
                    "Sending provider request",
                    extra={
                        "provider": self.config.provider,
                        "method": method,
                        "url": url,
                        "attempt": attempt + 1,
                        "max_retries": max_retries,
                    },
                )
                return await asyncio.wait_for(
                    self._send(method, url, request_headers, json_body, timeout),
                    timeout=timeout,
                )
            except Exception as e:
                last_error = e

                if isinstance(e, ProviderError) and e.status in NON_RETRYABLE_STATUSES:
                    self.logger.error(
                        "Provider rejected credentials",
                        extra={
                            "provider": self.config.provider,
                            "url": url,
                            "status": e.status,
                        },
                    )
                    raise

                if attempt < max_retries - 1:
                    delay = self.backoff_delay(attempt)
                    self.logger.warning(
                        "Provider request failed, retrying",
                        extra={
                            "provider": self.config.provider,
                            "url": url,
                            "attempt": attempt + 1,
                            "max_retries": max_retries,
                            "delay_seconds": delay,
                            "error": str(e) or type(e).__name__,
                        },
                    )
                    await asyncio.sleep(delay)

        if last_error is None:
            raise ProviderError("Request failed after retries")

        error = self.handle_error(last_error)
        self.logger.error(
            "Provider request failed after retries",
            extra={
                "provider": self.config.provider,
                "url": url,
                "max_retries": max_retries,
                "error_code": error.to_details()["code"],
                "status": error.status,
            },
        )
        if error is last_error:
            raise error
        raise error from last_error

    async def _send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        json_body: Optional[Dict[str, Any]],
        timeout: float,
    ) -> Any:
        """Perform a single HTTP attempt."""
        async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
            response = await client.request(method, url, headers=headers, json=json_body)

            if not response.is_success:
                error_text = response.text
                raise ProviderError(
                    message=self._error_message(error_text, response.status_code),
                    code=ErrorCode.HTTP_ERROR,
                    status=response.status_code,
                    provider_error=error_text,
                )

            return response.json()

    @staticmethod
    def _error_message(error_text: str, status_code: int) -> str:
        """Pull a readable message out of an error body."""
        try:
            error_data = json.loads(error_text)
        except ValueError:
            error_data = {"message": error_text}

        message = None
        if isinstance(error_data, dict):
            message = error_data.get("message")
            nested = error_data.get("error")
            if not message and isinstance(nested, dict):
                message = nested.get("message")
            elif not message and isinstance(nested, str):
                message = nested
        return message or f"HTTP {status_code}"

    def handle_error(self, error: BaseException) -> ProviderError:
        """Normalize any exception into ``ProviderError``."""
        if isinstance(error, ProviderError):
            return error

        if isinstance(error, (asyncio.TimeoutError, TimeoutError, httpx.TimeoutException)):
            return ProviderError(
                message="Request timeout",
                code=ErrorCode.TIMEOUT,
                provider_error=str(error) or type(error).__name__,
            )

        if isinstance(error, Exception):
            return ProviderError(
                message=str(error) or type(error).__name__,
                code=ErrorCode.UNKNOWN_ERROR,
                provider_error="".join(
                    traceback.format_exception(type(error), error, error.__traceback__)
                ),
            )

        return ProviderError(
            message="Unknown error occurred",
            code=ErrorCode.UNKNOWN_ERROR,
            provider_error=repr(error),
        )

    async def _connection_probe(self) -> None:
        """Cheapest real call that proves the provider is reachable."""
        await self.list_models()

    async def test_connection(self) -> TestResult:
        """Probe the provider and report the outcome.

        Never raises; failures are reported with ``status="failed"``.
        """
        start_time = time.monotonic()

        try:
            await self._connection_probe()
        except Exception as e:
            provider_error = self.handle_error(e)
            elapsed_ms = int((time.monotonic() - start_time) * 1000)
            self.logger.warning(
                "Connection test failed",
                extra={
                    "provider": self.config.provider,
                    "response_time_ms": elapsed_ms,
                    "error_code": provider_error.to_details()["code"],
                    "error_message": provider_error.message,
                },
            )
            return TestResult(
                status="failed",
                response_time_ms=elapsed_ms,
                error_message=provider_error.message,
                error_details=provider_error.to_details(),
                tested_at=datetime.now(timezone.utc).isoformat(),
            )

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        self.logger.info(
            "Connection test succeeded",
            extra={"provider": self.config.provider, "response_time_ms": elapsed_ms},
        )
        return TestResult(
            status="success",
            response_time_ms=elapsed_ms,
            tested_at=datetime.now(timezone.utc).isoformat(),
        )

    @abstractmethod
    async def chat(
        self,
        messages: Sequence[ChatMessage],
        options: Optional[ChatOptions] = None,
    ) -> ProviderChatResponse:
        """Send a chat completion request.

        Args:
            messages: Conversation in order
            options: Generation options

        Returns:
            Normalized chat response

        Raises:
            ProviderError: If the request fails
        """
        raise NotImplementedError

    @abstractmethod
    async def embeddings(self, text: str) -> List[float]:
        """Embed ``text``.

        Raises:
            ProviderError: If the request fails or embeddings are unsupported
        """
        raise NotImplementedError

    @abstractmethod
    async def list_models(self) -> List[ModelInfo]:
        """List available models.

        Raises:
            ProviderError: If models retrieval fails
        """
        raise NotImplementedError
