"""Tests for the shared adapter machinery: validation, headers, retries, errors."""
import asyncio
from typing import Dict, List

import httpx
import pytest

from conftest import RecordingTransport, json_response
from providers.base import BaseProviderAdapter
from providers.models import (
    ConfigurationError,
    ErrorCode,
    ModelInfo,
    ProviderChatResponse,
    ProviderError,
)


class PingAdapter(BaseProviderAdapter):
    """Minimal adapter whose model listing is a plain GET."""

    DEFAULT_MODELS_ENDPOINT = "/models"

    async def chat(self, messages, options=None) -> ProviderChatResponse:
        raise NotImplementedError

    async def embeddings(self, text: str) -> List[float]:
        raise NotImplementedError

    async def list_models(self) -> List[ModelInfo]:
        await self.make_request(self.build_url(self.DEFAULT_MODELS_ENDPOINT))
        return []


class HeaderAdapter(PingAdapter):
    """Adapter that authenticates with its own header."""

    def build_headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json", "X-Custom-Auth": self.config.api_key}


class TestConstruction:
    def test_rejects_empty_api_key(self, make_config, logger_service):
        with pytest.raises(ConfigurationError) as exc_info:
            PingAdapter(make_config(api_key=""), logger_service)

        assert exc_info.value.code == ErrorCode.INVALID_CONFIG
        assert exc_info.value.field == "api_key"

    def test_rejects_empty_base_url(self, make_config, logger_service):
        with pytest.raises(ConfigurationError) as exc_info:
            PingAdapter(make_config(base_url=""), logger_service)

        assert exc_info.value.field == "base_url"

    @pytest.mark.parametrize("base_url", ["not-a-url", "api.openai.com/v1", "http://"])
    def test_rejects_malformed_base_url(self, make_config, logger_service, base_url):
        with pytest.raises(ConfigurationError) as exc_info:
            PingAdapter(make_config(base_url=base_url), logger_service)

        assert exc_info.value.message == "Invalid base URL format"

    def test_accepts_valid_config(self, make_config, logger_service):
        adapter = PingAdapter(make_config(), logger_service)
        assert adapter.config.base_url == "https://api.example.com/v1"


class TestHeadersAndUrls:
    def test_bearer_auth(self, make_config, logger_service):
        headers = PingAdapter(make_config(), logger_service).build_headers()

        assert headers["Authorization"] == "Bearer sk-test"
        assert headers["Content-Type"] == "application/json"
        assert "x-api-key" not in headers

    def test_api_key_auth(self, make_config, logger_service):
        config = make_config(auth_method="api-key")
        headers = PingAdapter(config, logger_service).build_headers()

        assert headers["x-api-key"] == "sk-test"
        assert "Authorization" not in headers

    def test_custom_auth_sends_only_custom_headers(self, make_config, logger_service):
        config = make_config(auth_method="custom", custom_headers={"X-Token": "abc"})
        headers = PingAdapter(config, logger_service).build_headers()

        assert headers == {"Content-Type": "application/json", "X-Token": "abc"}

    def test_custom_headers_win_on_collision(self, make_config, logger_service):
        config = make_config(custom_headers={"Authorization": "Token override"})
        headers = PingAdapter(config, logger_service).build_headers()

        assert headers["Authorization"] == "Token override"

    @pytest.mark.parametrize(
        "base_url, endpoint",
        [
            ("https://api.example.com/v1", "/models"),
            ("https://api.example.com/v1/", "/models"),
            ("https://api.example.com/v1/", "models"),
        ],
    )
    def test_build_url_joins_with_single_slash(
        self, make_config, logger_service, base_url, endpoint
    ):
        adapter = PingAdapter(make_config(base_url=base_url), logger_service)
        assert adapter.build_url(endpoint) == "https://api.example.com/v1/models"


class TestMakeRequest:
    @pytest.mark.asyncio
    async def test_returns_parsed_body(self, make_config, logger_service):
        transport = RecordingTransport(lambda request: json_response({"ok": True}))
        adapter = PingAdapter(make_config(), logger_service, transport=transport)

        result = await adapter.make_request("https://api.example.com/v1/models")

        assert result == {"ok": True}
        assert transport.requests[0].headers["Authorization"] == "Bearer sk-test"

    @pytest.mark.asyncio
    async def test_uses_overridden_headers(self, make_config, logger_service):
        transport = RecordingTransport(lambda request: json_response({"ok": True}))
        adapter = HeaderAdapter(make_config(), logger_service, transport=transport)

        await adapter.make_request("https://api.example.com/v1/models")

        headers = transport.requests[0].headers
        assert headers["X-Custom-Auth"] == "sk-test"
        assert "Authorization" not in headers

    @pytest.mark.asyncio
    async def test_server_errors_use_all_attempts(self, make_config, logger_service, sleeps):
        transport = RecordingTransport(
            lambda request: json_response({"message": "overloaded"}, status_code=500)
        )
        adapter = PingAdapter(make_config(), logger_service, transport=transport)

        with pytest.raises(ProviderError) as exc_info:
            await adapter.make_request("https://api.example.com/v1/models")

        assert len(transport.requests) == 3
        assert exc_info.value.code == ErrorCode.HTTP_ERROR
        assert exc_info.value.status == 500
        assert exc_info.value.message == "overloaded"

    @pytest.mark.asyncio
    async def test_backoff_doubles_and_skips_final_sleep(
        self, make_config, logger_service, sleeps
    ):
        transport = RecordingTransport(lambda request: httpx.Response(503))
        adapter = PingAdapter(make_config(max_retries=4), logger_service, transport=transport)

        with pytest.raises(ProviderError):
            await adapter.make_request("https://api.example.com/v1/models")

        assert len(transport.requests) == 4
        assert sleeps == [1.0, 2.0, 4.0]

    @pytest.mark.parametrize("status_code", [401, 403])
    @pytest.mark.asyncio
    async def test_auth_failures_are_not_retried(
        self, make_config, logger_service, sleeps, status_code
    ):
        transport = RecordingTransport(
            lambda request: json_response(
                {"error": {"message": "Incorrect API key provided"}},
                status_code=status_code,
            )
        )
        adapter = PingAdapter(make_config(), logger_service, transport=transport)

        with pytest.raises(ProviderError) as exc_info:
            await adapter.make_request("https://api.example.com/v1/models")

        assert len(transport.requests) == 1
        assert sleeps == []
        assert exc_info.value.status == status_code
        assert exc_info.value.is_auth_error
        assert exc_info.value.message == "Incorrect API key provided"

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failure(
        self, make_config, logger_service, sleeps
    ):
        responses = iter([httpx.Response(502, text="Bad Gateway"), json_response([1])])
        transport = RecordingTransport(lambda request: next(responses))
        adapter = PingAdapter(make_config(), logger_service, transport=transport)

        result = await adapter.make_request("https://api.example.com/v1/models")

        assert result == [1]
        assert len(transport.requests) == 2
        assert sleeps == [1.0]

    @pytest.mark.asyncio
    async def test_zero_max_retries_falls_back_to_default(
        self, make_config, logger_service, sleeps
    ):
        transport = RecordingTransport(lambda request: httpx.Response(500))
        adapter = PingAdapter(make_config(max_retries=0), logger_service, transport=transport)

        with pytest.raises(ProviderError) as exc_info:
            await adapter.make_request("https://api.example.com/v1/models")

        assert len(transport.requests) == 3
        assert exc_info.value.message == "HTTP 500"

    @pytest.mark.asyncio
    async def test_plain_text_error_body_becomes_message(
        self, make_config, logger_service
    ):
        transport = RecordingTransport(lambda request: httpx.Response(404, text="Not Found"))
        adapter = PingAdapter(make_config(max_retries=1), logger_service, transport=transport)

        with pytest.raises(ProviderError) as exc_info:
            await adapter.make_request("https://api.example.com/v1/models")

        assert exc_info.value.message == "Not Found"
        assert exc_info.value.provider_error == "Not Found"

    @pytest.mark.asyncio
    async def test_transport_timeout_is_normalized(self, make_config, logger_service):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        adapter = PingAdapter(
            make_config(max_retries=1), logger_service, transport=RecordingTransport(handler)
        )

        with pytest.raises(ProviderError) as exc_info:
            await adapter.make_request("https://api.example.com/v1/models")

        assert exc_info.value.code == ErrorCode.TIMEOUT
        assert exc_info.value.message == "Request timeout"

    @pytest.mark.asyncio
    async def test_attempt_deadline_is_enforced(self, make_config, logger_service):
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(1)
            return json_response({})

        adapter = PingAdapter(
            make_config(max_retries=1, timeout_seconds=0.05),
            logger_service,
            transport=RecordingTransport(handler),
        )

        with pytest.raises(ProviderError) as exc_info:
            await adapter.make_request("https://api.example.com/v1/models")

        assert exc_info.value.code == ErrorCode.TIMEOUT

    @pytest.mark.asyncio
    async def test_network_failure_is_unknown_error(self, make_config, logger_service):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        adapter = PingAdapter(
            make_config(max_retries=1), logger_service, transport=RecordingTransport(handler)
        )

        with pytest.raises(ProviderError) as exc_info:
            await adapter.make_request("https://api.example.com/v1/models")

        assert exc_info.value.code == ErrorCode.UNKNOWN_ERROR
        assert "ConnectError" in exc_info.value.provider_error


class TestHandleError:
    def test_provider_error_passes_through(self, make_config, logger_service):
        adapter = PingAdapter(make_config(), logger_service)
        error = ProviderError("boom", code=ErrorCode.HTTP_ERROR, status=500)

        assert adapter.handle_error(error) is error

    def test_asyncio_timeout(self, make_config, logger_service):
        adapter = PingAdapter(make_config(), logger_service)
        error = adapter.handle_error(asyncio.TimeoutError())

        assert error.code == ErrorCode.TIMEOUT
        assert error.message == "Request timeout"

    def test_generic_exception_keeps_traceback(self, make_config, logger_service):
        adapter = PingAdapter(make_config(), logger_service)
        try:
            raise ValueError("bad payload")
        except ValueError as e:
            error = adapter.handle_error(e)

        assert error.code == ErrorCode.UNKNOWN_ERROR
        assert error.message == "bad payload"
        assert "Traceback" in error.provider_error

    def test_to_details_uses_plain_code(self):
        error = ProviderError("nope", code=ErrorCode.HTTP_ERROR, status=418, provider_error="x")

        assert error.to_details() == {
            "code": "HTTP_ERROR",
            "status": 418,
            "provider_error": "x",
        }


class TestConnection:
    @pytest.mark.asyncio
    async def test_success(self, make_config, logger_service):
        transport = RecordingTransport(lambda request: json_response({"data": []}))
        adapter = PingAdapter(make_config(), logger_service, transport=transport)

        result = await adapter.test_connection()

        assert result.status == "success"
        assert result.test_type == "connection"
        assert result.response_time_ms >= 0
        assert result.error_message is None
        assert result.tested_at

    @pytest.mark.asyncio
    async def test_failure_is_reported_not_raised(
        self, make_config, logger_service, sleeps
    ):
        transport = RecordingTransport(
            lambda request: json_response({"message": "down"}, status_code=500)
        )
        adapter = PingAdapter(make_config(), logger_service, transport=transport)

        result = await adapter.test_connection()

        assert result.status == "failed"
        assert result.error_message == "down"
        assert result.error_details["code"] == "HTTP_ERROR"
        assert result.error_details["status"] == 500

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_reported(self, make_config, logger_service):
        def handler(request: httpx.Request) -> httpx.Response:
            raise RuntimeError("socket exploded")

        adapter = PingAdapter(
            make_config(max_retries=1), logger_service, transport=RecordingTransport(handler)
        )

        result = await adapter.test_connection()

        assert result.status == "failed"
        assert result.error_details["code"] == "UNKNOWN_ERROR"
