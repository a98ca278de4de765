"""Shared fixtures for the adapter and API test suites.

HTTP traffic never leaves the process: adapters receive an
``httpx.MockTransport`` whose handler records every request it sees.
"""
import json
from typing import Any, Callable, Dict, List

import httpx
import pytest

from core.logger import LoggerService
from core.settings import Settings
from providers.models import ProviderConfig


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps the requests it handled."""

    def __init__(self, handler: Callable[[httpx.Request], Any]) -> None:
        self.requests: List[httpx.Request] = []

        def record(request: httpx.Request) -> Any:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    @property
    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.requests[-1].content)


class FakeRedis:
    """In-memory stand-in for ``redis.asyncio.Redis`` in cache tests."""

    def __init__(self) -> None:
        self.store: Dict[str, str] = {}
        self.expirations: Dict[str, int] = {}
        self.closed = False

    async def get(self, key: str):
        return self.store.get(key)

    async def set(self, key: str, value: str, ex: int = None):
        self.store[key] = value
        self.expirations[key] = ex
        return True

    async def delete(self, key: str):
        return 1 if self.store.pop(key, None) is not None else 0

    async def ping(self):
        return True

    async def aclose(self):
        self.closed = True


@pytest.fixture
def settings() -> Settings:
    return Settings(LOG_LEVEL="DEBUG", LOG_FORMAT="text", ENABLE_CACHE=False)


@pytest.fixture
def logger_service(settings: Settings) -> LoggerService:
    return LoggerService(settings_instance=settings)


@pytest.fixture
def make_config() -> Callable[..., ProviderConfig]:
    """Build a ``ProviderConfig`` with working defaults for the given provider."""

    def factory(provider: str = "openai", **overrides: Any) -> ProviderConfig:
        data: Dict[str, Any] = {
            "provider": provider,
            "api_key": "sk-test",
            "base_url": "https://api.example.com/v1",
            "max_retries": 3,
            "timeout_seconds": 5,
        }
        data.update(overrides)
        return ProviderConfig(**data)

    return factory


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> List[float]:
    """Replace backoff sleeps with a recorder so retries run instantly."""
    delays: List[float] = []

    async def fake_sleep(delay: float) -> None:
        delays.append(delay)

    monkeypatch.setattr("providers.base.asyncio.sleep", fake_sleep)
    return delays


def json_response(payload: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=payload)
