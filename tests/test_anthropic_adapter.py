"""Anthropic adapter tests."""
import pytest

from conftest import RecordingTransport, json_response
from providers.anthropic import AnthropicAdapter
from providers.anthropic.adapter import ANTHROPIC_VERSION, KNOWN_MODELS
from providers.models import (
    ChatMessage,
    ChatOptions,
    ErrorCode,
    ProviderError,
    UnsupportedCapabilityError,
)

MESSAGE = {
    "id": "msg_01",
    "type": "message",
    "role": "assistant",
    "model": "claude-3-5-sonnet-20241022",
    "content": [{"type": "text", "text": "Cześć!"}],
    "usage": {"input_tokens": 10, "output_tokens": 5},
}


@pytest.fixture
def anthropic_config(make_config):
    return make_config(
        provider="anthropic",
        api_key="sk-ant-test",
        base_url="https://api.anthropic.com/v1",
        auth_method="api-key",
    )


@pytest.mark.asyncio
async def test_chat_moves_system_prompt_out_of_messages(anthropic_config, logger_service):
    transport = RecordingTransport(lambda request: json_response(MESSAGE))
    adapter = AnthropicAdapter(anthropic_config, logger_service, transport=transport)

    response = await adapter.chat(
        [
            ChatMessage(role="system", content="Answer in Polish"),
            ChatMessage(role="user", content="Hello"),
            ChatMessage(role="assistant", content="Dzień dobry"),
            ChatMessage(role="user", content="Hi again"),
        ]
    )

    body = transport.last_json
    assert str(transport.requests[0].url) == "https://api.anthropic.com/v1/messages"
    assert body["system"] == "Answer in Polish"
    assert [message["role"] for message in body["messages"]] == ["user", "assistant", "user"]
    assert body["messages"][2]["content"] == "Hi again"
    assert body["max_tokens"] == 4096
    assert body["temperature"] == 0.7
    assert "top_p" not in body
    assert response.content == "Cześć!"


@pytest.mark.asyncio
async def test_chat_without_system_prompt_omits_field(anthropic_config, logger_service):
    transport = RecordingTransport(lambda request: json_response(MESSAGE))
    adapter = AnthropicAdapter(anthropic_config, logger_service, transport=transport)

    await adapter.chat([ChatMessage(role="user", content="Hello")], ChatOptions(max_tokens=100))

    assert "system" not in transport.last_json
    assert transport.last_json["max_tokens"] == 100


@pytest.mark.asyncio
async def test_headers_use_api_key_and_version(make_config, logger_service):
    config = make_config(
        provider="anthropic",
        api_key="sk-ant-test",
        base_url="https://api.anthropic.com/v1",
        custom_headers={"anthropic-beta": "prompt-caching-2024-07-31"},
    )
    transport = RecordingTransport(lambda request: json_response(MESSAGE))
    adapter = AnthropicAdapter(config, logger_service, transport=transport)

    await adapter.chat([ChatMessage(role="user", content="Hello")])

    headers = transport.requests[0].headers
    assert headers["x-api-key"] == "sk-ant-test"
    assert headers["anthropic-version"] == ANTHROPIC_VERSION
    assert headers["anthropic-beta"] == "prompt-caching-2024-07-31"
    assert "authorization" not in headers


@pytest.mark.asyncio
async def test_usage_is_summed(anthropic_config, logger_service):
    transport = RecordingTransport(lambda request: json_response(MESSAGE))
    adapter = AnthropicAdapter(anthropic_config, logger_service, transport=transport)

    response = await adapter.chat([ChatMessage(role="user", content="Hello")])

    assert response.usage.prompt_tokens == 10
    assert response.usage.completion_tokens == 5
    assert response.usage.total_tokens == 15


@pytest.mark.asyncio
async def test_missing_usage_stays_absent(anthropic_config, logger_service):
    payload = {key: value for key, value in MESSAGE.items() if key != "usage"}
    transport = RecordingTransport(lambda request: json_response(payload))
    adapter = AnthropicAdapter(anthropic_config, logger_service, transport=transport)

    response = await adapter.chat([ChatMessage(role="user", content="Hello")])

    assert response.usage is None


@pytest.mark.asyncio
async def test_embeddings_are_unsupported(anthropic_config, logger_service):
    transport = RecordingTransport(lambda request: json_response({}))
    adapter = AnthropicAdapter(anthropic_config, logger_service, transport=transport)

    with pytest.raises(UnsupportedCapabilityError) as exc_info:
        await adapter.embeddings("hello")

    assert exc_info.value.code == ErrorCode.UNSUPPORTED_CAPABILITY
    assert exc_info.value.message == "Anthropic does not support embeddings API"
    assert transport.requests == []


@pytest.mark.asyncio
async def test_list_models_is_static_and_isolated(anthropic_config, logger_service):
    transport = RecordingTransport(lambda request: json_response({}))
    adapter = AnthropicAdapter(anthropic_config, logger_service, transport=transport)

    models = await adapter.list_models()
    models[0].name = "changed"

    assert transport.requests == []
    assert [model.id for model in models] == [model.id for model in KNOWN_MODELS]
    assert KNOWN_MODELS[0].name == "Claude 3.5 Sonnet"


@pytest.mark.asyncio
async def test_connection_probe_sends_tiny_completion(anthropic_config, logger_service):
    transport = RecordingTransport(lambda request: json_response(MESSAGE))
    adapter = AnthropicAdapter(anthropic_config, logger_service, transport=transport)

    result = await adapter.test_connection()

    assert result.status == "success"
    assert transport.last_json["max_tokens"] == 10
    assert transport.last_json["messages"] == [{"role": "user", "content": "Hi"}]


@pytest.mark.asyncio
async def test_connection_reports_rejected_key(anthropic_config, logger_service):
    transport = RecordingTransport(
        lambda request: json_response(
            {
                "type": "error",
                "error": {"type": "authentication_error", "message": "invalid x-api-key"},
            },
            status_code=401,
        )
    )
    adapter = AnthropicAdapter(anthropic_config, logger_service, transport=transport)

    result = await adapter.test_connection()

    assert result.status == "failed"
    assert result.error_message == "invalid x-api-key"
    assert result.error_details["status"] == 401
    assert len(transport.requests) == 1


@pytest.mark.asyncio
async def test_chat_error_is_provider_error(anthropic_config, logger_service, sleeps):
    transport = RecordingTransport(
        lambda request: json_response({"error": {"message": "Overloaded"}}, status_code=529)
    )
    adapter = AnthropicAdapter(anthropic_config, logger_service, transport=transport)

    with pytest.raises(ProviderError) as exc_info:
        await adapter.chat([ChatMessage(role="user", content="Hello")])

    assert exc_info.value.status == 529
    assert sleeps == [1.0, 2.0]
