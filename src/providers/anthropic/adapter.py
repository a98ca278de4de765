"""Anthropic Claude adapter implementation."""
from typing import Any, Dict, List, Optional, Sequence

from ..base import BaseProviderAdapter, drop_none
from ..models import (
    ChatMessage,
    ChatOptions,
    ModelInfo,
    ProviderChatResponse,
    UnsupportedCapabilityError,
    Usage,
)

ANTHROPIC_VERSION = "2023-06-01"

# Anthropic exposes no discovery endpoint in the API version used here
KNOWN_MODELS: List[ModelInfo] = [
    ModelInfo(
        id="claude-3-5-sonnet-20241022", name="Claude 3.5 Sonnet", owned_by="anthropic"
    ),
    ModelInfo(id="claude-3-opus-20240229", name="Claude 3 Opus", owned_by="anthropic"),
    ModelInfo(
        id="claude-3-sonnet-20240229", name="Claude 3 Sonnet", owned_by="anthropic"
    ),
    ModelInfo(id="claude-3-haiku-20240307", name="Claude 3 Haiku", owned_by="anthropic"),
]


class AnthropicAdapter(BaseProviderAdapter):
    """Anthropic Messages API adapter."""

    PROVIDER_NAME = "Anthropic"
    DEFAULT_CHAT_ENDPOINT = "/messages"
    DEFAULT_MODEL = "claude-3-5-sonnet-20241022"
    DEFAULT_MAX_TOKENS = 4096
    SUPPORTS_EMBEDDINGS = False
    AUTH_METHODS = ("api-key",)

    def build_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.config.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            **self.config.custom_headers,
        }

    def map_chat_request(
        self, messages: Sequence[ChatMessage], options: ChatOptions
    ) -> Dict[str, Any]:
        """Build a Messages API body.

        The system prompt travels in the top-level ``system`` field; the
        remaining turns keep their relative order.
        """
        system_message = next((msg for msg in messages if msg.role == "system"), None)
        conversation = [msg for msg in messages if msg.role != "system"]

        body: Dict[str, Any] = {
            "model": self.model_name,
            "messages": [
                {"role": msg.role, "content": msg.content} for msg in conversation
            ],
            "max_tokens": options.max_tokens or self.DEFAULT_MAX_TOKENS,
            "temperature": (
                options.temperature
                if options.temperature is not None
                else self.DEFAULT_TEMPERATURE
            ),
            "top_p": options.top_p,
            "stream": False,
        }
        if system_message is not None:
            body["system"] = system_message.content

        return drop_none(body)

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        options: Optional[ChatOptions] = None,
    ) -> ProviderChatResponse:
        options = options or ChatOptions()
        try:
            url = self.build_url(self.config.chat_endpoint or self.DEFAULT_CHAT_ENDPOINT)
            body = self.map_chat_request(messages, options)
            self.logger.info(
                "Sending chat request",
                extra={
                    "provider": self.config.provider,
                    "model": self.model_name,
                    "message_count": len(messages),
                    "has_system": "system" in body,
                },
            )
            response = await self.make_request(url, method="POST", json_body=body)

            usage = response.get("usage")
            input_tokens = (usage or {}).get("input_tokens") or 0
            output_tokens = (usage or {}).get("output_tokens") or 0
            return ProviderChatResponse(
                content=response["content"][0]["text"],
                model=response.get("model") or self.model_name,
                usage=Usage(
                    prompt_tokens=input_tokens,
                    completion_tokens=output_tokens,
                    total_tokens=input_tokens + output_tokens,
                )
                if usage
                else None,
            )
        except Exception as e:
            raise self.handle_error(e)

    async def embeddings(self, text: str) -> List[float]:
        raise UnsupportedCapabilityError(self.PROVIDER_NAME, "embeddings")

    async def list_models(self) -> List[ModelInfo]:
        return [model.model_copy() for model in KNOWN_MODELS]

    async def _connection_probe(self) -> None:
        # The static model list proves nothing, so spend a tiny completion
        await self.chat([ChatMessage(role="user", content="Hi")], ChatOptions(max_tokens=10))
