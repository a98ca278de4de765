"""OpenAI adapter implementation.

Serves OpenAI itself and any endpoint that mirrors its JSON shapes
(Azure OpenAI, vLLM, LM Studio, Groq, Together and similar).
"""
from typing import List, Optional, Sequence

from ..base import BaseProviderAdapter
from ..models import ChatMessage, ChatOptions, ModelInfo, ProviderChatResponse
from . import mapper


class OpenAIAdapter(BaseProviderAdapter):
    """OpenAI-compatible API adapter."""

    PROVIDER_NAME = "OpenAI"
    DEFAULT_CHAT_ENDPOINT = "/chat/completions"
    DEFAULT_EMBEDDINGS_ENDPOINT = "/embeddings"
    DEFAULT_MODELS_ENDPOINT = "/models"
    DEFAULT_MODEL = "gpt-3.5-turbo"
    DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        options: Optional[ChatOptions] = None,
    ) -> ProviderChatResponse:
        options = options or ChatOptions()
        try:
            url = self.build_url(self.config.chat_endpoint or self.DEFAULT_CHAT_ENDPOINT)
            body = mapper.map_chat_request(
                self.model_name, messages, options, self.DEFAULT_TEMPERATURE
            )
            self.logger.info(
                "Sending chat request",
                extra={
                    "provider": self.config.provider,
                    "model": self.model_name,
                    "message_count": len(messages),
                },
            )
            response = await self.make_request(url, method="POST", json_body=body)
            return mapper.map_chat_response(response, self.model_name)
        except Exception as e:
            raise self.handle_error(e)

    async def embeddings(self, text: str) -> List[float]:
        try:
            url = self.build_url(
                self.config.embeddings_endpoint or self.DEFAULT_EMBEDDINGS_ENDPOINT
            )
            body = {"model": self.embedding_model, "input": text}
            response = await self.make_request(url, method="POST", json_body=body)
            return mapper.map_embedding_response(response)
        except Exception as e:
            raise self.handle_error(e)

    async def list_models(self) -> List[ModelInfo]:
        try:
            url = self.build_url(self.config.models_endpoint or self.DEFAULT_MODELS_ENDPOINT)
            response = await self.make_request(url, method="GET")
            return mapper.map_models_response(response)
        except Exception as e:
            raise self.handle_error(e)
