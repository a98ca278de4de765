"""Google Gemini adapter implementation.

Gemini is reachable through two protocols: its native REST API and an
OpenAI-compatible facade under ``/openai``. The mode is fixed when the
adapter is built, from the configured base URL and chat endpoint.
"""
from typing import Any, Dict, List, Optional, Sequence

import httpx

from core.logger import LoggerService
from ..base import BaseProviderAdapter, drop_none
from ..models import (
    ChatMessage,
    ChatOptions,
    ModelInfo,
    ProviderChatResponse,
    ProviderConfig,
    Usage,
)
from ..openai import mapper as openai_mapper

OPENAI_COMPATIBLE_MARKER = "/openai"


class GoogleGeminiAdapter(BaseProviderAdapter):
    """Google Gemini adapter supporting native and OpenAI-compatible modes."""

    PROVIDER_NAME = "Google Gemini"
    DEFAULT_CHAT_ENDPOINT = "/openai/chat/completions"
    DEFAULT_EMBEDDINGS_ENDPOINT = "/openai/embeddings"
    DEFAULT_MODELS_ENDPOINT = "/models"
    DEFAULT_MODEL = "gemini-pro"
    DEFAULT_EMBEDDING_MODEL = "text-embedding-004"
    AUTH_METHODS = ("api-key", "bearer")

    def __init__(
        self,
        config: ProviderConfig,
        logger: LoggerService,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(config=config, logger=logger, transport=transport)
        self.use_openai_compatible = OPENAI_COMPATIBLE_MARKER in config.base_url or (
            OPENAI_COMPATIBLE_MARKER in (config.chat_endpoint or "")
        )
        self.logger.debug(
            "Initialized GoogleGeminiAdapter",
            extra={
                "provider": config.provider,
                "openai_compatible": self.use_openai_compatible,
            },
        )

    def _compatible_endpoint(self, override: Optional[str], default: str) -> str:
        """Resolve an OpenAI-facade path without doubling the ``/openai`` prefix."""
        if override:
            return override
        if self.config.base_url.rstrip("/").endswith(OPENAI_COMPATIBLE_MARKER):
            return default[len(OPENAI_COMPATIBLE_MARKER):]
        return default

    def build_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {"Content-Type": "application/json"}

        if self.use_openai_compatible:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        else:
            headers["x-goog-api-key"] = self.config.api_key

        headers.update(self.config.custom_headers)
        return headers

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        options: Optional[ChatOptions] = None,
    ) -> ProviderChatResponse:
        options = options or ChatOptions()
        try:
            self.logger.info(
                "Sending chat request",
                extra={
                    "provider": self.config.provider,
                    "model": self.model_name,
                    "message_count": len(messages),
                    "openai_compatible": self.use_openai_compatible,
                },
            )
            if self.use_openai_compatible:
                return await self._chat_openai(messages, options)
            return await self._chat_native(messages, options)
        except Exception as e:
            raise self.handle_error(e)

    async def _chat_openai(
        self, messages: Sequence[ChatMessage], options: ChatOptions
    ) -> ProviderChatResponse:
        url = self.build_url(
            self._compatible_endpoint(self.config.chat_endpoint, self.DEFAULT_CHAT_ENDPOINT)
        )
        body = openai_mapper.map_chat_request(
            self.model_name,
            messages,
            options,
            self.DEFAULT_TEMPERATURE,
            include_penalties=False,
        )
        response = await self.make_request(url, method="POST", json_body=body)
        return openai_mapper.map_chat_response(response, self.model_name)

    def map_native_request(
        self, messages: Sequence[ChatMessage], options: ChatOptions
    ) -> Dict[str, Any]:
        """Build a ``generateContent`` body.

        Gemini names the assistant role ``model`` and takes the system prompt
        as ``systemInstruction`` rather than as a turn.
        """
        contents = [
            {
                "role": "model" if msg.role == "assistant" else "user",
                "parts": [{"text": msg.content}],
            }
            for msg in messages
            if msg.role != "system"
        ]
        system_message = next((msg for msg in messages if msg.role == "system"), None)

        body: Dict[str, Any] = {
            "contents": contents,
            "generationConfig": drop_none(
                {
                    "temperature": (
                        options.temperature
                        if options.temperature is not None
                        else self.DEFAULT_TEMPERATURE
                    ),
                    "maxOutputTokens": options.max_tokens,
                    "topP": options.top_p,
                }
            ),
        }
        if system_message is not None:
            body["systemInstruction"] = {"parts": [{"text": system_message.content}]}
        return body

    async def _chat_native(
        self, messages: Sequence[ChatMessage], options: ChatOptions
    ) -> ProviderChatResponse:
        model = self.model_name
        url = self.build_url(f"/models/{model}:generateContent")
        body = self.map_native_request(messages, options)

        response = await self.make_request(url, method="POST", json_body=body)

        usage_metadata = response.get("usageMetadata")
        return ProviderChatResponse(
            content=response["candidates"][0]["content"]["parts"][0]["text"],
            model=model,
            usage=Usage(
                prompt_tokens=usage_metadata.get("promptTokenCount") or 0,
                completion_tokens=usage_metadata.get("candidatesTokenCount") or 0,
                total_tokens=usage_metadata.get("totalTokenCount") or 0,
            )
            if usage_metadata
            else None,
        )

    async def embeddings(self, text: str) -> List[float]:
        try:
            if self.use_openai_compatible:
                url = self.build_url(
                    self._compatible_endpoint(
                        self.config.embeddings_endpoint, self.DEFAULT_EMBEDDINGS_ENDPOINT
                    )
                )
                body: Dict[str, Any] = {"model": self.embedding_model, "input": text}
                response = await self.make_request(url, method="POST", json_body=body)
                return openai_mapper.map_embedding_response(response)

            url = self.build_url(f"/models/{self.embedding_model}:embedContent")
            body = {"content": {"parts": [{"text": text}]}}
            response = await self.make_request(url, method="POST", json_body=body)
            return list(response["embedding"]["values"])
        except Exception as e:
            raise self.handle_error(e)

    async def list_models(self) -> List[ModelInfo]:
        try:
            url = self.build_url(self.config.models_endpoint or self.DEFAULT_MODELS_ENDPOINT)
            response = await self.make_request(url, method="GET")

            models = []
            for model in openai_mapper.extract_model_entries(response):
                model_id = model.get("id") or model.get("name")
                if not model_id:
                    continue
                models.append(
                    ModelInfo(
                        id=model_id,
                        name=model.get("displayName") or model.get("name") or model_id,
                        created=model.get("created"),
                        owned_by=model.get("owned_by") or "google",
                    )
                )
            return models
        except Exception as e:
            raise self.handle_error(e)
