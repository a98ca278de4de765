"""Local model server adapter implementation.

Targets Ollama's native API; LM Studio, LocalAI and other servers that
mimic it work as long as they accept the same paths.
"""
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..base import BaseProviderAdapter, drop_none
from ..models import ChatMessage, ChatOptions, ModelInfo, ProviderChatResponse, Usage
from ..openai.mapper import extract_model_entries, map_usage

NO_AUTH_API_KEY = "none"

# Python 3.10 datetime.fromisoformat accepts only 3 or 6 fraction digits
_SECONDS_FRACTION = re.compile(r"(?<=:\d{2})\.(\d+)")


def to_epoch_seconds(value: Optional[str]) -> Optional[int]:
    """Convert an ISO-8601 timestamp to Unix epoch seconds.

    Ollama reports nanosecond precision and a ``Z`` or numeric offset;
    naive timestamps are taken as UTC. Unparseable values yield None.
    """
    if not value:
        return None
    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    text = _SECONDS_FRACTION.sub(
        lambda match: "." + match.group(1)[:6].ljust(6, "0"), text
    )
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


class LocalModelAdapter(BaseProviderAdapter):
    """Ollama-style local model server adapter."""

    PROVIDER_NAME = "Local"
    DEFAULT_CHAT_ENDPOINT = "/api/chat"
    DEFAULT_EMBEDDINGS_ENDPOINT = "/api/embeddings"
    DEFAULT_MODELS_ENDPOINT = "/api/tags"
    DEFAULT_MODEL = "llama2"
    DEFAULT_EMBEDDING_MODEL = "nomic-embed-text"
    AUTH_METHODS = ("bearer", "custom")

    @property
    def requires_auth(self) -> bool:
        return bool(self.config.api_key) and self.config.api_key != NO_AUTH_API_KEY

    def build_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {"Content-Type": "application/json"}

        if self.requires_auth and self.config.auth_method == "bearer":
            headers["Authorization"] = f"Bearer {self.config.api_key}"

        headers.update(self.config.custom_headers)
        return headers

    @staticmethod
    def _map_usage(response: Mapping[str, Any]) -> Optional[Usage]:
        """Read usage from an OpenAI-style block or Ollama's eval counters."""
        if response.get("usage"):
            return map_usage(response["usage"])

        prompt_tokens = response.get("prompt_eval_count")
        completion_tokens = response.get("eval_count")
        if prompt_tokens is None and completion_tokens is None:
            return None
        prompt_tokens = prompt_tokens or 0
        completion_tokens = completion_tokens or 0
        return Usage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        )

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        options: Optional[ChatOptions] = None,
    ) -> ProviderChatResponse:
        options = options or ChatOptions()
        try:
            url = self.build_url(self.config.chat_endpoint or self.DEFAULT_CHAT_ENDPOINT)
            body = {
                "model": self.model_name,
                "messages": [
                    {"role": msg.role, "content": msg.content} for msg in messages
                ],
                "stream": False,
                "options": drop_none(
                    {
                        "temperature": (
                            options.temperature
                            if options.temperature is not None
                            else self.DEFAULT_TEMPERATURE
                        ),
                        "num_predict": options.max_tokens,
                        "top_p": options.top_p,
                    }
                ),
            }
            self.logger.info(
                "Sending chat request",
                extra={
                    "provider": self.config.provider,
                    "model": self.model_name,
                    "message_count": len(messages),
                },
            )
            response = await self.make_request(url, method="POST", json_body=body)

            message = response.get("message") or {}
            return ProviderChatResponse(
                content=message.get("content") or response.get("response") or "",
                model=response.get("model") or self.model_name,
                usage=self._map_usage(response),
            )
        except Exception as e:
            raise self.handle_error(e)

    async def embeddings(self, text: str) -> List[float]:
        try:
            url = self.build_url(
                self.config.embeddings_endpoint or self.DEFAULT_EMBEDDINGS_ENDPOINT
            )
            body = {"model": self.embedding_model, "prompt": text}
            response = await self.make_request(url, method="POST", json_body=body)
            return list(response["embedding"])
        except Exception as e:
            raise self.handle_error(e)

    async def list_models(self) -> List[ModelInfo]:
        try:
            url = self.build_url(self.config.models_endpoint or self.DEFAULT_MODELS_ENDPOINT)
            response = await self.make_request(url, method="GET")

            models = []
            for model in extract_model_entries(response):
                model_id = model.get("name") or model.get("id")
                if not model_id:
                    continue
                models.append(
                    ModelInfo(
                        id=model_id,
                        name=model_id,
                        created=to_epoch_seconds(model.get("modified_at"))
                        if model.get("modified_at")
                        else model.get("created"),
                        owned_by="local",
                    )
                )
            return models
        except Exception as e:
            raise self.handle_error(e)
