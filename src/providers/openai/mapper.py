"""OpenAI wire format mapping.

Shared by every adapter that speaks the OpenAI-compatible protocol.
"""
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..base import drop_none
from ..models import ChatMessage, ChatOptions, ModelInfo, ProviderChatResponse, Usage


def map_chat_request(
    model: str,
    messages: Sequence[ChatMessage],
    options: ChatOptions,
    default_temperature: float,
    include_penalties: bool = True,
) -> Dict[str, Any]:
    """Build a ``/chat/completions`` body; unset options are omitted."""
    body: Dict[str, Any] = {
        "model": model,
        "messages": [{"role": msg.role, "content": msg.content} for msg in messages],
        "temperature": (
            options.temperature
            if options.temperature is not None
            else default_temperature
        ),
        "max_tokens": options.max_tokens,
        "top_p": options.top_p,
        "stream": False,
    }
    if include_penalties:
        body.update(
            {
                "frequency_penalty": options.frequency_penalty,
                "presence_penalty": options.presence_penalty,
                "stop": options.stop,
            }
        )
    return drop_none(body)


def map_usage(usage: Optional[Mapping[str, Any]]) -> Optional[Usage]:
    if not usage:
        return None
    return Usage(
        prompt_tokens=usage.get("prompt_tokens") or 0,
        completion_tokens=usage.get("completion_tokens") or 0,
        total_tokens=usage.get("total_tokens") or 0,
    )


def map_chat_response(
    response: Mapping[str, Any], fallback_model: str
) -> ProviderChatResponse:
    """Read ``choices[0].message.content`` and usage from a completion."""
    message = response["choices"][0]["message"]
    return ProviderChatResponse(
        content=message.get("content") or "",
        model=response.get("model") or fallback_model,
        usage=map_usage(response.get("usage")),
    )


def map_embedding_response(response: Mapping[str, Any]) -> List[float]:
    return list(response["data"][0]["embedding"])


def extract_model_entries(response: Any) -> List[Mapping[str, Any]]:
    """Return the model list from a ``{data: [...]}`` or ``{models: [...]}`` envelope."""
    if isinstance(response, list):
        return response
    if not isinstance(response, Mapping):
        return []
    return response.get("data") or response.get("models") or []


def map_models_response(response: Any) -> List[ModelInfo]:
    models = []
    for model in extract_model_entries(response):
        model_id = model.get("id") or model.get("name")
        if not model_id:
            continue
        models.append(
            ModelInfo(
                id=model_id,
                name=model_id,
                created=model.get("created"),
                owned_by=model.get("owned_by"),
            )
        )
    return models
