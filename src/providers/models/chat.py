"""Provider-agnostic chat request and response models."""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

MessageRole = Literal["user", "assistant", "system"]


class ChatMessage(BaseModel):
    """Single chat turn."""

    role: MessageRole = Field(description="Author of the message")
    content: str = Field(description="Message text")


class ChatOptions(BaseModel):
    """Generation options.

    A superset across providers; adapters ignore fields their provider does
    not support.
    """

    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    stop: Optional[List[str]] = None


class Usage(BaseModel):
    """Token usage in OpenAI naming."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ProviderChatResponse(BaseModel):
    """Normalized chat completion result."""

    content: str = Field(description="Assistant reply text")
    model: str = Field(description="Model that produced the reply")
    usage: Optional[Usage] = Field(
        None, description="Token usage, absent when the provider does not report it"
    )
