"""
Request/response models for calls to the remote generation API.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """One role-tagged message of a chat completion request."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str

    def to_param(self) -> Dict[str, Any]:
        return {"role": self.role.value, "content": self.content}


class ChatRequest(BaseModel):
    """
    Parameters of one chat completion call.

    temperature / max_tokens:
      - None / 0 mean "not sent"; the model default applies.
    """
    model: str
    messages: List[ChatMessage]
    temperature: Optional[float] = None
    max_tokens: int = 0
    stream: bool = True

    def to_openai_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_param() for m in self.messages],
        }
        if self.temperature is not None and self.temperature >= 0:
            kwargs["temperature"] = self.temperature
        if self.max_tokens > 0:
            kwargs["max_completion_tokens"] = self.max_tokens
        if self.stream:
            kwargs["stream"] = True
        return kwargs


class ImageRequest(BaseModel):
    model: str
    prompt: str
    size: Optional[str] = None
    n: int = Field(default=1, ge=1)

    def to_openai_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "prompt": self.prompt,
            "n": self.n,
        }
        if self.size:
            kwargs["size"] = self.size
        # dall-e models return URLs unless asked otherwise; gpt-image-* always
        # return base64 and reject the parameter.
        if self.model.startswith("dall-e"):
            kwargs["response_format"] = "b64_json"
        return kwargs


class GeneratedImage(BaseModel):
    """One generated image: raw bytes, or a URL when only that was returned."""
    data: Optional[bytes] = None
    url: Optional[str] = None
    revised_prompt: Optional[str] = None
