"""
core.api.openai_client

Thin wrapper around the OpenAI Chat Completions and Images APIs for gptcli.

Used by:
  - runtime/agents/conversation_agent.py (chat round trips)
  - cli/main.py (client construction, one-shot image generation)

Every `openai.OpenAIError` leaving this module is translated into either
`TransientNetworkError` (worth retrying) or `PermanentRequestError`.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Iterator, List, Optional, Sequence, Union

import httpx
from openai import (
    APIConnectionError,
    APIError,
    APIStatusError,
    APITimeoutError,
    DefaultHttpxClient,
    OpenAI,
    OpenAIError,
)

from core.api.models import ChatMessage, ChatRequest, GeneratedImage, ImageRequest
from exceptions.exceptions import PermanentRequestError, TransientNetworkError


logger = logging.getLogger(__name__)

# Status codes that are worth another attempt.
RETRYABLE_STATUS_CODES = frozenset({408, 409, 429})


# -------------------------------------------------------------------
# Client + error translation
# -------------------------------------------------------------------


def build_client(
    api_key: str,
    base_url: Optional[str] = None,
    proxy: Optional[str] = None,
) -> OpenAI:
    """Create an OpenAI client, routed through `proxy` when one is given."""
    kwargs: dict = {"api_key": api_key}
    if base_url:
        kwargs["base_url"] = base_url
    if proxy:
        kwargs["http_client"] = DefaultHttpxClient(proxy=proxy)
    logger.debug("Building OpenAI client (base_url=%s, proxy=%s)", base_url, bool(proxy))
    return OpenAI(**kwargs)


def translate_error(err: Exception) -> Exception:
    """Map an SDK / transport exception to a gptcli error kind."""
    if isinstance(err, (TransientNetworkError, PermanentRequestError)):
        return err
    if isinstance(err, (APIConnectionError, APITimeoutError)):
        return TransientNetworkError(f"Connection to the API failed: {err}")
    if isinstance(err, APIStatusError):
        status = err.status_code
        message = _status_message(err)
        if status in RETRYABLE_STATUS_CODES or status >= 500:
            return TransientNetworkError(message, status_code=status)
        return PermanentRequestError(message, status_code=status)
    if isinstance(err, APIError):
        # Error events inside a stream carry no HTTP status
        return TransientNetworkError(f"API error: {err}")
    if isinstance(err, httpx.HTTPError):
        return TransientNetworkError(f"Transport error: {err}")
    if isinstance(err, OpenAIError):
        return PermanentRequestError(str(err))
    return err


def _status_message(err: APIStatusError) -> str:
    body = getattr(err, "body", None)
    if isinstance(body, dict):
        detail = body.get("message")
        if not detail and isinstance(body.get("error"), dict):
            detail = body["error"].get("message")
        if detail:
            return str(detail)
    return getattr(err, "message", None) or str(err)


def extract_json_text(text: str) -> str:
    """Pull the JSON payload out of a reply that may wrap it in a code fence
    or surround it with prose. Top-level objects and arrays are recognised;
    text with no JSON-looking span is returned stripped."""
    text = text.strip()

    if text.startswith("```"):
        lines = text.splitlines()[1:]
        if lines and lines[-1].strip().startswith("```"):
            lines = lines[:-1]
        text = "\n".join(lines).strip()

    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return text
    start = min(starts)
    end = text.rfind("}" if text[start] == "{" else "]")
    if end > start:
        return text[start : end + 1].strip()
    return text


# -------------------------------------------------------------------
# Backend
# -------------------------------------------------------------------


class OpenAIChatBackend:
    """
    Chat + image backend bound to one client and one set of model options.

    Parameters
    ----------
    client : OpenAI
        Client from `build_client` (or a test double with the same shape).
    model : str
        Chat model name.
    temperature : float, optional
        Sent only when set and >= 0.
    max_tokens : int
        Sent as `max_completion_tokens` only when > 0.
    stream : bool
        When True, `complete` returns an iterator of content deltas;
        otherwise the final text.
    image_model, image_size : str
        Defaults for `generate_image`.
    """

    def __init__(
        self,
        client: Any,
        model: str,
        temperature: Optional[float] = None,
        max_tokens: int = 0,
        stream: bool = True,
        image_model: str = "gpt-image-1",
        image_size: Optional[str] = None,
    ) -> None:
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.stream = stream
        self.image_model = image_model
        self.image_size = image_size

    def complete(self, messages: Sequence[ChatMessage]) -> Union[Iterator[str], str]:
        """
        Send one chat completion request.

        Request-level failures are raised here, before any fragment is
        produced. Failures while reading a stream are raised from the
        returned iterator.
        """
        request = ChatRequest(
            model=self.model,
            messages=list(messages),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            stream=self.stream,
        )
        logger.debug(
            "Chat request: model=%s messages=%d stream=%s",
            request.model,
            len(request.messages),
            request.stream,
        )

        try:
            response = self.client.chat.completions.create(**request.to_openai_kwargs())
        except (OpenAIError, httpx.HTTPError) as e:
            raise translate_error(e) from e

        if request.stream:
            return self._iter_deltas(response)

        if not response.choices:
            raise PermanentRequestError("Empty response from OpenAI API.")
        return response.choices[0].message.content or ""

    def _iter_deltas(self, stream: Any) -> Iterator[str]:
        try:
            for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if delta:
                    yield delta
        except (OpenAIError, httpx.HTTPError) as e:
            raise translate_error(e) from e
        finally:
            close = getattr(stream, "close", None)
            if callable(close):
                close()

    def generate_image(
        self,
        prompt: str,
        size: Optional[str] = None,
        n: int = 1,
    ) -> List[GeneratedImage]:
        """Generate `n` images for `prompt`."""
        request = ImageRequest(
            model=self.image_model,
            prompt=prompt,
            size=size or self.image_size,
            n=n,
        )
        logger.debug("Image request: model=%s size=%s n=%d", request.model, request.size, request.n)

        try:
            response = self.client.images.generate(**request.to_openai_kwargs())
        except (OpenAIError, httpx.HTTPError) as e:
            raise translate_error(e) from e

        images: List[GeneratedImage] = []
        for item in response.data or []:
            b64 = getattr(item, "b64_json", None)
            images.append(
                GeneratedImage(
                    data=base64.b64decode(b64) if b64 else None,
                    url=getattr(item, "url", None),
                    revised_prompt=getattr(item, "revised_prompt", None),
                )
            )

        if not images:
            raise PermanentRequestError("Image response contained no data.")
        return images
