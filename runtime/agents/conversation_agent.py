"""ConversationAgent implementation.

Responsible for:
- turning the current session into request messages
- running one remote round trip through the retry executor
- showing the reply as it streams in
- recording the outcome in the session

Current behavior:
- always appends the user's message as a Turn before the call
- on success appends the assistant's reply as another Turn, or, in
  no-context mode, rolls the round trip back so the history does not grow
- on failure (including Ctrl+C) removes the user Turn again before the
  error propagates, so the session is exactly as it was before the call
- optionally appends the prompt to the history store
"""

import logging
import threading
from typing import Callable, Iterator, Optional, Protocol, Sequence, Union

from core.api.models import ChatMessage
from core.api.openai_client import extract_json_text
from core.retry.backoff import JitterSource
from core.retry.executor import execute_with_retry
from core.retry.models import RetryPolicy
from core.stream.accumulator import StreamAccumulator
from exceptions.exceptions import (
    PermanentRequestError,
    RetryCancelledError,
    StreamTerminationError,
)

from ..models.session_models import Session


logger = logging.getLogger(__name__)


class ChatBackend(Protocol):
    """
    Anything that can answer a list of chat messages.

    `complete` returns either an iterator of content fragments (streaming)
    or the final text. Errors are raised, either from `complete` itself or
    from the iterator.
    """

    def complete(self, messages: Sequence[ChatMessage]) -> Union[Iterator[str], str]:
        ...


def _print_fragment(text: str) -> None:
    print(text, end="", flush=True)


def is_retryable(exc: Exception) -> bool:
    """Decide whether a failed round trip is worth another attempt."""
    if isinstance(exc, (PermanentRequestError, RetryCancelledError)):
        return False
    if isinstance(exc, StreamTerminationError) and isinstance(exc.cause, PermanentRequestError):
        return False
    return True


class ConversationAgent:
    """Conversation driver for one Session.

    Parameters
    ----------
    session:
        The Session owned by this invocation. Only this agent mutates it
        during a call.
    backend:
        ChatBackend used for every round trip.
    policy:
        RetryPolicy for the round trip; defaults to `RetryPolicy()`.
    no_context:
        If True, each successful round trip is rolled back so every
        message is sent without earlier turns.
    emit:
        Receives every piece of visible output (fragments, final newline).
        Defaults to printing to stdout without buffering.
    history_store:
        Optional store with `append(*lines)`; successful prompts are
        recorded there as `Q: <prompt>`.
    cancel_event:
        Optional threading.Event that aborts the retry loop between
        attempts.
    """

    def __init__(
        self,
        session: Session,
        backend: ChatBackend,
        policy: Optional[RetryPolicy] = None,
        no_context: bool = False,
        emit: Optional[Callable[[str], None]] = None,
        history_store=None,
        cancel_event: Optional[threading.Event] = None,
        sleep: Optional[Callable[[float], None]] = None,
        jitter_source: Optional[JitterSource] = None,
    ):
        self.session = session
        self.backend = backend
        self.policy = policy or RetryPolicy()
        self.no_context = no_context
        self.emit = emit or _print_fragment
        self.history_store = history_store
        self.cancel_event = cancel_event
        self._sleep = sleep
        self._jitter_source = jitter_source

    def round_trip(self, json_override: bool = False) -> str:
        """Perform one call with the current session and return the reply text.

        Does not modify the session.
        """
        json_mode = self.session.json_mode or json_override
        messages = self.session.build_request_messages(json_mode)

        try:
            result = self.backend.complete(messages)
            if isinstance(result, str):
                text = extract_json_text(result) if json_mode else result
                if text:
                    self.emit(text)
                return text
            return StreamAccumulator(self.emit).consume(result)
        finally:
            self.emit("\n")

    def handle_user_message(self, message: str, json_override: bool = False) -> str:
        """Handle a single user message within the session.

        Flow:
        - append user Turn
        - run `round_trip` through the retry executor
        - append assistant Turn (or roll back in no-context mode)
        - record the prompt in the history store
        - return the reply text

        Any exception, including KeyboardInterrupt, leaves the session as it
        was before the call and is re-raised.
        """
        self.session.append_user(message)

        try:
            reply = execute_with_retry(
                lambda: self.round_trip(json_override),
                self.policy,
                should_retry=is_retryable,
                cancel_event=self.cancel_event,
                sleep=self._sleep,
                jitter_source=self._jitter_source,
            )
        except BaseException:
            # Only the user turn was added; this removes exactly that.
            self.session.rollback_last_round_trip()
            raise

        if self.no_context:
            self.session.rollback_last_round_trip()
        else:
            self.session.append_assistant(reply)

        if self.history_store is not None:
            self.history_store.append(f"Q: {message}")

        logger.debug("Round trip complete (%d characters, %d turns)", len(reply), len(self.session.turns))
        return reply
