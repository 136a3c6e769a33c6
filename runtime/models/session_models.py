"""
Session-related models for the gptcli runtime.

These describe:
- Turn entries (user / assistant), immutable once created
- OutputFormat enum (text, markdown, json)
- Session: system instruction + ordered turns + output format
"""

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from core.api.models import ChatMessage, Role
from exceptions.exceptions import ValidationError


# Extra system message sent when a response must be strict JSON.
JSON_MODE_INSTRUCTION = "Respond ONLY with a single valid JSON object, with no extra text."


class OutputFormat(str, Enum):
    TEXT = "text"
    MARKDOWN = "markdown"
    JSON = "json"


class Turn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role         # USER or ASSISTANT
    content: str


class Session(BaseModel):
    """
    Conversation state for one program invocation.

    The system instruction is kept apart from `turns`; it is never appended
    to the history and always goes first in the request messages.

    Turns are expected to alternate user -> assistant, but nothing here
    rejects other orders. Every operation either completes or raises without
    changing the session.
    """

    system_instruction: Optional[str] = None
    turns: List[Turn] = Field(default_factory=list)
    output_format: OutputFormat = OutputFormat.TEXT

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def set_system(self, text: Optional[str]) -> None:
        """Replace the system instruction (trimmed; blank clears it)."""
        text = (text or "").strip()
        self.system_instruction = text or None

    def append_user(self, text: str) -> Turn:
        turn = Turn(role=Role.USER, content=text)
        self.turns.append(turn)
        return turn

    def append_assistant(self, text: str) -> Turn:
        turn = Turn(role=Role.ASSISTANT, content=text)
        self.turns.append(turn)
        return turn

    def clear(self) -> None:
        """Drop every turn; the system instruction is kept."""
        self.turns = []

    def set_format(self, value: Union[str, OutputFormat]) -> OutputFormat:
        """Set the output format, raising ValidationError for unknown values."""
        if isinstance(value, OutputFormat):
            fmt = value
        else:
            normalized = str(value or "").strip().lower()
            try:
                fmt = OutputFormat(normalized)
            except ValueError:
                raise ValidationError(
                    "format", value, allowed=[f.value for f in OutputFormat]
                ) from None
        self.output_format = fmt
        return fmt

    def rollback_last_round_trip(self) -> None:
        """
        Undo one user -> assistant round trip.

        Removes the last turn if it is an assistant turn, then the last
        remaining turn if it is a user turn. A missing turn is skipped, so
        calling this on an empty history (or after a failed call, where no
        assistant turn was added) is safe.
        """
        if self.turns and self.turns[-1].role == Role.ASSISTANT:
            self.turns.pop()
        if self.turns and self.turns[-1].role == Role.USER:
            self.turns.pop()

    # ------------------------------------------------------------------
    # Request building
    # ------------------------------------------------------------------

    @property
    def json_mode(self) -> bool:
        return self.output_format == OutputFormat.JSON

    def build_request_messages(self, json_mode_requested: bool = False) -> List[ChatMessage]:
        """
        Materialize the messages for one API call, in order:

        1. the system instruction, if any
        2. the strict-JSON instruction, if `json_mode_requested`
        3. every turn, oldest first
        """
        messages: List[ChatMessage] = []
        if self.system_instruction:
            messages.append(ChatMessage(role=Role.SYSTEM, content=self.system_instruction))
        if json_mode_requested:
            messages.append(ChatMessage(role=Role.SYSTEM, content=JSON_MODE_INSTRUCTION))
        for turn in self.turns:
            messages.append(ChatMessage(role=turn.role, content=turn.content))
        return messages
