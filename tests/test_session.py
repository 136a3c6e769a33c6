"""Tests for the Session model.

Tests for:
- set_system / clear / set_format
- build_request_messages() ordering and the JSON instruction
- rollback_last_round_trip() in all history shapes
"""
import pytest

from core.api.models import ChatMessage, Role
from exceptions.exceptions import ValidationError
from runtime.models.session_models import (
    JSON_MODE_INSTRUCTION,
    OutputFormat,
    Session,
    Turn,
)


def roles(messages):
    return [m.role for m in messages]


class TestSessionMutation:

    def test_set_system_trims_and_does_not_touch_turns(self):
        session = Session()
        session.set_system("   You are terse.  \n")
        assert session.system_instruction == "You are terse."
        assert session.turns == []

    def test_blank_system_clears_instruction(self):
        session = Session(system_instruction="old")
        session.set_system("   ")
        assert session.system_instruction is None

    def test_append_keeps_insertion_order(self):
        session = Session()
        session.append_user("a")
        session.append_assistant("b")
        session.append_user("c")
        assert [(t.role, t.content) for t in session.turns] == [
            (Role.USER, "a"),
            (Role.ASSISTANT, "b"),
            (Role.USER, "c"),
        ]

    def test_out_of_order_turns_are_accepted(self):
        session = Session()
        session.append_assistant("first")
        session.append_assistant("second")
        assert len(session.turns) == 2

    def test_turns_are_immutable(self):
        turn = Session().append_user("hi")
        with pytest.raises(Exception):
            turn.content = "changed"

    @pytest.mark.parametrize("history", [[], ["u"], ["u", "a"], ["u", "a", "u", "a", "u"]])
    def test_clear_keeps_system(self, history):
        session = Session()
        session.set_system("sys")
        for i, item in enumerate(history):
            if item == "u":
                session.append_user(f"user {i}")
            else:
                session.append_assistant(f"assistant {i}")
        session.clear()
        assert session.turns == []
        assert session.system_instruction == "sys"

    @pytest.mark.parametrize("value", ["text", "markdown", "json", "JSON", " Markdown "])
    def test_set_format_accepts_known_values(self, value):
        session = Session()
        fmt = session.set_format(value)
        assert fmt.value == value.strip().lower()
        assert session.output_format == fmt

    def test_set_format_accepts_enum(self):
        session = Session()
        assert session.set_format(OutputFormat.JSON) == OutputFormat.JSON

    @pytest.mark.parametrize("value", ["yaml", "", "htm"])
    def test_set_format_rejects_unknown_and_keeps_state(self, value):
        session = Session()
        session.set_format("markdown")
        with pytest.raises(ValidationError) as exc_info:
            session.set_format(value)
        assert session.output_format == OutputFormat.MARKDOWN
        assert exc_info.value.field == "format"
        assert "json" in exc_info.value.allowed


class TestBuildRequestMessages:

    def test_system_then_user(self):
        session = Session()
        session.set_system("You are terse.")
        session.append_user("2+2?")
        assert session.build_request_messages(False) == [
            ChatMessage(role=Role.SYSTEM, content="You are terse."),
            ChatMessage(role=Role.USER, content="2+2?"),
        ]

    def test_no_system_message_when_empty(self):
        session = Session()
        session.append_user("hi")
        assert roles(session.build_request_messages(False)) == [Role.USER]

    def test_json_instruction_follows_system(self):
        session = Session()
        session.set_system("sys")
        session.append_user("q")
        session.append_assistant("a")
        messages = session.build_request_messages(True)
        assert roles(messages) == [Role.SYSTEM, Role.SYSTEM, Role.USER, Role.ASSISTANT]
        assert messages[0].content == "sys"
        assert messages[1].content == JSON_MODE_INSTRUCTION

    def test_json_instruction_without_system(self):
        session = Session()
        session.append_user("q")
        messages = session.build_request_messages(True)
        assert messages[0] == ChatMessage(role=Role.SYSTEM, content=JSON_MODE_INSTRUCTION)

    @pytest.mark.parametrize(
        "fmt, override, expected",
        [
            ("text", False, False),
            ("markdown", False, False),
            ("json", False, True),
            ("text", True, True),
            ("markdown", True, True),
            ("json", True, True),
        ],
    )
    def test_json_mode_iff_format_or_override(self, fmt, override, expected):
        session = Session()
        session.set_format(fmt)
        session.append_user("q")
        messages = session.build_request_messages(session.json_mode or override)
        has_instruction = any(m.content == JSON_MODE_INSTRUCTION for m in messages)
        assert has_instruction is expected

    def test_messages_serialize_to_wire_form(self):
        session = Session()
        session.set_system("s")
        session.append_user("u")
        params = [m.to_param() for m in session.build_request_messages(False)]
        assert params == [
            {"role": "system", "content": "s"},
            {"role": "user", "content": "u"},
        ]


class TestRollback:

    def _session_with_prior(self):
        session = Session()
        session.set_system("keep me")
        session.append_user("earlier")
        session.append_assistant("earlier reply")
        return session

    def test_rollback_removes_user_and_assistant(self):
        session = self._session_with_prior()
        before = list(session.turns)
        session.append_user("A")
        session.append_assistant("B")
        session.rollback_last_round_trip()
        assert session.turns == before
        assert session.system_instruction == "keep me"

    def test_rollback_after_failed_call_removes_user(self):
        session = self._session_with_prior()
        before = list(session.turns)
        session.append_user("A")
        session.rollback_last_round_trip()
        assert session.turns == before

    def test_rollback_on_empty_history_is_noop(self):
        session = Session()
        session.rollback_last_round_trip()
        assert session.turns == []

    def test_rollback_only_assistant_present(self):
        session = Session()
        session.append_assistant("orphan")
        session.rollback_last_round_trip()
        assert session.turns == []

    def test_no_context_round_trip_restores_empty_session(self):
        session = Session()
        session.append_user("hi")
        session.append_assistant("hello")
        session.rollback_last_round_trip()
        assert session.turns == []
        assert session.system_instruction is None

    def test_rollback_removes_at_most_one_pair(self):
        session = Session()
        session.append_user("u1")
        session.append_assistant("a1")
        session.append_user("u2")
        session.append_assistant("a2")
        session.rollback_last_round_trip()
        assert session.turns == [
            Turn(role=Role.USER, content="u1"),
            Turn(role=Role.ASSISTANT, content="a1"),
        ]
