"""
Interactive REPL for gptcli.

Request lifecycle (per input line):
1. Read one line; blank lines are ignored.
2. Lines starting with "/" are local commands (see HELP_TEXT); they act on
   the session or the transcript store and never reach the API.
3. Any other line is a user message, handed to ConversationAgent, which
   streams the reply and updates the session.

Error handling strategy:
- Command errors and failed calls are reported and the loop continues.
- EOF, /exit, /quit and Ctrl+C at the prompt end the loop.
- Ctrl+C during a call aborts only that call; the session is left as it
  was before the message was sent.
"""

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from exceptions.exceptions import ValidationError
from runtime.agents.conversation_agent import ConversationAgent
from runtime.store.transcript_store import TranscriptStore


logger = logging.getLogger(__name__)

HELP_TEXT = """Commands:
  /help                  show this help
  /exit | /quit          leave the REPL
  /sys <text>            set/replace the system instruction
  /format <f>            set output format: text|markdown|json
  /clear                 clear the conversation (keeps the system instruction)
  /save [path]           save the transcript as Markdown
"""


class ReplState(str, Enum):
    READING = "reading"
    EXITED = "exited"


class CommandKind(str, Enum):
    HELP = "help"
    EXIT = "exit"
    SYSTEM = "sys"
    FORMAT = "format"
    CLEAR = "clear"
    SAVE = "save"
    UNKNOWN = "unknown"


COMMANDS = {
    "/help": CommandKind.HELP,
    "/exit": CommandKind.EXIT,
    "/quit": CommandKind.EXIT,
    "/sys": CommandKind.SYSTEM,
    "/format": CommandKind.FORMAT,
    "/clear": CommandKind.CLEAR,
    "/save": CommandKind.SAVE,
}


@dataclass(frozen=True)
class ReplCommand:
    kind: CommandKind
    name: str
    argument: str = ""


def is_command(line: str) -> bool:
    return line.startswith("/")


def parse_command(line: str) -> ReplCommand:
    """Split "/name rest of line" into a ReplCommand."""
    parts = line.strip().split(maxsplit=1)
    name = parts[0] if parts else ""
    argument = parts[1].strip() if len(parts) > 1 else ""
    return ReplCommand(
        kind=COMMANDS.get(name, CommandKind.UNKNOWN),
        name=name,
        argument=argument,
    )


class ReplController:
    """Line-by-line driver around one ConversationAgent.

    `read_line` is called with the prompt string and must raise EOFError
    at end of input (the builtin `input` does).
    """

    def __init__(
        self,
        agent: ConversationAgent,
        transcript_store: TranscriptStore,
        read_line: Callable[[str], str] = input,
        prompt: str = "> ",
        stdout=None,
        stderr=None,
    ):
        self.agent = agent
        self.transcript_store = transcript_store
        self.read_line = read_line
        self.prompt = prompt
        self._stdout = stdout
        self._stderr = stderr
        self.state = ReplState.READING

    @property
    def session(self):
        return self.agent.session

    def _out(self, text: str = "") -> None:
        print(text, file=self._stdout or sys.stdout)

    def _err(self, text: str) -> None:
        print(text, file=self._stderr or sys.stderr)

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def run(self, banner: Optional[str] = None) -> None:
        if banner:
            self._out(banner)
        if self.session.system_instruction:
            self._out("(system active)")

        while self.state == ReplState.READING:
            try:
                line = self.read_line(self.prompt)
            except EOFError:
                self._out()
                self.state = ReplState.EXITED
                break
            except KeyboardInterrupt:
                self._out()
                self.state = ReplState.EXITED
                break
            self.handle_line(line)

        logger.debug("REPL exited")

    def handle_line(self, line: str) -> ReplState:
        """Process one input line and return the resulting state."""
        line = line.strip()
        if not line:
            return self.state

        if is_command(line):
            self.dispatch(parse_command(line))
        else:
            self._send(line)
        return self.state

    def _send(self, message: str) -> None:
        try:
            self.agent.handle_user_message(message)
        except KeyboardInterrupt:
            self._err("(interrupted)")
        except Exception as e:
            self._err(f"error: {e}")

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def dispatch(self, command: ReplCommand) -> None:
        kind = command.kind

        if kind == CommandKind.HELP:
            self._out(HELP_TEXT.rstrip("\n"))
        elif kind == CommandKind.EXIT:
            self.state = ReplState.EXITED
        elif kind == CommandKind.SYSTEM:
            if not command.argument:
                self._out("usage: /sys <text>")
                return
            self.session.set_system(command.argument)
            self._out("(system updated)")
        elif kind == CommandKind.FORMAT:
            if not command.argument:
                self._out("usage: /format text|markdown|json")
                return
            try:
                fmt = self.session.set_format(command.argument.split()[0])
            except ValidationError as e:
                self._out(str(e))
                return
            self._out(f"(format: {fmt.value})")
        elif kind == CommandKind.CLEAR:
            self.session.clear()
            self._out("(context cleared)")
        elif kind == CommandKind.SAVE:
            path = command.argument.split()[0] if command.argument else None
            try:
                saved = self.transcript_store.save(self.session, path)
            except OSError as e:
                self._err(f"error: {e}")
                return
            self._out(f"(transcript saved to {saved})")
        elif kind == CommandKind.UNKNOWN:
            self._out(f"unknown command {command.name}. /help for help")
        else:
            raise AssertionError(f"unhandled command kind: {kind}")


def run_repl(
    agent: ConversationAgent,
    transcript_store: TranscriptStore,
    model: Optional[str] = None,
    read_line: Callable[[str], str] = input,
) -> None:
    """Run the interactive loop until EOF or /exit."""
    banner = "gptcli"
    if model:
        banner += f" - model={model}"
    banner += " - ctrl+c/ctrl+d to quit"
    ReplController(agent, transcript_store, read_line=read_line).run(banner)
