"""
HistoryStore: append-only prompt history for gptcli.

Entries are written to:

    <data_dir>/history.txt

each followed by a separator line of 40 dashes. Writing is best-effort:
a failure is logged and never interrupts the conversation.
"""

import logging
from pathlib import Path
from typing import Union


logger = logging.getLogger(__name__)

SEPARATOR = "-" * 40


class HistoryStore:
    """Append-only text log of prompts."""

    def __init__(self, data_dir: Union[str, Path]):
        self.path = Path(data_dir) / "history.txt"

    def append(self, *lines: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                for line in lines:
                    f.write(line + "\n")
                f.write(SEPARATOR + "\n")
        except OSError as e:
            logger.warning("Could not write history to %s: %s", self.path, e)
