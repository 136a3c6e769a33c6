"""Markdown transcript storage for gptcli.

A transcript is a snapshot of one Session written as Markdown:

    # gptcli transcript

    **system**:

    <system instruction>

    **user**:

    <content>

    ...

Files go to an explicit path or, by default, to
`<data_dir>/transcript-<unix seconds>.md`.
"""

import time
from pathlib import Path
from typing import Optional, Union

from ..models.session_models import Session


class TranscriptStore:
    """File-backed transcript writer.

    Parameters
    ----------
    data_dir:
        Directory used for transcripts saved without an explicit path.
    """

    def __init__(self, data_dir: Union[str, Path]) -> None:
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def default_path(self) -> Path:
        return self._data_dir / f"transcript-{int(time.time())}.md"

    def save(self, session: Session, path: Optional[Union[str, Path]] = None) -> Path:
        """Write `session` as Markdown and return the file path.

        Parent directories are created as needed. OSError propagates.
        """
        target = Path(path).expanduser() if path else self.default_path()
        target.parent.mkdir(parents=True, exist_ok=True)

        with target.open("w", encoding="utf-8") as f:
            f.write(render_transcript(session))
        return target


def render_transcript(session: Session) -> str:
    parts = ["# gptcli transcript\n\n"]
    if session.system_instruction:
        parts.append(f"**system**:\n\n{session.system_instruction}\n\n")
    for turn in session.turns:
        parts.append(f"**{turn.role.value}**:\n\n{turn.content}\n\n")
    return "".join(parts)
