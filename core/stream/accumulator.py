"""
core.stream.accumulator

Consumes a lazy sequence of text fragments (content deltas of a streamed
completion), shows each one as soon as it arrives and assembles the final
text.

The sequence ends either normally (iteration stops) or by raising. A raised
error turns into `StreamTerminationError`; fragments already shown stay on
screen but are not returned as a result.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional

from exceptions.exceptions import StreamTerminationError


class StreamAccumulator:
    """Per-call accumulation state. Create a new one for every call."""

    def __init__(self, emit: Optional[Callable[[str], None]] = None) -> None:
        self._emit = emit
        self._parts: List[str] = []

    @property
    def text(self) -> str:
        """Concatenation of every fragment received so far."""
        return "".join(self._parts)

    @property
    def fragment_count(self) -> int:
        return len(self._parts)

    def feed(self, fragment: Optional[str]) -> None:
        """Emit and record one fragment. Empty fragments are ignored."""
        if not fragment:
            return
        if self._emit is not None:
            self._emit(fragment)
        self._parts.append(fragment)

    def consume(self, fragments: Iterable[Optional[str]]) -> str:
        """Drain `fragments` and return the full text.

        Raises StreamTerminationError if the sequence raises part-way.
        KeyboardInterrupt is not converted.
        """
        try:
            for fragment in fragments:
                self.feed(fragment)
        except StreamTerminationError:
            raise
        except Exception as exc:
            raise StreamTerminationError(self.text, cause=exc) from exc
        return self.text


def accumulate_stream(
    fragments: Iterable[Optional[str]],
    emit: Optional[Callable[[str], None]] = None,
) -> str:
    """Shortcut for `StreamAccumulator(emit).consume(fragments)`."""
    return StreamAccumulator(emit).consume(fragments)
