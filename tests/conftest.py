"""Shared test fixtures for gptcli tests."""
import sys
from pathlib import Path

import pytest

# Add project root to path for imports
ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from core.retry.models import RetryPolicy


class FakeBackend:
    """Scripted ChatBackend.

    Each call to `complete` consumes the next script entry:
      - str            -> returned as a non-streaming reply
      - list of str    -> returned as a stream of fragments
      - Exception      -> raised from `complete`
      - callable       -> called with no arguments; its result is returned
    """

    def __init__(self, *script, model="fake-model"):
        self.script = list(script)
        self.calls = []
        self.model = model

    def complete(self, messages):
        self.calls.append(list(messages))
        if not self.script:
            raise AssertionError("FakeBackend called more times than scripted")
        step = self.script.pop(0)
        if isinstance(step, BaseException):
            raise step
        if callable(step):
            return step()
        if isinstance(step, list):
            return iter(step)
        return step


def failing_stream(fragments, error):
    """Generator yielding `fragments` then raising `error`."""
    def _gen():
        for fragment in fragments:
            yield fragment
        raise error
    return _gen


class TtyStdin:
    """Stand-in for an interactive stdin (nothing piped)."""

    def isatty(self):
        return True

    def read(self):
        raise AssertionError("interactive stdin must not be read")


@pytest.fixture
def fast_policy():
    return RetryPolicy(max_attempts=3, base_delay=0.01, max_delay=0.05, jitter_range=0.0)


@pytest.fixture
def sleeps():
    """Pass `sleep=sleeps.append` to record delays instead of sleeping."""
    return []


@pytest.fixture
def emitted():
    return []
