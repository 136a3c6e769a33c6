"""
core.retry.executor

Runs a fallible, zero-argument operation up to `policy.max_attempts` times.

Side effects of a failed attempt (e.g. fragments already printed) are not
undone; a retry repeats the whole call.

Cancellation:
    If a `threading.Event` is given as `cancel_event`, the inter-attempt
    sleep waits on it instead of `time.sleep`. Setting the event aborts the
    loop with `RetryCancelledError`. A KeyboardInterrupt raised during the
    operation or the sleep is never caught here.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional, TypeVar

from exceptions.exceptions import RetryCancelledError

from core.retry.backoff import JitterSource, compute_delay
from core.retry.models import RetryPolicy


logger = logging.getLogger(__name__)

T = TypeVar("T")


def execute_with_retry(
    operation: Callable[[], T],
    policy: RetryPolicy,
    *,
    should_retry: Optional[Callable[[Exception], bool]] = None,
    cancel_event: Optional[threading.Event] = None,
    sleep: Optional[Callable[[float], None]] = None,
    jitter_source: Optional[JitterSource] = None,
) -> T:
    """
    Call `operation` until it returns or the attempts are used up.

    Parameters
    ----------
    operation : callable
        Performs one full attempt. Its return value is returned as-is.
    policy : RetryPolicy
        Attempt bound and backoff parameters.
    should_retry : callable, optional
        Given the exception of a failed attempt, returns False to stop
        immediately. Without it every exception is retried.
    cancel_event : threading.Event, optional
        External cancellation signal checked before each attempt and while
        sleeping.
    sleep : callable, optional
        Replaces `time.sleep` (ignored when `cancel_event` is given).
    jitter_source : callable, optional
        Random source passed to the backoff scheduler.

    Returns
    -------
    The result of the first successful attempt.

    Raises
    ------
    Exception
        The last attempt's exception when every attempt failed, or the first
        non-retryable one.
    RetryCancelledError
        If `cancel_event` was set between attempts.
    """
    attempts = max(1, policy.max_attempts)
    sleeper = sleep or time.sleep

    for attempt in range(attempts):
        if cancel_event is not None and cancel_event.is_set():
            logger.info("Retry loop cancelled before attempt %d", attempt + 1)
            raise RetryCancelledError(attempt)

        try:
            return operation()
        except Exception as exc:
            is_last = attempt == attempts - 1
            if is_last:
                logger.warning("Attempt %d/%d failed: %s", attempt + 1, attempts, exc)
                raise
            if should_retry is not None and not should_retry(exc):
                logger.warning("Attempt %d/%d failed with a non-retryable error: %s",
                               attempt + 1, attempts, exc)
                raise

            delay = compute_delay(attempt, policy, jitter_source)
            logger.warning(
                "Attempt %d/%d failed: %s; retrying in %.2fs",
                attempt + 1,
                attempts,
                exc,
                delay,
            )

        if cancel_event is not None:
            if cancel_event.wait(delay):
                logger.info("Retry loop cancelled after attempt %d", attempt + 1)
                raise RetryCancelledError(attempt + 1)
        else:
            sleeper(delay)

    # Unreachable: the last attempt either returns or re-raises.
    raise AssertionError("retry loop exited without a result")
