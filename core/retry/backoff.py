"""
core.retry.backoff

Exponential backoff with additive jitter.

    delay(i) = min(base_delay * 2**i, max_delay) + U[0, jitter_range)

`i` is the 0-based index of the attempt that just failed. The random source
defaults to the module-level `random.random`, which is seeded from the OS at
import; tests pass their own zero-argument callable returning a float in
[0, 1) to make the result deterministic.
"""

from __future__ import annotations

import random
from typing import Callable, Optional

from core.retry.models import RetryPolicy


JitterSource = Callable[[], float]


def compute_delay(
    attempt: int,
    policy: RetryPolicy,
    jitter_source: Optional[JitterSource] = None,
) -> float:
    """Return the number of seconds to wait after failed attempt `attempt`."""
    # Past 2**62 the cap always wins; keeps the float conversion in range.
    exponent = min(max(attempt, 0), 62)

    base = policy.base_delay * (2 ** exponent)
    capped = min(base, policy.max_delay)

    source = jitter_source or random.random
    sample = min(max(source(), 0.0), 1.0)

    return max(0.0, capped + sample * policy.jitter_range)
