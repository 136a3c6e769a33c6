"""
Bounded retries with exponential backoff and jitter.
"""

from core.retry.backoff import compute_delay
from core.retry.executor import execute_with_retry
from core.retry.models import RetryPolicy

__all__ = ["RetryPolicy", "compute_delay", "execute_with_retry"]
