"""Retry, backoff and suspension utilities.

- compute_backoff for the exponential-with-jitter delay
- decide_retry / execute_with_retry for the bounded retry loop
- CancellationToken, Deadline and suspend for timed waits
"""

from presenton.resilience.backoff import (
    JITTER_FRACTION,
    MAX_BACKOFF_SECONDS,
    compute_backoff,
)
from presenton.resilience.models import RetryDecision, SleepFunc
from presenton.resilience.retry import decide_retry, execute_with_retry
from presenton.resilience.timing import CancellationToken, Deadline, suspend

__all__ = [
    # Models
    "RetryDecision",
    "SleepFunc",
    # Backoff
    "JITTER_FRACTION",
    "MAX_BACKOFF_SECONDS",
    "compute_backoff",
    # Retry
    "decide_retry",
    "execute_with_retry",
    # Timing
    "CancellationToken",
    "Deadline",
    "suspend",
]
