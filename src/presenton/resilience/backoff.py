"""Exponential backoff with additive jitter."""

import random
from typing import Optional

MAX_BACKOFF_SECONDS = 30.0
JITTER_FRACTION = 0.3


def compute_backoff(
    attempt: int,
    base_delay: float,
    *,
    rng: Optional[random.Random] = None,
    max_delay: float = MAX_BACKOFF_SECONDS,
) -> float:
    """Delay before the retry that follows failed attempt *attempt*.

    ``min(base * 2**attempt + jitter, max_delay)`` where jitter is drawn
    uniformly from ``[0, 0.3 * base * 2**attempt)``.

    Args:
        attempt: 0-based index of the attempt that just failed.
        base_delay: Base delay in seconds.
        rng: Injectable Random instance for deterministic testing.
        max_delay: Ceiling in seconds (default 30).

    Returns:
        Seconds to wait.
    """
    _rng = rng or random
    exponential = base_delay * (2.0**attempt)
    jitter = _rng.random() * JITTER_FRACTION * exponential
    return min(exponential + jitter, max_delay)
