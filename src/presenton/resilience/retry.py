"""Bounded retry loop driven by error classification.

The engine holds no state between calls: every invocation starts a fresh
attempt counter, so any number of concurrent calls can share one client.
"""

import logging
import random
from typing import Awaitable, Callable, Optional, TypeVar

from presenton.errors import ErrorKind, PresentonError
from presenton.resilience.backoff import compute_backoff
from presenton.resilience.models import RetryDecision, SleepFunc
from presenton.resilience.timing import CancellationToken, Deadline, suspend

logger = logging.getLogger(__name__)

T = TypeVar("T")


def decide_retry(
    error: PresentonError,
    attempt: int,
    max_retries: int,
    base_delay: float,
    rng: Optional[random.Random] = None,
) -> RetryDecision:
    """Decide whether failed attempt *attempt* is followed by another.

    Rules (applied in order):
        1. Non-retryable kind -> give up, whatever budget remains
        2. Last allowed attempt -> give up
        3. Positive ``retry_after`` on a rate-limit error -> wait exactly that;
           a zero hint carries no wait and falls through to backoff
        4. Otherwise -> exponential backoff with jitter for this attempt

    Args:
        error: The classified failure.
        attempt: 0-based index of the attempt that failed.
        max_retries: Retries allowed after the first attempt.
        base_delay: Base backoff delay in seconds.
        rng: Injectable Random instance for deterministic testing.

    Returns:
        A :class:`RetryDecision`.
    """
    if not error.is_retryable or attempt >= max_retries:
        return RetryDecision(should_retry=False)

    if error.kind is ErrorKind.RATE_LIMITED and error.retry_after:
        return RetryDecision(should_retry=True, wait_seconds=error.retry_after)

    return RetryDecision(
        should_retry=True,
        wait_seconds=compute_backoff(attempt, base_delay, rng=rng),
    )


async def execute_with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    max_retries: int = 3,
    base_delay: float = 1.0,
    rng: Optional[random.Random] = None,
    sleep_func: Optional[SleepFunc] = None,
    cancel_token: Optional[CancellationToken] = None,
    deadline: Optional[Deadline] = None,
    operation_name: str = "request",
) -> T:
    """Run *operation* up to ``max_retries + 1`` times.

    *operation* performs exactly one transport attempt and raises a
    :class:`PresentonError` on failure. A success returns immediately with
    no further delay. Once the budget is spent the last observed error is
    re-raised unchanged; no generic "retries exhausted" error is
    synthesized.

    Args:
        operation: Zero-argument async callable (use a closure for args).
        max_retries: Retries allowed after the first attempt (0 = one try).
        base_delay: Base backoff delay in seconds.
        rng: Injectable Random instance for deterministic testing.
        sleep_func: Injectable sleep function for time control in tests.
        cancel_token: Aborts the call with a CANCELLED error before the next
            attempt and interrupts backoff waits.
        deadline: Aborts the call with a TIMEOUT error at the first
            suspension past it.
        operation_name: Label used in log lines and timeout messages.

    Returns:
        Result from the operation on success.

    Raises:
        PresentonError: The first non-retryable error, the last retryable
            error once the budget is spent, or CANCELLED / TIMEOUT.
        ValueError: If ``max_retries`` is negative.

    Example:
        >>> result = await execute_with_retry(
        ...     lambda: transport.send("/api/v1/ppt/files/upload", "POST", files),
        ...     max_retries=3,
        ...     base_delay=1.0,
        ... )
    """
    if max_retries < 0:
        raise ValueError(f"max_retries must be >= 0, got {max_retries}")

    for attempt in range(max_retries + 1):
        if cancel_token is not None:
            cancel_token.raise_if_cancelled(operation_name)
        if deadline is not None:
            deadline.check(operation_name)

        try:
            return await operation()
        except PresentonError as e:
            decision = decide_retry(e, attempt, max_retries, base_delay, rng)
            if not decision.should_retry:
                if e.is_retryable:
                    logger.warning(
                        "%s failed after %d attempts: %s",
                        operation_name,
                        attempt + 1,
                        e,
                    )
                raise

            logger.warning(
                "%s attempt %d/%d failed (%s); retrying in %.2fs",
                operation_name,
                attempt + 1,
                max_retries + 1,
                e.kind.value,
                decision.wait_seconds,
            )
            await suspend(
                decision.wait_seconds,
                cancel_token=cancel_token,
                deadline=deadline,
                sleep_func=sleep_func,
                operation=operation_name,
            )

    raise RuntimeError("execute_with_retry: unexpected state")
