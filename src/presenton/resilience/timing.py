"""Cancellation, deadlines and the shared timed suspension.

Retry waits and poll intervals both go through :func:`suspend`, so a single
cancellation token or deadline governs the whole call.
"""

import asyncio
import time
from typing import Callable, Optional

from presenton.errors import ErrorKind, PresentonError
from presenton.resilience.models import SleepFunc

Clock = Callable[[], float]


class CancellationToken:
    """Cooperative cancellation signal shared by a call and its waits.

    Triggering the token stops a poll loop before its next fetch and wakes
    any in-progress backoff or poll wait early. In-flight HTTP attempts are
    not interrupted.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancelled(self, operation: str = "request") -> None:
        if self._event.is_set():
            raise PresentonError(ErrorKind.CANCELLED, f"{operation} was cancelled")


class Deadline:
    """Absolute end-to-end deadline measured on a monotonic clock.

    Attributes:
        expires_at: Clock reading after which the call is aborted
        budget_seconds: The original budget, kept for error messages
    """

    def __init__(
        self,
        expires_at: float,
        budget_seconds: Optional[float] = None,
        clock: Clock = time.monotonic,
    ):
        self.expires_at = expires_at
        self.budget_seconds = budget_seconds
        self._clock = clock

    @classmethod
    def after(cls, seconds: float, clock: Clock = time.monotonic) -> "Deadline":
        return cls(clock() + seconds, budget_seconds=seconds, clock=clock)

    def remaining(self) -> float:
        return max(0.0, self.expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self._clock() >= self.expires_at

    def _timeout(self, message: str) -> PresentonError:
        return PresentonError(ErrorKind.TIMEOUT, message, details={"budget_seconds": self.budget_seconds})

    def check(self, operation: str = "request") -> None:
        """Raise a TIMEOUT error if the deadline has passed."""
        if self.expired:
            raise self._timeout(f"Deadline exceeded before {operation}")

    def check_wait(self, seconds: float, operation: str = "request") -> None:
        """Raise a TIMEOUT error if waiting *seconds* would overrun the deadline."""
        budget = self.remaining()
        if seconds > budget:
            raise self._timeout(
                f"Wait of {seconds:.1f}s for {operation} exceeds remaining budget {budget:.1f}s"
            )


async def suspend(
    seconds: float,
    *,
    cancel_token: Optional[CancellationToken] = None,
    deadline: Optional[Deadline] = None,
    sleep_func: Optional[SleepFunc] = None,
    operation: str = "request",
) -> None:
    """Wait *seconds*, honouring cancellation and the deadline.

    Raises:
        PresentonError: CANCELLED if the token fires before or during the
            wait; TIMEOUT if the wait would end past the deadline.
    """
    if cancel_token is not None:
        cancel_token.raise_if_cancelled(operation)
    if deadline is not None:
        deadline.check_wait(seconds, operation)

    if sleep_func is not None:
        await sleep_func(seconds)
    elif cancel_token is None:
        await asyncio.sleep(seconds)
    else:
        try:
            await asyncio.wait_for(cancel_token.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass  # Full wait elapsed without cancellation

    if cancel_token is not None:
        cancel_token.raise_if_cancelled(operation)
