"""Resilience data models and protocols.

Defines the core types used across the resilience sub-package:
- RetryDecision for the per-failure retry/wait outcome
- SleepFunc protocol for injectable async sleep
"""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class RetryDecision:
    """Outcome of inspecting one failed attempt.

    Computed per failure and discarded once acted upon.
    """

    should_retry: bool
    wait_seconds: float = 0.0


class SleepFunc(Protocol):
    """Protocol for injectable sleep function."""

    async def __call__(self, seconds: float) -> None: ...
