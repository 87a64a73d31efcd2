"""Tests for execute_with_retry.

Tests cover:
- Scenario timings for transient, auth and rate-limit failures
- Budget exhaustion re-raising the last observed error
- Cancellation and deadline handling between attempts
"""

import asyncio
import logging
import random
from typing import Any

import pytest

from presenton.errors import ErrorKind, PresentonError
from presenton.resilience import CancellationToken, Deadline, execute_with_retry


class FlakyOperation:
    """Raises the queued errors in order, then returns ``result``."""

    def __init__(self, *errors: PresentonError, result: Any = "ok"):
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    async def __call__(self) -> Any:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


def transient(message: str = "503") -> PresentonError:
    return PresentonError(ErrorKind.SERVER_OR_TRANSIENT, message, status_code=503)


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestRetryScenarios:
    @pytest.mark.asyncio
    async def test_three_transient_failures_then_success(self, fake_sleep):
        operation = FlakyOperation(transient(), transient(), transient(), result="done")

        result = await execute_with_retry(
            operation,
            max_retries=3,
            base_delay=1.0,
            rng=random.Random(42),
            sleep_func=fake_sleep,
        )

        assert result == "done"
        assert operation.calls == 4
        assert len(fake_sleep.delays) == 3
        for attempt, delay in enumerate(fake_sleep.delays):
            assert 2**attempt <= delay <= 2**attempt * 1.3

    @pytest.mark.asyncio
    async def test_authentication_fails_immediately(self, fake_sleep):
        error = PresentonError(ErrorKind.AUTHENTICATION, "bad key", status_code=401)
        operation = FlakyOperation(error)

        with pytest.raises(PresentonError) as exc_info:
            await execute_with_retry(operation, max_retries=5, sleep_func=fake_sleep)

        assert exc_info.value is error
        assert operation.calls == 1
        assert fake_sleep.delays == []

    @pytest.mark.asyncio
    async def test_rate_limit_waits_exactly_retry_after(self, fake_sleep):
        operation = FlakyOperation(
            PresentonError(ErrorKind.RATE_LIMITED, "slow down", retry_after=5.0)
        )

        result = await execute_with_retry(
            operation, max_retries=1, base_delay=1.0, sleep_func=fake_sleep
        )

        assert result == "ok"
        assert fake_sleep.delays == [5.0]


class TestRetryBudget:
    @pytest.mark.asyncio
    async def test_zero_retries_is_one_try(self, fake_sleep):
        error = transient()
        operation = FlakyOperation(error)

        with pytest.raises(PresentonError) as exc_info:
            await execute_with_retry(operation, max_retries=0, sleep_func=fake_sleep)

        assert exc_info.value is error
        assert operation.calls == 1
        assert fake_sleep.delays == []

    @pytest.mark.asyncio
    async def test_exhausted_budget_reraises_last_error(self, fake_sleep):
        errors = [transient("first"), transient("second"), transient("third")]
        operation = FlakyOperation(*errors)

        with pytest.raises(PresentonError) as exc_info:
            await execute_with_retry(operation, max_retries=2, sleep_func=fake_sleep)

        assert exc_info.value is errors[-1]
        assert operation.calls == 3
        assert len(fake_sleep.delays) == 2

    @pytest.mark.asyncio
    async def test_success_on_last_attempt_has_no_extra_delay(self, fake_sleep):
        operation = FlakyOperation(transient(), transient())

        result = await execute_with_retry(operation, max_retries=2, sleep_func=fake_sleep)

        assert result == "ok"
        assert len(fake_sleep.delays) == 2

    @pytest.mark.asyncio
    async def test_non_retryable_after_retryable_stops(self, fake_sleep):
        final = PresentonError(ErrorKind.CLIENT_REQUEST, "bad request", status_code=400)
        operation = FlakyOperation(transient(), final)

        with pytest.raises(PresentonError) as exc_info:
            await execute_with_retry(operation, max_retries=5, sleep_func=fake_sleep)

        assert exc_info.value is final
        assert operation.calls == 2
        assert len(fake_sleep.delays) == 1

    @pytest.mark.asyncio
    async def test_each_call_starts_a_fresh_counter(self, fake_sleep):
        rng = random.Random(0)
        for _ in range(2):
            operation = FlakyOperation(transient())
            await execute_with_retry(
                operation, max_retries=1, base_delay=1.0, rng=rng, sleep_func=fake_sleep
            )

        # Both calls back off from attempt 0
        assert all(1.0 <= d <= 1.3 for d in fake_sleep.delays)

    @pytest.mark.asyncio
    async def test_negative_retries_rejected(self):
        with pytest.raises(ValueError):
            await execute_with_retry(FlakyOperation(), max_retries=-1)

    @pytest.mark.asyncio
    async def test_other_exceptions_are_not_retried(self, fake_sleep):
        calls = 0

        async def broken() -> None:
            nonlocal calls
            calls += 1
            raise KeyError("bug")

        with pytest.raises(KeyError):
            await execute_with_retry(broken, max_retries=3, sleep_func=fake_sleep)
        assert calls == 1

    @pytest.mark.asyncio
    async def test_retries_are_logged(self, fake_sleep, caplog):
        operation = FlakyOperation(transient())

        with caplog.at_level(logging.WARNING, logger="presenton.resilience.retry"):
            await execute_with_retry(
                operation, max_retries=1, sleep_func=fake_sleep, operation_name="GET /status"
            )

        assert "GET /status attempt 1/2 failed (server_or_transient)" in caplog.text


class TestRetryCancellation:
    @pytest.mark.asyncio
    async def test_cancelled_before_first_attempt(self, fake_sleep):
        token = CancellationToken()
        token.cancel()
        operation = FlakyOperation()

        with pytest.raises(PresentonError) as exc_info:
            await execute_with_retry(operation, cancel_token=token, sleep_func=fake_sleep)

        assert exc_info.value.kind is ErrorKind.CANCELLED
        assert operation.calls == 0

    @pytest.mark.asyncio
    async def test_cancelled_during_backoff(self):
        token = CancellationToken()
        operation = FlakyOperation(transient(), transient())

        async def cancelling_sleep(seconds: float) -> None:
            token.cancel()

        with pytest.raises(PresentonError) as exc_info:
            await execute_with_retry(
                operation, max_retries=3, cancel_token=token, sleep_func=cancelling_sleep
            )

        assert exc_info.value.kind is ErrorKind.CANCELLED
        assert operation.calls == 1

    @pytest.mark.asyncio
    async def test_real_wait_wakes_on_cancel(self):
        token = CancellationToken()
        operation = FlakyOperation(transient())

        async def run() -> Any:
            return await execute_with_retry(
                operation, max_retries=1, base_delay=60.0, cancel_token=token
            )

        task = asyncio.create_task(run())
        await asyncio.sleep(0.01)
        token.cancel()

        with pytest.raises(PresentonError) as exc_info:
            await asyncio.wait_for(task, timeout=2.0)
        assert exc_info.value.kind is ErrorKind.CANCELLED


class TestRetryDeadline:
    @pytest.mark.asyncio
    async def test_backoff_past_deadline_raises_timeout(self, fake_sleep):
        clock = FakeClock()
        deadline = Deadline.after(1.5, clock=clock)
        operation = FlakyOperation(transient(), transient())

        async def advancing_sleep(seconds: float) -> None:
            clock.now += seconds
            await fake_sleep(seconds)

        with pytest.raises(PresentonError) as exc_info:
            await execute_with_retry(
                operation,
                max_retries=3,
                base_delay=1.0,
                rng=random.Random(0),
                sleep_func=advancing_sleep,
                deadline=deadline,
            )

        assert exc_info.value.kind is ErrorKind.TIMEOUT
        assert exc_info.value.details == {"budget_seconds": 1.5}
        assert operation.calls == 2
        assert len(fake_sleep.delays) == 1

    @pytest.mark.asyncio
    async def test_expired_deadline_skips_attempt(self):
        clock = FakeClock(now=10.0)
        deadline = Deadline(expires_at=5.0, clock=clock)
        operation = FlakyOperation()

        with pytest.raises(PresentonError) as exc_info:
            await execute_with_retry(operation, deadline=deadline)

        assert exc_info.value.kind is ErrorKind.TIMEOUT
        assert operation.calls == 0
