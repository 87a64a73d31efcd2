"""Task poller for async presentation generation.

The server owns task state; the poller only observes successive snapshots.
Each iteration is fetch -> notify -> evaluate -> suspend, with the single
suspension at the end so cancellation and deadlines apply between fetches.
"""

import logging
from typing import Any, Awaitable, Callable, Optional

from presenton.errors import ErrorKind, PresentonError
from presenton.models import PresentationResult, TaskSnapshot, TaskStatus
from presenton.resilience import CancellationToken, Deadline, SleepFunc, suspend

logger = logging.getLogger(__name__)

FetchStatus = Callable[[str], Awaitable[TaskSnapshot]]
StatusObserver = Callable[[TaskSnapshot], None]

DEFAULT_FAILURE_MESSAGE = "Presentation generation failed"


class TaskPoller:
    """Polls a task until it reaches a terminal status.

    Attributes:
        interval: Seconds to wait between fetches
    """

    def __init__(
        self,
        fetch_status: FetchStatus,
        *,
        interval: float = 2.0,
        on_status_change: Optional[StatusObserver] = None,
        cancel_token: Optional[CancellationToken] = None,
        deadline: Optional[Deadline] = None,
        sleep_func: Optional[SleepFunc] = None,
    ):
        """Initialize the poller.

        Args:
            fetch_status: Async callable returning a fresh snapshot for a
                task id. Expected to retry transient failures itself.
            interval: Seconds to wait after a non-terminal snapshot.
            on_status_change: Called with every fetched snapshot, including
                the terminal one, before it is evaluated. Exceptions it
                raises abort the poll unchanged.
            cancel_token: Stops the loop before its next fetch.
            deadline: Aborts with TIMEOUT at the first wait past it.
            sleep_func: Injectable sleep function for time control in tests.
        """
        self.interval = interval
        self._fetch_status = fetch_status
        self._on_status_change = on_status_change
        self._cancel_token = cancel_token
        self._deadline = deadline
        self._sleep_func = sleep_func

    async def run(self, task_id: str) -> PresentationResult:
        """Poll *task_id* until it completes or fails.

        Returns:
            The result payload of the completed task.

        Raises:
            PresentonError: GENERATION_FAILED if the task errors or completes
                without data; CANCELLED / TIMEOUT from the token or deadline;
                any unrecoverable fetch error.
        """
        polls = 0
        while True:
            if self._cancel_token is not None:
                self._cancel_token.raise_if_cancelled("polling")
            if self._deadline is not None:
                self._deadline.check("polling")

            snapshot = await self._fetch_status(task_id)
            polls += 1
            logger.debug("Task %s poll %d: status=%s", task_id, polls, snapshot.status)

            if self._on_status_change is not None:
                self._on_status_change(snapshot)

            result = self._evaluate(task_id, snapshot)
            if result is not None:
                return result

            await suspend(
                self.interval,
                cancel_token=self._cancel_token,
                deadline=self._deadline,
                sleep_func=self._sleep_func,
                operation="polling",
            )

    @staticmethod
    def _evaluate(task_id: str, snapshot: TaskSnapshot) -> Optional[PresentationResult]:
        """Return the payload for a completed task, None if still running."""
        if not snapshot.is_terminal:
            return None

        if snapshot.status == TaskStatus.COMPLETED.value:
            if snapshot.data is None:
                raise PresentonError(
                    ErrorKind.GENERATION_FAILED,
                    "Task completed but no data was returned",
                    task_id=task_id,
                )
            return snapshot.data

        raise PresentonError(
            ErrorKind.GENERATION_FAILED,
            _failure_message(snapshot.error),
            task_id=task_id,
            details=snapshot.error,
        )


def _failure_message(error: Any) -> str:
    """Pick the message out of a task error, which may be an object or a string."""
    if isinstance(error, dict):
        message = error.get("message")
    else:
        message = error
    if message and isinstance(message, str):
        return message
    return DEFAULT_FAILURE_MESSAGE
