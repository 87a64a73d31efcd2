"""Presenton API client.

Every higher-level operation goes through the same retried send as
:meth:`Presenton.request`, which runs one :class:`HttpTransport` attempt at
a time inside the retry engine.

Example:
    client = Presenton(api_key="sk-presenton-...")
    result = await client.presentations.generate(
        content="Introduction to Machine Learning",
        num_slides=10,
        tone=Tone.PROFESSIONAL,
    )
    print(result.path)
"""

import asyncio
import dataclasses
import logging
import os
import random
from pathlib import Path
from typing import Any, Optional, Sequence, Union

import httpx

from presenton.config import ClientConfig
from presenton.errors import ErrorKind, PresentonError
from presenton.models import (
    GenerateOptions,
    PresentationResult,
    TaskSnapshot,
    UploadResult,
    parse_model,
)
from presenton.polling import StatusObserver, TaskPoller
from presenton.resilience import CancellationToken, Deadline, SleepFunc, execute_with_retry
from presenton.transport import ApiResponse, HttpTransport
from presenton.validation import (
    build_generate_options,
    validate_api_key,
    validate_poll_interval,
    validate_retry_settings,
    validate_task_id,
    validate_upload_files,
)

logger = logging.getLogger(__name__)

GENERATE_PATH = "/api/v1/ppt/presentation/generate"
GENERATE_ASYNC_PATH = "/api/v1/ppt/presentation/generate/async"
STATUS_PATH = "/api/v1/ppt/presentation/status/{task_id}"
UPLOAD_PATH = "/api/v1/ppt/files/upload"

UploadableFile = Union[str, os.PathLike, bytes, tuple[str, bytes]]


class Presenton:
    """Async client for the Presenton presentation API.

    Configuration is resolved once at construction and never changes, so a
    single instance can serve any number of concurrent calls.

    Attributes:
        config: The resolved :class:`ClientConfig`
        presentations: Generation and task-status operations
        files: File upload operations
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        timeout: Optional[float] = None,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep_func: Optional[SleepFunc] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize the client.

        Args:
            api_key: Presenton API key. Falls back to ``PRESENTON_API_KEY``.
            base_url: API root. Falls back to ``PRESENTON_BASE_URL``.
            max_retries: Retries after the first attempt (default 3).
            retry_delay: Base backoff delay in seconds (default 1.0).
            timeout: Per-attempt HTTP timeout in seconds (default 300).
            config: Pre-built config; explicit arguments still override it.
                When omitted the config is loaded with
                :meth:`ClientConfig.from_env`.
            transport: Optional httpx transport, mainly for tests.
            sleep_func: Injectable sleep for retry and poll waits.
            rng: Injectable Random instance for backoff jitter.

        Raises:
            PresentonError: VALIDATION if the key or retry settings are invalid.
        """
        overrides = {
            "api_key": api_key,
            "base_url": base_url,
            "max_retries": max_retries,
            "retry_delay": retry_delay,
            "timeout": timeout,
        }
        if config is None:
            config = ClientConfig.from_env(**overrides)
        else:
            config = dataclasses.replace(
                config, **{k: v for k, v in overrides.items() if v is not None}
            )

        validate_api_key(config.api_key)
        validate_retry_settings(config.max_retries, config.retry_delay)

        self.config = config
        self._transport = HttpTransport(config, transport=transport)
        self._sleep_func = sleep_func
        self._rng = rng

        self.presentations = PresentationsAPI(self)
        self.files = FilesAPI(self)

    def __repr__(self) -> str:
        return f"Presenton(base_url={self.config.base_url!r})"

    async def request(
        self,
        path: str,
        method: str,
        body: Any = None,
        *,
        max_retries: Optional[int] = None,
        is_multipart: bool = False,
        cancel_token: Optional[CancellationToken] = None,
        deadline: Optional[Deadline] = None,
    ) -> Any:
        """Send a request with retries and return the decoded JSON body.

        Args:
            path: Path below the base URL.
            method: HTTP method.
            body: JSON body, or httpx ``files`` entries for multipart.
            max_retries: Overrides the client's retry budget for this call.
            is_multipart: Send *body* as multipart/form-data.
            cancel_token: Aborts the call and wakes backoff waits.
            deadline: Aborts the call at the first wait past it.

        Raises:
            PresentonError: The classified failure of the last attempt, or
                VALIDATION for a negative *max_retries*.
        """
        response = await self._send(
            path,
            method,
            body,
            max_retries=max_retries,
            is_multipart=is_multipart,
            cancel_token=cancel_token,
            deadline=deadline,
        )
        return response.data

    async def _send(
        self,
        path: str,
        method: str,
        body: Any = None,
        *,
        max_retries: Optional[int] = None,
        is_multipart: bool = False,
        cancel_token: Optional[CancellationToken] = None,
        deadline: Optional[Deadline] = None,
    ) -> ApiResponse:
        retries = self.config.max_retries if max_retries is None else max_retries
        validate_retry_settings(retries, self.config.retry_delay)

        async def attempt() -> ApiResponse:
            return await self._transport.send(path, method, body, is_multipart=is_multipart)

        return await execute_with_retry(
            attempt,
            max_retries=retries,
            base_delay=self.config.retry_delay,
            rng=self._rng,
            sleep_func=self._sleep_func,
            cancel_token=cancel_token,
            deadline=deadline,
            operation_name=f"{method} {path}",
        )


class PresentationsAPI:
    """Presentation generation and task status operations."""

    def __init__(self, client: Presenton):
        self._client = client

    async def generate(
        self, options: Optional[GenerateOptions] = None, **kwargs: Any
    ) -> PresentationResult:
        """Generate a presentation and wait for the finished file.

        Options may be passed as a :class:`GenerateOptions`, as keyword
        arguments, or both (keywords win).
        """
        merged = build_generate_options(options, kwargs)
        response = await self._client._send(GENERATE_PATH, "POST", merged.to_payload())
        return parse_model(PresentationResult, response.data, request_id=response.request_id)

    async def generate_async(
        self, options: Optional[GenerateOptions] = None, **kwargs: Any
    ) -> TaskSnapshot:
        """Start generation and return the task to poll."""
        merged = build_generate_options(options, kwargs)
        response = await self._client._send(GENERATE_ASYNC_PATH, "POST", merged.to_payload())
        snapshot = parse_model(TaskSnapshot, response.data, request_id=response.request_id)
        logger.info("Started generation task %s", snapshot.task_id)
        return snapshot

    async def get_status(
        self,
        task_id: str,
        *,
        cancel_token: Optional[CancellationToken] = None,
        deadline: Optional[Deadline] = None,
    ) -> TaskSnapshot:
        """Fetch the current snapshot of an async task."""
        validate_task_id(task_id)
        response = await self._client._send(
            STATUS_PATH.format(task_id=task_id),
            "GET",
            cancel_token=cancel_token,
            deadline=deadline,
        )
        return parse_model(TaskSnapshot, response.data, request_id=response.request_id)

    async def wait_for_completion(
        self,
        task_id: str,
        *,
        interval: Optional[float] = None,
        on_status_change: Optional[StatusObserver] = None,
        cancel_token: Optional[CancellationToken] = None,
        timeout: Optional[float] = None,
    ) -> PresentationResult:
        """Poll a task until it completes or fails.

        Each status fetch is retried like any other request. There is no
        poll limit; pass *timeout* or *cancel_token* to bound the wait.

        Args:
            task_id: Id returned by :meth:`generate_async`.
            interval: Seconds between polls (default: config poll_interval).
            on_status_change: Called with every snapshot, terminal included.
                Exceptions it raises abort the wait.
            cancel_token: Stops polling with a CANCELLED error.
            timeout: End-to-end budget in seconds; TIMEOUT once exceeded.

        Returns:
            The completed presentation.

        Raises:
            PresentonError: GENERATION_FAILED if the task fails or completes
                without a result; VALIDATION for a bad id or interval.
        """
        validate_task_id(task_id)
        if interval is None:
            interval = self._client.config.poll_interval
        validate_poll_interval(interval)

        deadline = Deadline.after(timeout) if timeout is not None else None

        async def fetch(tid: str) -> TaskSnapshot:
            return await self.get_status(tid, cancel_token=cancel_token, deadline=deadline)

        poller = TaskPoller(
            fetch,
            interval=interval,
            on_status_change=on_status_change,
            cancel_token=cancel_token,
            deadline=deadline,
            sleep_func=self._client._sleep_func,
        )
        return await poller.run(task_id)

    async def generate_and_wait(
        self,
        options: Optional[GenerateOptions] = None,
        *,
        interval: Optional[float] = None,
        on_status_change: Optional[StatusObserver] = None,
        cancel_token: Optional[CancellationToken] = None,
        timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> PresentationResult:
        """Start async generation and poll it to completion."""
        task = await self.generate_async(options, **kwargs)
        return await self.wait_for_completion(
            task.task_id,
            interval=interval,
            on_status_change=on_status_change,
            cancel_token=cancel_token,
            timeout=timeout,
        )


class FilesAPI:
    """File upload operations."""

    def __init__(self, client: Presenton):
        self._client = client

    async def upload(self, files: Sequence[UploadableFile]) -> UploadResult:
        """Upload files for use as ``GenerateOptions.files``.

        Args:
            files: Paths, raw bytes, or ``(filename, bytes)`` tuples.

        Returns:
            The file ids assigned by the service, in input order.

        Raises:
            PresentonError: VALIDATION for a bad list; UPLOAD_FAILED if a
                path cannot be read (not retried).
        """
        validate_upload_files(files)

        entries = []
        for index, item in enumerate(files):
            name, content = await _read_upload(index, item)
            entries.append(("files", (name, content)))

        response = await self._client._send(UPLOAD_PATH, "POST", entries, is_multipart=True)
        if not isinstance(response.data, list):
            raise PresentonError(
                ErrorKind.RESPONSE_MALFORMED,
                "Upload response is not a list of file ids",
                request_id=response.request_id,
                response_body=response.data,
            )
        return parse_model(
            UploadResult, {"file_ids": response.data}, request_id=response.request_id
        )


async def _read_upload(index: int, item: Any) -> tuple[str, bytes]:
    """Resolve one upload entry to ``(filename, content)``."""
    if isinstance(item, (str, os.PathLike)):
        path = Path(item)
        if not path.is_file():
            raise PresentonError(
                ErrorKind.UPLOAD_FAILED,
                f"File not found: {item}",
                file_name=str(item),
            )
        try:
            content = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise PresentonError(
                ErrorKind.UPLOAD_FAILED,
                f"Failed to read file: {item}",
                file_name=str(item),
                original_error=e,
            ) from e
        return path.name, content

    if isinstance(item, (bytes, bytearray)):
        return f"file-{index}", bytes(item)

    if (
        isinstance(item, tuple)
        and len(item) == 2
        and isinstance(item[0], str)
        and isinstance(item[1], (bytes, bytearray))
    ):
        return item[0], bytes(item[1])

    raise PresentonError(
        ErrorKind.UPLOAD_FAILED,
        f"Invalid file type at index {index}. Expected a path, bytes or (name, bytes).",
    )
