"""Input validation run before any request is issued.

Every check raises a VALIDATION-kind :class:`PresentonError` carrying
:class:`ValidationDetail` entries, so bad input never reaches the network.
"""

from typing import Any, Mapping, Optional, Sequence

from pydantic import ValidationError

from presenton.errors import ValidationDetail, validation_error
from presenton.models import GenerateOptions

API_KEY_PREFIX = "sk-presenton-"
TASK_ID_PREFIX = "task-"

MAX_CONTENT_LENGTH = 100_000
MAX_INSTRUCTIONS_LENGTH = 10_000
MIN_SLIDES = 1
MAX_SLIDES = 50
MAX_UPLOAD_FILES = 10
MAX_UPLOAD_BYTES = 50 * 1024 * 1024  # 50MB
MIN_POLL_INTERVAL = 0.5  # seconds


def validate_api_key(api_key: Any) -> None:
    """Check that an API key is present and looks like a Presenton key."""
    if not api_key:
        raise validation_error(
            [
                ValidationDetail(
                    field="api_key",
                    message="API key is required",
                    expected=f"{API_KEY_PREFIX}xxxxxxxx",
                )
            ],
            message="API key is required. Pass api_key or set PRESENTON_API_KEY.",
        )

    if not isinstance(api_key, str):
        raise validation_error(
            [
                ValidationDetail(
                    field="api_key",
                    message="API key must be a string",
                    received=type(api_key).__name__,
                    expected="str",
                )
            ]
        )

    if not api_key.startswith(API_KEY_PREFIX):
        raise validation_error(
            [
                ValidationDetail(
                    field="api_key",
                    message=f'API key should start with "{API_KEY_PREFIX}"',
                    received=api_key[:4] + "...",
                    expected=f"{API_KEY_PREFIX}xxxxxxxx",
                )
            ],
            message=f'Invalid API key format. API keys should start with "{API_KEY_PREFIX}"',
        )


def validate_task_id(task_id: Any) -> None:
    """Check that *task_id* looks like ``task-xxxxxxxxxx``."""
    if not task_id or not isinstance(task_id, str):
        raise validation_error(
            [
                ValidationDetail(
                    field="task_id",
                    message="Task ID is required and must be a string",
                    received=task_id,
                    expected="str (e.g. 'task-xxxxxxxxxx')",
                )
            ],
            message="Task ID is required and must be a string",
        )

    if not task_id.startswith(TASK_ID_PREFIX):
        raise validation_error(
            [
                ValidationDetail(
                    field="task_id",
                    message=f'Task ID must start with "{TASK_ID_PREFIX}"',
                    received=task_id,
                    expected="task-xxxxxxxxxx",
                )
            ],
            message=(
                'Invalid task ID format. Expected format: "task-xxxxxxxxxx", '
                f'received: "{task_id}"'
            ),
        )


def validate_retry_settings(max_retries: Any, retry_delay: Any) -> None:
    details: list[ValidationDetail] = []
    if isinstance(max_retries, bool) or not isinstance(max_retries, int) or max_retries < 0:
        details.append(
            ValidationDetail(
                field="max_retries",
                message="max_retries must be a non-negative integer",
                received=max_retries,
                expected=">= 0",
            )
        )
    if isinstance(retry_delay, bool) or not isinstance(retry_delay, (int, float)) or retry_delay < 0:
        details.append(
            ValidationDetail(
                field="retry_delay",
                message="retry_delay must be a non-negative number of seconds",
                received=retry_delay,
                expected=">= 0",
            )
        )
    if details:
        raise validation_error(details)


def validate_poll_interval(interval: Any) -> None:
    """Polling faster than every 0.5s is rejected."""
    if (
        isinstance(interval, bool)
        or not isinstance(interval, (int, float))
        or interval < MIN_POLL_INTERVAL
    ):
        raise validation_error(
            [
                ValidationDetail(
                    field="interval",
                    message=f"Polling interval must be at least {MIN_POLL_INTERVAL}s",
                    received=interval,
                    expected=f">= {MIN_POLL_INTERVAL}",
                )
            ],
            message=f"Polling interval must be at least {MIN_POLL_INTERVAL}s",
        )


def build_generate_options(
    options: Optional[GenerateOptions] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> GenerateOptions:
    """Merge an options object with keyword overrides and validate the result.

    Args:
        options: Base options, if the caller built a :class:`GenerateOptions`.
        overrides: Keyword options; these win over *options*.

    Returns:
        A validated :class:`GenerateOptions`.

    Raises:
        PresentonError: VALIDATION for type errors, unknown options and
            every rule in :func:`validate_generate_options`.
    """
    values: dict[str, Any] = {}
    if options is not None:
        values.update(options.model_dump(exclude_unset=True))
    if overrides:
        values.update(overrides)

    try:
        merged = GenerateOptions.model_validate(values)
    except ValidationError as e:
        details = [
            ValidationDetail(
                field=".".join(str(p) for p in err["loc"]) or "options",
                message=err["msg"],
                received=err.get("input"),
            )
            for err in e.errors()
        ]
        raise validation_error(details) from e

    validate_generate_options(merged)
    return merged


def validate_generate_options(options: GenerateOptions) -> None:
    """Apply range and consistency rules, collecting every failure."""
    errors: list[ValidationDetail] = []

    if options.content is not None:
        if len(options.content) == 0:
            errors.append(
                ValidationDetail(
                    field="content",
                    message="Content cannot be an empty string",
                    received='""',
                    expected="non-empty string",
                )
            )
        elif len(options.content) > MAX_CONTENT_LENGTH:
            errors.append(
                ValidationDetail(
                    field="content",
                    message="Content exceeds maximum length of 100,000 characters",
                    received=len(options.content),
                    expected=f"<= {MAX_CONTENT_LENGTH}",
                )
            )

    if options.slides_markdown is not None and len(options.slides_markdown) == 0:
        errors.append(
            ValidationDetail(
                field="slides_markdown",
                message="slides_markdown cannot be an empty list",
                received="[]",
                expected="non-empty list",
            )
        )

    if (
        options.slides_layout is not None
        and options.slides_markdown
        and len(options.slides_layout) != len(options.slides_markdown)
    ):
        errors.append(
            ValidationDetail(
                field="slides_layout",
                message="slides_layout length must match slides_markdown length",
                received=len(options.slides_layout),
                expected=str(len(options.slides_markdown)),
            )
        )

    if options.num_slides is not None and not MIN_SLIDES <= options.num_slides <= MAX_SLIDES:
        errors.append(
            ValidationDetail(
                field="num_slides",
                message=f"num_slides must be between {MIN_SLIDES} and {MAX_SLIDES}",
                received=options.num_slides,
                expected=f"{MIN_SLIDES}-{MAX_SLIDES}",
            )
        )

    if options.instructions is not None and len(options.instructions) > MAX_INSTRUCTIONS_LENGTH:
        errors.append(
            ValidationDetail(
                field="instructions",
                message="instructions exceeds maximum length of 10,000 characters",
                received=len(options.instructions),
                expected=f"<= {MAX_INSTRUCTIONS_LENGTH}",
            )
        )

    for index, file_id in enumerate(options.files or []):
        if not file_id.strip():
            errors.append(
                ValidationDetail(
                    field=f"files[{index}]",
                    message=f"File ID at index {index} cannot be empty",
                    received='""',
                    expected="non-empty string",
                )
            )

    if not (options.content or options.slides_markdown or options.files):
        errors.append(
            ValidationDetail(
                field="content",
                message="At least one of 'content', 'slides_markdown', or 'files' must be provided",
                expected="content | slides_markdown | files",
            )
        )

    if errors:
        raise validation_error(errors)


def validate_upload_files(files: Any) -> None:
    """Check the list handed to ``client.files.upload``.

    Paths are checked for existence later, when they are read; only
    in-memory payloads can be size-checked here.
    """
    if isinstance(files, (str, bytes)) or not isinstance(files, Sequence):
        raise validation_error(
            [
                ValidationDetail(
                    field="files",
                    message="Files must be a list",
                    received=type(files).__name__,
                    expected="list of paths, bytes or (name, bytes) tuples",
                )
            ]
        )

    if len(files) == 0:
        raise validation_error(
            [
                ValidationDetail(
                    field="files",
                    message="At least one file is required",
                    received="[]",
                    expected="non-empty list",
                )
            ]
        )

    if len(files) > MAX_UPLOAD_FILES:
        raise validation_error(
            [
                ValidationDetail(
                    field="files",
                    message=f"Maximum {MAX_UPLOAD_FILES} files can be uploaded at once",
                    received=len(files),
                    expected=f"<= {MAX_UPLOAD_FILES}",
                )
            ]
        )

    for index, item in enumerate(files):
        if item is None:
            raise validation_error(
                [
                    ValidationDetail(
                        field=f"files[{index}]",
                        message="File cannot be None",
                        expected="path, bytes or (name, bytes)",
                    )
                ],
                message=f"File at index {index} is None",
            )

        payload = item[1] if isinstance(item, tuple) and len(item) == 2 else item
        if isinstance(payload, (bytes, bytearray)) and len(payload) > MAX_UPLOAD_BYTES:
            raise validation_error(
                [
                    ValidationDetail(
                        field=f"files[{index}]",
                        message="File exceeds maximum size of 50MB",
                        received=f"{len(payload) / 1024 / 1024:.2f}MB",
                        expected="<= 50MB",
                    )
                ],
                message=f"File at index {index} exceeds maximum size of 50MB",
            )
