"""Classified error type for the Presenton client.

Every failure the client surfaces is a :class:`PresentonError` tagged with an
:class:`ErrorKind`. The kind alone decides whether the retry engine may try
again; callers branch on ``error.kind`` rather than on exception subclasses.

Usage:
    from presenton.errors import ErrorKind, PresentonError

    try:
        result = await client.presentations.generate(content="Q3 review")
    except PresentonError as e:
        if e.kind is ErrorKind.RATE_LIMITED:
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from presenton.shared import extract_error_message, parse_retry_after


class ErrorKind(str, Enum):
    """Closed set of failure kinds."""

    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    RATE_LIMITED = "rate_limited"
    SERVER_OR_TRANSIENT = "server_or_transient"
    CLIENT_REQUEST = "client_request"
    RESPONSE_MALFORMED = "response_malformed"
    GENERATION_FAILED = "generation_failed"
    UPLOAD_FAILED = "upload_failed"
    CANCELLED = "cancelled"
    TIMEOUT = "timeout"


RETRYABLE_KINDS: frozenset[ErrorKind] = frozenset(
    {
        ErrorKind.RATE_LIMITED,
        ErrorKind.SERVER_OR_TRANSIENT,
        ErrorKind.UPLOAD_FAILED,
    }
)


def is_retryable_kind(kind: ErrorKind) -> bool:
    return kind in RETRYABLE_KINDS


@dataclass(frozen=True)
class ValidationDetail:
    """One failed input check.

    Attributes:
        field: Name of the offending option (``files[2]`` for list items)
        message: What is wrong with it
        received: The value (or a description of it) that was supplied
        expected: What would have been accepted
    """

    field: str
    message: str
    received: Any = None
    expected: Optional[str] = None


class PresentonError(Exception):
    """A failure tagged with its taxonomy kind.

    Produced once per failed attempt and never mutated afterwards. The
    retry engine reads ``is_retryable`` and ``retry_after``; everything else
    is diagnostic.

    Attributes:
        kind: The :class:`ErrorKind` of this failure
        message: Human-readable, secret-redacted description
        retry_after: Server-requested wait in seconds (rate limits only)
        status_code: HTTP status, when a response was received
        request_id: Value of the ``x-request-id`` response header
        task_id: Async task the failure belongs to (generation failures)
        file_name: Input file that could not be read (upload failures)
        details: Validation details or the server-reported task error
        response_body: Decoded error body, when one was returned
        original_error: Underlying exception, if any
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        retry_after: Optional[float] = None,
        status_code: Optional[int] = None,
        request_id: Optional[str] = None,
        task_id: Optional[str] = None,
        file_name: Optional[str] = None,
        details: Any = None,
        response_body: Any = None,
        original_error: Optional[BaseException] = None,
    ):
        self.kind = kind
        self.message = message
        self.retry_after = retry_after
        self.status_code = status_code
        self.request_id = request_id
        self.task_id = task_id
        self.file_name = file_name
        self.details = details
        self.response_body = response_body
        self.original_error = original_error
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        return is_retryable_kind(self.kind)

    def __str__(self) -> str:
        parts = [f"[{self.kind.value}] {self.message}"]
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        if self.request_id:
            parts.append(f"request_id={self.request_id}")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"PresentonError(kind={self.kind.value!r}, message={self.message!r}, "
            f"status_code={self.status_code!r}, request_id={self.request_id!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Serializable summary, used by the CLI for error output."""
        data: dict[str, Any] = {"error": self.kind.value, "message": self.message}
        for key in ("status_code", "request_id", "retry_after", "task_id", "file_name"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if isinstance(self.details, list) and all(
            isinstance(d, ValidationDetail) for d in self.details
        ):
            data["details"] = [
                {"field": d.field, "message": d.message} for d in self.details
            ]
        elif self.details is not None:
            data["details"] = self.details
        return data


def classify_status(
    status_code: int,
    body: Any,
    headers: Mapping[str, str],
    request_id: Optional[str] = None,
) -> PresentonError:
    """Map a non-2xx HTTP response to a classified error.

    Classification rules (applied in order):
        1. 401 / 403 -> AUTHENTICATION
        2. 429 -> RATE_LIMITED, ``retry_after`` from the Retry-After header
        3. >= 500 -> SERVER_OR_TRANSIENT
        4. other >= 400 -> CLIENT_REQUEST

    Args:
        status_code: HTTP status of the response.
        body: Decoded JSON body, raw text, or ``None``.
        headers: Response headers.
        request_id: Value of ``x-request-id``, if present.

    Returns:
        The error to raise. Never raises itself.
    """
    if status_code in (401, 403):
        return PresentonError(
            ErrorKind.AUTHENTICATION,
            "Invalid API key or insufficient permissions",
            status_code=status_code,
            request_id=request_id,
            response_body=body,
        )

    if status_code == 429:
        return PresentonError(
            ErrorKind.RATE_LIMITED,
            "Rate limit exceeded. Please slow down your requests.",
            retry_after=parse_retry_after(headers),
            status_code=status_code,
            request_id=request_id,
            response_body=body,
        )

    kind = ErrorKind.SERVER_OR_TRANSIENT if status_code >= 500 else ErrorKind.CLIENT_REQUEST
    return PresentonError(
        kind,
        extract_error_message(status_code, body),
        status_code=status_code,
        request_id=request_id,
        response_body=body,
    )


def validation_error(
    details: list[ValidationDetail],
    message: Optional[str] = None,
) -> PresentonError:
    """Build a VALIDATION error from one or more failed checks."""
    if message is None and len(details) == 1:
        message = f"Validation failed: {details[0].message}"
    elif message is None:
        lines = "\n".join(f"  - {d.field}: {d.message}" for d in details)
        message = f"Validation failed with {len(details)} errors:\n{lines}"
    return PresentonError(ErrorKind.VALIDATION, message, details=list(details))
