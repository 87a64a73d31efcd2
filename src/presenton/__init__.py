"""Async Python client for the Presenton presentation generation API."""

from presenton.client import FilesAPI, Presenton, PresentationsAPI
from presenton.config import ClientConfig
from presenton.errors import (
    RETRYABLE_KINDS,
    ErrorKind,
    PresentonError,
    ValidationDetail,
)
from presenton.models import (
    ContentGeneration,
    ExportFormat,
    GenerateOptions,
    ImageType,
    Language,
    PresentationResult,
    TaskSnapshot,
    TaskStatus,
    Template,
    Theme,
    Tone,
    UploadResult,
    Verbosity,
)
from presenton.resilience import CancellationToken, Deadline

__version__ = "0.1.0"

__all__ = [
    # Client
    "Presenton",
    "PresentationsAPI",
    "FilesAPI",
    "ClientConfig",
    # Errors
    "ErrorKind",
    "PresentonError",
    "RETRYABLE_KINDS",
    "ValidationDetail",
    # Models
    "GenerateOptions",
    "PresentationResult",
    "TaskSnapshot",
    "UploadResult",
    "ContentGeneration",
    "ExportFormat",
    "ImageType",
    "Language",
    "TaskStatus",
    "Template",
    "Theme",
    "Tone",
    "Verbosity",
    # Cancellation
    "CancellationToken",
    "Deadline",
]
