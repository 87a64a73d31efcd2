"""Shared helpers for the HTTP layer.

Pure parsing and redaction utilities used by the transport and error
classification code.

Architecture constraints:
    - Imports only from stdlib
    - SECURITY: All error parsing redacts API keys and sensitive headers --
      never expose secrets in logs, error messages, or return values.

Utilities:
    - redact_secrets(text) -> str
    - redact_headers(headers) -> dict
    - parse_retry_after(headers) -> Optional[float]
    - extract_error_message(status_code, body) -> str
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Regex to detect potential API keys / bearer tokens in strings
_SECRET_PATTERN = re.compile(
    r"(?i)"
    r"(?:"
    r"(?:api[_-]?key|token|bearer|authorization|secret|password|credential)"
    r"[\s:=]+"
    r")"
    r"['\"]?([^\s'\"]{8,})['\"]?",
)

# Presenton keys are recognisable on their own, without a "key=" prefix
_PRESENTON_KEY_PATTERN = re.compile(r"sk-presenton-[A-Za-z0-9_\-]+")

# Headers that should never appear in logs/errors
_SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "x-api-key",
        "cookie",
        "set-cookie",
        "proxy-authorization",
    }
)

_REDACTED = "****"

_MAX_MESSAGE_LENGTH = 500


# ---------------------------------------------------------------------------
# Secret redaction
# ---------------------------------------------------------------------------


def redact_secrets(text: str) -> str:
    """Remove API keys and sensitive tokens from a text string.

    Scans for patterns like ``api_key=...``, ``Bearer ...``, ``token: ...``
    and bare ``sk-presenton-...`` keys, replacing the secret portion with a
    redacted placeholder.

    Args:
        text: Input text that may contain secrets.

    Returns:
        Text with secrets replaced by redacted placeholders.
    """
    if not text:
        return text

    def _replace(match: re.Match[str]) -> str:
        full = match.group(0)
        secret = match.group(1)
        return full.replace(secret, _REDACTED)

    text = _SECRET_PATTERN.sub(_replace, text)
    return _PRESENTON_KEY_PATTERN.sub(_REDACTED, text)


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Return a copy of *headers* with sensitive values redacted."""
    return {
        key: _REDACTED if key.lower() in _SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


# ---------------------------------------------------------------------------
# Pure parsing helpers
# ---------------------------------------------------------------------------


def parse_retry_after(headers: Mapping[str, str]) -> Optional[float]:
    """Parse the ``Retry-After`` header.

    Handles numeric (integer or float) seconds only. RFC 7231 date-based
    values, negative numbers and garbage return ``None`` so the caller falls
    back to exponential backoff.

    Args:
        headers: Response headers (``httpx.Headers`` is case-insensitive;
            plain dicts are checked in both spellings).

    Returns:
        Seconds to wait before retrying, or ``None``.
    """
    retry_after = headers.get("retry-after")
    if retry_after is None:
        retry_after = headers.get("Retry-After")
    if not retry_after:
        return None
    try:
        seconds = float(retry_after)
    except (TypeError, ValueError):
        return None
    if seconds < 0:
        return None
    return seconds


def extract_error_message(status_code: int, body: Any) -> str:
    """Build a human-readable, secret-redacted message from an error body.

    The service is a FastAPI application, so error bodies come in a few
    shapes, tried in order:

    1. ``{"detail": "..."}``
    2. ``{"message": "..."}``
    3. ``{"detail": [{"loc": [...], "msg": "..."}, ...]}`` (request
       validation errors), rendered as ``body.field: msg; ...``
    4. A non-empty plain-text body

    Anything else yields ``"API request failed with status <code>"``.
    """
    message = f"API request failed with status {status_code}"

    if isinstance(body, dict):
        detail = body.get("detail")
        if isinstance(detail, str):
            message = detail
        elif isinstance(body.get("message"), str):
            message = body["message"]
        elif isinstance(detail, list):
            parts = []
            for item in detail:
                if not isinstance(item, dict):
                    continue
                loc = ".".join(str(p) for p in item.get("loc", []))
                parts.append(f"{loc}: {item.get('msg', '')}" if loc else str(item.get("msg", "")))
            if parts:
                message = "; ".join(parts)
    elif isinstance(body, str) and body:
        message = body[:_MAX_MESSAGE_LENGTH]

    return redact_secrets(message)

