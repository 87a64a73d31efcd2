"""Single-attempt HTTP transport.

``HttpTransport.send`` performs exactly one request and either returns the
decoded JSON body or raises a classified :class:`PresentonError`. Retrying
is the caller's concern (see :mod:`presenton.resilience`).

Error Handling:
    - No response (connect/read errors, timeouts): SERVER_OR_TRANSIENT
    - 401/403: AUTHENTICATION
    - 429: RATE_LIMITED with Retry-After
    - 5xx: SERVER_OR_TRANSIENT
    - other 4xx: CLIENT_REQUEST
    - 2xx with a non-JSON body: RESPONSE_MALFORMED
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from presenton.config import ClientConfig
from presenton.errors import ErrorKind, PresentonError, classify_status
from presenton.shared import redact_headers, redact_secrets

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-request-id"


@dataclass(frozen=True)
class ApiResponse:
    """Decoded body of a successful response and its request id."""

    data: Any
    request_id: Optional[str] = None


def build_headers(api_key: str, is_multipart: bool = False) -> dict[str, str]:
    """Headers sent with every request.

    Multipart uploads omit Content-Type so httpx can set the boundary.
    """
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Accept": "application/json",
    }
    if not is_multipart:
        headers["Content-Type"] = "application/json"
    return headers


def _decode_error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class HttpTransport:
    """Performs one HTTP attempt against the Presenton API.

    Creates a short-lived ``httpx.AsyncClient`` per attempt, so concurrent
    calls share nothing but the immutable config.

    Attributes:
        config: Client configuration (base URL, key, timeout)

    Example:
        transport = HttpTransport(ClientConfig(api_key="sk-presenton-..."))
        response = await transport.send("/api/v1/ppt/presentation/status/task-1", "GET")
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the transport.

        Args:
            config: Client configuration.
            transport: Optional httpx transport (e.g. ``httpx.MockTransport``
                in tests). Defaults to httpx's network transport.
        """
        self.config = config
        self._transport = transport

    async def send(
        self,
        path: str,
        method: str,
        body: Any = None,
        *,
        is_multipart: bool = False,
    ) -> ApiResponse:
        """Send one request and return the decoded JSON response.

        Args:
            path: Path below the base URL, starting with ``/``.
            method: HTTP method.
            body: JSON-serializable body, or a list of httpx ``files``
                entries when *is_multipart* is set.
            is_multipart: Send *body* as multipart/form-data.

        Returns:
            Decoded JSON body with the response's request id.

        Raises:
            PresentonError: Classified failure for this attempt.
        """
        url = f"{self.config.base_url}{path}"
        headers = build_headers(self.config.api_key, is_multipart)

        kwargs: dict[str, Any] = {}
        if body is not None:
            if is_multipart:
                kwargs["files"] = body
            else:
                kwargs["json"] = body

        logger.debug("%s %s headers=%s", method, url, redact_headers(headers))

        async with httpx.AsyncClient(
            timeout=self.config.timeout,
            transport=self._transport,
            follow_redirects=True,
        ) as client:
            try:
                response = await client.request(method, url, headers=headers, **kwargs)
            except httpx.HTTPError as e:
                raise PresentonError(
                    ErrorKind.SERVER_OR_TRANSIENT,
                    redact_secrets(f"Network request failed: {type(e).__name__}: {e}"),
                    original_error=e,
                ) from e

            return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> ApiResponse:
        request_id = response.headers.get(REQUEST_ID_HEADER)

        if response.status_code >= 400:
            body = _decode_error_body(response)
            error = classify_status(
                response.status_code,
                body,
                response.headers,
                request_id=request_id,
            )
            logger.debug(
                "HTTP %d from %s (request_id=%s): %s",
                response.status_code,
                response.request.url.path,
                request_id,
                error.message,
            )
            raise error

        try:
            data = response.json()
        except ValueError as e:
            raise PresentonError(
                ErrorKind.RESPONSE_MALFORMED,
                "Failed to parse API response as JSON",
                status_code=response.status_code,
                request_id=request_id,
                response_body=response.text[:500],
                original_error=e,
            ) from e
        return ApiResponse(data, request_id)
