"""Tests for HttpTransport: one attempt, classified outcome."""

import json

import httpx
import pytest

from conftest import API_KEY, BASE_URL, ScriptedHandler, json_response
from presenton.config import ClientConfig
from presenton.errors import ErrorKind, PresentonError
from presenton.transport import HttpTransport, build_headers


def make_transport(handler: ScriptedHandler) -> HttpTransport:
    config = ClientConfig(api_key=API_KEY, base_url=BASE_URL)
    return HttpTransport(config, transport=httpx.MockTransport(handler))


class TestBuildHeaders:
    def test_json_headers(self):
        headers = build_headers("sk-presenton-abc")
        assert headers == {
            "Authorization": "Bearer sk-presenton-abc",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    def test_multipart_omits_content_type(self):
        headers = build_headers("sk-presenton-abc", is_multipart=True)
        assert "Content-Type" not in headers
        assert headers["Authorization"] == "Bearer sk-presenton-abc"


class TestSendSuccess:
    @pytest.mark.asyncio
    async def test_returns_decoded_json(self):
        handler = ScriptedHandler(json_response(200, {"ok": True}))
        response = await make_transport(handler).send("/api/v1/ping", "GET")
        assert response.data == {"ok": True}
        assert response.request_id is None

    @pytest.mark.asyncio
    async def test_carries_request_id(self):
        handler = ScriptedHandler(json_response(200, {"ok": True}, x_request_id="req-5"))
        response = await make_transport(handler).send("/api/v1/ping", "GET")
        assert response.request_id == "req-5"

    @pytest.mark.asyncio
    async def test_request_shape(self):
        handler = ScriptedHandler(json_response(200, {}))
        await make_transport(handler).send("/api/v1/thing", "POST", {"content": "hi"})

        request = handler.requests[0]
        assert request.method == "POST"
        assert str(request.url) == f"{BASE_URL}/api/v1/thing"
        assert request.headers["authorization"] == f"Bearer {API_KEY}"
        assert request.headers["accept"] == "application/json"
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == {"content": "hi"}

    @pytest.mark.asyncio
    async def test_multipart_body(self):
        handler = ScriptedHandler(json_response(200, ["file-1"]))
        files = [("files", ("notes.txt", b"hello"))]

        response = await make_transport(handler).send(
            "/api/v1/ppt/files/upload", "POST", files, is_multipart=True
        )

        assert response.data == ["file-1"]
        request = handler.requests[0]
        assert request.headers["content-type"].startswith("multipart/form-data; boundary=")
        assert b'name="files"; filename="notes.txt"' in request.content
        assert b"hello" in request.content


class TestSendFailures:
    @pytest.mark.asyncio
    async def test_network_error_is_transient(self):
        handler = ScriptedHandler(httpx.ConnectError("connection refused"))
        with pytest.raises(PresentonError) as exc_info:
            await make_transport(handler).send("/x", "GET")

        error = exc_info.value
        assert error.kind is ErrorKind.SERVER_OR_TRANSIENT
        assert error.status_code is None
        assert isinstance(error.original_error, httpx.ConnectError)
        assert error.__cause__ is error.original_error

    @pytest.mark.asyncio
    async def test_read_timeout_is_transient(self):
        handler = ScriptedHandler(httpx.ReadTimeout("timed out"))
        with pytest.raises(PresentonError) as exc_info:
            await make_transport(handler).send("/x", "GET")
        assert exc_info.value.kind is ErrorKind.SERVER_OR_TRANSIENT

    @pytest.mark.asyncio
    async def test_rate_limit_with_request_id(self):
        handler = ScriptedHandler(
            json_response(429, {"detail": "slow"}, retry_after="5", x_request_id="req-42")
        )
        with pytest.raises(PresentonError) as exc_info:
            await make_transport(handler).send("/x", "GET")

        error = exc_info.value
        assert error.kind is ErrorKind.RATE_LIMITED
        assert error.retry_after == 5.0
        assert error.request_id == "req-42"
        assert error.status_code == 429

    @pytest.mark.asyncio
    async def test_auth_failure(self):
        handler = ScriptedHandler(json_response(401, {"detail": "invalid key"}))
        with pytest.raises(PresentonError) as exc_info:
            await make_transport(handler).send("/x", "GET")
        assert exc_info.value.kind is ErrorKind.AUTHENTICATION

    @pytest.mark.asyncio
    async def test_server_error_with_text_body(self):
        handler = ScriptedHandler(httpx.Response(502, text="Bad Gateway"))
        with pytest.raises(PresentonError) as exc_info:
            await make_transport(handler).send("/x", "GET")

        error = exc_info.value
        assert error.kind is ErrorKind.SERVER_OR_TRANSIENT
        assert error.message == "Bad Gateway"
        assert error.response_body == "Bad Gateway"

    @pytest.mark.asyncio
    async def test_client_error_message_from_body(self):
        handler = ScriptedHandler(json_response(400, {"detail": "n_slides too large"}))
        with pytest.raises(PresentonError) as exc_info:
            await make_transport(handler).send("/x", "POST", {})

        assert exc_info.value.kind is ErrorKind.CLIENT_REQUEST
        assert exc_info.value.message == "n_slides too large"

    @pytest.mark.asyncio
    async def test_non_json_success_is_malformed(self):
        handler = ScriptedHandler(
            httpx.Response(200, text="<html>oops</html>", headers={"x-request-id": "req-7"})
        )
        with pytest.raises(PresentonError) as exc_info:
            await make_transport(handler).send("/x", "GET")

        error = exc_info.value
        assert error.kind is ErrorKind.RESPONSE_MALFORMED
        assert error.request_id == "req-7"
        assert error.is_retryable is False
