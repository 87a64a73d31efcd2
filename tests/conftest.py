"""Shared test fixtures for the Presenton client tests.

Provides an isolated environment, a recording sleep function and a scripted
``httpx.MockTransport`` so no test touches the network or real time.
"""

import random
from typing import Any, Callable, Union

import httpx
import pytest

from presenton import Presenton

API_KEY = "sk-presenton-test-key-123456"
BASE_URL = "https://api.test.presenton.ai"


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Hide developer config: no PRESENTON_* vars, no config files."""
    for var in (
        "PRESENTON_API_KEY",
        "PRESENTON_BASE_URL",
        "PRESENTON_MAX_RETRIES",
        "PRESENTON_RETRY_DELAY",
        "PRESENTON_TIMEOUT",
        "PRESENTON_POLL_INTERVAL",
        "PRESENTON_CONFIG_FILE",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Time control
# ---------------------------------------------------------------------------


class SleepRecorder:
    """Async sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def fake_sleep():
    return SleepRecorder()


# ---------------------------------------------------------------------------
# Scripted HTTP
# ---------------------------------------------------------------------------

Step = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


class ScriptedHandler:
    """MockTransport handler that replays a fixed sequence of outcomes.

    Each step is an ``httpx.Response`` to return, an exception to raise, or
    a callable taking the request. The last step repeats once the script
    runs out. Every request is recorded in ``requests``.
    """

    def __init__(self, *steps: Step):
        if not steps:
            raise ValueError("ScriptedHandler needs at least one step")
        self.steps = list(steps)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests) - 1, len(self.steps) - 1)
        step = self.steps[index]
        if isinstance(step, Exception):
            raise step
        if isinstance(step, httpx.Response):
            return step
        return step(request)

    @property
    def call_count(self) -> int:
        return len(self.requests)


def json_response(status_code: int = 200, data: Any = None, **headers: str) -> httpx.Response:
    """Build a JSON response; keyword headers use underscores for dashes."""
    return httpx.Response(
        status_code,
        json=data if data is not None else {},
        headers={k.replace("_", "-"): v for k, v in headers.items()},
    )


def task_payload(status: str = "pending", **extra: Any) -> dict[str, Any]:
    payload = {
        "id": "task-abc123",
        "status": status,
        "message": f"Task is {status}",
        "created_at": "2025-01-01T00:00:00Z",
        "updated_at": "2025-01-01T00:00:05Z",
        "data": None,
        "error": None,
    }
    payload.update(extra)
    return payload


PRESENTATION = {
    "presentation_id": "pres-1",
    "path": "/exports/pres-1.pptx",
    "edit_path": "/edit/pres-1",
    "credits_consumed": 5,
}


@pytest.fixture
def make_client(fake_sleep):
    """Factory for a client wired to a ScriptedHandler and fake sleep."""

    def _make(handler: ScriptedHandler, **kwargs: Any) -> Presenton:
        kwargs.setdefault("api_key", API_KEY)
        kwargs.setdefault("base_url", BASE_URL)
        kwargs.setdefault("sleep_func", fake_sleep)
        kwargs.setdefault("rng", random.Random(42))
        return Presenton(transport=httpx.MockTransport(handler), **kwargs)

    return _make
