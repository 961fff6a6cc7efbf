"""Shared test fixtures and dummy classes."""

from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from youtrack_mcp.services.cache import TTLCache
from youtrack_mcp.services.client import YouTrackClient
from youtrack_mcp.services.retry import RetryPolicy

BASE_URL = "https://example.com"
NO_DELAY = RetryPolicy(delays=(0.0, 0.0))

Handler = Callable[[httpx.Request], Any]


class RecordingHandler:
    """MockTransport handler that records every request it serves."""

    def __init__(self, handler: Handler) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        result = self.handler(request)
        if hasattr(result, "__await__"):
            result = await result
        return result

    @property
    def calls(self) -> int:
        return len(self.requests)


class FakeClock:
    """Monotonic clock under test control."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class DummyLog:
    """Records (level, message) pairs sent to a log sink."""

    def __init__(self) -> None:
        self.entries: list[tuple[str, str]] = []

    def __call__(self, level: str, message: str) -> None:
        self.entries.append((level, message))

    def messages(self, level: str) -> list[str]:
        return [message for lvl, message in self.entries if lvl == level]


@pytest.fixture
def make_client():
    """Factory building a client wired to an in-memory transport."""

    def factory(
        handler: Handler, cache: TTLCache | None = None, **kwargs: Any
    ) -> tuple[YouTrackClient, RecordingHandler]:
        recorder = RecordingHandler(handler)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
        client = YouTrackClient(
            BASE_URL,
            "test",
            retry_policy=kwargs.pop("retry_policy", NO_DELAY),
            http_client=http_client,
            cache=cache,
            **kwargs,
        )
        return client, recorder

    return factory


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def dummy_log() -> DummyLog:
    return DummyLog()


def ok(data: Any = None) -> httpx.Response:
    if data is None:
        data = {"id": 1}
    return httpx.Response(200, json=data)


def error(
    status: int, body: dict[str, str] | None = None, headers: dict[str, str] | None = None
) -> httpx.Response:
    if body is None:
        return httpx.Response(status, headers=headers)
    return httpx.Response(status, json=body, headers=headers)
