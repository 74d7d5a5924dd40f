"""Shared fixtures: in-memory event sources and mock-transport clients."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx
import pytest

from vecinita_client.client import AgentServiceClient
from vecinita_client.transport.sse import ServerSentEvent

BASE_URL = "http://gateway.test"


def frame(**payload: Any) -> str:
    """Encode one stream event payload as it appears in a ``data:`` line."""
    return json.dumps(payload)


class FakeEventSource:
    """In-memory stand-in for an SSE connection.

    ``frames`` items are ``data`` payload strings, or exceptions to raise
    at that point of the stream (simulating a dropped connection).
    """

    def __init__(
        self,
        url: str,
        frames: list[str | BaseException],
        *,
        hang: bool = False,
        open_error: BaseException | None = None,
    ) -> None:
        self.url = url
        self._frames = list(frames)
        self._hang = hang
        self._open_error = open_error
        self.opened = False
        self.close_calls = 0
        self.delivered = 0

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    async def open(self) -> None:
        if self._open_error is not None:
            raise self._open_error
        self.opened = True

    async def messages(self) -> AsyncIterator[ServerSentEvent]:
        for item in self._frames:
            # Each frame is a real wait, as on a socket.
            await asyncio.sleep(0)
            if self.closed:
                return
            if isinstance(item, BaseException):
                raise item
            self.delivered += 1
            yield ServerSentEvent(data=item)
        if self._hang:
            await asyncio.Event().wait()

    async def close(self) -> None:
        self.close_calls += 1


class RecordingStream(httpx.AsyncByteStream):
    """Response body that records how often it was closed."""

    def __init__(self, chunks: list[bytes], error: Exception | None = None) -> None:
        self.chunks = chunks
        self.error = error
        self.close_calls = 0

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error

    async def aclose(self) -> None:
        self.close_calls += 1


@pytest.fixture
def fake_sources() -> list[FakeEventSource]:
    """Every fake event source created by ``make_stream_client``."""
    return []


@pytest.fixture
def make_stream_client(
    fake_sources: list[FakeEventSource],
) -> Callable[..., AgentServiceClient]:
    """Build a client whose stream connections replay the given frames."""

    def _make(
        frames: list[str | BaseException],
        *,
        base_url: str = BASE_URL,
        hang: bool = False,
        open_error: BaseException | None = None,
        **kwargs: Any,
    ) -> AgentServiceClient:
        def factory(url: str) -> FakeEventSource:
            source = FakeEventSource(url, frames, hang=hang, open_error=open_error)
            fake_sources.append(source)
            return source

        return AgentServiceClient(base_url, event_source_factory=factory, **kwargs)

    return _make


@pytest.fixture
def make_http_client() -> Callable[..., AgentServiceClient]:
    """Build a client whose HTTP calls go to ``handler`` via ``MockTransport``."""

    def _make(
        handler: Callable[[httpx.Request], Any],
        *,
        base_url: str = BASE_URL,
        **kwargs: Any,
    ) -> AgentServiceClient:
        http = httpx.AsyncClient(
            transport=httpx.MockTransport(handler), base_url=BASE_URL
        )
        return AgentServiceClient(base_url, http_client=http, **kwargs)

    return _make
