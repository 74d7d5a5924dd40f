"""Unidirectional text/event-stream connection over ``httpx``.

One :class:`HttpxEventSource` is one connection: ``open()`` sends the
request, ``messages()`` yields decoded frames in wire order, and
``close()`` releases the response. ``close()`` is idempotent so every exit
path of the caller may call it.

SSE framing: ``field: value`` lines, events separated by a blank line,
multiple ``data`` lines joined with ``\\n``, lines starting with ``:`` are
comments (keep-alives).
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from typing import Protocol

import httpx

from vecinita_client.errors import stream_fault

__all__ = [
    "SSE_CONTENT_TYPE",
    "EventSource",
    "EventSourceFactory",
    "HttpxEventSource",
    "SSEDecoder",
    "ServerSentEvent",
]

logger = logging.getLogger(__name__)

SSE_CONTENT_TYPE = "text/event-stream"
_DEFAULT_EVENT = "message"


@dataclass(frozen=True)
class ServerSentEvent:
    """One dispatched SSE frame."""

    data: str
    event: str = _DEFAULT_EVENT
    id: str | None = None
    retry: int | None = None


class SSEDecoder:
    """Line-at-a-time SSE decoder.

    Feed lines without their terminator; a frame is returned when the blank
    line that ends it arrives.
    """

    def __init__(self) -> None:
        self._data: list[str] = []
        self._event = ""
        self._last_id: str | None = None
        self._retry: int | None = None

    def decode(self, line: str) -> ServerSentEvent | None:
        if not line:
            return self._dispatch()

        if line.startswith(":"):
            return None

        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if field == "data":
            self._data.append(value)
        elif field == "event":
            self._event = value
        elif field == "id":
            if "\0" not in value:
                self._last_id = value
        elif field == "retry":
            try:
                self._retry = int(value)
            except ValueError:
                logger.debug("Ignoring non-integer SSE retry %r", value)
        else:
            logger.debug("Ignoring unknown SSE field %r", field)
        return None

    def _dispatch(self) -> ServerSentEvent | None:
        if not self._data:
            self._event = ""
            return None
        sse = ServerSentEvent(
            data="\n".join(self._data),
            event=self._event or _DEFAULT_EVENT,
            id=self._last_id,
            retry=self._retry,
        )
        self._data = []
        self._event = ""
        self._retry = None
        return sse


class EventSource(Protocol):
    """What the stream invoker needs from a text/event-stream connection."""

    url: str

    @property
    def closed(self) -> bool: ...

    async def open(self) -> None: ...

    def messages(self) -> AsyncIterator[ServerSentEvent]: ...

    async def close(self) -> None: ...


EventSourceFactory = Callable[[str], EventSource]


class HttpxEventSource:
    """:class:`EventSource` backed by a streamed ``httpx`` GET."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.url = url
        self._client = client
        self._headers = {
            "Accept": SSE_CONTENT_TYPE,
            "Cache-Control": "no-cache",
            **(headers or {}),
        }
        self._response: httpx.Response | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def open(self) -> None:
        """Send the request and check the status.

        Raises:
            AgentServiceError: ``STREAM_ERROR`` carrying the status when the
                gateway refuses the stream.
        """
        request = self._client.build_request("GET", self.url, headers=self._headers)
        self._response = await self._client.send(request, stream=True)
        logger.debug("Stream response status: %s", self._response.status_code)

        if not self._response.is_success:
            status = self._response.status_code
            try:
                body = (await self._response.aread()).decode(errors="replace")
            except httpx.HTTPError:
                body = ""
            await self.close()
            reason = f"HTTP {status}"
            if body.strip():
                reason = f"{reason}: {body.strip()[:200]}"
            raise stream_fault(reason, status)

    async def messages(self) -> AsyncIterator[ServerSentEvent]:
        """Yield frames until the server ends the stream or we close it."""
        if self._response is None:
            raise RuntimeError("open() must be called before messages()")
        decoder = SSEDecoder()
        async for line in self._response.aiter_lines():
            if self._closed:
                return
            sse = decoder.decode(line.rstrip("\r\n"))
            if sse is not None:
                yield sse

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._response is not None:
            await self._response.aclose()
