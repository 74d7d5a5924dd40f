"""Async client for the Vecinita agent gateway.

Public API
----------
``ask(params)``
    One request/response call to ``/ask`` within the request budget.

``stream_events(params)``
    Async iterator over the ``/ask/stream`` events, ending after the
    ``complete`` event.

``ask_stream(params, on_event)``
    Callback flavour of ``stream_events``; returns the ``complete`` event.

``get_config()`` / ``health_check()``
    Provider/model catalogue and liveness probe.

Every failure is raised as :class:`~vecinita_client.errors.AgentServiceError`
(``health_check`` returns ``False`` instead). Timers and stream connections
are scoped to one call and released on every exit path.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import aclosing
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from vecinita_client.configs.config import ClientConfig, get_client_config
from vecinita_client.errors import (
    ERROR_CODE_NETWORK,
    ERROR_CODE_STREAM,
    STATUS_NO_RESPONSE,
    AgentServiceError,
    from_error_event,
    from_exception,
    from_http_response,
    stream_fault,
)
from vecinita_client.models import (
    AgentConfig,
    AgentResponse,
    CompleteEvent,
    ErrorEvent,
    QueryParameters,
    StreamEvent,
    parse_stream_event,
)
from vecinita_client.request import (
    ENDPOINT_ASK,
    ENDPOINT_ASK_STREAM,
    ENDPOINT_CONFIG,
    ENDPOINT_HEALTH,
    build_url,
)
from vecinita_client.transport.sse import (
    EventSource,
    EventSourceFactory,
    HttpxEventSource,
    ServerSentEvent,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8002"
REQUEST_TIMEOUT = 30.0  # seconds, request/response calls
STREAM_TIMEOUT = 120.0  # seconds, whole event stream

_JSON_HEADERS = {"Accept": "application/json"}

EventCallback = Callable[[StreamEvent], Awaitable[None] | None]

_ModelT = TypeVar("_ModelT", bound=BaseModel)


def _parse_body(model: type[_ModelT], response: httpx.Response) -> _ModelT:
    try:
        return model.model_validate_json(response.content)
    except ValidationError as e:
        raise AgentServiceError(
            f"Network error: invalid response body ({e.error_count()} validation errors)",
            STATUS_NO_RESPONSE,
            ERROR_CODE_NETWORK,
        ) from e


class AgentServiceClient:
    """Client for the agent gateway's ``/ask`` family of endpoints.

    Parameters
    ----------
    base_url
        Absolute gateway URL or a relative prefix such as ``/api``.
    origin
        Origin relative ``base_url`` values resolve against. Ignored when
        ``http_client`` is given (configure its ``base_url`` instead).
    request_timeout
        Seconds allowed for ``ask``, ``get_config`` and ``health_check``.
    stream_timeout
        Seconds allowed for a whole event stream.
    headers
        Extra headers for every request made by an owned HTTP client.
    http_client
        Shared ``httpx.AsyncClient``; left open by :meth:`close`.
    event_source_factory
        Builds the stream connection for a URL; defaults to
        :class:`~vecinita_client.transport.sse.HttpxEventSource`.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        origin: str | None = None,
        request_timeout: float = REQUEST_TIMEOUT,
        stream_timeout: float = STREAM_TIMEOUT,
        headers: dict[str, str] | None = None,
        http_client: httpx.AsyncClient | None = None,
        event_source_factory: EventSourceFactory | None = None,
    ):
        self.base_url = base_url
        self.request_timeout = request_timeout
        self.stream_timeout = stream_timeout
        self._owns_http = http_client is None
        if http_client is None:
            # Budgets are enforced per call; httpx must not cut a quiet stream short.
            http_client = httpx.AsyncClient(
                base_url=origin or "",
                headers=headers,
                timeout=stream_timeout,
            )
        self._http = http_client
        self._event_source_factory = event_source_factory or self._http_event_source

    @classmethod
    def from_config(cls, config: ClientConfig | None = None) -> AgentServiceClient:
        """Build a client from :class:`ClientConfig` (loaded when omitted)."""
        gateway = (config or get_client_config()).gateway
        return cls(
            gateway.base_url,
            origin=gateway.origin,
            request_timeout=gateway.request_timeout,
            stream_timeout=gateway.stream_timeout,
            headers=gateway.headers,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> AgentServiceClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Request/response calls
    # ------------------------------------------------------------------

    async def ask(self, params: QueryParameters) -> AgentResponse:
        """Ask a question and wait for the complete answer.

        Raises
        ------
        AgentServiceError
            ``TIMEOUT`` (504) when the budget runs out, ``HTTP_ERROR`` (or
            the server's code) for non-2xx responses, ``NETWORK_ERROR`` for
            transport failures and undecodable bodies.
        """
        url = build_url(self.base_url, ENDPOINT_ASK, params.to_query())
        response = await self._get(url)
        return _parse_body(AgentResponse, response)

    async def get_config(self) -> AgentConfig:
        """Fetch the provider/model catalogue."""
        url = build_url(self.base_url, ENDPOINT_CONFIG)
        response = await self._get(url)
        return _parse_body(AgentConfig, response)

    async def health_check(self) -> bool:
        """Return ``True`` when the gateway answers its health probe with 2xx.

        Never raises; any failure reads as unhealthy.
        """
        try:
            await self._get(build_url(self.base_url, ENDPOINT_HEALTH))
        except AgentServiceError as e:
            logger.debug("Health check failed: %s", e.message)
            return False
        except Exception:
            logger.debug("Health check failed", exc_info=True)
            return False
        return True

    async def _get(self, url: str) -> httpx.Response:
        """GET *url* within the request budget; return a 2xx response."""
        logger.debug("GET %s", url)
        try:
            async with asyncio.timeout(self.request_timeout):
                response = await self._http.get(url, headers=_JSON_HEADERS)
        except Exception as e:
            error = from_exception(e)
            logger.warning("Gateway request failed [%s]: %s", error.code, error.message)
            raise error from e

        logger.debug("Response status: %s", response.status_code)
        if not response.is_success:
            error = from_http_response(response.status_code, response.text)
            logger.warning("Gateway request failed [%s]: %s", error.code, error.message)
            raise error
        return response

    # ------------------------------------------------------------------
    # Event stream
    # ------------------------------------------------------------------

    def _http_event_source(self, url: str) -> EventSource:
        return HttpxEventSource(self._http, url)

    async def stream_events(self, params: QueryParameters) -> AsyncIterator[StreamEvent]:
        """Open ``/ask/stream`` and yield events in wire order.

        Malformed frames are skipped. The iterator ends after yielding the
        ``complete`` event; an ``error`` event is raised, not yielded. The
        connection is closed on every exit, including when the consumer
        stops early or the task is cancelled.

        Raises
        ------
        AgentServiceError
            Server ``error`` events (their code, default ``AGENT_ERROR``),
            ``STREAM_ERROR`` for transport faults or a stream that ends
            without a terminal event, ``STREAM_TIMEOUT`` (504) when the
            budget runs out.
        """
        url = build_url(self.base_url, ENDPOINT_ASK_STREAM, params.to_query())
        source = self._event_source_factory(url)
        deadline = asyncio.get_running_loop().time() + self.stream_timeout
        logger.debug("Opening stream %s", url)

        messages: AsyncIterator[ServerSentEvent] | None = None
        try:
            async with asyncio.timeout_at(deadline):
                await source.open()
            messages = source.messages()

            while True:
                try:
                    # One deadline for the whole stream, consumer time included.
                    # It is enforced on wire waits only, never across a yield.
                    async with asyncio.timeout_at(deadline):
                        message = await anext(messages)
                except StopAsyncIteration:
                    raise stream_fault("stream ended before a terminal event") from None

                event = parse_stream_event(message.data)
                if event is None:
                    continue

                if isinstance(event, ErrorEvent):
                    await source.close()
                    raise from_error_event(event)

                if isinstance(event, CompleteEvent):
                    await source.close()
                    logger.debug("Stream complete (%d sources)", len(event.sources))
                    yield event
                    return

                yield event

        except AgentServiceError as e:
            logger.warning("Stream failed [%s]: %s", e.code, e.message)
            raise
        except Exception as e:
            error = from_exception(e, streaming=True)
            logger.warning("Stream failed [%s]: %s", error.code, error.message)
            raise error from e
        finally:
            if messages is not None and hasattr(messages, "aclose"):
                await messages.aclose()
            await source.close()

    async def ask_stream(
        self, params: QueryParameters, on_event: EventCallback
    ) -> CompleteEvent:
        """Stream an answer, calling *on_event* once per event in wire order.

        *on_event* may be a plain function or a coroutine function. If it
        raises, the stream is closed and the call fails with that fault:
        an :class:`AgentServiceError` as is, anything else as
        ``STREAM_ERROR``.

        Returns the ``complete`` event, which has also been passed to
        *on_event*.
        """
        completed: CompleteEvent | None = None
        async with aclosing(self.stream_events(params)) as events:
            async for event in events:
                try:
                    result = on_event(event)
                    if inspect.isawaitable(result):
                        await result
                except AgentServiceError as e:
                    logger.warning("Stream callback raised [%s]: %s", e.code, e.message)
                    raise
                except Exception as e:
                    logger.warning("Stream callback raised %s", type(e).__name__)
                    raise AgentServiceError(
                        f"Stream callback failed: {e}",
                        STATUS_NO_RESPONSE,
                        ERROR_CODE_STREAM,
                    ) from e

                if isinstance(event, CompleteEvent):
                    completed = event

        if completed is None:
            raise stream_fault("stream ended before a terminal event")
        return completed
