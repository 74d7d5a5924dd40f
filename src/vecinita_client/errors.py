"""Error taxonomy and classification for the agent gateway client.

Every failure surfaced by :class:`~vecinita_client.client.AgentServiceClient`
is a single :class:`AgentServiceError` carrying an HTTP-equivalent
``status_code`` and a short machine-readable ``code``:

=====================  ==================  ===========================
Condition              code                status_code
=====================  ==================  ===========================
request timeout        ``TIMEOUT``         504
stream stall timeout   ``STREAM_TIMEOUT``  504
non-2xx response       ``HTTP_ERROR``      observed status
connection failure     ``NETWORK_ERROR``   0
stream transport fault ``STREAM_ERROR``    0 (or the rejected status)
``error`` stream event payload code        payload status or 500
=====================  ==================  ===========================

The helpers below are the only place raw transport exceptions are turned
into that type.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from vecinita_client.models.events import ErrorEvent

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------

ERROR_CODE_TIMEOUT = "TIMEOUT"
ERROR_CODE_STREAM_TIMEOUT = "STREAM_TIMEOUT"
ERROR_CODE_HTTP = "HTTP_ERROR"
ERROR_CODE_NETWORK = "NETWORK_ERROR"
ERROR_CODE_STREAM = "STREAM_ERROR"
ERROR_CODE_AGENT = "AGENT_ERROR"

KNOWN_ERROR_CODES = frozenset(
    {
        ERROR_CODE_TIMEOUT,
        ERROR_CODE_STREAM_TIMEOUT,
        ERROR_CODE_HTTP,
        ERROR_CODE_NETWORK,
        ERROR_CODE_STREAM,
        ERROR_CODE_AGENT,
    }
)

STATUS_TIMEOUT = 504
STATUS_NO_RESPONSE = 0
STATUS_DEFAULT = 500

_BODY_SNIPPET_LIMIT = 500


class AgentServiceError(Exception):
    """The single error type raised by the agent gateway client."""

    def __init__(
        self,
        message: str,
        status_code: int = STATUS_DEFAULT,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    def __repr__(self) -> str:
        return (
            f"AgentServiceError(message={self.message!r}, "
            f"status_code={self.status_code}, code={self.code!r})"
        )


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def _snippet(body: str) -> str:
    body = body.strip()
    if len(body) > _BODY_SNIPPET_LIMIT:
        return body[:_BODY_SNIPPET_LIMIT] + "..."
    return body


def from_http_response(status_code: int, body: str) -> AgentServiceError:
    """Build the error for a non-2xx response.

    A JSON body shaped like ``{"detail": ..., "code": ...}`` contributes the
    server-declared code and message; anything else is quoted verbatim.
    """
    code = ERROR_CODE_HTTP
    detail = _snippet(body)
    try:
        payload: Any = json.loads(body) if body else None
    except (ValueError, RecursionError):
        payload = None
    if isinstance(payload, dict):
        if isinstance(payload.get("code"), str) and payload["code"]:
            code = payload["code"]
        server_detail = payload.get("detail") or payload.get("message")
        if isinstance(server_detail, str) and server_detail:
            detail = _snippet(server_detail)

    message = f"Agent request failed: HTTP {status_code}"
    if detail:
        message = f"{message}: {detail}"
    return AgentServiceError(message, status_code, code)


def from_error_event(event: ErrorEvent) -> AgentServiceError:
    """Build the error for an application ``error`` stream event."""
    return AgentServiceError(
        event.message,
        event.status_code if event.status_code is not None else STATUS_DEFAULT,
        event.code or ERROR_CODE_AGENT,
    )


def from_exception(exc: Exception, *, streaming: bool = False) -> AgentServiceError:
    """Map any failure raised while talking to the gateway.

    ``streaming`` selects the stream flavour of the timeout and transport
    codes. An :class:`AgentServiceError` is returned unchanged so the
    mapping can be applied at every layer without double-wrapping.
    """
    if isinstance(exc, AgentServiceError):
        return exc
    if isinstance(exc, (TimeoutError, httpx.TimeoutException)):
        if streaming:
            return AgentServiceError(
                "Stream timeout - request took too long",
                STATUS_TIMEOUT,
                ERROR_CODE_STREAM_TIMEOUT,
            )
        return AgentServiceError(
            "Request timeout - please try again",
            STATUS_TIMEOUT,
            ERROR_CODE_TIMEOUT,
        )

    reason = str(exc) or type(exc).__name__
    if streaming:
        return AgentServiceError(
            f"Stream connection failed: {reason}",
            STATUS_NO_RESPONSE,
            ERROR_CODE_STREAM,
        )
    return AgentServiceError(
        f"Network error: {reason}",
        STATUS_NO_RESPONSE,
        ERROR_CODE_NETWORK,
    )


def stream_fault(reason: str, status_code: int = STATUS_NO_RESPONSE) -> AgentServiceError:
    """Build a ``STREAM_ERROR`` for faults detected by the stream reader itself."""
    return AgentServiceError(
        f"Stream connection failed: {reason}", status_code, ERROR_CODE_STREAM
    )
