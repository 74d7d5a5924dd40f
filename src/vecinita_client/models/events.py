"""Stream events received from ``GET /ask/stream``."""

from __future__ import annotations

import json
import logging
from typing import Annotated, Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
)

from .constants import (
    EVENT_TYPE_CLARIFICATION,
    EVENT_TYPE_COMPLETE,
    EVENT_TYPE_ERROR,
    EVENT_TYPE_SOURCE,
    EVENT_TYPE_THINKING,
    EVENT_TYPE_TOKEN,
    EVENT_TYPE_TOOL_EVENT,
    TERMINAL_EVENT_TYPES,
)
from .responses import SourceList, WireText

_logger = logging.getLogger(__name__)

_FRAME_LOG_LIMIT = 200


class _ProgressFields(BaseModel):
    """Fields the gateway may attach to any event."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    stage: str | None = Field(default=None, description="Pipeline stage label")
    progress: float | None = Field(default=None, description="Percent complete")
    timestamp: str | None = None


class ThinkingEvent(_ProgressFields):
    """Progress update while the agent works."""

    type: Literal["thinking"] = EVENT_TYPE_THINKING
    message: str = Field(default="", description="Human-readable status")
    status: str | None = Field(default=None, description="working, waiting or error")
    tool: str | None = None
    tool_name: str | None = Field(
        default=None, validation_alias=AliasChoices("tool_name", "toolName")
    )
    waiting: bool | None = None


class TokenEvent(_ProgressFields):
    """Incremental answer text."""

    type: Literal["token"] = EVENT_TYPE_TOKEN
    content: str = Field(default="", description="Token text")
    cumulative: str | None = Field(default=None, description="Answer so far")


class SourceEvent(_ProgressFields):
    """A source discovered before the answer completes."""

    type: Literal["source"] = EVENT_TYPE_SOURCE
    url: str = ""
    title: str = ""
    source_type: str | None = None


class ToolEvent(_ProgressFields):
    """Tool invocation lifecycle event."""

    type: Literal["tool_event"] = EVENT_TYPE_TOOL_EVENT
    phase: Literal["start", "result", "error"]
    tool: str | None = None
    message: str = ""
    status: str | None = None
    waiting: bool | None = None
    transient: bool | None = None


class ClarificationEvent(_ProgressFields):
    """The agent needs more input before it can answer.

    Non-terminal for the transport; the caller usually treats it as the end
    of the turn and answers with ``clarification_response`` next time.
    """

    type: Literal["clarification", "clarification-request"] = (
        EVENT_TYPE_CLARIFICATION
    )
    message: str = Field(default="", description="Prompt shown to the user")
    questions: list[str] = Field(default_factory=list)
    context: str | None = None
    suggested_questions: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("suggested_questions", "suggestedQuestions"),
    )
    waiting: bool | None = None


class CompleteEvent(_ProgressFields):
    """Final answer; ends the stream successfully."""

    type: Literal["complete"] = EVENT_TYPE_COMPLETE
    answer: WireText = Field(default="", description="Final answer text")
    sources: SourceList = Field(default_factory=list)
    thread_id: str | None = None
    plan: str | None = None
    metadata: dict[str, Any] | None = None


class ErrorEvent(_ProgressFields):
    """Application-level failure; ends the stream."""

    type: Literal["error"] = EVENT_TYPE_ERROR
    message: str = Field(default="Agent reported an error")
    code: str | None = Field(default=None, description="Error code")
    status_code: int | None = Field(
        default=None,
        validation_alias=AliasChoices("status_code", "statusCode"),
        description="HTTP-equivalent status",
    )


StreamEvent = Annotated[
    ThinkingEvent
    | TokenEvent
    | SourceEvent
    | ToolEvent
    | ClarificationEvent
    | CompleteEvent
    | ErrorEvent,
    Field(discriminator="type"),
]

_STREAM_EVENT_ADAPTER: TypeAdapter[StreamEvent] = TypeAdapter(StreamEvent)


def parse_stream_event(data: str) -> StreamEvent | None:
    """Parse one frame payload into a :data:`StreamEvent`.

    Returns ``None`` for malformed JSON, an unknown ``type`` or a payload
    that does not fit its event model; such frames are dropped, not fatal.
    A ``complete`` or ``error`` frame is kept even when some of its fields
    are unusable: those fields fall back to their defaults.
    """
    try:
        return _STREAM_EVENT_ADAPTER.validate_json(data)
    except ValidationError as e:
        event = _without_invalid_fields(data, e)
        if event is not None:
            _logger.warning(
                "Ignored %d invalid field(s) of %s frame", e.error_count(), event.type
            )
            return event
        _logger.warning(
            "Discarding unparseable stream frame %r (%d validation errors)",
            data[:_FRAME_LOG_LIMIT],
            e.error_count(),
        )
        return None


def _without_invalid_fields(data: str, error: ValidationError) -> StreamEvent | None:
    """Re-validate a terminal frame with the offending keys removed."""
    try:
        payload = json.loads(data)
    except (ValueError, RecursionError):
        return None
    if not isinstance(payload, dict):
        return None
    event_type = payload.get("type")
    if not isinstance(event_type, str) or event_type not in TERMINAL_EVENT_TYPES:
        return None

    # loc is (tag, field, ...) for a tagged union member.
    invalid = {err["loc"][1] for err in error.errors() if len(err["loc"]) > 1}
    if not invalid:
        return None
    try:
        return _STREAM_EVENT_ADAPTER.validate_python(
            {key: value for key, value in payload.items() if key not in invalid}
        )
    except ValidationError:
        return None


def is_terminal(event: StreamEvent) -> bool:
    """Return whether *event* ends the stream."""
    return event.type in TERMINAL_EVENT_TYPES
