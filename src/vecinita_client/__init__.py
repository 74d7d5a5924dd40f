"""Async client for the Vecinita conversational-agent gateway."""

from vecinita_client.client import AgentServiceClient
from vecinita_client.errors import AgentServiceError
from vecinita_client.models import (
    AgentConfig,
    AgentResponse,
    AgentSource,
    ClarificationEvent,
    CompleteEvent,
    ErrorEvent,
    QueryParameters,
    SourceEvent,
    StreamEvent,
    ThinkingEvent,
    TokenEvent,
    ToolEvent,
)

__all__ = [
    "AgentConfig",
    "AgentResponse",
    "AgentServiceClient",
    "AgentServiceError",
    "AgentSource",
    "ClarificationEvent",
    "CompleteEvent",
    "ErrorEvent",
    "QueryParameters",
    "SourceEvent",
    "StreamEvent",
    "ThinkingEvent",
    "TokenEvent",
    "ToolEvent",
]
