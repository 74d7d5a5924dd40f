"""Query parameters sent to the ``/ask`` endpoints."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .constants import QUERY_PARAM_ORDER


class QueryParameters(BaseModel):
    """A single question for the agent.

    Immutable value object; two instances with the same fields are equal.
    Omitting ``thread_id`` starts a new conversation.
    """

    model_config = ConfigDict(frozen=True)

    question: str = Field(min_length=1, description="Free-text question")
    thread_id: str | None = Field(
        default=None, description="Conversation to continue (absent = new)"
    )
    lang: Literal["en", "es"] | None = Field(
        default=None, description="Answer language"
    )
    provider: str | None = Field(default=None, description="LLM provider key")
    model: str | None = Field(default=None, description="Model name")
    clarification_response: str | None = Field(
        default=None,
        description="Answer to a previous clarification request",
    )

    def to_query(self) -> list[tuple[str, str | None]]:
        """Return ``(name, value)`` pairs in wire order, absent values included."""
        values = self.model_dump()
        return [(name, values[name]) for name in QUERY_PARAM_ORDER]
