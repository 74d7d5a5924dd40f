"""Response formatter for displaying stream events by type."""

import logging
from typing import TextIO

from vecinita_client.models import (
    TOOL_PHASE_ERROR,
    TOOL_PHASE_RESULT,
    TOOL_PHASE_START,
    AgentResponse,
    AgentSource,
    ClarificationEvent,
    CompleteEvent,
    SourceEvent,
    StreamEvent,
    ThinkingEvent,
    TokenEvent,
    ToolEvent,
)

logger = logging.getLogger(__name__)

_MAX_SOURCES = 5


class ResponseFormatter:
    """Formats and displays agent events organized by type."""

    def __init__(self, output: TextIO, show_thinking: bool = False):
        """Initialize the formatter.

        Parameters
        ----------
        output
            File-like object to write output to.
        show_thinking
            Whether to display thinking and tool events.
        """
        self.output = output
        self.show_thinking = show_thinking
        self.content_started = False
        self.pending_clarification: ClarificationEvent | None = None

    def handle_event(self, event: StreamEvent) -> None:
        """Handle a single event and display it appropriately."""
        if isinstance(event, ThinkingEvent):
            if self.show_thinking and event.message:
                progress = f" ({event.progress:.0f}%)" if event.progress is not None else ""
                self._print(f"\nThinking{progress}: {event.message}\n")

        elif isinstance(event, ToolEvent):
            if self.show_thinking:
                self._handle_tool_event(event)

        elif isinstance(event, TokenEvent):
            # Show "Response:" header before first token
            if not self.content_started:
                self._print("\nResponse:\n")
                self.content_started = True
            self._print(event.content)

        elif isinstance(event, SourceEvent):
            logger.debug("Source discovered: %s", event.url)

        elif isinstance(event, ClarificationEvent):
            self.pending_clarification = event
            self._print_clarification(event)

        elif isinstance(event, CompleteEvent):
            if not self.content_started:
                self._print(f"\nResponse:\n{event.answer}")
            self._print("\n")
            self._print_sources(event.sources)

        else:
            logger.debug("Unhandled event type: %s", event.type)

    def show_response(self, response: AgentResponse) -> None:
        """Display a non-streamed answer."""
        self._print(f"\nResponse:\n{response.answer}\n")
        self._print_sources(response.sources)

    def _handle_tool_event(self, event: ToolEvent) -> None:
        name = event.tool or "unknown"
        if event.phase == TOOL_PHASE_START:
            self._print(f"\n🔧 Tool: {name}\n")
        elif event.phase == TOOL_PHASE_RESULT:
            self._print(f"✅ Tool {name} completed{self._format_message(event.message)}\n")
        elif event.phase == TOOL_PHASE_ERROR:
            self._print(f"❌ Tool {name} failed{self._format_message(event.message)}\n")

    def _print_clarification(self, event: ClarificationEvent) -> None:
        self._print(f"\n❓ {event.message or 'The agent needs more details.'}\n")
        for i, question in enumerate(event.questions or event.suggested_questions, 1):
            self._print(f"  {i}. {question}\n")

    def _print_sources(self, sources: list[AgentSource]) -> None:
        if not sources:
            return
        self._print("\nSources:\n")
        for source in sources[:_MAX_SOURCES]:
            label = source.title or source.url or str(source.id or "untitled")
            score = f" [{source.similarity:.2f}]" if source.similarity is not None else ""
            link = f" <{source.url}>" if source.url and source.url != label else ""
            self._print(f"  - {label}{link}{score}\n")
        if len(sources) > _MAX_SOURCES:
            self._print(f"  ... and {len(sources) - _MAX_SOURCES} more\n")

    def _format_message(self, message: str) -> str:
        """Format a tool message for display."""
        if not message:
            return ""
        # Truncate long messages
        max_len = 100
        if len(message) > max_len:
            return f": {message[:max_len]}..."
        return f": {message}"

    def finish_response(self) -> None:
        """Finish displaying a response."""
        self.content_started = False

    def _print(self, text: str) -> None:
        """Print text to output."""
        self.output.write(text)
        self.output.flush()
