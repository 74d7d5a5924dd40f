"""Main CLI loop for interactive chat with the agent gateway."""

import logging
import sys
from typing import TextIO

from vecinita_client.client import AgentServiceClient
from vecinita_client.configs.config import get_client_config
from vecinita_client.errors import AgentServiceError
from vecinita_client.infra.id_utils import generate_thread_id
from vecinita_client.infra.logging import setup_logging
from vecinita_client.models import QueryParameters

from .formatter import ResponseFormatter

logger = logging.getLogger(__name__)

_EXIT_COMMANDS = ("exit", "quit", "q")
_NEW_THREAD_COMMAND = "/new"


class VecinitaCLI:
    """Interactive CLI for the agent gateway."""

    def __init__(
        self,
        client: AgentServiceClient,
        input_stream: TextIO = sys.stdin,
        output_stream: TextIO = sys.stdout,
        show_thinking: bool = False,
        stream: bool = True,
        lang: str | None = None,
        provider: str | None = None,
        model: str | None = None,
        thread_id: str | None = None,
    ):
        """Initialize the CLI.

        Parameters
        ----------
        client
            Gateway client; closed when the loop exits.
        input_stream
            Input stream for user input (default: stdin).
        output_stream
            Output stream for responses (default: stdout).
        show_thinking
            Whether to show thinking and tool events.
        stream
            Use ``/ask/stream`` (default) or the one-shot ``/ask``.
        lang, provider, model
            Sent with every question when set.
        thread_id
            Conversation to continue; the gateway assigns one when absent.
        """
        self.client = client
        self.input_stream = input_stream
        self.output_stream = output_stream
        self.show_thinking = show_thinking
        self.stream = stream
        self.lang = lang
        self.provider = provider
        self.model = model
        self.thread_id = thread_id
        # Question awaiting an answer to a clarification request.
        self.pending_question: str | None = None

    async def run(self) -> None:
        """Run the interactive CLI loop."""
        try:
            self._print_welcome()
            while True:
                try:
                    line = self._get_user_input()
                    if not line.strip():
                        continue

                    command = line.strip().lower()
                    if command in _EXIT_COMMANDS:
                        self._print("Goodbye!\n")
                        break
                    if command == _NEW_THREAD_COMMAND:
                        self.thread_id = None
                        self.pending_question = None
                        self._print("Started a new conversation.\n\n")
                        continue

                    await self.process_query(line)

                except KeyboardInterrupt:
                    self._print("\n\nInterrupted. Use 'exit' or 'quit' to exit.\n")
                except EOFError:
                    self._print("\nGoodbye!\n")
                    break
        finally:
            await self.client.close()

    def build_params(self, line: str) -> QueryParameters:
        """Turn an input line into query parameters.

        After a clarification request the line answers it and the original
        question is asked again.
        """
        question = line
        clarification_response = None
        if self.pending_question is not None:
            question = self.pending_question
            clarification_response = line
        return QueryParameters(
            question=question,
            thread_id=self.thread_id,
            lang=self.lang,
            provider=self.provider,
            model=self.model,
            clarification_response=clarification_response,
        )

    async def process_query(self, line: str) -> None:
        """Send one question and render the answer."""
        params = self.build_params(line)
        formatter = ResponseFormatter(self.output_stream, self.show_thinking)

        try:
            if self.stream:
                complete = await self.client.ask_stream(params, formatter.handle_event)
                new_thread_id = complete.thread_id
            else:
                response = await self.client.ask(params)
                formatter.show_response(response)
                new_thread_id = response.thread_id

            if new_thread_id:
                self.thread_id = new_thread_id
            self.pending_question = (
                params.question if formatter.pending_clarification else None
            )
            formatter.finish_response()
            self._print("\n")

        except AgentServiceError as e:
            logger.debug("Query failed: %r", e)
            self._print(f"\n❌ Error [{e.code}]: {e.message}\n\n")

    def _get_user_input(self) -> str:
        """Get user input from the input stream."""
        self._print("> " if self.pending_question is None else "(clarify) > ")
        line = self.input_stream.readline()
        if not line:
            raise EOFError
        return line.rstrip("\n\r")

    def _print_welcome(self) -> None:
        """Print welcome message."""
        self._print("Vecinita CLI - Interactive Agent Chat\n")
        self._print(f"Connected to: {self.client.base_url}\n")
        self._print(
            "Type your question and press Enter. "
            f"Type '{_NEW_THREAD_COMMAND}' for a new conversation, "
            "'exit' or 'quit' to exit.\n\n"
        )

    def _print(self, text: str) -> None:
        """Print text to output stream."""
        self.output_stream.write(text)
        self.output_stream.flush()


async def main(
    base_url: str | None = None,
    origin: str | None = None,
    lang: str | None = None,
    provider: str | None = None,
    model: str | None = None,
    new_thread: bool = False,
    debug: bool = False,
    show_thinking: bool = False,
    stream: bool = True,
) -> None:
    """Main entry point for the CLI.

    Values left as ``None`` fall back to :class:`ClientConfig`.
    """
    config = get_client_config()
    if debug:
        config.logging.level = "DEBUG"
    setup_logging(config.logging)

    overrides = {"base_url": base_url, "origin": origin}
    config.gateway = config.gateway.model_copy(
        update={key: value for key, value in overrides.items() if value is not None}
    )

    cli = VecinitaCLI(
        AgentServiceClient.from_config(config),
        show_thinking=show_thinking,
        stream=stream,
        lang=lang,
        provider=provider,
        model=model,
        thread_id=generate_thread_id() if new_thread else None,
    )
    await cli.run()
