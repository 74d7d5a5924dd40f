"""Entry point for running the CLI as a module."""

import argparse
import asyncio
import sys

from vecinita_client.models import LANG_EN, LANG_ES

from .repl import main


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Interactive CLI for the Vecinita agent gateway",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help="Gateway base URL or relative prefix (default: from config)",
    )
    parser.add_argument(
        "--origin",
        type=str,
        default=None,
        help="Origin for a relative --base-url (default: from config)",
    )
    parser.add_argument(
        "--lang",
        choices=[LANG_EN, LANG_ES],
        default=None,
        help="Answer language",
    )
    parser.add_argument("--provider", type=str, default=None, help="LLM provider")
    parser.add_argument("--model", type=str, default=None, help="Model name")
    parser.add_argument(
        "--new-thread",
        action="store_true",
        help="Pin a client-generated thread ID instead of letting the gateway assign one",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--show-thinking",
        action="store_true",
        help="Show thinking and tool events",
    )
    parser.add_argument(
        "--no-stream",
        action="store_true",
        help="Use the one-shot /ask endpoint instead of the event stream",
    )

    return parser.parse_args()


def cli_entry() -> None:
    """CLI entry point."""
    args = parse_args()

    try:
        asyncio.run(
            main(
                base_url=args.base_url,
                origin=args.origin,
                lang=args.lang,
                provider=args.provider,
                model=args.model,
                new_thread=args.new_thread,
                debug=args.debug,
                show_thinking=args.show_thinking,
                stream=not args.no_stream,
            )
        )
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    cli_entry()
