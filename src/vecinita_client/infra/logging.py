"""Structured logging bootstrap.

Configures the root logger so every ``logging.getLogger(__name__)`` call
in the client emits either:

* **JSON lines** (``json_output=True``): machine-parseable by log
  shippers.
* **Human-readable** (``json_output=False``, default): timestamp-prefixed
  lines for local use.

When the host application runs OpenTelemetry tracing, the current
``trace_id`` and ``span_id`` are injected into every log record so a
failed gateway call can be matched to its trace.

Libraries should not call this; it is meant for the CLI and for scripts.
"""

from __future__ import annotations

import logging
import sys

from opentelemetry import trace

from vecinita_client.configs.system import LoggingConfig


class _TraceContextFilter(logging.Filter):
    """Injects OTEL trace/span IDs into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        span = trace.get_current_span()
        ctx = span.get_span_context()
        if ctx and ctx.is_valid:
            record.trace_id = format(ctx.trace_id, "032x")  # type: ignore[attr-defined]
            record.span_id = format(ctx.span_id, "016x")  # type: ignore[attr-defined]
        else:
            record.trace_id = ""  # type: ignore[attr-defined]
            record.span_id = ""  # type: ignore[attr-defined]
        return True


_DEV_FORMAT = "%(levelname)-8s %(asctime)s %(name)s  %(message)s"
_DEV_DATEFMT = "%H:%M:%S"

_HANDLER_NAME = "vecinita-client"


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Install the client's stdout handler on the root logger.

    Handlers a host application already added are left in place; calling
    this again swaps only the handler installed here.
    """
    if config is None:
        config = LoggingConfig()

    level = config.level.upper()
    root = logging.getLogger()
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.addFilter(_TraceContextFilter())

    formatter: logging.Formatter
    if config.json_output:
        from pythonjsonlogger.json import JsonFormatter

        formatter = JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s "
            "%(trace_id)s %(span_id)s",
            rename_fields={
                "asctime": "timestamp",
                "levelname": "level",
                "name": "logger",
            },
            defaults={"trace_id": "", "span_id": ""},
        )
    else:
        formatter = logging.Formatter(fmt=_DEV_FORMAT, datefmt=_DEV_DATEFMT)

    handler.setFormatter(formatter)

    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("opentelemetry").setLevel(logging.WARNING)
