"""Structured logging for the calendar gateway.

Every ``logging.getLogger(__name__)`` call site is rendered through structlog's
``ProcessorFormatter``.  Per-call context is bound with
:func:`structlog.contextvars.bound_contextvars` and merged into each record,
so a line logged deep inside a runner still names its tool and script::

    12:04:31 [warning] Script deleteEvent exited with code 1
        service=outlook-calendar tool=delete_event script=deleteEvent

Console output always goes to stderr; stdout carries the MCP stream.  With a
``log_root``, JSON lines are also written to::

    <log_root>/gateway/<service>.log     application records
    <log_root>/transport/<service>.log   MCP SDK and anyio records
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import structlog
from opentelemetry import trace

# Third-party loggers held at WARNING; with a log_root they also write to transport/.
_TRANSPORT_LOGGERS = (
    "mcp.server.lowlevel.server",
    "mcp.server.stdio",
    "anyio",
)

_APP_DIR = "gateway"
_TRANSPORT_DIR = "transport"

_ZERO_TRACE_ID = "0" * 32
_ZERO_SPAN_ID = "0" * 16


def set_service_context(name: str) -> None:
    """Bind ``service`` for every record logged from the current context."""
    structlog.contextvars.bind_contextvars(service=name)


def add_otel_context(
    logger: logging.Logger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: dict,
) -> dict:
    """Add ``trace_id``/``span_id`` of the active span (zeros outside a span)."""
    ctx = trace.get_current_span().get_span_context()
    if ctx.is_valid:
        event_dict["trace_id"] = format(ctx.trace_id, "032x")
        event_dict["span_id"] = format(ctx.span_id, "016x")
    else:
        event_dict["trace_id"] = _ZERO_TRACE_ID
        event_dict["span_id"] = _ZERO_SPAN_ID
    return event_dict


def _pre_chain(time_fmt: str) -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt=time_fmt),
        add_otel_context,
        structlog.stdlib.ExtraAdder(),
    ]


def _formatter(
    renderer: structlog.types.Processor, pre_chain: list[structlog.types.Processor]
) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        foreign_pre_chain=pre_chain,
    )


def _json_file_handler(path: Path) -> logging.FileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(_formatter(structlog.processors.JSONRenderer(), _pre_chain("iso")))
    handler.setLevel(logging.DEBUG)
    return handler


def configure_logging(
    level: str = "INFO",
    fmt: str = "text",
    log_root: Path | None = None,
    service_name: str | None = None,
) -> None:
    """Route all logging to stderr (and optionally JSON files) via structlog.

    Parameters
    ----------
    level:
        Root log level name; unknown names fall back to INFO.
    fmt:
        ``"text"`` for the console renderer, ``"json"`` for JSON lines.
    log_root:
        Directory for the JSON log files, or ``None`` for console only.
    service_name:
        Bound as ``service`` on every record and used as the log file name.
    """
    if service_name:
        set_service_context(service_name)

    if fmt == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
        pre_chain = _pre_chain("iso")
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        pre_chain = _pre_chain("%H:%M:%S")

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(_formatter(renderer, pre_chain))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in _TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if log_root is None:
        return

    file_name = f"{service_name or 'calendar-mcp'}.log"
    root.addHandler(_json_file_handler(Path(log_root) / _APP_DIR / file_name))
    transport = _json_file_handler(Path(log_root) / _TRANSPORT_DIR / file_name)
    for name in _TRANSPORT_LOGGERS:
        logging.getLogger(name).addHandler(transport)
