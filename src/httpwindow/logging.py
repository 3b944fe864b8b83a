# src/httpwindow/logging.py
"""Structured logging setup for httpwindow.

The library only emits events (``structlog.get_logger(__name__)``); it never
configures output on import. Applications, and the CLI, call
``configure_logging`` once. Both structlog events and plain stdlib records
are rendered by one ``ProcessorFormatter`` so they share a format.

Output goes to stderr by default: stdout carries the CLI's result lines.
"""

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.stdlib import ProcessorFormatter

# Per-connection chatter from the HTTP stack; kept at WARNING even in DEBUG runs.
_NOISY_LOGGERS: tuple[str, ...] = (
    "httpx",
    "httpcore",
    "hpack",
    "urllib3",
)


def _pre_chain() -> list[Any]:
    """Processors applied to every event before rendering."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]


def _render_chain(json_output: bool, stream: TextIO) -> list[Any]:
    """Processors that turn a finished event into output text."""
    if json_output:
        return [
            ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [
        ProcessorFormatter.remove_processors_meta,
        structlog.dev.ConsoleRenderer(colors=stream.isatty()),
    ]


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
    stream: TextIO | None = None,
) -> None:
    """Route structlog and stdlib logging through one handler.

    Args:
        json_output: Emit one JSON object per line instead of console text
        level: Root log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        stream: Destination; defaults to the current ``sys.stderr``
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown log level: {level!r}")
    target = stream if stream is not None else sys.stderr

    pre_chain = _pre_chain()
    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # configure_logging may run again (tests, repeated CLI invocations)
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(target)
    handler.setFormatter(
        ProcessorFormatter(
            processors=_render_chain(json_output, target),
            foreign_pre_chain=pre_chain,
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    quiet_level = max(log_level, logging.WARNING)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Bound logger for a module or component."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
