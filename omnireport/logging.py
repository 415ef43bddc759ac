"""Structured logging for OmniReport.

Every event is a snake_case name plus key/value context. Two renderers:
- console output when running the CLI
- one JSON object per line otherwise

Events emitted while a report run is in progress carry the run's subject and
model, bound once through `run_context`.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from structlog.contextvars import bound_contextvars, merge_contextvars
from structlog.processors import (
    JSONRenderer,
    StackInfoRenderer,
    TimeStamper,
    add_log_level,
    format_exc_info,
)


def configure_logging(cli_mode: bool = False, log_level: str = "INFO") -> None:
    """Install the processor chain for the current process.

    Args:
        cli_mode: Console renderer when True, JSON lines when False
        log_level: Minimum level name; unknown names fall back to INFO
    """
    processors = [
        merge_contextvars,
        add_log_level,
        TimeStamper(fmt="iso"),
        StackInfoRenderer(),
        format_exc_info,
    ]

    if cli_mode:
        from structlog.dev import ConsoleRenderer
        processors.append(ConsoleRenderer(colors=True))
    else:
        # Keep CJK subjects and titles readable in the JSON output
        processors.append(JSONRenderer(ensure_ascii=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        # Loggers resolve sys.stdout on every call; CLI test runners swap it
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Return a logger whose events are tagged with the emitting module."""
    if name:
        return structlog.get_logger(module=name)
    return structlog.get_logger()


@contextmanager
def run_context(**values: str) -> Iterator[None]:
    """Bind key/values to every event logged inside the block."""
    with bound_contextvars(**values):
        yield
