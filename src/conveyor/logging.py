# src/conveyor/logging.py
"""Logging setup and per-session log context for conveyor.

Modules log through structlog.get_logger(__name__). QueueWriter wraps each
lifecycle call in writer_context(), which binds queue_name and uid as
structlog context variables; the dispatcher runs every send task in a copy
of that context, so a failure logged on a pool thread still names the
session it belongs to.

configure_logging() is optional. It renders that context for conveyor's
loggers and for the Azure SDK's stdlib loggers through one formatter.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TextIO

import structlog
from structlog.stdlib import ProcessorFormatter

# Parent loggers of the Azure SDK and its HTTP transport. Children inherit.
_SDK_LOGGERS: tuple[str, ...] = ("azure", "urllib3")


def _level(name: str) -> int:
    value = logging.getLevelName(name.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {name!r}")
    return value


@contextmanager
def writer_context(queue_name: str, uid: str | None = None) -> Iterator[None]:
    """Bind a writer session's identity to every log line emitted inside the block."""
    bindings = {"queue_name": queue_name}
    if uid is not None:
        bindings["uid"] = uid
    with structlog.contextvars.bound_contextvars(**bindings):
        yield


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
    sdk_level: str = "WARNING",
    stream: TextIO | None = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        json_output: One JSON object per line instead of console output.
        level: Level for conveyor and the root logger.
        sdk_level: Floor for the Azure SDK and urllib3 loggers, which log
            every HTTP request below WARNING. Never looser than level.
        stream: Destination, stderr by default.
    """
    log_level = _level(level)

    pre_chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    renderer: Any
    if json_output:
        renderer = [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        renderer = [structlog.dev.ConsoleRenderer(colors=False)]

    structlog.configure(
        processors=[*pre_chain, structlog.processors.StackInfoRenderer(), ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(
        ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[ProcessorFormatter.remove_processors_meta, *renderer],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    sdk_floor = max(log_level, _level(sdk_level))
    for name in _SDK_LOGGERS:
        logging.getLogger(name).setLevel(sdk_floor)
