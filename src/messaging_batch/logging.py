"""
Logging setup for the batch queue.
Queue and transport modules log through ``structlog.get_logger(__name__)``; applications
call ``setup_logging`` once to route those events through the standard library.
"""

import logging
import typing as t
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

PACKAGE_LOGGER_NAME = "messaging_batch"


def setup_logging(level: int = logging.INFO, json_logs: bool = False) -> None:
    """
    Configure structlog and the package logger.

    Parameters
    ----------
    level : int
        Level applied to the ``messaging_batch`` logger.
    json_logs : bool
        Render events as JSON lines instead of console key/value output.
    """
    logging.basicConfig(format="%(message)s")
    logging.getLogger(PACKAGE_LOGGER_NAME).setLevel(level)
    renderer: t.Any = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


@contextmanager
def logging_context(**context: t.Any) -> Iterator[None]:
    """
    Bind fields to every event logged in the current context.

    Fields already bound by the caller are overridden for the duration of the block
    and restored afterwards.
    """
    with structlog.contextvars.bound_contextvars(**context):
        yield
