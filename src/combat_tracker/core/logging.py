"""structlog setup for the tracker.

Engine and storage modules log key-value events through ``get_logger``.
Nothing is configured at import time: a front end calls
``configure_logging`` once, usually through
``CombatSession.from_settings(setup_logging=True)``.

Example:
    >>> from combat_tracker.core.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Damage applied", combatant="Goblin", amount=7)
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger


APP_NAME = "combat_tracker"


def add_app_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Tag every event with ``app=combat_tracker``."""
    event_dict["app"] = APP_NAME
    return event_dict


def configure_logging(
    *,
    level: str = "INFO",
    json_format: bool = False,
    log_file: str | Path | None = None,
) -> None:
    """Route structlog events through the stdlib root logger.

    Events go to stderr and, when ``log_file`` is given, also to that file.
    Persistence failures are logged at error level, so a file at ERROR
    doubles as the tracker's error log. Console colours are switched off
    whenever a file is attached.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL. Unknown names
            fall back to INFO.
        json_format: Render one JSON object per event.
        log_file: Extra destination for the same records.

    Example:
        >>> configure_logging(level="ERROR", log_file="tracker_errors.log")
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(
                colors=log_file is None,
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
        stream=sys.stderr,
        force=True,
    )

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        logging.getLogger().addHandler(file_handler)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach ``kwargs`` to every later event in this context.

    The session binds ``encounter=<name>`` whenever a saved encounter or a
    library entry is loaded.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


__all__ = [
    "APP_NAME",
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
