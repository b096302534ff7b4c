"""
Structured logging for arbor.

A suite run is a stream of engine events: groups constructed, steps sent,
polls retried, groups drained. Each is a dotted snake_case structlog event
with key-value fields, rendered as JSON in CI and as colored lines locally.
The runner scopes ``suite`` / ``leaf`` onto every event of a leaf through
contextvars, so concurrent leaves never mix their fields.

Architecture:
    ::

        configure_logging(level, json_format)
            │
            ├── stdlib logger "arbor" → one StreamHandler on stderr
            │     (reports own stdout)
            │
            └── processor chain
                  timestamp → contextvars → level / logger → app
                  → drop None fields → JSON | console

        with LogContext(leaf="users / create.yaml: create"):
            logger.info("executor.step", step="create")

Tags:
    logging, structlog, contextvars, arbor
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

ROOT_LOGGER = "arbor"

_app_name = "arbor"


def _add_app(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("app", _app_name)
    return event_dict


def _drop_none(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Omit unset optional fields such as ``cleaner=None``."""
    return {key: value for key, value in event_dict.items() if value is not None}


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    app: str = "arbor",
    stream: IO[str] | None = None,
) -> None:
    """Configure structlog and the ``arbor`` stdlib logger.

    Calling it again replaces the previous configuration.

    Args:
        level: DEBUG, INFO, WARNING or ERROR
        json_format: JSON lines when true; auto-detected from the tty when None
        app: Value of the ``app`` field on every event
        stream: Destination (stderr by default)
    """
    global _app_name
    _app_name = app
    stream = stream or sys.stderr
    numeric_level = logging.getLevelName(level.upper())

    if json_format is None:
        json_format = not stream.isatty()

    processors: list[Processor] = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_app,
        _drop_none,
        structlog.processors.format_exc_info,
    ]
    renderer: Processor = (
        structlog.processors.JSONRenderer(sort_keys=True)
        if json_format
        else structlog.dev.ConsoleRenderer(colors=stream.isatty())
    )

    structlog.configure(
        processors=processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(numeric_level)
    root.propagate = False


def get_logger(name: str | None = None) -> Any:
    """Bound logger for a module, normally ``get_logger(__name__)``."""
    return structlog.get_logger(name)


def bind_context(**fields: Any) -> None:
    """Attach *fields* to every later event of the current thread / task."""
    structlog.contextvars.bind_contextvars(**fields)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Scoped log fields; values shadowed by the scope are restored on exit.

    Example:
        with LogContext(suite="api"):
            with LogContext(leaf="users / create.yaml: create"):
                logger.info("runner.leaf_passed")
    """

    def __init__(self, **fields: Any):
        self.fields = fields
        self._previous: dict[str, Any] = {}

    def __enter__(self) -> LogContext:
        current = structlog.contextvars.get_contextvars()
        self._previous = {key: current[key] for key in self.fields if key in current}
        bind_context(**self.fields)
        return self

    def __exit__(self, *exc_info: object) -> None:
        unbind_context(*self.fields)
        if self._previous:
            bind_context(**self._previous)


__all__ = [
    "ROOT_LOGGER",
    "LogContext",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "unbind_context",
]
