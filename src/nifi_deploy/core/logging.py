"""
Structured logging for nifi-deploy.

One call to ``configure_logging()`` at CLI start-up sets up structlog for the
whole process. Modules then do::

    from nifi_deploy.core.logging import get_logger

    logger = get_logger(__name__)
    logger.info("volume.created", volume="nifi_state")

Output goes to stderr so that commands printing artifacts to stdout
(``nifi-deploy dockerfile``, ``--json``) stay pipeable.

Processor chain:
    ::

        TimeStamper(iso) → add_log_level → add_logger_name
            → add_service_metadata → redact_secrets
            → JSONRenderer (non-tty / json_format=True)
              ConsoleRenderer (tty)

Guardrails:
    - Values of keys named like ``password`` are replaced before rendering
    - JSON vs console is auto-detected from stderr's TTY state

Tags:
    logging, structlog, observability, nifi-deploy
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# Store service name for metadata
_SERVICE_NAME = "nifi-deploy"

_REDACTED = "**********"
_SECRET_KEYS = ("password", "secret", "token")


class _NamedPrintLogger(structlog.PrintLogger):
    """``PrintLogger`` that remembers the name it was created under."""

    def __init__(self, file: TextIO, name: str | None = None):
        super().__init__(file)
        self.name = name


class _NamedPrintLoggerFactory:
    """Logger factory receiving ``get_logger(name)`` arguments."""

    def __init__(self, file: TextIO):
        self._file = file

    def __call__(self, *args: Any) -> _NamedPrintLogger:
        return _NamedPrintLogger(self._file, args[0] if args else None)


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service", _SERVICE_NAME)
    return event_dict


def _add_logger_name(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    name = getattr(logger, "name", None)
    if name:
        event_dict.setdefault("logger", name)
    return event_dict


def _redact_secrets(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Mask any value whose key looks like a credential."""
    for key in list(event_dict):
        if any(marker in key.lower() for marker in _SECRET_KEYS):
            event_dict[key] = _REDACTED
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "nifi-deploy",
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        service: Service name to include in logs
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    if json_format is None:
        json_format = not sys.stderr.isatty()

    processors: list[Processor] = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        _add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
        _redact_secrets,
    ]

    if json_format:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=_NamedPrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``).

    The name is a logger factory argument, so it is resolved when the logger
    is first used and ``configure_logging()`` may run after import.
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs.

    Example:
        bind_context(run_id="abc123", destination="server")
        logger.info("launch.started")  # Includes run_id and destination
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


__all__ = [
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
]
