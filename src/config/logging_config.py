"""Logging configuration.

Application code logs through the standard library (``logging.getLogger(__name__)``);
this module routes those records through structlog's ``ProcessorFormatter`` so the
output is rendered as JSON lines or human-readable console text.
"""

import logging
from typing import Any

import structlog

from src.config.settings import settings

SENSITIVE_KEYS = ("password", "token", "secret", "authorization")


def redact_sensitive(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Replace values of credential-bearing keys before rendering."""
    for key in list(event_dict.keys()):
        if any(sensitive in key.lower() for sensitive in SENSITIVE_KEYS):
            event_dict[key] = "[REDACTED]"
    return event_dict


def configure_logging(log_level: str | None = None, log_format: str | None = None) -> None:
    """Install a single root handler rendering records with structlog.

    Args:
        log_level: Overrides ``settings.log_level``
        log_format: ``json`` or ``text``; overrides ``settings.log_format``

    """
    level = (log_level or settings.log_level).upper()
    fmt = log_format or settings.log_format

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redact_sensitive,
    ]

    if fmt == "json":
        renderer: Any = structlog.processors.JSONRenderer()
        final_processors = [structlog.processors.format_exc_info, renderer]
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)
        final_processors = [renderer]

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *final_processors],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # SQL echo is controlled by settings.database_echo, not the root level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
