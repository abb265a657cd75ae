"""
Structured logging for trigger buses.

Bus events are logged through structlog on top of stdlib logging, so hosts
that already route stdlib records keep working. Event names are prefixed
``trigger_`` and carry the key as ``repr`` text.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from triggers.config import TriggerSettings

_configured = False


def _processors(json_output: bool, colors: bool) -> list[structlog.types.Processor]:
    renderer: structlog.types.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=colors)

    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Path | None = None,
    colors: bool = True,
) -> None:
    """Configure stdlib logging and structlog for trigger events.

    Replaces any previous root handlers; a previous log file is closed.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render one JSON object per line
        log_file: Append to this file instead of stderr
        colors: Colorize console output (ignored for JSON)
    """
    global _configured

    handler_kwargs: dict[str, Any]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler_kwargs = {"filename": str(log_file), "filemode": "a", "encoding": "utf-8"}
    else:
        handler_kwargs = {"stream": sys.stderr}

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        force=True,
        **handler_kwargs,
    )

    structlog.configure(
        processors=_processors(json_output, colors and not json_output),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def configure_from_settings(
    settings: TriggerSettings,
    log_file: Path | None = None,
) -> None:
    """Apply the log level and format carried by ``settings``."""
    configure_logging(
        level=settings.log_level,
        json_output=settings.json_logs,
        log_file=log_file,
        colors=not settings.json_logs,
    )


def ensure_logging(settings: TriggerSettings) -> bool:
    """Configure logging from ``settings`` unless it was configured already.

    Returns:
        True if this call configured logging
    """
    if _configured:
        return False
    configure_from_settings(settings)
    return True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, typically ``get_logger(__name__)``."""
    return structlog.get_logger(name)
