"""Runtime settings for trigger buses.

Settings are plain dataclass fields with defaults; ``from_env`` overlays
``TRIGGERS_*`` environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

_TRUTHY = ("1", "true", "True", "yes")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return raw in _TRUTHY


@dataclass
class TriggerSettings:
    """
    Behaviour switches for handler lists and logging.

    Args:
        eager_clear: Empty a handler list immediately on clear() instead
            of waiting for the next purge
        purge_on_execute: Drop cancelled handlers at the start of every
            fire-and-forget broadcast, like poll() does
        log_level: Level passed to logging configuration
        json_logs: Render logs as JSON instead of console output
    """

    eager_clear: bool = True
    purge_on_execute: bool = False
    log_level: str = "INFO"
    json_logs: bool = False

    def __post_init__(self):
        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")

    @classmethod
    def from_env(cls) -> TriggerSettings:
        """Load settings from TRIGGERS_* environment variables."""
        defaults = cls()
        return cls(
            eager_clear=_env_flag("TRIGGERS_EAGER_CLEAR", defaults.eager_clear),
            purge_on_execute=_env_flag(
                "TRIGGERS_PURGE_ON_EXECUTE", defaults.purge_on_execute
            ),
            log_level=os.environ.get("TRIGGERS_LOG_LEVEL", defaults.log_level),
            json_logs=_env_flag("TRIGGERS_LOG_JSON", defaults.json_logs),
        )
