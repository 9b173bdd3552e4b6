"""Logging Configuration.

Log level, output format and the slow-simulation threshold, derived
from the engine settings.
"""

from dataclasses import dataclass
from enum import Enum


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    JSON = "json"
    CONSOLE = "console"


@dataclass(frozen=True)
class LoggingConfig:
    """How engine log records are rendered."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    include_caller: bool = False
    slow_threshold_ms: float = 1000.0
    service_name: str = "magerisk"

    @classmethod
    def from_settings(cls, settings) -> "LoggingConfig":
        """Build from ``Settings``; unknown level or format names fall back to the defaults."""
        level = settings.log_level.upper()
        fmt = settings.log_format.lower()
        return cls(
            level=LogLevel(level) if level in LogLevel.__members__ else cls.level,
            format=LogFormat(fmt) if fmt in {f.value for f in LogFormat} else cls.format,
            slow_threshold_ms=settings.slow_simulation_ms,
        )


DEFAULT_LOGGING_CONFIG = LoggingConfig()
