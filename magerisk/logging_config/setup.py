"""Logging Setup.

Installs one stdout handler on the root logger whose records carry the
active request context, rendered as JSON lines or as plain console
text.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from magerisk.logging_config.config import LogFormat, LoggingConfig
from magerisk.logging_config.context import current_context

# Record attributes copied into JSON output when a caller passes them via ``extra``
_EXTRA_FIELDS = ("operation", "duration_ms", "iterations", "risk_count")


class ContextFilter(logging.Filter):
    """Attach the active request context to each record as ``record.context``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.context = current_context()
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def __init__(self, service_name: str = "magerisk", include_caller: bool = False):
        super().__init__()
        self.service_name = service_name
        self.include_caller = include_caller

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            **getattr(record, "context", {}),
        }
        if self.include_caller:
            entry["caller"] = f"{record.module}.{record.funcName}:{record.lineno}"
        for key in _EXTRA_FIELDS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable line with the bound context appended."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)-8s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = getattr(record, "context", {})
        if context:
            line += " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]"
        return line


def configure_logging(config: Optional[LoggingConfig] = None) -> logging.Handler:
    """Route all logging through one handler; call once at startup.

    Without an explicit config the level and format come from
    ``Settings`` (``MAGERISK_LOG_LEVEL``, ``MAGERISK_LOG_FORMAT``).
    """
    if config is None:
        from magerisk.settings import get_settings

        config = LoggingConfig.from_settings(get_settings())

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(ContextFilter())
    if config.format == LogFormat.JSON:
        handler.setFormatter(JsonFormatter(config.service_name, config.include_caller))
    else:
        handler.setFormatter(ConsoleFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(config.level.value)

    # SQL echo is controlled by Settings.database_echo, not the root level
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    return handler
