"""Structured Logging & Request Context.

JSON or console logging on the standard library, request-scoped
identifiers merged into every record, and simulation timing.
"""

from magerisk.logging_config.config import DEFAULT_LOGGING_CONFIG, LogFormat, LoggingConfig, LogLevel
from magerisk.logging_config.context import RequestContext, current_context, generate_request_id
from magerisk.logging_config.performance import PerformanceTimer, log_performance
from magerisk.logging_config.setup import ConsoleFormatter, ContextFilter, JsonFormatter, configure_logging

__all__ = [
    # Config
    "DEFAULT_LOGGING_CONFIG",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    # Context
    "RequestContext",
    "current_context",
    "generate_request_id",
    # Timing
    "PerformanceTimer",
    "log_performance",
    # Setup
    "ConsoleFormatter",
    "ContextFilter",
    "JsonFormatter",
    "configure_logging",
]
