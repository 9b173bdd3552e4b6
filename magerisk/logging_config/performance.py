"""Simulation Timing.

``PerformanceTimer`` measures a block and logs it at DEBUG, or at
WARNING once it crosses the slow threshold; ``log_performance`` wraps
a function in one.
"""

import functools
import logging
import time
from typing import Any, Callable, Optional

from magerisk.logging_config.config import DEFAULT_LOGGING_CONFIG

logger = logging.getLogger(__name__)


class PerformanceTimer:
    """Time a block of engine work.

    Example:
        with PerformanceTimer("organizational_var", threshold_ms=500) as timer:
            result = simulator.run(risks)
        print(timer.duration_ms)
    """

    def __init__(
        self,
        operation_name: str,
        threshold_ms: Optional[float] = None,
        log: Optional[logging.Logger] = None,
    ):
        self.operation_name = operation_name
        self.threshold_ms = DEFAULT_LOGGING_CONFIG.slow_threshold_ms if threshold_ms is None else threshold_ms
        self.duration_ms: float = 0.0
        self._log = log or logger
        self._start = 0.0

    @property
    def is_slow(self) -> bool:
        return self.duration_ms >= self.threshold_ms

    def __enter__(self) -> "PerformanceTimer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.duration_ms = (time.perf_counter() - self._start) * 1000
        extra = {"operation": self.operation_name, "duration_ms": round(self.duration_ms, 2)}
        if exc_type is not None:
            self._log.debug(
                "%s failed with %s after %.1fms",
                self.operation_name, exc_type.__name__, self.duration_ms, extra=extra,
            )
        elif self.is_slow:
            self._log.warning(
                "Slow simulation: %s took %.1fms (threshold %.0fms)",
                self.operation_name, self.duration_ms, self.threshold_ms, extra=extra,
            )
        else:
            self._log.debug("%s took %.1fms", self.operation_name, self.duration_ms, extra=extra)


def log_performance(threshold_ms: Optional[float] = None) -> Callable:
    """Decorator timing every call of the wrapped function.

    Without an explicit ``threshold_ms`` a method reads the threshold from
    its instance's ``slow_threshold_ms`` attribute when it has one.

    Example:
        @log_performance(threshold_ms=500)
        def run(self, calculation, iterations=None):
            ...
    """

    def decorator(func: Callable) -> Callable:
        func_logger = logging.getLogger(func.__module__)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            threshold = threshold_ms
            if threshold is None and args:
                threshold = getattr(args[0], "slow_threshold_ms", None)
            with PerformanceTimer(func.__qualname__, threshold, log=func_logger):
                return func(*args, **kwargs)

        return wrapper

    return decorator
