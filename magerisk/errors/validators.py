"""Input Validation Utilities.

Validators for the numeric input contracts of the simulation layer:
iteration counts, confidence levels, time horizons and scenario
multipliers.
"""

import math
from typing import Any, Optional, Sequence

from magerisk.errors.config import ErrorCode
from magerisk.errors.exceptions import ValidationError

MIN_ITERATIONS = 1_000
MAX_ITERATIONS = 100_000
MIN_CONFIDENCE = 0.5
MAX_CONFIDENCE = 0.99
MIN_HORIZON_DAYS = 1
MAX_HORIZON_DAYS = 365
MIN_SCENARIOS = 1
MAX_SCENARIOS = 10


def validate_iterations(
    iterations: Any,
    min_iterations: int = MIN_ITERATIONS,
    max_iterations: int = MAX_ITERATIONS,
) -> int:
    """Validate a Monte Carlo iteration count.

    Raises:
        ValidationError: If not an integer within [min, max].
    """
    if isinstance(iterations, bool) or not isinstance(iterations, int):
        raise ValidationError(
            message="Iterations must be an integer",
            error_code=ErrorCode.INVALID_ITERATIONS,
            field="iterations",
        )
    if iterations < min_iterations or iterations > max_iterations:
        raise ValidationError(
            message=f"Iterations must be between {min_iterations:,} and {max_iterations:,}, got {iterations:,}",
            error_code=ErrorCode.INVALID_ITERATIONS,
            field="iterations",
        )
    return iterations


def validate_confidence_level(confidence_level: Any) -> float:
    """Validate a VaR confidence level in [0.5, 0.99]."""
    value = _as_finite_float(confidence_level, "confidence_level", ErrorCode.INVALID_CONFIDENCE_LEVEL)
    if value < MIN_CONFIDENCE or value > MAX_CONFIDENCE:
        raise ValidationError(
            message=f"Confidence level must be between {MIN_CONFIDENCE} and {MAX_CONFIDENCE}, got {value}",
            error_code=ErrorCode.INVALID_CONFIDENCE_LEVEL,
            field="confidence_level",
        )
    return value


def validate_time_horizon(time_horizon: Any) -> float:
    """Validate a VaR time horizon in [1, 365] days."""
    value = _as_finite_float(time_horizon, "time_horizon", ErrorCode.INVALID_TIME_HORIZON)
    if value < MIN_HORIZON_DAYS or value > MAX_HORIZON_DAYS:
        raise ValidationError(
            message=f"Time horizon must be between {MIN_HORIZON_DAYS} and {MAX_HORIZON_DAYS} days, got {value}",
            error_code=ErrorCode.INVALID_TIME_HORIZON,
            field="time_horizon",
        )
    return value


def validate_multiplier(value: Any, field: str) -> float:
    """Validate a scenario multiplier: finite and strictly positive."""
    number = _as_finite_float(value, field, ErrorCode.INVALID_SCENARIO)
    if number <= 0:
        raise ValidationError(
            message=f"{field} must be positive, got {number}",
            error_code=ErrorCode.INVALID_SCENARIO,
            field=field,
        )
    return number


def validate_scenarios(scenarios: Sequence[Any]) -> Sequence[Any]:
    """Validate the scenario list size and every scenario's multipliers.

    Each scenario must expose ``name``, ``probability_multiplier``,
    ``impact_multiplier`` and ``threat_multipliers`` (mapping of MAGERIT
    threat code to multiplier).
    """
    if scenarios is None or len(scenarios) < MIN_SCENARIOS or len(scenarios) > MAX_SCENARIOS:
        count = 0 if scenarios is None else len(scenarios)
        raise ValidationError(
            message=f"Between {MIN_SCENARIOS} and {MAX_SCENARIOS} scenarios are required, got {count}",
            error_code=ErrorCode.INVALID_SCENARIO,
            field="scenarios",
        )

    for i, scenario in enumerate(scenarios):
        if not getattr(scenario, "name", ""):
            raise ValidationError(
                message=f"Scenario {i} has no name",
                error_code=ErrorCode.INVALID_SCENARIO,
                field=f"scenarios[{i}].name",
            )
        validate_multiplier(scenario.probability_multiplier, f"scenarios[{i}].probability_multiplier")
        validate_multiplier(scenario.impact_multiplier, f"scenarios[{i}].impact_multiplier")
        for code, multiplier in (scenario.threat_multipliers or {}).items():
            validate_multiplier(multiplier, f"scenarios[{i}].threat_multipliers[{code}]")

    return scenarios


def validate_unit_interval(value: Any, field: str) -> float:
    """Validate a probability-like value in [0, 1]."""
    number = _as_finite_float(value, field, ErrorCode.VALUE_OUT_OF_RANGE)
    if number < 0.0 or number > 1.0:
        raise ValidationError(
            message=f"{field} must be within [0, 1], got {number}",
            error_code=ErrorCode.VALUE_OUT_OF_RANGE,
            field=field,
        )
    return number


def validate_range(
    value: Any,
    field: str,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
) -> float:
    """Validate a finite number against optional inclusive bounds."""
    number = _as_finite_float(value, field, ErrorCode.VALUE_OUT_OF_RANGE)
    if (minimum is not None and number < minimum) or (maximum is not None and number > maximum):
        raise ValidationError(
            message=f"{field} must be within [{minimum}, {maximum}], got {number}",
            error_code=ErrorCode.VALUE_OUT_OF_RANGE,
            field=field,
        )
    return number


def _as_finite_float(value: Any, field: str, error_code: ErrorCode) -> float:
    if isinstance(value, bool):
        raise ValidationError(message=f"{field} must be a number", error_code=error_code, field=field)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(
            message=f"{field} must be a number, got {value!r}",
            error_code=error_code,
            field=field,
        ) from None
    if not math.isfinite(number):
        raise ValidationError(message=f"{field} must be finite", error_code=error_code, field=field)
    return number
