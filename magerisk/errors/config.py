"""Error Configuration.

Defines error codes and their mapping to caller-facing status codes
and retry policy.
"""

from enum import Enum
from typing import Dict, FrozenSet


class ErrorCode(Enum):
    """Standardized error codes raised by the engine."""

    # Input contract violations (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_ITERATIONS = "INVALID_ITERATIONS"
    INVALID_CONFIDENCE_LEVEL = "INVALID_CONFIDENCE_LEVEL"
    INVALID_TIME_HORIZON = "INVALID_TIME_HORIZON"
    INVALID_SCENARIO = "INVALID_SCENARIO"
    VALUE_OUT_OF_RANGE = "VALUE_OUT_OF_RANGE"

    # Missing entities (404)
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # Reference / configuration problems (409 / 422)
    INCONSISTENT_REFERENCE = "INCONSISTENT_REFERENCE"
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"
    NO_ACTIVE_MATRIX = "NO_ACTIVE_MATRIX"

    # Optimistic concurrency (409)
    VERSION_CONFLICT = "VERSION_CONFLICT"

    INTERNAL_ERROR = "INTERNAL_ERROR"


ERROR_STATUS_MAP: Dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INVALID_ITERATIONS: 400,
    ErrorCode.INVALID_CONFIDENCE_LEVEL: 400,
    ErrorCode.INVALID_TIME_HORIZON: 400,
    ErrorCode.INVALID_SCENARIO: 400,
    ErrorCode.VALUE_OUT_OF_RANGE: 400,
    ErrorCode.RESOURCE_NOT_FOUND: 404,
    ErrorCode.INCONSISTENT_REFERENCE: 409,
    ErrorCode.INVALID_CONFIGURATION: 422,
    ErrorCode.NO_ACTIVE_MATRIX: 422,
    ErrorCode.VERSION_CONFLICT: 409,
    ErrorCode.INTERNAL_ERROR: 500,
}

# Validation errors are never retried; only lost-update races are.
RETRYABLE_CODES: FrozenSet[ErrorCode] = frozenset({ErrorCode.VERSION_CONFLICT})
