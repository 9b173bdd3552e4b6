"""Engine Error Handling & Validation.

Typed exceptions, error codes, input validators and result values
shared by every engine component.
"""

from magerisk.errors.config import ERROR_STATUS_MAP, RETRYABLE_CODES, ErrorCode
from magerisk.errors.exceptions import (
    ConflictError,
    InconsistentReferenceError,
    InvalidConfigurationError,
    NotFoundError,
    RiskEngineError,
    ValidationError,
)
from magerisk.errors.result import Err, Ok, Result, capture
from magerisk.errors.validators import (
    validate_confidence_level,
    validate_iterations,
    validate_multiplier,
    validate_range,
    validate_scenarios,
    validate_time_horizon,
    validate_unit_interval,
)

__all__ = [
    # Config
    "ErrorCode",
    "ERROR_STATUS_MAP",
    "RETRYABLE_CODES",
    # Exceptions
    "ConflictError",
    "InconsistentReferenceError",
    "InvalidConfigurationError",
    "NotFoundError",
    "RiskEngineError",
    "ValidationError",
    # Results
    "Err",
    "Ok",
    "Result",
    "capture",
    # Validators
    "validate_confidence_level",
    "validate_iterations",
    "validate_multiplier",
    "validate_range",
    "validate_scenarios",
    "validate_time_horizon",
    "validate_unit_interval",
]
