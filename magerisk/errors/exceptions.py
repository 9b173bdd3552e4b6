"""Engine Exception Hierarchy.

Typed exceptions for the four failure families of the engine
(missing entities, inconsistent references, invalid configuration,
input validation) plus optimistic-version conflicts raised at the
persistence boundary.
"""

from typing import Any, Dict, List, Optional

from magerisk.errors.config import ERROR_STATUS_MAP, RETRYABLE_CODES, ErrorCode


class RiskEngineError(Exception):
    """Base exception for all engine errors.

    All custom exceptions inherit from this, allowing a calling layer to
    catch the entire hierarchy with one handler.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = ERROR_STATUS_MAP.get(error_code, 500)
        self.details = details or []

    @property
    def retryable(self) -> bool:
        return self.error_code in RETRYABLE_CODES

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(RiskEngineError):
    """Raised when an input parameter falls outside its declared bounds."""

    def __init__(
        self,
        message: str = "Validation failed",
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
        field: Optional[str] = None,
    ):
        if field and not details:
            details = [{"field": field, "issue": message}]
        super().__init__(message, error_code, details)
        self.field = field


class NotFoundError(RiskEngineError):
    """Raised when a referenced asset, threat, vulnerability, risk or matrix is absent."""

    def __init__(
        self,
        message: str = "Resource not found",
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
    ):
        details = []
        if resource_type or resource_id:
            details = [{"resource_type": resource_type, "resource_id": resource_id}]
        super().__init__(message, ErrorCode.RESOURCE_NOT_FOUND, details)
        self.resource_type = resource_type
        self.resource_id = resource_id


class InconsistentReferenceError(RiskEngineError):
    """Raised when a vulnerability does not belong to the supplied asset."""

    def __init__(
        self,
        message: str = "Vulnerability does not belong to the given asset",
        vulnerability_id: Optional[str] = None,
        asset_id: Optional[str] = None,
        recorded_asset_id: Optional[str] = None,
    ):
        details = [{
            "vulnerability_id": vulnerability_id,
            "asset_id": asset_id,
            "recorded_asset_id": recorded_asset_id,
        }]
        super().__init__(message, ErrorCode.INCONSISTENT_REFERENCE, details)


class InvalidConfigurationError(RiskEngineError):
    """Raised when no usable risk matrix is configured for an organization."""

    def __init__(
        self,
        message: str = "Invalid risk matrix configuration",
        violations: Optional[List[str]] = None,
        error_code: ErrorCode = ErrorCode.INVALID_CONFIGURATION,
    ):
        self.violations = list(violations or [])
        details = [{"violation": v} for v in self.violations]
        super().__init__(message, error_code, details)


class ConflictError(RiskEngineError):
    """Raised when a persisted record changed since it was read."""

    def __init__(
        self,
        message: str = "Record was modified concurrently",
        resource_id: Optional[str] = None,
        expected_version: Optional[int] = None,
        actual_version: Optional[int] = None,
    ):
        details = [{
            "resource_id": resource_id,
            "expected_version": expected_version,
            "actual_version": actual_version,
        }]
        super().__init__(message, ErrorCode.VERSION_CONFLICT, details)
