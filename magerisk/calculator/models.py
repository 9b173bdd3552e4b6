"""Risk Calculator Data Models."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class BaseRiskCalculation:
    """Factor breakdown returned by ``calculate_base_risk``."""
    threat_probability: float = 0.0
    vulnerability_level: float = 0.0
    aggregated_impact: float = 0.0
    base_risk: float = 0.0
    temporal_factor: float = 1.0
    environmental_factor: float = 1.0
    adjusted_risk: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "threat_probability": round(self.threat_probability, 6),
            "vulnerability_level": round(self.vulnerability_level, 6),
            "aggregated_impact": round(self.aggregated_impact, 6),
            "base_risk": round(self.base_risk, 6),
            "temporal_factor": round(self.temporal_factor, 4),
            "environmental_factor": round(self.environmental_factor, 4),
            "adjusted_risk": round(self.adjusted_risk, 6),
        }


@dataclass(frozen=True)
class RecalculationError:
    risk_id: str
    error_code: str
    message: str


@dataclass
class RecalculationReport:
    """Outcome of recalculating every risk of an organization."""
    organization_id: str
    processed: int = 0
    updated: int = 0
    errors: list[RecalculationError] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.errors)

    @property
    def success_rate(self) -> float:
        if self.processed == 0:
            return 0.0
        return self.updated / self.processed

    def to_dict(self) -> dict[str, Any]:
        return {
            "organization_id": self.organization_id,
            "processed": self.processed,
            "updated": self.updated,
            "errors": [
                {"risk_id": e.risk_id, "error_code": e.error_code, "message": e.message}
                for e in self.errors
            ],
        }
