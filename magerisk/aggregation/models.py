"""Aggregation Data Models."""

from dataclasses import dataclass, field
from typing import Optional

from magerisk.matrix.config import KPICalculation, KPIStatus


@dataclass(frozen=True)
class TopRisk:
    risk_id: str
    name: str
    risk_level: str
    adjusted_risk: float
    expected_loss: float


@dataclass(frozen=True)
class RiskTrend:
    """Current mean adjusted risk against the recent-window mean."""
    direction: str  # increasing, decreasing, stable
    percentage: float
    previous_average: float
    current_average: float


@dataclass
class PortfolioSummary:
    """Dashboard statistics over an organization's risks."""
    total_risks: int = 0
    average_risk: float = 0.0
    risk_by_level: dict[str, int] = field(default_factory=dict)
    risk_by_category: dict[str, int] = field(default_factory=dict)
    risk_by_business_function: dict[str, int] = field(default_factory=dict)
    top_risks: list[TopRisk] = field(default_factory=list)
    trend: Optional[RiskTrend] = None

    def to_dict(self) -> dict:
        return {
            "total_risks": self.total_risks,
            "average_risk": round(self.average_risk, 6),
            "risk_by_level": dict(self.risk_by_level),
            "risk_by_category": dict(self.risk_by_category),
            "risk_by_business_function": dict(self.risk_by_business_function),
            "top_risks": [
                {
                    "risk_id": r.risk_id,
                    "name": r.name,
                    "risk_level": r.risk_level,
                    "adjusted_risk": r.adjusted_risk,
                    "expected_loss": r.expected_loss,
                }
                for r in self.top_risks
            ],
            "trend": None if self.trend is None else {
                "direction": self.trend.direction,
                "percentage": round(self.trend.percentage, 2),
                "previous_average": self.trend.previous_average,
                "current_average": self.trend.current_average,
            },
        }


@dataclass(frozen=True)
class KPIResult:
    name: str
    calculation: KPICalculation
    value: float
    status: KPIStatus
    description: str = ""
    matched_risks: int = 0
