"""Stochastic Simulation Data Models."""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from magerisk.matrix.config import RiskLevel


def _empty_distribution() -> dict[RiskLevel, int]:
    return {level: 0 for level in RiskLevel}


@dataclass(frozen=True)
class LossExposure:
    """Minimal VaR input: materialization probability and expected loss."""
    adjusted_risk: float
    expected_loss: float
    risk_id: str = ""


@dataclass
class SimulationStatistics:
    """Summary statistics of a simulated risk distribution."""
    mean: float = 0.0
    median: float = 0.0
    p5: float = 0.0
    p95: float = 0.0
    min: float = 0.0
    max: float = 0.0
    std_dev: float = 0.0

    def to_dict(self) -> dict:
        return {
            "mean": round(self.mean, 6),
            "median": round(self.median, 6),
            "p5": round(self.p5, 6),
            "p95": round(self.p95, 6),
            "min": round(self.min, 6),
            "max": round(self.max, 6),
            "std_dev": round(self.std_dev, 6),
        }


@dataclass(frozen=True)
class ConfidenceInterval:
    p5: float
    p50: float
    p95: float


@dataclass(frozen=True)
class DistributionBin:
    """Equal-width histogram bin."""
    min: float
    max: float
    count: int
    frequency: float


@dataclass
class MonteCarloResult:
    """Result of a single-risk Monte Carlo simulation."""
    iterations: int
    statistics: SimulationStatistics
    confidence_interval: ConfidenceInterval
    distribution_bins: list[DistributionBin] = field(default_factory=list)
    risk_id: Optional[str] = None

    @property
    def interval_width(self) -> float:
        return self.confidence_interval.p95 - self.confidence_interval.p5

    def to_dict(self) -> dict:
        return {
            "risk_id": self.risk_id,
            "iterations": self.iterations,
            "statistics": self.statistics.to_dict(),
            "confidence_interval": {
                "p5": round(self.confidence_interval.p5, 6),
                "p50": round(self.confidence_interval.p50, 6),
                "p95": round(self.confidence_interval.p95, 6),
            },
            "distribution_bins": [
                {"min": b.min, "max": b.max, "count": b.count, "frequency": b.frequency}
                for b in self.distribution_bins
            ],
        }


@dataclass
class VaRResult:
    """Organizational Value at Risk.

    ``var`` is scaled by sqrt(time_horizon / 365); ``var_95`` and
    ``var_99`` are the unscaled order statistics of the same run.
    """
    var: float = 0.0
    expected_shortfall: float = 0.0
    total_expected_loss: float = 0.0
    confidence_level: float = 0.95
    time_horizon: float = 365
    var_95: float = 0.0
    var_99: float = 0.0
    simulation_count: int = 0
    risk_count: int = 0

    def to_dict(self) -> dict:
        return {
            "var": round(self.var, 2),
            "expected_shortfall": round(self.expected_shortfall, 2),
            "total_expected_loss": round(self.total_expected_loss, 2),
            "confidence_level": self.confidence_level,
            "time_horizon": self.time_horizon,
            "var_95": round(self.var_95, 2),
            "var_99": round(self.var_99, 2),
            "simulation_count": self.simulation_count,
            "risk_count": self.risk_count,
        }


@dataclass(frozen=True)
class Scenario:
    """What-if multipliers applied to every risk of a portfolio.

    ``threat_multipliers`` maps a MAGERIT threat code to an extra
    multiplier for risks of that threat.
    """
    name: str
    description: str = ""
    probability_multiplier: float = 1.0
    impact_multiplier: float = 1.0
    threat_multipliers: Mapping[str, float] = field(default_factory=dict)

    def multiplier_for(self, threat_code: str) -> float:
        return (
            self.probability_multiplier
            * self.impact_multiplier
            * self.threat_multipliers.get(threat_code, 1.0)
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Scenario":
        return cls(
            name=data.get("name", ""),
            description=data.get("description", ""),
            probability_multiplier=data.get("probability_multiplier", 1.0),
            impact_multiplier=data.get("impact_multiplier", 1.0),
            threat_multipliers=dict(data.get("threat_multipliers") or {}),
        )


@dataclass
class ScenarioResult:
    """Portfolio aggregate under one scenario."""
    name: str
    description: str = ""
    total_risk: float = 0.0
    average_risk: float = 0.0
    risk_distribution: dict[RiskLevel, int] = field(default_factory=_empty_distribution)
    economic_impact: float = 0.0
    risk_count: int = 0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "total_risk": round(self.total_risk, 6),
            "average_risk": round(self.average_risk, 6),
            "risk_distribution": {k.value: v for k, v in self.risk_distribution.items()},
            "economic_impact": round(self.economic_impact, 2),
            "risk_count": self.risk_count,
        }
