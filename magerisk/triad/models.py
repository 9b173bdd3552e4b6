"""Risk Triad Data Models.

Immutable snapshots of the entities a risk is built from (asset,
threat, vulnerability) and the Risk value struct with its embedded
calculation, classification, matrix position, quantitative analysis
and treatment blocks. Constructors enforce the numeric ranges; computed
values are exposed as properties, never stored.
"""

import math
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional

from magerisk.errors.config import ErrorCode
from magerisk.errors.exceptions import ValidationError
from magerisk.errors.validators import validate_range, validate_unit_interval
from magerisk.matrix.config import RiskLevel, level_for_value
from magerisk.triad.config import (
    MAGERIT_DIMENSIONS,
    MAX_VALUATION,
    AssetType,
    BusinessCriticality,
    BusinessFunction,
    ControlStatus,
    ExploitMaturity,
    Exposure,
    GeographicRelevance,
    Priority,
    RemediationLevel,
    ReportConfidence,
    ReviewFrequency,
    RiskCategory,
    TreatmentStatus,
    TreatmentStrategy,
)

# Factor bounds produced by the calculator
TEMPORAL_FACTOR_RANGE = (1.0, 2.0)
ENVIRONMENTAL_FACTOR_RANGE = (0.5, 1.5)
LEVEL_RANGE = (1, 5)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _coerce(obj: Any, name: str, enum_cls: type) -> None:
    """Normalize a str/Enum attribute of a frozen dataclass to ``enum_cls``."""
    object.__setattr__(obj, name, enum_cls(getattr(obj, name)))


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _parse_date(value: Any) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(value)


def serialize(value: Any) -> Any:
    """Convert dataclasses, enums and datetimes to JSON-compatible values."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: serialize(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Mapping):
        return {str(k): serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize(v) for v in value]
    if isinstance(value, float) and math.isinf(value):
        return None
    return value


# =============================================================================
# Triad entity snapshots
# =============================================================================

@dataclass(frozen=True)
class AssetValuation:
    """MAGERIT valuation of an asset, 0-10 per dimension."""
    confidentiality: float = 0.0
    integrity: float = 0.0
    availability: float = 0.0
    authenticity: float = 0.0
    traceability: float = 0.0

    def __post_init__(self):
        for dim in MAGERIT_DIMENSIONS:
            validate_range(getattr(self, dim), f"valuation.{dim}", 0.0, MAX_VALUATION)

    def get(self, dimension: str) -> float:
        return float(getattr(self, dimension))

    @property
    def max_value(self) -> float:
        return max(self.get(d) for d in MAGERIT_DIMENSIONS)


@dataclass(frozen=True)
class Asset:
    """Asset snapshot as seen by the calculator."""
    asset_id: str
    organization_id: str
    name: str = ""
    asset_type: AssetType = AssetType.DATA
    valuation: Optional[AssetValuation] = None
    economic_value: float = 0.0
    exposure: Exposure = Exposure.INTERNAL
    business_criticality: BusinessCriticality = BusinessCriticality.MEDIUM
    business_function: BusinessFunction = BusinessFunction.SUPPORT

    def __post_init__(self):
        _coerce(self, "asset_type", AssetType)
        _coerce(self, "exposure", Exposure)
        _coerce(self, "business_criticality", BusinessCriticality)
        _coerce(self, "business_function", BusinessFunction)
        validate_range(self.economic_value, "economic_value", 0.0)


@dataclass(frozen=True)
class Seasonality:
    """Seasonal variation of a threat."""
    has_seasonality: bool = False
    peak_months: tuple[int, ...] = ()
    seasonal_multiplier: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, "peak_months", tuple(self.peak_months))
        for month in self.peak_months:
            validate_range(month, "peak_months", 1, 12)
        validate_range(self.seasonal_multiplier, "seasonal_multiplier", 0.0)


@dataclass(frozen=True)
class Threat:
    """Threat snapshot (MAGERIT catalogue entry or organization custom threat)."""
    threat_id: str
    magerit_code: str
    name: str = ""
    base_probability: float = 0.5
    susceptible_asset_types: tuple[AssetType, ...] = ()
    geographic_relevance: GeographicRelevance = GeographicRelevance.MEDIUM
    seasonality: Seasonality = field(default_factory=Seasonality)

    def __post_init__(self):
        validate_unit_interval(self.base_probability, "base_probability")
        object.__setattr__(
            self,
            "susceptible_asset_types",
            tuple(AssetType(t) for t in self.susceptible_asset_types),
        )
        _coerce(self, "geographic_relevance", GeographicRelevance)


@dataclass(frozen=True)
class Vulnerability:
    """Vulnerability snapshot bound to one asset."""
    vulnerability_id: str
    asset_id: str
    vulnerability_level: float = 0.5
    affected_dimensions: Mapping[str, float] = field(default_factory=dict)
    exploit_code_maturity: ExploitMaturity = ExploitMaturity.NOT_DEFINED
    remediation_level: RemediationLevel = RemediationLevel.NOT_DEFINED
    report_confidence: ReportConfidence = ReportConfidence.NOT_DEFINED
    cve_id: Optional[str] = None
    cve_published_at: Optional[datetime] = None

    def __post_init__(self):
        validate_unit_interval(self.vulnerability_level, "vulnerability_level")
        for dim, impact in self.affected_dimensions.items():
            if dim not in MAGERIT_DIMENSIONS:
                raise ValidationError(
                    message=f"Unknown MAGERIT dimension: {dim!r}",
                    error_code=ErrorCode.VALUE_OUT_OF_RANGE,
                    field="affected_dimensions",
                )
            validate_unit_interval(impact, f"affected_dimensions.{dim}")
        object.__setattr__(self, "affected_dimensions", dict(self.affected_dimensions))
        _coerce(self, "exploit_code_maturity", ExploitMaturity)
        _coerce(self, "remediation_level", RemediationLevel)
        _coerce(self, "report_confidence", ReportConfidence)

    def impact_on(self, dimension: str) -> float:
        return float(self.affected_dimensions.get(dimension, 0.0))


# =============================================================================
# Risk calculation blocks
# =============================================================================

@dataclass(frozen=True)
class EconomicImpact:
    """Monetary view of a risk."""
    potential_loss: float = 0.0
    expected_loss: float = 0.0
    annualized_loss: float = 0.0

    def __post_init__(self):
        validate_range(self.potential_loss, "potential_loss", 0.0)
        validate_range(self.expected_loss, "expected_loss", 0.0)
        validate_range(self.annualized_loss, "annualized_loss", 0.0)

    @classmethod
    def from_values(
        cls,
        asset_value: float,
        aggregated_impact: float,
        adjusted_risk: float,
    ) -> "EconomicImpact":
        """potential = value x impact; expected = potential x risk; ALE = expected."""
        potential = asset_value * aggregated_impact
        expected = potential * adjusted_risk
        return cls(potential_loss=potential, expected_loss=expected, annualized_loss=expected)


@dataclass(frozen=True)
class DimensionImpact:
    """Per-dimension share of the aggregated impact, each in [0,1]."""
    confidentiality: float = 0.0
    integrity: float = 0.0
    availability: float = 0.0
    authenticity: float = 0.0
    traceability: float = 0.0

    def __post_init__(self):
        for dim in MAGERIT_DIMENSIONS:
            validate_unit_interval(getattr(self, dim), f"impact.{dim}")

    @property
    def total(self) -> float:
        return sum(getattr(self, d) for d in MAGERIT_DIMENSIONS)

    def as_dict(self) -> dict[str, float]:
        return {d: getattr(self, d) for d in MAGERIT_DIMENSIONS}


@dataclass(frozen=True)
class RiskCalculation:
    """Deterministic calculation record of one risk triad.

    Invariants checked on construction:
        base_risk == threat_probability x vulnerability_level x aggregated_impact
        adjusted_risk == min(base_risk x temporal_factor x environmental_factor, 1)
    """
    threat_probability: float
    vulnerability_level: float
    aggregated_impact: float
    base_risk: float
    adjusted_risk: float
    temporal_factor: float = 1.0
    environmental_factor: float = 1.0
    impact: DimensionImpact = field(default_factory=DimensionImpact)
    economic_impact: EconomicImpact = field(default_factory=EconomicImpact)

    def __post_init__(self):
        for name in (
            "threat_probability",
            "vulnerability_level",
            "aggregated_impact",
            "base_risk",
            "adjusted_risk",
        ):
            validate_unit_interval(getattr(self, name), name)
        validate_range(self.temporal_factor, "temporal_factor", *TEMPORAL_FACTOR_RANGE)
        validate_range(self.environmental_factor, "environmental_factor", *ENVIRONMENTAL_FACTOR_RANGE)

        expected_base = self.threat_probability * self.vulnerability_level * self.aggregated_impact
        if not math.isclose(self.base_risk, expected_base, rel_tol=1e-9, abs_tol=1e-12):
            raise ValidationError(
                message=f"base_risk {self.base_risk} does not match probability x vulnerability x impact ({expected_base})",
                error_code=ErrorCode.VALUE_OUT_OF_RANGE,
                field="base_risk",
            )
        expected_adjusted = min(expected_base * self.temporal_factor * self.environmental_factor, 1.0)
        if not math.isclose(self.adjusted_risk, expected_adjusted, rel_tol=1e-9, abs_tol=1e-12):
            raise ValidationError(
                message=f"adjusted_risk {self.adjusted_risk} does not match min(base x temporal x environmental, 1) ({expected_adjusted})",
                error_code=ErrorCode.VALUE_OUT_OF_RANGE,
                field="adjusted_risk",
            )

    @classmethod
    def compose(
        cls,
        threat_probability: float,
        vulnerability_level: float,
        aggregated_impact: float,
        temporal_factor: float = 1.0,
        environmental_factor: float = 1.0,
        impact: Optional[DimensionImpact] = None,
        asset_value: Optional[float] = None,
    ) -> "RiskCalculation":
        """Build a calculation, deriving base/adjusted risk and economics."""
        base = threat_probability * vulnerability_level * aggregated_impact
        adjusted = min(base * temporal_factor * environmental_factor, 1.0)
        economic = (
            EconomicImpact.from_values(asset_value, aggregated_impact, adjusted)
            if asset_value is not None
            else EconomicImpact()
        )
        return cls(
            threat_probability=threat_probability,
            vulnerability_level=vulnerability_level,
            aggregated_impact=aggregated_impact,
            base_risk=base,
            adjusted_risk=adjusted,
            temporal_factor=temporal_factor,
            environmental_factor=environmental_factor,
            impact=impact or DimensionImpact(),
            economic_impact=economic,
        )


@dataclass(frozen=True)
class RiskClassification:
    risk_level: RiskLevel = RiskLevel.MEDIUM
    category: RiskCategory = RiskCategory.OPERATIONAL
    business_function: BusinessFunction = BusinessFunction.SUPPORT

    def __post_init__(self):
        _coerce(self, "risk_level", RiskLevel)
        _coerce(self, "category", RiskCategory)
        _coerce(self, "business_function", BusinessFunction)


@dataclass(frozen=True)
class MatrixPosition:
    """Position of a risk in the 5x5 probability x impact grid."""
    probability_level: int
    impact_level: int

    def __post_init__(self):
        validate_range(self.probability_level, "probability_level", *LEVEL_RANGE)
        validate_range(self.impact_level, "impact_level", *LEVEL_RANGE)

    @property
    def matrix_position(self) -> str:
        return f"{self.probability_level}{self.impact_level}"

    @property
    def risk_score(self) -> int:
        return self.probability_level * self.impact_level

    @staticmethod
    def to_level(value: float) -> int:
        """ceil(value x 5), clamped to [1, 5].

        The product is rounded first so that 0.6 maps to 3, not 4.
        """
        low, high = LEVEL_RANGE
        return int(min(max(math.ceil(round(value * high, 9)), low), high))

    @classmethod
    def from_calculation(cls, threat_probability: float, aggregated_impact: float) -> "MatrixPosition":
        return cls(
            probability_level=cls.to_level(threat_probability),
            impact_level=cls.to_level(aggregated_impact),
        )


# =============================================================================
# Quantitative analysis
# =============================================================================

@dataclass(frozen=True)
class MonteCarloSummary:
    iterations: int
    p5: float
    p50: float
    p95: float
    last_simulation: datetime = field(default_factory=_utc_now)


@dataclass(frozen=True)
class VaRSummary:
    var_95: float = 0.0
    var_99: float = 0.0
    expected_shortfall: float = 0.0
    calculated_at: datetime = field(default_factory=_utc_now)


@dataclass(frozen=True)
class QuantitativeAnalysis:
    monte_carlo: Optional[MonteCarloSummary] = None
    value_at_risk: Optional[VaRSummary] = None


# =============================================================================
# Treatment
# =============================================================================

@dataclass(frozen=True)
class AppliedControl:
    """A security control applied to a risk."""
    control_id: str
    effectiveness: float = 0.0
    implementation_cost: float = 0.0
    status: ControlStatus = ControlStatus.PLANNED
    implementation_date: Optional[date] = None

    def __post_init__(self):
        validate_unit_interval(self.effectiveness, "effectiveness")
        validate_range(self.implementation_cost, "implementation_cost", 0.0)
        _coerce(self, "status", ControlStatus)


@dataclass(frozen=True)
class ResidualRisk:
    probability: float = 0.0
    impact: float = 0.0
    value: float = 0.0
    risk_level: RiskLevel = RiskLevel.VERY_LOW

    def __post_init__(self):
        validate_unit_interval(self.probability, "residual.probability")
        validate_unit_interval(self.impact, "residual.impact")
        validate_unit_interval(self.value, "residual.value")
        _coerce(self, "risk_level", RiskLevel)


@dataclass(frozen=True)
class TreatmentROI:
    investment_cost: float = 0.0
    annual_savings: float = 0.0
    roi_pct: float = 0.0
    payback_period_years: float = math.inf


@dataclass(frozen=True)
class Treatment:
    strategy: TreatmentStrategy = TreatmentStrategy.MITIGATE
    status: TreatmentStatus = TreatmentStatus.IDENTIFIED
    priority: Priority = Priority.LOW
    applied_controls: tuple[AppliedControl, ...] = ()
    residual_risk: Optional[ResidualRisk] = None
    roi: Optional[TreatmentROI] = None

    def __post_init__(self):
        _coerce(self, "strategy", TreatmentStrategy)
        _coerce(self, "status", TreatmentStatus)
        _coerce(self, "priority", Priority)
        object.__setattr__(self, "applied_controls", tuple(self.applied_controls))


def combined_effectiveness(controls: tuple[AppliedControl, ...]) -> float:
    """Non-additive combined effectiveness of implemented controls.

    e = e + e_i x (1 - e) for each implemented control.
    """
    combined = 0.0
    for control in controls:
        if control.status == ControlStatus.IMPLEMENTED:
            combined = combined + control.effectiveness * (1.0 - combined)
    return combined


# =============================================================================
# Risk
# =============================================================================

@dataclass(frozen=True)
class Risk:
    """One evaluated asset/threat/vulnerability triad.

    Updates produce new instances (``dataclasses.replace``); ``version``
    is the optimistic concurrency counter owned by the persistence layer.
    """
    risk_id: str
    name: str
    organization_id: str
    asset_id: str
    threat_id: str
    vulnerability_id: str
    calculation: RiskCalculation
    classification: RiskClassification
    position: MatrixPosition
    threat_code: str = ""
    description: str = ""
    treatment: Treatment = field(default_factory=Treatment)
    quantitative: QuantitativeAnalysis = field(default_factory=QuantitativeAnalysis)
    review_frequency: ReviewFrequency = ReviewFrequency.QUARTERLY
    next_review_date: Optional[date] = None
    created_by: str = ""
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)
    version: int = 1

    def __post_init__(self):
        _coerce(self, "review_frequency", ReviewFrequency)

    @property
    def adjusted_risk(self) -> float:
        return self.calculation.adjusted_risk

    @property
    def expected_loss(self) -> float:
        return self.calculation.economic_impact.expected_loss

    @property
    def risk_level(self) -> RiskLevel:
        return self.classification.risk_level

    @property
    def inherent_risk_level(self) -> RiskLevel:
        """Level of the unadjusted base risk."""
        return level_for_value(self.calculation.base_risk)

    @property
    def total_control_effectiveness(self) -> float:
        return combined_effectiveness(self.treatment.applied_controls)

    def to_dict(self) -> dict[str, Any]:
        data = serialize(self)
        data["position"]["matrix_position"] = self.position.matrix_position
        data["position"]["risk_score"] = self.position.risk_score
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Risk":
        calc = data["calculation"]
        position = data["position"]
        treatment = data.get("treatment") or {}
        quantitative = data.get("quantitative") or {}

        residual = treatment.get("residual_risk")
        roi = treatment.get("roi")
        monte_carlo = quantitative.get("monte_carlo")
        value_at_risk = quantitative.get("value_at_risk")

        return cls(
            risk_id=data["risk_id"],
            name=data["name"],
            organization_id=data["organization_id"],
            asset_id=data["asset_id"],
            threat_id=data["threat_id"],
            vulnerability_id=data["vulnerability_id"],
            threat_code=data.get("threat_code", ""),
            description=data.get("description", ""),
            calculation=RiskCalculation(
                threat_probability=calc["threat_probability"],
                vulnerability_level=calc["vulnerability_level"],
                aggregated_impact=calc["aggregated_impact"],
                base_risk=calc["base_risk"],
                adjusted_risk=calc["adjusted_risk"],
                temporal_factor=calc["temporal_factor"],
                environmental_factor=calc["environmental_factor"],
                impact=DimensionImpact(**calc["impact"]),
                economic_impact=EconomicImpact(**calc["economic_impact"]),
            ),
            classification=RiskClassification(**data["classification"]),
            position=MatrixPosition(
                probability_level=position["probability_level"],
                impact_level=position["impact_level"],
            ),
            treatment=Treatment(
                strategy=treatment.get("strategy", TreatmentStrategy.MITIGATE),
                status=treatment.get("status", TreatmentStatus.IDENTIFIED),
                priority=treatment.get("priority", Priority.LOW),
                applied_controls=tuple(
                    AppliedControl(
                        control_id=c["control_id"],
                        effectiveness=c["effectiveness"],
                        implementation_cost=c["implementation_cost"],
                        status=c["status"],
                        implementation_date=_parse_date(c.get("implementation_date")),
                    )
                    for c in treatment.get("applied_controls", [])
                ),
                residual_risk=ResidualRisk(**residual) if residual else None,
                roi=TreatmentROI(
                    investment_cost=roi["investment_cost"],
                    annual_savings=roi["annual_savings"],
                    roi_pct=roi["roi_pct"],
                    payback_period_years=(
                        math.inf if roi["payback_period_years"] is None else roi["payback_period_years"]
                    ),
                ) if roi else None,
            ),
            quantitative=QuantitativeAnalysis(
                monte_carlo=MonteCarloSummary(
                    iterations=monte_carlo["iterations"],
                    p5=monte_carlo["p5"],
                    p50=monte_carlo["p50"],
                    p95=monte_carlo["p95"],
                    last_simulation=_parse_datetime(monte_carlo["last_simulation"]),
                ) if monte_carlo else None,
                value_at_risk=VaRSummary(
                    var_95=value_at_risk["var_95"],
                    var_99=value_at_risk["var_99"],
                    expected_shortfall=value_at_risk["expected_shortfall"],
                    calculated_at=_parse_datetime(value_at_risk["calculated_at"]),
                ) if value_at_risk else None,
            ),
            review_frequency=data.get("review_frequency", ReviewFrequency.QUARTERLY),
            next_review_date=_parse_date(data.get("next_review_date")),
            created_by=data.get("created_by", ""),
            created_at=_parse_datetime(data.get("created_at")) or _utc_now(),
            updated_at=_parse_datetime(data.get("updated_at")) or _utc_now(),
            version=data.get("version", 1),
        )
