"""Risk Matrix Data Models.

A RiskMatrix is an immutable, versioned configuration: probability and
impact scales, the exhaustive probability x impact cell table,
tolerance bands, escalation rules and KPI definitions.
"""

import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import cached_property
from typing import Any, Mapping, Optional

from magerisk.errors.exceptions import InvalidConfigurationError
from magerisk.matrix.config import (
    MAX_SCALE_LEVELS,
    MIN_SCALE_LEVELS,
    BusinessImpact,
    EscalationActionType,
    EscalationRole,
    KPICalculation,
    MatrixAction,
    RiskLevel,
    ScaleDimension,
    ToleranceBand,
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


def _optional_float(value: Any, default: float) -> float:
    return default if value is None else float(value)


# =============================================================================
# Scales
# =============================================================================

@dataclass(frozen=True)
class NumericRange:
    """Closed numeric range [min, max]."""
    min: float = 0.0
    max: float = 0.0

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def overlaps(self, other: "NumericRange") -> bool:
        """True when the ranges share more than a boundary point."""
        return self.min < other.max and other.min < self.max


@dataclass(frozen=True)
class ScaleLevel:
    """One level of a probability or impact scale."""
    level: int
    label: str
    range: NumericRange
    description: str = ""
    color: str = ""
    qualitative_descriptor: str = ""
    business_impact: Optional[BusinessImpact] = None


@dataclass(frozen=True)
class DimensionScale:
    """A probability or impact scale with its declared level count."""
    levels: int = 5
    scale: tuple[ScaleLevel, ...] = ()

    def __post_init__(self):
        if not MIN_SCALE_LEVELS <= self.levels <= MAX_SCALE_LEVELS:
            raise InvalidConfigurationError(
                f"Scale must declare between {MIN_SCALE_LEVELS} and {MAX_SCALE_LEVELS} levels, got {self.levels}",
                violations=[f"scale levels out of range: {self.levels}"],
            )
        object.__setattr__(self, "scale", tuple(sorted(self.scale, key=lambda s: s.level)))


# =============================================================================
# Cells, tolerance and escalation
# =============================================================================

@dataclass(frozen=True)
class MatrixCell:
    """Classification of one (probability, impact) combination."""
    probability_level: int
    impact_level: int
    risk_level: RiskLevel
    risk_score: int
    color: str
    action: MatrixAction
    action_description: str = ""

    def __post_init__(self):
        object.__setattr__(self, "risk_level", RiskLevel(self.risk_level))
        object.__setattr__(self, "action", MatrixAction(self.action))


@dataclass(frozen=True)
class ToleranceThreshold:
    levels: tuple[RiskLevel, ...] = ()
    max_score: Optional[int] = None
    min_score: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "levels", tuple(RiskLevel(lv) for lv in self.levels))


@dataclass(frozen=True)
class ToleranceBands:
    """Organizational tolerance to risk, by score and by level set."""
    acceptable: ToleranceThreshold = field(
        default_factory=lambda: ToleranceThreshold(
            levels=(RiskLevel.VERY_LOW, RiskLevel.LOW), max_score=6,
        )
    )
    tolerable: ToleranceThreshold = field(
        default_factory=lambda: ToleranceThreshold(levels=(RiskLevel.MEDIUM,), max_score=12)
    )
    unacceptable: ToleranceThreshold = field(
        default_factory=lambda: ToleranceThreshold(
            levels=(RiskLevel.HIGH, RiskLevel.CRITICAL), min_score=13,
        )
    )

    def band_for_score(self, score: float) -> ToleranceBand:
        if self.acceptable.max_score is not None and score <= self.acceptable.max_score:
            return ToleranceBand.ACCEPTABLE
        if self.tolerable.max_score is not None and score <= self.tolerable.max_score:
            return ToleranceBand.TOLERABLE
        return ToleranceBand.UNACCEPTABLE

    def band_for_level(self, level: RiskLevel) -> ToleranceBand:
        level = RiskLevel(level)
        if level in self.unacceptable.levels:
            return ToleranceBand.UNACCEPTABLE
        if level in self.tolerable.levels:
            return ToleranceBand.TOLERABLE
        return ToleranceBand.ACCEPTABLE


@dataclass(frozen=True)
class EscalationCondition:
    """Condition part of an escalation rule; unset bounds are not checked."""
    risk_level: Optional[RiskLevel] = None
    min_score: Optional[int] = None
    max_score: Optional[int] = None

    def __post_init__(self):
        if self.risk_level is not None:
            object.__setattr__(self, "risk_level", RiskLevel(self.risk_level))

    def matches(self, risk_level: RiskLevel, risk_score: float) -> bool:
        if self.risk_level is not None and self.risk_level != RiskLevel(risk_level):
            return False
        if self.min_score is not None and risk_score < self.min_score:
            return False
        if self.max_score is not None and risk_score > self.max_score:
            return False
        return True


@dataclass(frozen=True)
class EscalationAction:
    action_type: EscalationActionType
    target_role: Optional[EscalationRole] = None
    target_user: Optional[str] = None
    department: Optional[str] = None
    timeframe_hours: Optional[float] = None
    message: str = ""

    def __post_init__(self):
        object.__setattr__(self, "action_type", EscalationActionType(self.action_type))
        if self.target_role is not None:
            object.__setattr__(self, "target_role", EscalationRole(self.target_role))


@dataclass(frozen=True)
class EscalationRule:
    condition: EscalationCondition
    actions: tuple[EscalationAction, ...] = ()
    name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "actions", tuple(self.actions))


@dataclass(frozen=True)
class EscalationMatch:
    """A rule whose condition holds for a risk, with its ordered actions."""
    rule: EscalationRule
    actions: tuple[EscalationAction, ...]
    risk_id: str = ""
    triggered_at: datetime = field(default_factory=_utc_now)


@dataclass(frozen=True)
class TreatmentRecommendation:
    priority: str
    action: MatrixAction
    description: str
    timeframe: str


# =============================================================================
# KPI definitions
# =============================================================================

_OPERATORS = {
    "<": lambda a, b: a < b,
    "<=": lambda a, b: a <= b,
    ">": lambda a, b: a > b,
    ">=": lambda a, b: a >= b,
    "=": lambda a, b: a == b,
}


@dataclass(frozen=True)
class KPIThreshold:
    operator: str
    value: float

    def __post_init__(self):
        if self.operator not in _OPERATORS:
            raise InvalidConfigurationError(
                f"Unknown KPI threshold operator: {self.operator!r}",
                violations=[f"kpi operator {self.operator!r}"],
            )

    def evaluate(self, value: float) -> bool:
        return _OPERATORS[self.operator](value, self.value)


@dataclass(frozen=True)
class KPIDefinition:
    """A KPI computed over the organization's risks."""
    name: str
    calculation: KPICalculation
    description: str = ""
    risk_levels: tuple[RiskLevel, ...] = ()
    categories: tuple[str, ...] = ()
    date_range_days: Optional[int] = None
    yellow: Optional[KPIThreshold] = None
    red: Optional[KPIThreshold] = None

    def __post_init__(self):
        object.__setattr__(self, "calculation", KPICalculation(self.calculation))
        object.__setattr__(self, "risk_levels", tuple(RiskLevel(lv) for lv in self.risk_levels))
        object.__setattr__(self, "categories", tuple(self.categories))


# =============================================================================
# Risk matrix
# =============================================================================

@dataclass(frozen=True)
class RiskMatrix:
    """Probability x impact classification matrix for one organization.

    Construction fails when the cell table does not hold exactly
    ``probability.levels x impact.levels`` cells.

    Example:
        matrix = create_magerit_standard("org-1")
        cell = matrix.get_risk_level(5, 5)
        print(cell.risk_level, cell.action)  # critical avoid
    """
    organization_id: str
    probability: DimensionScale
    impact: DimensionScale
    cells: tuple[MatrixCell, ...]
    name: str = "Risk Matrix"
    matrix_id: str = field(default_factory=_new_id)
    description: str = ""
    version: str = "1.0"
    tolerance: ToleranceBands = field(default_factory=ToleranceBands)
    escalation_rules: tuple[EscalationRule, ...] = ()
    kpis: tuple[KPIDefinition, ...] = ()
    is_default: bool = False
    is_active: bool = True
    created_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self):
        object.__setattr__(self, "cells", tuple(self.cells))
        object.__setattr__(self, "escalation_rules", tuple(self.escalation_rules))
        object.__setattr__(self, "kpis", tuple(self.kpis))
        if len(self.cells) != self.matrix_size:
            raise InvalidConfigurationError(
                f"Risk matrix must have {self.matrix_size} cells "
                f"({self.probability.levels}x{self.impact.levels}), got {len(self.cells)}",
                violations=["risk matrix incomplete"],
            )

    @property
    def matrix_size(self) -> int:
        return self.probability.levels * self.impact.levels

    @cached_property
    def _cell_index(self) -> dict[tuple[int, int], MatrixCell]:
        return {(c.probability_level, c.impact_level): c for c in self.cells}

    def get_risk_level(self, probability_level: int, impact_level: int) -> Optional[MatrixCell]:
        """Exact cell lookup; None signals a configuration defect."""
        return self._cell_index.get((probability_level, impact_level))

    def get_scale_level(self, dimension: ScaleDimension, value: float) -> Optional[ScaleLevel]:
        """Map a numeric value to its scale entry by range containment.

        Falls back to the lowest level when no range contains the value.
        """
        scale = self._scale(dimension).scale
        if not scale:
            return None
        for level in scale:
            if level.range.contains(value):
                return level
        return scale[0]

    def validate_configuration(self) -> list[str]:
        """Return every configuration violation (empty when valid)."""
        errors = []

        for dimension in ScaleDimension:
            dim_scale = self._scale(dimension)
            if len(dim_scale.scale) != dim_scale.levels:
                errors.append(
                    f"{dimension.value} scale incomplete: {dim_scale.levels} levels declared, "
                    f"{len(dim_scale.scale)} defined"
                )
            for prev, curr in zip(dim_scale.scale, dim_scale.scale[1:]):
                if curr.range.min < prev.range.max:
                    errors.append(
                        f"{dimension.value} ranges overlap between levels {prev.level} and {curr.level}"
                    )
                    break

        if len(self.cells) != self.matrix_size:
            errors.append(f"risk matrix incomplete: {len(self.cells)} of {self.matrix_size} cells")
        missing = [
            (p, i)
            for p in range(1, self.probability.levels + 1)
            for i in range(1, self.impact.levels + 1)
            if (p, i) not in self._cell_index
        ]
        if missing:
            errors.append(f"risk matrix missing cells: {', '.join(f'{p}{i}' for p, i in missing)}")

        return errors

    @property
    def is_valid(self) -> bool:
        return not self.validate_configuration()

    def check_escalation_rules(self, risk: Any, now: Optional[datetime] = None) -> list[EscalationMatch]:
        """Rules whose condition holds for ``risk``.

        Matching only; acting on the returned actions is the notification
        layer's job.
        """
        level = risk.classification.risk_level
        score = risk.position.risk_score
        triggered_at = now or _utc_now()
        return [
            EscalationMatch(
                rule=rule,
                actions=rule.actions,
                risk_id=getattr(risk, "risk_id", ""),
                triggered_at=triggered_at,
            )
            for rule in self.escalation_rules
            if rule.condition.matches(level, score)
        ]

    def tolerance_band(self, score: float) -> ToleranceBand:
        return self.tolerance.band_for_score(score)

    def treatment_recommendations(self, risk_level: RiskLevel) -> list[TreatmentRecommendation]:
        """Tolerance-driven treatment recommendation for a risk level."""
        band = self.tolerance.band_for_level(risk_level)
        if band == ToleranceBand.UNACCEPTABLE:
            return [TreatmentRecommendation(
                priority="immediate",
                action=MatrixAction.MITIGATE,
                description="Unacceptable risk - requires immediate mitigation",
                timeframe="24 hours",
            )]
        if band == ToleranceBand.TOLERABLE:
            return [TreatmentRecommendation(
                priority="high",
                action=MatrixAction.MONITOR,
                description="Tolerable risk - monitor and plan mitigation",
                timeframe="1 week",
            )]
        return [TreatmentRecommendation(
            priority="low",
            action=MatrixAction.ACCEPT,
            description="Acceptable risk - keep routine monitoring",
            timeframe="1 month",
        )]

    def _scale(self, dimension: ScaleDimension) -> DimensionScale:
        dimension = ScaleDimension(dimension)
        return self.probability if dimension == ScaleDimension.PROBABILITY else self.impact

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        from magerisk.triad.models import serialize

        return serialize(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RiskMatrix":
        def scale(d: Mapping[str, Any]) -> DimensionScale:
            return DimensionScale(
                levels=d["levels"],
                scale=tuple(
                    ScaleLevel(
                        level=s["level"],
                        label=s["label"],
                        range=NumericRange(
                            min=_optional_float(s["range"]["min"], 0.0),
                            max=_optional_float(s["range"]["max"], math.inf),
                        ),
                        description=s.get("description", ""),
                        color=s.get("color", ""),
                        qualitative_descriptor=s.get("qualitative_descriptor", ""),
                        business_impact=(
                            BusinessImpact(s["business_impact"]) if s.get("business_impact") else None
                        ),
                    )
                    for s in d["scale"]
                ),
            )

        def threshold(d: Optional[Mapping[str, Any]]) -> Optional[KPIThreshold]:
            return KPIThreshold(operator=d["operator"], value=d["value"]) if d else None

        tolerance = data.get("tolerance")
        created_at = data.get("created_at")

        return cls(
            matrix_id=data["matrix_id"],
            organization_id=data["organization_id"],
            name=data.get("name", "Risk Matrix"),
            description=data.get("description", ""),
            version=data.get("version", "1.0"),
            probability=scale(data["probability"]),
            impact=scale(data["impact"]),
            cells=tuple(MatrixCell(**c) for c in data["cells"]),
            tolerance=ToleranceBands(
                acceptable=ToleranceThreshold(**tolerance["acceptable"]),
                tolerable=ToleranceThreshold(**tolerance["tolerable"]),
                unacceptable=ToleranceThreshold(**tolerance["unacceptable"]),
            ) if tolerance else ToleranceBands(),
            escalation_rules=tuple(
                EscalationRule(
                    name=r.get("name", ""),
                    condition=EscalationCondition(**r["condition"]),
                    actions=tuple(EscalationAction(**a) for a in r["actions"]),
                )
                for r in data.get("escalation_rules", [])
            ),
            kpis=tuple(
                KPIDefinition(
                    name=k["name"],
                    calculation=k["calculation"],
                    description=k.get("description", ""),
                    risk_levels=tuple(k.get("risk_levels", ())),
                    categories=tuple(k.get("categories", ())),
                    date_range_days=k.get("date_range_days"),
                    yellow=threshold(k.get("yellow")),
                    red=threshold(k.get("red")),
                )
                for k in data.get("kpis", [])
            ),
            is_default=data.get("is_default", False),
            is_active=data.get("is_active", True),
            created_at=datetime.fromisoformat(created_at) if created_at else _utc_now(),
        )
