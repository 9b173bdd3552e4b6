"""Treatment and Classification Rules.

Residual risk after controls, treatment ROI, and the lookup rules that
assign priority, review cadence, default strategy and category to a
newly calculated risk.
"""

import calendar
import dataclasses
import logging
import math
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional

from magerisk.calculator.config import (
    ASSET_TYPE_CATEGORIES,
    DEFAULT_CALCULATOR_CONFIG,
    LEVEL_STRATEGIES,
    PRIORITY_THRESHOLDS,
    REVIEW_INTERVAL_MONTHS,
    REVIEW_THRESHOLDS,
    CalculatorConfig,
)
from magerisk.matrix.config import RiskLevel, level_for_value
from magerisk.triad.config import (
    ControlStatus,
    Priority,
    ReviewFrequency,
    RiskCategory,
    TreatmentStatus,
    TreatmentStrategy,
)
from magerisk.triad.models import (
    AppliedControl,
    Asset,
    ResidualRisk,
    Risk,
    RiskCalculation,
    TreatmentROI,
    combined_effectiveness,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Controls and residual risk
# =============================================================================

def total_control_effectiveness(controls: Iterable[AppliedControl]) -> float:
    return combined_effectiveness(tuple(controls))


def calculate_residual_risk(
    calculation: RiskCalculation,
    controls: Iterable[AppliedControl],
    config: CalculatorConfig = DEFAULT_CALCULATOR_CONFIG,
) -> ResidualRisk:
    """Residual risk once implemented controls are in place.

    Controls cut probability by their combined effectiveness and impact
    by half of it.
    """
    effectiveness = total_control_effectiveness(controls)
    probability = calculation.threat_probability * (1.0 - effectiveness)
    impact = calculation.aggregated_impact * (1.0 - effectiveness * config.residual_impact_weight)
    value = probability * calculation.vulnerability_level * impact
    return ResidualRisk(
        probability=probability,
        impact=impact,
        value=value,
        risk_level=level_for_value(value),
    )


def calculate_treatment_roi(
    adjusted_risk: float,
    residual: ResidualRisk,
    controls: Iterable[AppliedControl],
    asset_value: float,
) -> TreatmentROI:
    """Return on the controls' investment.

    Zero investment yields roi 0 and an infinite payback period.
    """
    annual_savings = (adjusted_risk - residual.value) * (asset_value or 0.0)
    investment = sum(c.implementation_cost for c in controls)

    if investment == 0:
        return TreatmentROI(investment_cost=0.0, annual_savings=annual_savings)

    roi_pct = (annual_savings - investment) / investment * 100
    payback = investment / annual_savings if annual_savings > 0 else math.inf
    return TreatmentROI(
        investment_cost=investment,
        annual_savings=annual_savings,
        roi_pct=roi_pct,
        payback_period_years=payback,
    )


# =============================================================================
# Classification rules
# =============================================================================

def determine_priority(adjusted_risk: float) -> Priority:
    for lower, priority in PRIORITY_THRESHOLDS:
        if adjusted_risk >= lower:
            return priority
    return Priority.LOW


def determine_review_frequency(adjusted_risk: float) -> ReviewFrequency:
    for lower, frequency in REVIEW_THRESHOLDS:
        if adjusted_risk >= lower:
            return frequency
    return ReviewFrequency.ANNUALLY


def _add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def next_review_date(frequency: ReviewFrequency, today: date) -> date:
    """Next review date; month arithmetic clamps to the month's last day."""
    frequency = ReviewFrequency(frequency)
    if frequency == ReviewFrequency.WEEKLY:
        return today + timedelta(days=7)
    return _add_months(today, REVIEW_INTERVAL_MONTHS[frequency])


def determine_default_strategy(risk_level: RiskLevel) -> TreatmentStrategy:
    return LEVEL_STRATEGIES.get(RiskLevel(risk_level), TreatmentStrategy.MITIGATE)


def determine_risk_category(asset: Asset) -> RiskCategory:
    return ASSET_TYPE_CATEGORIES.get(asset.asset_type, RiskCategory.OPERATIONAL)


# =============================================================================
# Treatment application
# =============================================================================

def _treatment_status(controls: tuple[AppliedControl, ...]) -> TreatmentStatus:
    implemented = [c for c in controls if c.status == ControlStatus.IMPLEMENTED]
    if not controls:
        return TreatmentStatus.ANALYZED
    if not implemented:
        return TreatmentStatus.TREATMENT_PLANNED
    if len(implemented) < len(controls):
        return TreatmentStatus.TREATMENT_IN_PROGRESS
    return TreatmentStatus.MONITORED


def apply_treatment(
    risk: Risk,
    controls: Iterable[AppliedControl],
    asset_value: float = 0.0,
    now: Optional[datetime] = None,
    config: CalculatorConfig = DEFAULT_CALCULATOR_CONFIG,
) -> Risk:
    """Replacement risk with the controls, residual risk and ROI recorded."""
    controls = tuple(controls)
    residual = calculate_residual_risk(risk.calculation, controls, config)
    roi = calculate_treatment_roi(risk.adjusted_risk, residual, controls, asset_value)
    treatment = dataclasses.replace(
        risk.treatment,
        applied_controls=controls,
        residual_risk=residual,
        roi=roi,
        status=_treatment_status(controls),
    )
    logger.debug(
        "Applied %d controls to risk %s: residual %.4f (%s)",
        len(controls), risk.risk_id, residual.value, residual.risk_level.value,
    )
    return dataclasses.replace(
        risk,
        treatment=treatment,
        updated_at=now or datetime.now(timezone.utc),
    )
