"""Risk Calculator Configuration."""

from dataclasses import dataclass, field
from typing import Mapping

from magerisk.matrix.config import RiskLevel
from magerisk.triad.config import (
    AssetType,
    BusinessCriticality,
    ExploitMaturity,
    Exposure,
    GeographicRelevance,
    Priority,
    RemediationLevel,
    ReportConfidence,
    ReviewFrequency,
    RiskCategory,
    TreatmentStrategy,
)


GEOGRAPHIC_MULTIPLIERS = {
    GeographicRelevance.VERY_LOW: 0.5,
    GeographicRelevance.LOW: 0.7,
    GeographicRelevance.MEDIUM: 1.0,
    GeographicRelevance.HIGH: 1.3,
    GeographicRelevance.VERY_HIGH: 1.6,
}

EXPLOIT_MATURITY_INCREMENTS = {
    ExploitMaturity.HIGH: 0.3,
    ExploitMaturity.FUNCTIONAL: 0.2,
    ExploitMaturity.PROOF_OF_CONCEPT: 0.1,
}

REMEDIATION_INCREMENTS = {
    RemediationLevel.UNAVAILABLE: 0.2,
    RemediationLevel.WORKAROUND: 0.1,
}

REPORT_CONFIDENCE_INCREMENTS = {
    ReportConfidence.CONFIRMED: 0.1,
}

# (max age in days, increment) checked in order
CVE_RECENCY_INCREMENTS = ((30, 0.2), (90, 0.1))

EXPOSURE_ADJUSTMENTS = {
    Exposure.PUBLIC: 0.3,
    Exposure.PARTNER: 0.2,
    Exposure.INTERNAL: 0.0,
    Exposure.RESTRICTED: -0.1,
}

CRITICALITY_ADJUSTMENTS = {
    BusinessCriticality.CRITICAL: 0.2,
    BusinessCriticality.HIGH: 0.1,
    BusinessCriticality.MEDIUM: 0.0,
    BusinessCriticality.LOW: -0.1,
}

ASSET_TYPE_CATEGORIES = {
    AssetType.ESSENTIAL_SERVICES: RiskCategory.OPERATIONAL,
    AssetType.DATA: RiskCategory.OPERATIONAL,
    AssetType.KEY_DATA: RiskCategory.COMPLIANCE,
    AssetType.SOFTWARE: RiskCategory.TECHNICAL,
    AssetType.HARDWARE: RiskCategory.TECHNICAL,
    AssetType.COMMUNICATION_NETWORKS: RiskCategory.TECHNICAL,
    AssetType.SUPPORT_EQUIPMENT: RiskCategory.OPERATIONAL,
    AssetType.INSTALLATIONS: RiskCategory.OPERATIONAL,
    AssetType.PERSONNEL: RiskCategory.OPERATIONAL,
}

LEVEL_STRATEGIES = {
    RiskLevel.VERY_LOW: TreatmentStrategy.ACCEPT,
    RiskLevel.LOW: TreatmentStrategy.ACCEPT,
    RiskLevel.MEDIUM: TreatmentStrategy.MITIGATE,
    RiskLevel.HIGH: TreatmentStrategy.MITIGATE,
    RiskLevel.CRITICAL: TreatmentStrategy.MITIGATE,
}

# Lower adjusted-risk bound (inclusive) for each priority / review frequency
PRIORITY_THRESHOLDS = (
    (0.8, Priority.CRITICAL),
    (0.6, Priority.HIGH),
    (0.4, Priority.MEDIUM),
)

REVIEW_THRESHOLDS = (
    (0.8, ReviewFrequency.WEEKLY),
    (0.6, ReviewFrequency.MONTHLY),
    (0.4, ReviewFrequency.QUARTERLY),
)

REVIEW_INTERVAL_MONTHS = {
    ReviewFrequency.MONTHLY: 1,
    ReviewFrequency.QUARTERLY: 3,
    ReviewFrequency.ANNUALLY: 12,
}


@dataclass(frozen=True)
class CalculatorConfig:
    """Deterministic calculator configuration."""
    partial_applicability_penalty: float = 0.5
    neutral_impact: float = 0.5
    max_temporal_factor: float = 2.0
    min_environmental_factor: float = 0.5
    max_environmental_factor: float = 1.5
    # Residual impact falls by half the control effectiveness
    residual_impact_weight: float = 0.5
    geographic_multipliers: Mapping[GeographicRelevance, float] = field(
        default_factory=lambda: dict(GEOGRAPHIC_MULTIPLIERS)
    )


DEFAULT_CALCULATOR_CONFIG = CalculatorConfig()
