"""Risk Factor Functions.

Pure functions computing the factors of
``base_risk = threat_probability x vulnerability_level x aggregated_impact``
and the temporal / environmental adjustments applied on top of it.
"""

from datetime import datetime, timezone
from typing import Optional

from magerisk.calculator.config import (
    CRITICALITY_ADJUSTMENTS,
    CVE_RECENCY_INCREMENTS,
    DEFAULT_CALCULATOR_CONFIG,
    EXPLOIT_MATURITY_INCREMENTS,
    EXPOSURE_ADJUSTMENTS,
    REMEDIATION_INCREMENTS,
    REPORT_CONFIDENCE_INCREMENTS,
    CalculatorConfig,
)
from magerisk.triad.config import MAGERIT_DIMENSIONS, MAX_VALUATION, GeographicRelevance
from magerisk.triad.models import Asset, DimensionImpact, EconomicImpact, Threat, Vulnerability


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def geographic_multiplier(
    relevance: GeographicRelevance,
    config: CalculatorConfig = DEFAULT_CALCULATOR_CONFIG,
) -> float:
    return config.geographic_multipliers.get(GeographicRelevance(relevance), 1.0)


def calculate_threat_probability(
    threat: Threat,
    asset: Asset,
    month: int,
    config: CalculatorConfig = DEFAULT_CALCULATOR_CONFIG,
) -> float:
    """Threat probability for an asset in a given calendar month.

    Applies the partial-applicability penalty when the asset type is not
    in the threat's susceptible set, the geographic multiplier and the
    seasonal multiplier for peak months. Clamped to 1.0.
    """
    probability = threat.base_probability

    if asset.asset_type not in threat.susceptible_asset_types:
        probability *= config.partial_applicability_penalty

    probability *= geographic_multiplier(threat.geographic_relevance, config)

    seasonality = threat.seasonality
    if seasonality.has_seasonality and month in seasonality.peak_months:
        probability *= seasonality.seasonal_multiplier

    return min(probability, 1.0)


def _weights(asset: Asset) -> Optional[dict[str, float]]:
    if asset.valuation is None:
        return None
    return {dim: asset.valuation.get(dim) / MAX_VALUATION for dim in MAGERIT_DIMENSIONS}


def calculate_aggregated_impact(
    asset: Asset,
    vulnerability: Vulnerability,
    config: CalculatorConfig = DEFAULT_CALCULATOR_CONFIG,
) -> float:
    """Valuation-weighted mean of the per-dimension vulnerability impacts.

    Zero total weight gives 0; a missing valuation gives the neutral impact.
    """
    weights = _weights(asset)
    if weights is None:
        return config.neutral_impact

    total_weight = sum(weights.values())
    if total_weight == 0:
        return 0.0

    weighted = sum(weights[dim] * vulnerability.impact_on(dim) for dim in MAGERIT_DIMENSIONS)
    return weighted / total_weight


def dimension_contributions(
    asset: Asset,
    vulnerability: Vulnerability,
    config: CalculatorConfig = DEFAULT_CALCULATOR_CONFIG,
) -> DimensionImpact:
    """Split the aggregated impact into per-dimension contributions.

    Uses the same valuation weights as ``calculate_aggregated_impact`` so
    the contributions always sum to the aggregated impact. Without a
    valuation the neutral impact is spread evenly.
    """
    weights = _weights(asset)
    if weights is None:
        share = config.neutral_impact / len(MAGERIT_DIMENSIONS)
        return DimensionImpact(**{dim: share for dim in MAGERIT_DIMENSIONS})

    total_weight = sum(weights.values())
    if total_weight == 0:
        return DimensionImpact()

    return DimensionImpact(**{
        dim: weights[dim] * vulnerability.impact_on(dim) / total_weight
        for dim in MAGERIT_DIMENSIONS
    })


def _age_days(published: datetime, as_of: datetime) -> float:
    if published.tzinfo is None:
        published = published.replace(tzinfo=timezone.utc)
    if as_of.tzinfo is None:
        as_of = as_of.replace(tzinfo=timezone.utc)
    return (as_of - published).total_seconds() / 86400


def calculate_temporal_factor(
    vulnerability: Vulnerability,
    as_of: datetime,
    config: CalculatorConfig = DEFAULT_CALCULATOR_CONFIG,
) -> float:
    """CVSS-style temporal factor in [1, 2]."""
    factor = 1.0
    factor += EXPLOIT_MATURITY_INCREMENTS.get(vulnerability.exploit_code_maturity, 0.0)
    factor += REMEDIATION_INCREMENTS.get(vulnerability.remediation_level, 0.0)
    factor += REPORT_CONFIDENCE_INCREMENTS.get(vulnerability.report_confidence, 0.0)

    if vulnerability.cve_published_at is not None:
        age = _age_days(vulnerability.cve_published_at, as_of)
        for max_age, increment in CVE_RECENCY_INCREMENTS:
            if age <= max_age:
                factor += increment
                break

    return min(factor, config.max_temporal_factor)


def calculate_environmental_factor(
    asset: Asset,
    config: CalculatorConfig = DEFAULT_CALCULATOR_CONFIG,
) -> float:
    """Exposure and criticality adjustment, clamped to [0.5, 1.5]."""
    factor = 1.0
    factor += EXPOSURE_ADJUSTMENTS.get(asset.exposure, 0.0)
    factor += CRITICALITY_ADJUSTMENTS.get(asset.business_criticality, 0.0)
    return _clamp(factor, config.min_environmental_factor, config.max_environmental_factor)


def calculate_economic_impact(
    asset_value: float,
    aggregated_impact: float,
    adjusted_risk: float,
) -> EconomicImpact:
    return EconomicImpact.from_values(asset_value, aggregated_impact, adjusted_risk)
