"""Deterministic Risk Calculator.

Factor functions for threat probability, aggregated impact, temporal
and environmental adjustment; treatment maths; and the RiskCalculator
that resolves, scores and classifies risk triads.
"""

from magerisk.calculator.config import (
    ASSET_TYPE_CATEGORIES,
    GEOGRAPHIC_MULTIPLIERS,
    LEVEL_STRATEGIES,
    CalculatorConfig,
    DEFAULT_CALCULATOR_CONFIG,
)
from magerisk.calculator.engine import RiskCalculator
from magerisk.calculator.factors import (
    calculate_aggregated_impact,
    calculate_economic_impact,
    calculate_environmental_factor,
    calculate_temporal_factor,
    calculate_threat_probability,
    dimension_contributions,
    geographic_multiplier,
)
from magerisk.calculator.models import (
    BaseRiskCalculation,
    RecalculationError,
    RecalculationReport,
)
from magerisk.calculator.treatment import (
    apply_treatment,
    calculate_residual_risk,
    calculate_treatment_roi,
    determine_default_strategy,
    determine_priority,
    determine_review_frequency,
    determine_risk_category,
    next_review_date,
    total_control_effectiveness,
)

__all__ = [
    # Config
    "ASSET_TYPE_CATEGORIES",
    "GEOGRAPHIC_MULTIPLIERS",
    "LEVEL_STRATEGIES",
    "CalculatorConfig",
    "DEFAULT_CALCULATOR_CONFIG",
    # Models
    "BaseRiskCalculation",
    "RecalculationError",
    "RecalculationReport",
    # Factors
    "calculate_aggregated_impact",
    "calculate_economic_impact",
    "calculate_environmental_factor",
    "calculate_temporal_factor",
    "calculate_threat_probability",
    "dimension_contributions",
    "geographic_multiplier",
    # Treatment
    "apply_treatment",
    "calculate_residual_risk",
    "calculate_treatment_roi",
    "determine_default_strategy",
    "determine_priority",
    "determine_review_frequency",
    "determine_risk_category",
    "next_review_date",
    "total_control_effectiveness",
    # Engine
    "RiskCalculator",
]
