"""Risk Triad.

Asset, threat and vulnerability snapshots and the immutable Risk value
struct built from them.
"""

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
from magerisk.triad.models import (
    AppliedControl,
    Asset,
    AssetValuation,
    DimensionImpact,
    EconomicImpact,
    MatrixPosition,
    MonteCarloSummary,
    QuantitativeAnalysis,
    ResidualRisk,
    Risk,
    RiskCalculation,
    RiskClassification,
    Seasonality,
    Threat,
    Treatment,
    TreatmentROI,
    VaRSummary,
    Vulnerability,
    combined_effectiveness,
    serialize,
)

__all__ = [
    # Config
    "MAGERIT_DIMENSIONS",
    "MAX_VALUATION",
    "AssetType",
    "BusinessCriticality",
    "BusinessFunction",
    "ControlStatus",
    "ExploitMaturity",
    "Exposure",
    "GeographicRelevance",
    "Priority",
    "RemediationLevel",
    "ReportConfidence",
    "ReviewFrequency",
    "RiskCategory",
    "TreatmentStatus",
    "TreatmentStrategy",
    # Entities
    "Asset",
    "AssetValuation",
    "Seasonality",
    "Threat",
    "Vulnerability",
    # Risk
    "AppliedControl",
    "DimensionImpact",
    "EconomicImpact",
    "MatrixPosition",
    "MonteCarloSummary",
    "QuantitativeAnalysis",
    "ResidualRisk",
    "Risk",
    "RiskCalculation",
    "RiskClassification",
    "Treatment",
    "TreatmentROI",
    "VaRSummary",
    "combined_effectiveness",
    "serialize",
]
