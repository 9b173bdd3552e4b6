"""Risk Matrix Model.

Versioned probability x impact matrices: scales, exhaustive cell
tables, tolerance bands, escalation rules and KPI definitions, plus
builders for the default and MAGERIT standard matrices and the
default-matrix swap plan.
"""

from magerisk.matrix.builder import (
    clone_matrix,
    create_magerit_standard,
    generate_default_cells,
    generate_default_matrix,
)
from magerisk.matrix.config import (
    DEFAULT_SCALE_LEVELS,
    LEVEL_ACTIONS,
    LEVEL_COLORS,
    LEVEL_SCORE_BREAKPOINTS,
    LEVEL_VALUE_THRESHOLDS,
    MAX_SCALE_LEVELS,
    MIN_SCALE_LEVELS,
    BusinessImpact,
    EscalationActionType,
    EscalationRole,
    KPICalculation,
    KPIStatus,
    MatrixAction,
    RiskLevel,
    ScaleDimension,
    ToleranceBand,
    level_for_score,
    level_for_value,
)
from magerisk.matrix.models import (
    DimensionScale,
    EscalationAction,
    EscalationCondition,
    EscalationMatch,
    EscalationRule,
    KPIDefinition,
    KPIThreshold,
    MatrixCell,
    NumericRange,
    RiskMatrix,
    ScaleLevel,
    ToleranceBands,
    ToleranceThreshold,
    TreatmentRecommendation,
)
from magerisk.matrix.registry import DefaultSwap, apply_default_swap, plan_default_swap

__all__ = [
    # Config
    "DEFAULT_SCALE_LEVELS",
    "LEVEL_ACTIONS",
    "LEVEL_COLORS",
    "LEVEL_SCORE_BREAKPOINTS",
    "LEVEL_VALUE_THRESHOLDS",
    "MAX_SCALE_LEVELS",
    "MIN_SCALE_LEVELS",
    "BusinessImpact",
    "EscalationActionType",
    "EscalationRole",
    "KPICalculation",
    "KPIStatus",
    "MatrixAction",
    "RiskLevel",
    "ScaleDimension",
    "ToleranceBand",
    "level_for_score",
    "level_for_value",
    # Models
    "DimensionScale",
    "EscalationAction",
    "EscalationCondition",
    "EscalationMatch",
    "EscalationRule",
    "KPIDefinition",
    "KPIThreshold",
    "MatrixCell",
    "NumericRange",
    "RiskMatrix",
    "ScaleLevel",
    "ToleranceBands",
    "ToleranceThreshold",
    "TreatmentRecommendation",
    # Builders
    "clone_matrix",
    "create_magerit_standard",
    "generate_default_cells",
    "generate_default_matrix",
    # Registry
    "DefaultSwap",
    "apply_default_swap",
    "plan_default_swap",
]
