"""Risk Matrix Configuration.

Enums, level breakpoints, colors and the MAGERIT standard scale
definitions used to build and classify risk matrices.
"""

import math
from enum import Enum


# =============================================================================
# Enums
# =============================================================================

class RiskLevel(str, Enum):
    """Qualitative risk level, ordered from lowest to highest."""
    VERY_LOW = "very_low"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _LEVEL_ORDER.index(self)


_LEVEL_ORDER = [
    RiskLevel.VERY_LOW,
    RiskLevel.LOW,
    RiskLevel.MEDIUM,
    RiskLevel.HIGH,
    RiskLevel.CRITICAL,
]


class MatrixAction(str, Enum):
    """Recommended action attached to a matrix cell."""
    ACCEPT = "accept"
    MONITOR = "monitor"
    MITIGATE = "mitigate"
    TRANSFER = "transfer"
    AVOID = "avoid"


class ToleranceBand(str, Enum):
    """Organizational risk tolerance band."""
    ACCEPTABLE = "acceptable"
    TOLERABLE = "tolerable"
    UNACCEPTABLE = "unacceptable"


class EscalationActionType(str, Enum):
    NOTIFY = "notify"
    ASSIGN = "assign"
    ESCALATE = "escalate"
    AUTO_MITIGATE = "auto_mitigate"


class EscalationRole(str, Enum):
    ANALYST = "analyst"
    MANAGER = "manager"
    EXECUTIVE = "executive"
    ADMIN = "admin"


class BusinessImpact(str, Enum):
    MINIMAL = "minimal"
    MINOR = "minor"
    MODERATE = "moderate"
    MAJOR = "major"
    SEVERE = "severe"
    CATASTROPHIC = "catastrophic"


class ScaleDimension(str, Enum):
    PROBABILITY = "probability"
    IMPACT = "impact"


class KPICalculation(str, Enum):
    COUNT = "count"
    PERCENTAGE = "percentage"
    AVERAGE = "average"
    SUM = "sum"
    RATIO = "ratio"


class KPIStatus(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


# =============================================================================
# Constants
# =============================================================================

MIN_SCALE_LEVELS = 3
MAX_SCALE_LEVELS = 7
DEFAULT_SCALE_LEVELS = 5

# Upper score bound (inclusive) for each level; anything above is critical.
LEVEL_SCORE_BREAKPOINTS = (
    (4, RiskLevel.VERY_LOW),
    (8, RiskLevel.LOW),
    (12, RiskLevel.MEDIUM),
    (16, RiskLevel.HIGH),
)

LEVEL_COLORS = {
    RiskLevel.VERY_LOW: "#4CAF50",
    RiskLevel.LOW: "#8BC34A",
    RiskLevel.MEDIUM: "#FFC107",
    RiskLevel.HIGH: "#FF9800",
    RiskLevel.CRITICAL: "#F44336",
}

LEVEL_ACTIONS = {
    RiskLevel.VERY_LOW: MatrixAction.ACCEPT,
    RiskLevel.LOW: MatrixAction.MONITOR,
    RiskLevel.MEDIUM: MatrixAction.MITIGATE,
    RiskLevel.HIGH: MatrixAction.MITIGATE,
    RiskLevel.CRITICAL: MatrixAction.AVOID,
}

# Lower bounds (inclusive) for classifying a continuous [0,1] risk value.
# Matrix cells use LEVEL_SCORE_BREAKPOINTS instead.
LEVEL_VALUE_THRESHOLDS = (
    (0.8, RiskLevel.CRITICAL),
    (0.6, RiskLevel.HIGH),
    (0.4, RiskLevel.MEDIUM),
    (0.2, RiskLevel.LOW),
)

MAGERIT_PROBABILITY_SCALE = (
    # level, label, description, min, max, color
    (1, "Very Low", "Less than once every 10 years", 0.0, 0.2, "#E8F5E8"),
    (2, "Low", "Once every 5-10 years", 0.2, 0.4, "#C8E6C9"),
    (3, "Medium", "Once every 2-5 years", 0.4, 0.6, "#FFF3E0"),
    (4, "High", "About once a year", 0.6, 0.8, "#FFE0B2"),
    (5, "Very High", "Several times a year", 0.8, 1.0, "#FFCDD2"),
)

MAGERIT_IMPACT_SCALE = (
    # level, label, description, min, max, business impact, color
    (1, "Very Low", "Negligible impact on the organization", 0, 10_000, BusinessImpact.MINIMAL, "#E8F5E8"),
    (2, "Low", "Minor but manageable impact", 10_000, 50_000, BusinessImpact.MINOR, "#C8E6C9"),
    (3, "Medium", "Significant impact requiring attention", 50_000, 250_000, BusinessImpact.MODERATE, "#FFF3E0"),
    (4, "High", "Severe impact on critical operations", 250_000, 1_000_000, BusinessImpact.MAJOR, "#FFE0B2"),
    (5, "Very High", "Catastrophic impact for the organization", 1_000_000, math.inf, BusinessImpact.CATASTROPHIC, "#FFCDD2"),
)


def level_for_score(score: float) -> RiskLevel:
    """Map a probability x impact score to a risk level."""
    for upper, level in LEVEL_SCORE_BREAKPOINTS:
        if score <= upper:
            return level
    return RiskLevel.CRITICAL


def level_for_value(value: float, thresholds=LEVEL_VALUE_THRESHOLDS) -> RiskLevel:
    """Classify a [0,1] risk value (adjusted, residual or inherent risk)."""
    for lower, level in thresholds:
        if value >= lower:
            return level
    return RiskLevel.VERY_LOW
