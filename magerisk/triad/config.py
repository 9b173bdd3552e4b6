"""Risk Triad Configuration.

Enums for asset, threat and vulnerability attributes and for the risk
classification and treatment lifecycle.
"""

from enum import Enum


MAGERIT_DIMENSIONS = (
    "confidentiality",
    "integrity",
    "availability",
    "authenticity",
    "traceability",
)

MAX_VALUATION = 10.0


# =============================================================================
# Asset attributes
# =============================================================================

class AssetType(str, Enum):
    """MAGERIT asset classes."""
    ESSENTIAL_SERVICES = "essential_services"
    DATA = "data"
    KEY_DATA = "key_data"
    SOFTWARE = "software"
    HARDWARE = "hardware"
    COMMUNICATION_NETWORKS = "communication_networks"
    SUPPORT_EQUIPMENT = "support_equipment"
    INSTALLATIONS = "installations"
    PERSONNEL = "personnel"


class Exposure(str, Enum):
    PUBLIC = "public"
    PARTNER = "partner"
    INTERNAL = "internal"
    RESTRICTED = "restricted"


class BusinessCriticality(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class BusinessFunction(str, Enum):
    CORE_BUSINESS = "core_business"
    SUPPORT = "support"
    MANAGEMENT = "management"
    COMPLIANCE = "compliance"


# =============================================================================
# Threat and vulnerability attributes
# =============================================================================

class GeographicRelevance(str, Enum):
    VERY_LOW = "very_low"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


class ExploitMaturity(str, Enum):
    """CVSS temporal exploit code maturity."""
    UNPROVEN = "unproven"
    PROOF_OF_CONCEPT = "proof_of_concept"
    FUNCTIONAL = "functional"
    HIGH = "high"
    NOT_DEFINED = "not_defined"


class RemediationLevel(str, Enum):
    OFFICIAL_FIX = "official_fix"
    TEMPORARY_FIX = "temporary_fix"
    WORKAROUND = "workaround"
    UNAVAILABLE = "unavailable"
    NOT_DEFINED = "not_defined"


class ReportConfidence(str, Enum):
    UNKNOWN = "unknown"
    REASONABLE = "reasonable"
    CONFIRMED = "confirmed"
    NOT_DEFINED = "not_defined"


# =============================================================================
# Risk classification and treatment
# =============================================================================

class RiskCategory(str, Enum):
    OPERATIONAL = "operational"
    STRATEGIC = "strategic"
    FINANCIAL = "financial"
    COMPLIANCE = "compliance"
    REPUTATIONAL = "reputational"
    TECHNICAL = "technical"


class TreatmentStrategy(str, Enum):
    ACCEPT = "accept"
    MITIGATE = "mitigate"
    TRANSFER = "transfer"
    AVOID = "avoid"


class TreatmentStatus(str, Enum):
    IDENTIFIED = "identified"
    ANALYZED = "analyzed"
    TREATMENT_PLANNED = "treatment_planned"
    TREATMENT_IN_PROGRESS = "treatment_in_progress"
    MONITORED = "monitored"
    CLOSED = "closed"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ReviewFrequency(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"


class ControlStatus(str, Enum):
    PLANNED = "planned"
    IMPLEMENTING = "implementing"
    IMPLEMENTED = "implemented"
    NOT_EFFECTIVE = "not_effective"
