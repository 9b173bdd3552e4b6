"""Engine Repositories.

Collaborator protocols and thread-safe in-memory implementations.
"""

from magerisk.repository.memory import (
    InMemoryMatrixRepository,
    InMemoryRepository,
    InMemoryRiskRepository,
)
from magerisk.repository.protocols import (
    AssetRepository,
    MatrixRepository,
    RiskRepository,
    ThreatRepository,
    VulnerabilityRepository,
)

__all__ = [
    # Protocols
    "AssetRepository",
    "MatrixRepository",
    "RiskRepository",
    "ThreatRepository",
    "VulnerabilityRepository",
    # In-memory
    "InMemoryMatrixRepository",
    "InMemoryRepository",
    "InMemoryRiskRepository",
]
