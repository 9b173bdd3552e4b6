"""Repository Protocols.

Lookups and persistence the engine depends on. Implementations are
injected into the calculator and the service facade.
"""

from typing import Optional, Protocol

from magerisk.matrix.models import RiskMatrix
from magerisk.matrix.registry import DefaultSwap
from magerisk.triad.models import Asset, Risk, Threat, Vulnerability


class AssetRepository(Protocol):
    def get_asset(self, asset_id: str) -> Optional[Asset]: ...


class ThreatRepository(Protocol):
    def get_threat(self, threat_id: str) -> Optional[Threat]: ...


class VulnerabilityRepository(Protocol):
    def get_vulnerability(self, vulnerability_id: str) -> Optional[Vulnerability]: ...


class MatrixRepository(Protocol):
    def get_matrix(self, matrix_id: str) -> Optional[RiskMatrix]: ...

    def list_matrices(self, organization_id: str) -> list[RiskMatrix]: ...

    def save_matrix(self, matrix: RiskMatrix) -> RiskMatrix: ...

    def get_active_default(self, organization_id: str) -> Optional[RiskMatrix]: ...

    def activate_default(self, organization_id: str, matrix_id: str) -> DefaultSwap: ...


class RiskRepository(Protocol):
    def get_risk(self, risk_id: str) -> Optional[Risk]: ...

    def list_risks(self, organization_id: str) -> list[Risk]: ...

    def add_risk(self, risk: Risk) -> Risk: ...

    def update_risk(self, risk: Risk) -> Risk:
        """Store ``risk`` if its version matches; returns it with version + 1.

        Raises ConflictError on a version mismatch.
        """
        ...
