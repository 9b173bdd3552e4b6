"""In-Memory Repositories.

Thread-safe dictionary-backed implementations of every repository
protocol, used for tests and for embedding the engine without a
database.
"""

import dataclasses
import logging
import threading
from typing import Iterable, Optional

from magerisk.errors.exceptions import ConflictError, NotFoundError, RiskEngineError
from magerisk.matrix.models import RiskMatrix
from magerisk.matrix.registry import DefaultSwap, apply_default_swap, plan_default_swap
from magerisk.triad.models import Asset, Risk, Threat, Vulnerability

logger = logging.getLogger(__name__)


class InMemoryMatrixRepository:
    """Risk matrices keyed by id; default activation is atomic under a lock."""

    def __init__(self, matrices: Iterable[RiskMatrix] = ()):
        self._lock = threading.Lock()
        self._matrices: dict[str, RiskMatrix] = {m.matrix_id: m for m in matrices}

    def get_matrix(self, matrix_id: str) -> Optional[RiskMatrix]:
        with self._lock:
            return self._matrices.get(matrix_id)

    def list_matrices(self, organization_id: str) -> list[RiskMatrix]:
        with self._lock:
            return [m for m in self._matrices.values() if m.organization_id == organization_id]

    def save_matrix(self, matrix: RiskMatrix) -> RiskMatrix:
        """Store a matrix; a default-flagged matrix goes through the swap."""
        with self._lock:
            if matrix.is_default:
                previous = self._matrices.get(matrix.matrix_id)
                self._matrices[matrix.matrix_id] = dataclasses.replace(matrix, is_default=False)
                try:
                    self._swap_locked(matrix.organization_id, matrix.matrix_id)
                except RiskEngineError:
                    if previous is None:
                        del self._matrices[matrix.matrix_id]
                    else:
                        self._matrices[matrix.matrix_id] = previous
                    raise
            else:
                self._matrices[matrix.matrix_id] = matrix
            return self._matrices[matrix.matrix_id]

    def get_active_default(self, organization_id: str) -> Optional[RiskMatrix]:
        with self._lock:
            return next(
                (
                    m for m in self._matrices.values()
                    if m.organization_id == organization_id and m.is_default and m.is_active
                ),
                None,
            )

    def activate_default(self, organization_id: str, matrix_id: str) -> DefaultSwap:
        with self._lock:
            return self._swap_locked(organization_id, matrix_id)

    def _swap_locked(self, organization_id: str, matrix_id: str) -> DefaultSwap:
        swap = plan_default_swap(self._matrices.values(), organization_id, matrix_id)
        for changed in apply_default_swap(list(self._matrices.values()), swap):
            self._matrices[changed.matrix_id] = changed
        logger.info(
            "Default matrix for %s: %s -> %s",
            organization_id, swap.previous_default_id, swap.new_default_id,
        )
        return swap


class InMemoryRiskRepository:
    """Risks keyed by id with optimistic version checks on update."""

    def __init__(self):
        self._lock = threading.Lock()
        self._risks: dict[str, Risk] = {}

    def get_risk(self, risk_id: str) -> Optional[Risk]:
        with self._lock:
            return self._risks.get(risk_id)

    def list_risks(self, organization_id: str) -> list[Risk]:
        with self._lock:
            return [r for r in self._risks.values() if r.organization_id == organization_id]

    def add_risk(self, risk: Risk) -> Risk:
        with self._lock:
            if risk.risk_id in self._risks:
                raise ConflictError(
                    f"Risk {risk.risk_id} already exists",
                    resource_id=risk.risk_id,
                )
            self._risks[risk.risk_id] = risk
            return risk

    def update_risk(self, risk: Risk) -> Risk:
        with self._lock:
            current = self._risks.get(risk.risk_id)
            if current is None:
                raise NotFoundError(
                    f"Risk {risk.risk_id} not found",
                    resource_type="risk",
                    resource_id=risk.risk_id,
                )
            if current.version != risk.version:
                raise ConflictError(
                    f"Risk {risk.risk_id} was modified concurrently",
                    resource_id=risk.risk_id,
                    expected_version=risk.version,
                    actual_version=current.version,
                )
            stored = dataclasses.replace(risk, version=risk.version + 1)
            self._risks[risk.risk_id] = stored
            return stored


class InMemoryRepository(InMemoryMatrixRepository, InMemoryRiskRepository):
    """All engine collaborators in one in-memory store."""

    def __init__(self):
        InMemoryMatrixRepository.__init__(self)
        InMemoryRiskRepository.__init__(self)
        self._assets: dict[str, Asset] = {}
        self._threats: dict[str, Threat] = {}
        self._vulnerabilities: dict[str, Vulnerability] = {}

    # --- Entity registration ---

    def add_asset(self, asset: Asset) -> Asset:
        with self._lock:
            self._assets[asset.asset_id] = asset
        return asset

    def add_threat(self, threat: Threat) -> Threat:
        with self._lock:
            self._threats[threat.threat_id] = threat
        return threat

    def add_vulnerability(self, vulnerability: Vulnerability) -> Vulnerability:
        with self._lock:
            self._vulnerabilities[vulnerability.vulnerability_id] = vulnerability
        return vulnerability

    # --- Lookups ---

    def get_asset(self, asset_id: str) -> Optional[Asset]:
        with self._lock:
            return self._assets.get(asset_id)

    def get_threat(self, threat_id: str) -> Optional[Threat]:
        with self._lock:
            return self._threats.get(threat_id)

    def get_vulnerability(self, vulnerability_id: str) -> Optional[Vulnerability]:
        with self._lock:
            return self._vulnerabilities.get(vulnerability_id)
