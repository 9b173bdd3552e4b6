"""Deterministic Risk Calculator.

Resolves a risk triad through injected repositories, scores it and
classifies it against the organization's default risk matrix. Every
operation returns a complete replacement object; persisting it is the
risk repository's job.
"""

import asyncio
import dataclasses
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from magerisk.calculator.config import DEFAULT_CALCULATOR_CONFIG, CalculatorConfig
from magerisk.calculator.factors import (
    calculate_aggregated_impact,
    calculate_environmental_factor,
    calculate_temporal_factor,
    calculate_threat_probability,
    dimension_contributions,
)
from magerisk.calculator.models import BaseRiskCalculation, RecalculationError, RecalculationReport
from magerisk.calculator.treatment import (
    calculate_residual_risk,
    calculate_treatment_roi,
    determine_default_strategy,
    determine_priority,
    determine_review_frequency,
    determine_risk_category,
    next_review_date,
)
from magerisk.errors.exceptions import (
    InconsistentReferenceError,
    InvalidConfigurationError,
    NotFoundError,
    RiskEngineError,
)
from magerisk.matrix.models import MatrixCell, RiskMatrix
from magerisk.repository.protocols import (
    AssetRepository,
    MatrixRepository,
    RiskRepository,
    ThreatRepository,
    VulnerabilityRepository,
)
from magerisk.triad.config import TreatmentStatus
from magerisk.triad.models import (
    Asset,
    MatrixPosition,
    Risk,
    RiskCalculation,
    RiskClassification,
    Threat,
    Treatment,
    Vulnerability,
)

logger = logging.getLogger(__name__)

Triad = tuple[Asset, Threat, Vulnerability]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RiskCalculator:
    """Scores asset/threat/vulnerability triads.

    Stateless between calls: all state lives in the injected repositories,
    so one instance can serve concurrent callers.

    Example:
        calculator = RiskCalculator(repo, repo, repo, repo, repo)
        result = calculator.calculate_base_risk("a1", "t1", "v1", "org-1")
        print(result.adjusted_risk)
    """

    def __init__(
        self,
        assets: AssetRepository,
        threats: ThreatRepository,
        vulnerabilities: VulnerabilityRepository,
        matrices: MatrixRepository,
        risks: RiskRepository,
        clock: Optional[Callable[[], datetime]] = None,
        config: Optional[CalculatorConfig] = None,
    ):
        self._assets = assets
        self._threats = threats
        self._vulnerabilities = vulnerabilities
        self._matrices = matrices
        self._risks = risks
        self._clock = clock or _utc_now
        self.config = config or DEFAULT_CALCULATOR_CONFIG

    # =========================================================================
    # Triad resolution
    # =========================================================================

    def _resolve(
        self,
        asset_id: str,
        threat_id: str,
        vulnerability_id: str,
        organization_id: str,
    ) -> Triad:
        return self._check_triad(
            self._assets.get_asset(asset_id),
            self._threats.get_threat(threat_id),
            self._vulnerabilities.get_vulnerability(vulnerability_id),
            asset_id,
            threat_id,
            vulnerability_id,
            organization_id,
        )

    async def _resolve_async(
        self,
        asset_id: str,
        threat_id: str,
        vulnerability_id: str,
        organization_id: str,
    ) -> Triad:
        asset, threat, vulnerability = await asyncio.gather(
            asyncio.to_thread(self._assets.get_asset, asset_id),
            asyncio.to_thread(self._threats.get_threat, threat_id),
            asyncio.to_thread(self._vulnerabilities.get_vulnerability, vulnerability_id),
        )
        return self._check_triad(
            asset, threat, vulnerability,
            asset_id, threat_id, vulnerability_id, organization_id,
        )

    @staticmethod
    def _check_triad(
        asset: Optional[Asset],
        threat: Optional[Threat],
        vulnerability: Optional[Vulnerability],
        asset_id: str,
        threat_id: str,
        vulnerability_id: str,
        organization_id: str,
    ) -> Triad:
        if asset is None or asset.organization_id != organization_id:
            raise NotFoundError(
                f"Asset {asset_id} not found in organization {organization_id}",
                resource_type="asset",
                resource_id=asset_id,
            )
        if threat is None:
            raise NotFoundError(
                f"Threat {threat_id} not found",
                resource_type="threat",
                resource_id=threat_id,
            )
        if vulnerability is None:
            raise NotFoundError(
                f"Vulnerability {vulnerability_id} not found",
                resource_type="vulnerability",
                resource_id=vulnerability_id,
            )
        if vulnerability.asset_id != asset.asset_id:
            raise InconsistentReferenceError(
                f"Vulnerability {vulnerability_id} belongs to asset {vulnerability.asset_id}, not {asset_id}",
                vulnerability_id=vulnerability_id,
                asset_id=asset_id,
                recorded_asset_id=vulnerability.asset_id,
            )
        return asset, threat, vulnerability

    # =========================================================================
    # Scoring
    # =========================================================================

    def build_calculation(
        self,
        asset: Asset,
        threat: Threat,
        vulnerability: Vulnerability,
        as_of: Optional[datetime] = None,
    ) -> RiskCalculation:
        """Full calculation block for a resolved triad."""
        as_of = as_of or self._clock()
        return RiskCalculation.compose(
            threat_probability=calculate_threat_probability(threat, asset, as_of.month, self.config),
            vulnerability_level=vulnerability.vulnerability_level,
            aggregated_impact=calculate_aggregated_impact(asset, vulnerability, self.config),
            temporal_factor=calculate_temporal_factor(vulnerability, as_of, self.config),
            environmental_factor=calculate_environmental_factor(asset, self.config),
            impact=dimension_contributions(asset, vulnerability, self.config),
            asset_value=asset.economic_value,
        )

    @staticmethod
    def _summarize(calculation: RiskCalculation) -> BaseRiskCalculation:
        return BaseRiskCalculation(
            threat_probability=calculation.threat_probability,
            vulnerability_level=calculation.vulnerability_level,
            aggregated_impact=calculation.aggregated_impact,
            base_risk=calculation.base_risk,
            temporal_factor=calculation.temporal_factor,
            environmental_factor=calculation.environmental_factor,
            adjusted_risk=calculation.adjusted_risk,
        )

    def calculate_base_risk(
        self,
        asset_id: str,
        threat_id: str,
        vulnerability_id: str,
        organization_id: str,
    ) -> BaseRiskCalculation:
        """Factor breakdown for a triad.

        Raises:
            NotFoundError: asset, threat or vulnerability is missing.
            InconsistentReferenceError: vulnerability belongs to another asset.
        """
        triad = self._resolve(asset_id, threat_id, vulnerability_id, organization_id)
        return self._summarize(self.build_calculation(*triad))

    async def calculate_base_risk_async(
        self,
        asset_id: str,
        threat_id: str,
        vulnerability_id: str,
        organization_id: str,
    ) -> BaseRiskCalculation:
        """Same as ``calculate_base_risk`` with the three lookups run concurrently."""
        triad = await self._resolve_async(asset_id, threat_id, vulnerability_id, organization_id)
        return self._summarize(self.build_calculation(*triad))

    # =========================================================================
    # Classification
    # =========================================================================

    def _default_matrix(self, organization_id: str) -> RiskMatrix:
        matrix = self._matrices.get_active_default(organization_id)
        if matrix is None:
            raise InvalidConfigurationError(
                f"No active default risk matrix for organization {organization_id}",
                violations=["no active default matrix"],
            )
        violations = matrix.validate_configuration()
        if violations:
            raise InvalidConfigurationError(
                f"Default risk matrix {matrix.matrix_id} failed validation",
                violations=violations,
            )
        return matrix

    @staticmethod
    def _classify(matrix: RiskMatrix, position: MatrixPosition) -> MatrixCell:
        cell = matrix.get_risk_level(position.probability_level, position.impact_level)
        if cell is None:
            raise InvalidConfigurationError(
                f"Risk matrix {matrix.matrix_id} has no cell {position.matrix_position}",
                violations=[f"missing cell {position.matrix_position}"],
            )
        return cell

    @staticmethod
    def _risk_id(asset: Asset, threat: Threat) -> str:
        asset_prefix = (asset.name or asset.asset_id)[:3].upper()
        threat_code = threat.magerit_code.replace(".", "")
        return f"{asset_prefix}-{threat_code}-{uuid.uuid4().hex[:8]}"

    def create_calculated_risk(
        self,
        asset_id: str,
        threat_id: str,
        vulnerability_id: str,
        organization_id: str,
        actor_id: str,
    ) -> Risk:
        """Evaluate a triad, classify it and store the new risk.

        Raises:
            NotFoundError / InconsistentReferenceError: as ``calculate_base_risk``.
            InvalidConfigurationError: no usable default matrix.
        """
        asset, threat, vulnerability = self._resolve(asset_id, threat_id, vulnerability_id, organization_id)
        matrix = self._default_matrix(organization_id)

        now = self._clock()
        calculation = self.build_calculation(asset, threat, vulnerability, as_of=now)
        position = MatrixPosition.from_calculation(
            calculation.threat_probability, calculation.aggregated_impact,
        )
        cell = self._classify(matrix, position)
        review_frequency = determine_review_frequency(calculation.adjusted_risk)

        risk = Risk(
            risk_id=self._risk_id(asset, threat),
            name=f"{asset.name} - {threat.name}",
            description=f"Risk of threat {threat.magerit_code} on asset {asset.name}",
            organization_id=organization_id,
            asset_id=asset.asset_id,
            threat_id=threat.threat_id,
            vulnerability_id=vulnerability.vulnerability_id,
            threat_code=threat.magerit_code,
            calculation=calculation,
            classification=RiskClassification(
                risk_level=cell.risk_level,
                category=determine_risk_category(asset),
                business_function=asset.business_function,
            ),
            position=position,
            treatment=Treatment(
                strategy=determine_default_strategy(cell.risk_level),
                status=TreatmentStatus.IDENTIFIED,
                priority=determine_priority(calculation.adjusted_risk),
            ),
            review_frequency=review_frequency,
            next_review_date=next_review_date(review_frequency, now.date()),
            created_by=actor_id,
            created_at=now,
            updated_at=now,
        )
        stored = self._risks.add_risk(risk)
        logger.info(
            "Created risk %s (%s, adjusted %.4f) for %s",
            stored.risk_id, cell.risk_level.value, calculation.adjusted_risk, organization_id,
        )
        return stored

    # =========================================================================
    # Recalculation
    # =========================================================================

    def recalculate_risk(self, risk: Risk) -> Risk:
        """Replacement risk with fresh factors and classification.

        The version is left untouched; the repository bumps it on update.
        Without a default matrix the previous risk level is kept.
        """
        asset, threat, vulnerability = self._resolve(
            risk.asset_id, risk.threat_id, risk.vulnerability_id, risk.organization_id,
        )
        now = self._clock()
        calculation = self.build_calculation(asset, threat, vulnerability, as_of=now)
        position = MatrixPosition.from_calculation(
            calculation.threat_probability, calculation.aggregated_impact,
        )

        risk_level = risk.classification.risk_level
        matrix = self._matrices.get_active_default(risk.organization_id)
        if matrix is not None:
            risk_level = self._classify(matrix, position).risk_level

        treatment = risk.treatment
        if treatment.applied_controls:
            residual = calculate_residual_risk(calculation, treatment.applied_controls, self.config)
            treatment = dataclasses.replace(
                treatment,
                residual_risk=residual,
                roi=calculate_treatment_roi(
                    calculation.adjusted_risk, residual, treatment.applied_controls, asset.economic_value,
                ),
            )

        return dataclasses.replace(
            risk,
            calculation=calculation,
            position=position,
            classification=dataclasses.replace(risk.classification, risk_level=risk_level),
            treatment=treatment,
            updated_at=now,
        )

    def recalculate_organization_risks(self, organization_id: str) -> RecalculationReport:
        """Recalculate and store every risk of an organization.

        Per-risk engine errors are collected in the report, not raised.
        """
        report = RecalculationReport(organization_id=organization_id)
        for risk in self._risks.list_risks(organization_id):
            try:
                self._risks.update_risk(self.recalculate_risk(risk))
                report.updated += 1
            except RiskEngineError as exc:
                report.errors.append(RecalculationError(
                    risk_id=risk.risk_id,
                    error_code=exc.error_code.value,
                    message=exc.message,
                ))
            report.processed += 1

        logger.info(
            "Recalculated %d/%d risks for %s",
            report.updated, report.processed, organization_id,
        )
        return report
