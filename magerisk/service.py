"""Risk Engine Service.

Facade exposing the engine's external operations over injected
repositories: triad scoring, risk creation, Monte Carlo, organizational
VaR, scenario analysis, aggregation, escalation matching and
treatment.
"""

import dataclasses
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Union

import numpy as np

from magerisk.aggregation.kpis import calculate_kpis
from magerisk.aggregation.metrics import summarize_portfolio
from magerisk.aggregation.models import KPIResult, PortfolioSummary
from magerisk.calculator.engine import RiskCalculator
from magerisk.calculator.models import BaseRiskCalculation, RecalculationReport
from magerisk.calculator.treatment import apply_treatment
from magerisk.errors.exceptions import InvalidConfigurationError, NotFoundError
from magerisk.logging_config.context import RequestContext
from magerisk.matrix.models import EscalationMatch, RiskMatrix
from magerisk.matrix.registry import DefaultSwap
from magerisk.repository.protocols import (
    AssetRepository,
    MatrixRepository,
    RiskRepository,
    ThreatRepository,
    VulnerabilityRepository,
)
from magerisk.settings import Settings, get_settings
from magerisk.simulation.config import SimulationConfig, VaRConfig
from magerisk.simulation.models import MonteCarloResult, Scenario, ScenarioResult, VaRResult
from magerisk.simulation.monte_carlo import MonteCarloSimulator
from magerisk.simulation.sampling import make_rng
from magerisk.simulation.scenarios import ScenarioAnalyzer
from magerisk.simulation.var import VaRSimulator
from magerisk.triad.models import AppliedControl, MonteCarloSummary, Risk

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RiskEngine:
    """Stateless engine over explicit repositories.

    Each stochastic call draws from its own generator: the injected
    ``rng_factory`` when given, otherwise a fresh generator seeded from
    ``Settings.random_seed``.

    Example:
        repo = InMemoryRepository()
        engine = RiskEngine.from_repository(repo)
        var = engine.calculate_organizational_var("org-1", confidence_level=0.99)
    """

    def __init__(
        self,
        assets: AssetRepository,
        threats: ThreatRepository,
        vulnerabilities: VulnerabilityRepository,
        matrices: MatrixRepository,
        risks: RiskRepository,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rng_factory: Optional[Callable[[], np.random.Generator]] = None,
    ):
        self.settings = settings or get_settings()
        self._assets = assets
        self._matrices = matrices
        self._risks = risks
        self._clock = clock or _utc_now
        self._rng_factory = rng_factory or (lambda: make_rng(self.settings.random_seed))
        self.calculator = RiskCalculator(
            assets, threats, vulnerabilities, matrices, risks, clock=self._clock,
        )

    @classmethod
    def from_repository(cls, repository: Any, **kwargs: Any) -> "RiskEngine":
        """Engine whose five collaborators are one combined repository."""
        return cls(repository, repository, repository, repository, repository, **kwargs)

    # =========================================================================
    # Lookups
    # =========================================================================

    def _get_risk(self, risk_id: str) -> Risk:
        risk = self._risks.get_risk(risk_id)
        if risk is None:
            raise NotFoundError(f"Risk {risk_id} not found", resource_type="risk", resource_id=risk_id)
        return risk

    def _default_matrix(self, organization_id: str) -> RiskMatrix:
        matrix = self._matrices.get_active_default(organization_id)
        if matrix is None:
            raise InvalidConfigurationError(
                f"No active default risk matrix for organization {organization_id}",
                violations=["no active default matrix"],
            )
        return matrix

    # =========================================================================
    # Deterministic scoring
    # =========================================================================

    def calculate_base_risk(
        self,
        asset_id: str,
        threat_id: str,
        vulnerability_id: str,
        organization_id: str,
    ) -> BaseRiskCalculation:
        return self.calculator.calculate_base_risk(asset_id, threat_id, vulnerability_id, organization_id)

    async def calculate_base_risk_async(
        self,
        asset_id: str,
        threat_id: str,
        vulnerability_id: str,
        organization_id: str,
    ) -> BaseRiskCalculation:
        return await self.calculator.calculate_base_risk_async(
            asset_id, threat_id, vulnerability_id, organization_id,
        )

    def create_calculated_risk(
        self,
        asset_id: str,
        threat_id: str,
        vulnerability_id: str,
        organization_id: str,
        actor_id: str,
    ) -> Risk:
        with RequestContext(organization_id=organization_id, actor_id=actor_id):
            return self.calculator.create_calculated_risk(
                asset_id, threat_id, vulnerability_id, organization_id, actor_id,
            )

    def recalculate_organization_risks(self, organization_id: str) -> RecalculationReport:
        with RequestContext(organization_id=organization_id):
            return self.calculator.recalculate_organization_risks(organization_id)

    # =========================================================================
    # Simulation
    # =========================================================================

    def run_monte_carlo_simulation(self, risk_id: str, iterations: Optional[int] = None) -> MonteCarloResult:
        """Simulate a stored risk and record its confidence interval on it."""
        risk = self._get_risk(risk_id)
        simulator = MonteCarloSimulator(
            config=SimulationConfig(
                iterations=self.settings.monte_carlo_iterations,
                slow_threshold_ms=self.settings.slow_simulation_ms,
            ),
            rng=self._rng_factory(),
        )
        with RequestContext(organization_id=risk.organization_id):
            result = simulator.run(risk.calculation, iterations, risk_id=risk.risk_id)

        now = self._clock()
        summary = MonteCarloSummary(
            iterations=result.iterations,
            p5=result.confidence_interval.p5,
            p50=result.confidence_interval.p50,
            p95=result.confidence_interval.p95,
            last_simulation=now,
        )
        self._risks.update_risk(dataclasses.replace(
            risk,
            quantitative=dataclasses.replace(risk.quantitative, monte_carlo=summary),
            updated_at=now,
        ))
        return result

    def calculate_organizational_var(
        self,
        organization_id: str,
        confidence_level: Optional[float] = None,
        time_horizon: Optional[float] = None,
    ) -> VaRResult:
        """Portfolio VaR; stored risks are left unchanged."""
        simulator = VaRSimulator(
            config=VaRConfig(
                simulations=self.settings.var_simulations,
                slow_threshold_ms=self.settings.slow_simulation_ms,
            ),
            rng=self._rng_factory(),
        )
        risks = self._risks.list_risks(organization_id)
        with RequestContext(organization_id=organization_id):
            return simulator.run(
                risks,
                confidence_level=(
                    self.settings.default_confidence_level if confidence_level is None else confidence_level
                ),
                time_horizon=self.settings.default_time_horizon if time_horizon is None else time_horizon,
            )

    def perform_scenario_analysis(
        self,
        organization_id: str,
        scenarios: Sequence[Union[Scenario, Mapping[str, Any]]],
    ) -> list[ScenarioResult]:
        parsed = [s if isinstance(s, Scenario) else Scenario.from_dict(s) for s in scenarios]
        with RequestContext(organization_id=organization_id):
            return ScenarioAnalyzer().analyze(self._risks.list_risks(organization_id), parsed)

    # =========================================================================
    # Aggregation
    # =========================================================================

    def portfolio_summary(self, organization_id: str) -> PortfolioSummary:
        return summarize_portfolio(self._risks.list_risks(organization_id), self._clock())

    def calculate_kpis(self, organization_id: str) -> list[KPIResult]:
        """KPIs of the organization's default matrix."""
        matrix = self._default_matrix(organization_id)
        return calculate_kpis(matrix, self._risks.list_risks(organization_id), self._clock())

    # =========================================================================
    # Matrix and treatment
    # =========================================================================

    def activate_default_matrix(self, organization_id: str, matrix_id: str) -> DefaultSwap:
        return self._matrices.activate_default(organization_id, matrix_id)

    def check_escalations(self, risk_id: str) -> list[EscalationMatch]:
        """Escalation rules of the default matrix that the risk triggers."""
        risk = self._get_risk(risk_id)
        matches = self._default_matrix(risk.organization_id).check_escalation_rules(risk, now=self._clock())
        if matches:
            logger.info("Risk %s triggered %d escalation rules", risk_id, len(matches))
        return matches

    def apply_treatment(self, risk_id: str, controls: Iterable[AppliedControl]) -> Risk:
        """Record controls on a risk with its residual risk and ROI."""
        risk = self._get_risk(risk_id)
        asset = self._assets.get_asset(risk.asset_id)
        if asset is None:
            raise NotFoundError(
                f"Asset {risk.asset_id} not found",
                resource_type="asset",
                resource_id=risk.asset_id,
            )
        treated = apply_treatment(risk, controls, asset_value=asset.economic_value, now=self._clock())
        return self._risks.update_risk(treated)
