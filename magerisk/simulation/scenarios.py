"""Deterministic Scenario Analysis.

Applies what-if multipliers to a portfolio's adjusted risks and
reclassifies each risk on the matrix breakpoints. No sampling.
"""

import logging
from typing import Optional, Protocol, Sequence

from magerisk.errors.validators import validate_scenarios
from magerisk.matrix.config import level_for_value
from magerisk.simulation.config import DEFAULT_SCENARIO_CONFIG, ScenarioConfig
from magerisk.simulation.models import Scenario, ScenarioResult

logger = logging.getLogger(__name__)

BASELINE = Scenario(name="baseline", description="Current portfolio without modifications")


class ScenarioRisk(Protocol):
    adjusted_risk: float
    expected_loss: float
    threat_code: str


class ScenarioAnalyzer:
    """What-if analysis over a set of risks.

    Example:
        analyzer = ScenarioAnalyzer()
        results = analyzer.analyze(risks, [
            Scenario("ransomware wave", probability_multiplier=1.5,
                     threat_multipliers={"A.24": 2.0}),
        ])
    """

    def __init__(self, config: Optional[ScenarioConfig] = None):
        self.config = config or DEFAULT_SCENARIO_CONFIG

    def analyze(
        self,
        risks: Sequence[ScenarioRisk],
        scenarios: Sequence[Scenario],
    ) -> list[ScenarioResult]:
        """One aggregate per scenario, in input order.

        Raises:
            ValidationError: not 1-10 scenarios, or a multiplier that is
                not finite and positive.
        """
        validate_scenarios(scenarios)
        results = [self._apply(risks, scenario) for scenario in scenarios]
        logger.debug("Analyzed %d scenarios over %d risks", len(results), len(risks))
        return results

    def baseline(self, risks: Sequence[ScenarioRisk]) -> ScenarioResult:
        """Aggregate of the unmodified portfolio."""
        return self._apply(risks, BASELINE)

    def _apply(self, risks: Sequence[ScenarioRisk], scenario: Scenario) -> ScenarioResult:
        result = ScenarioResult(name=scenario.name, description=scenario.description)
        for risk in risks:
            original = risk.adjusted_risk
            modified = min(max(original * scenario.multiplier_for(risk.threat_code), 0.0), 1.0)

            result.risk_distribution[level_for_value(modified, self.config.level_thresholds)] += 1
            result.total_risk += modified
            if original > 0:
                result.economic_impact += (risk.expected_loss or 0.0) * (modified / original)

        result.risk_count = len(risks)
        result.average_risk = result.total_risk / len(risks) if risks else 0.0
        return result
