"""Tests for deterministic scenario analysis."""

from types import SimpleNamespace

import pytest

from magerisk.errors import ValidationError
from magerisk.matrix import RiskLevel
from magerisk.simulation import Scenario, ScenarioAnalyzer


def _risk(adjusted: float, expected: float, code: str = "A.24") -> SimpleNamespace:
    return SimpleNamespace(adjusted_risk=adjusted, expected_loss=expected, threat_code=code)


PORTFOLIO = [
    _risk(0.3168, 15_840, "A.24"),
    _risk(0.1, 1_000, "E.1"),
    _risk(0.7, 70_000, "A.11"),
]


class TestScenarioAnalyzer:
    def test_identity_scenario_equals_baseline(self):
        analyzer = ScenarioAnalyzer()
        [identity] = analyzer.analyze(PORTFOLIO, [Scenario(name="identity")])
        baseline = analyzer.baseline(PORTFOLIO)
        assert identity.total_risk == pytest.approx(baseline.total_risk)
        assert identity.economic_impact == pytest.approx(baseline.economic_impact)
        assert identity.risk_distribution == baseline.risk_distribution

    def test_baseline_aggregates(self):
        baseline = ScenarioAnalyzer().baseline(PORTFOLIO)
        assert baseline.risk_count == 3
        assert baseline.total_risk == pytest.approx(1.1168)
        assert baseline.average_risk == pytest.approx(1.1168 / 3)
        assert baseline.economic_impact == pytest.approx(86_840)
        assert baseline.risk_distribution[RiskLevel.VERY_LOW] == 1  # 0.1
        assert baseline.risk_distribution[RiskLevel.LOW] == 1  # 0.3168
        assert baseline.risk_distribution[RiskLevel.HIGH] == 1  # 0.7
        assert baseline.risk_distribution[RiskLevel.CRITICAL] == 0

    def test_levels_use_value_thresholds(self):
        risks = [_risk(0.7, 7_000), _risk(0.5, 5_000), _risk(0.18, 1_800), _risk(0.8, 8_000)]
        distribution = ScenarioAnalyzer().baseline(risks).risk_distribution
        assert distribution[RiskLevel.CRITICAL] == 1
        assert distribution[RiskLevel.HIGH] == 1
        assert distribution[RiskLevel.MEDIUM] == 1
        assert distribution[RiskLevel.LOW] == 0
        assert distribution[RiskLevel.VERY_LOW] == 1

    def test_multipliers_and_threat_specific_factor(self):
        scenario = Scenario(
            name="ransomware wave",
            probability_multiplier=1.5,
            threat_multipliers={"A.24": 2.0},
        )
        [result] = ScenarioAnalyzer().analyze(PORTFOLIO, [scenario])
        # 0.3168 x 3 -> 0.9504, 0.1 x 1.5 -> 0.15, 0.7 x 1.5 -> capped at 1
        assert result.total_risk == pytest.approx(0.9504 + 0.15 + 1.0)
        assert result.economic_impact == pytest.approx(15_840 * 3 + 1_000 * 1.5 + 70_000 / 0.7)
        assert result.risk_distribution[RiskLevel.CRITICAL] == 2

    def test_results_keep_input_order(self):
        names = [r.name for r in ScenarioAnalyzer().analyze(PORTFOLIO, [
            Scenario(name="b"), Scenario(name="a", impact_multiplier=0.5),
        ])]
        assert names == ["b", "a"]

    def test_empty_portfolio(self):
        [result] = ScenarioAnalyzer().analyze([], [Scenario(name="x")])
        assert result.risk_count == 0
        assert result.average_risk == 0.0

    def test_zero_risk_has_no_economic_impact(self):
        [result] = ScenarioAnalyzer().analyze([_risk(0.0, 5_000)], [Scenario(name="x", probability_multiplier=3)])
        assert result.economic_impact == 0.0

    @pytest.mark.parametrize("count", [0, 11])
    def test_scenario_count_bounds(self, count):
        with pytest.raises(ValidationError):
            ScenarioAnalyzer().analyze(PORTFOLIO, [Scenario(name=f"s{i}") for i in range(count)])

    @pytest.mark.parametrize("scenario", [
        Scenario(name="neg", probability_multiplier=-1),
        Scenario(name="zero", impact_multiplier=0),
        Scenario(name="threat", threat_multipliers={"A.24": 0}),
        Scenario(name=""),
    ])
    def test_invalid_scenarios(self, scenario):
        with pytest.raises(ValidationError):
            ScenarioAnalyzer().analyze(PORTFOLIO, [scenario])

    def test_from_dict(self):
        scenario = Scenario.from_dict({
            "name": "pandemic", "impact_multiplier": 1.2, "threat_multipliers": {"E.1": 1.5},
        })
        assert scenario.multiplier_for("E.1") == pytest.approx(1.8)
        assert scenario.multiplier_for("A.24") == pytest.approx(1.2)
        assert ScenarioAnalyzer().analyze(PORTFOLIO, [scenario])[0].to_dict()["name"] == "pandemic"
