"""Tests for the RiskEngine facade."""

import asyncio
import dataclasses
import logging

import numpy as np
import pytest

from conftest import FIXED_NOW, ORG, make_asset, make_threat, make_vulnerability
from magerisk.errors import InvalidConfigurationError, NotFoundError, ValidationError
from magerisk.matrix import (
    EscalationAction,
    EscalationActionType,
    EscalationCondition,
    EscalationRole,
    EscalationRule,
    KPIDefinition,
    KPIStatus,
    KPIThreshold,
    RiskLevel,
    clone_matrix,
)
from magerisk.repository import InMemoryRepository
from magerisk.service import RiskEngine
from magerisk.settings import Settings
from magerisk.simulation import Scenario
from magerisk.triad import AppliedControl, ControlStatus, TreatmentStatus


@pytest.fixture
def risk(engine):
    return engine.create_calculated_risk("a1", "t1", "v1", ORG, "analyst")


def _add_second_risk(repo, engine):
    repo.add_asset(make_asset("a2", name="Payroll"))
    repo.add_threat(make_threat("t2", magerit_code="E.1", base_probability=0.3))
    repo.add_vulnerability(make_vulnerability("v2", asset_id="a2", vulnerability_level=0.5))
    return engine.create_calculated_risk("a2", "t2", "v2", ORG, "analyst")


class TestScoring:
    def test_base_risk(self, engine):
        result = engine.calculate_base_risk("a1", "t1", "v1", ORG)
        assert result.adjusted_risk == pytest.approx(0.3168)

    def test_base_risk_async(self, engine):
        result = asyncio.run(engine.calculate_base_risk_async("a1", "t1", "v1", ORG))
        assert result.base_risk == pytest.approx(0.24)

    def test_create_and_recalculate(self, engine, repo, risk):
        assert repo.get_risk(risk.risk_id) == risk
        report = engine.recalculate_organization_risks(ORG)
        assert report.updated == 1
        assert repo.get_risk(risk.risk_id).version == risk.version + 1


class TestMonteCarlo:
    def test_records_summary_on_risk(self, engine, repo, risk):
        result = engine.run_monte_carlo_simulation(risk.risk_id)
        assert result.iterations == 2_000
        stored = repo.get_risk(risk.risk_id)
        summary = stored.quantitative.monte_carlo
        assert summary.p5 == result.confidence_interval.p5
        assert summary.p95 == result.confidence_interval.p95
        assert summary.last_simulation == FIXED_NOW
        assert stored.version == risk.version + 1
        assert stored.calculation == risk.calculation

    def test_explicit_iterations_validated(self, engine, risk):
        with pytest.raises(ValidationError):
            engine.run_monte_carlo_simulation(risk.risk_id, iterations=500)

    def test_seeded_runs_repeat(self, engine, risk):
        first = engine.run_monte_carlo_simulation(risk.risk_id)
        second = engine.run_monte_carlo_simulation(risk.risk_id)
        assert first.to_dict() == second.to_dict()

    def test_injected_generator(self, repo, risk):
        engine = RiskEngine.from_repository(
            repo,
            settings=Settings(monte_carlo_iterations=1_000),
            rng_factory=lambda: np.random.default_rng(3),
            clock=lambda: FIXED_NOW,
        )
        assert engine.run_monte_carlo_simulation(risk.risk_id).iterations == 1_000

    def test_missing_risk(self, engine):
        with pytest.raises(NotFoundError):
            engine.run_monte_carlo_simulation("missing")


class TestVaR:
    def test_portfolio_var_leaves_risks_unchanged(self, engine, repo, risk):
        _add_second_risk(repo, engine)
        before = repo.list_risks(ORG)
        result = engine.calculate_organizational_var(ORG, confidence_level=0.99, time_horizon=30)
        assert result.risk_count == 2
        assert result.simulation_count == 5_000
        assert result.confidence_level == 0.99
        assert repo.list_risks(ORG) == before

    def test_defaults_from_settings(self, engine, risk):
        result = engine.calculate_organizational_var(ORG)
        assert result.confidence_level == 0.95
        assert result.time_horizon == 365

    def test_invalid_confidence(self, engine, risk):
        with pytest.raises(ValidationError):
            engine.calculate_organizational_var(ORG, confidence_level=1.0)

    def test_unknown_organization_is_empty(self, engine):
        assert engine.calculate_organizational_var("org-x").var == 0.0

    @pytest.mark.parametrize("slow_ms,expected_level", [(0, logging.WARNING), (60_000, logging.DEBUG)])
    def test_timed_once_with_configured_threshold(self, repo, caplog, slow_ms, expected_level):
        engine = RiskEngine.from_repository(
            repo, settings=Settings(random_seed=7, var_simulations=1_000, slow_simulation_ms=slow_ms),
        )
        with caplog.at_level(logging.DEBUG, logger="magerisk"):
            engine.calculate_organizational_var(ORG)
        timings = [r for r in caplog.records if getattr(r, "duration_ms", None) is not None]
        assert len(timings) == 1
        assert timings[0].operation == "VaRSimulator.run"
        assert timings[0].levelno == expected_level


class TestScenarios:
    def test_accepts_dicts_and_objects(self, engine, risk):
        results = engine.perform_scenario_analysis(ORG, [
            {"name": "pandemic", "impact_multiplier": 1.5},
            Scenario(name="calm", probability_multiplier=0.5),
        ])
        assert [r.name for r in results] == ["pandemic", "calm"]
        assert results[0].total_risk == pytest.approx(0.3168 * 1.5)
        assert results[1].total_risk == pytest.approx(0.3168 * 0.5)

    def test_invalid_multiplier(self, engine, risk):
        with pytest.raises(ValidationError):
            engine.perform_scenario_analysis(ORG, [{"name": "bad", "probability_multiplier": -2}])


class TestAggregation:
    def test_portfolio_summary(self, engine, repo, risk):
        second = _add_second_risk(repo, engine)
        summary = engine.portfolio_summary(ORG)
        assert summary.total_risks == 2
        assert summary.top_risks[0].risk_id == risk.risk_id
        assert summary.top_risks[1].risk_id == second.risk_id

    def test_kpis_from_default_matrix(self, engine, repo, risk):
        default = repo.get_active_default(ORG)
        kpi = KPIDefinition(
            name="Medium or worse", calculation="count",
            risk_levels=(RiskLevel.MEDIUM, RiskLevel.HIGH, RiskLevel.CRITICAL),
            red=KPIThreshold(">=", 1),
        )
        repo.save_matrix(dataclasses.replace(default, kpis=(kpi,)))
        [result] = engine.calculate_kpis(ORG)
        assert result.value == 1
        assert result.status == KPIStatus.RED

    def test_kpis_need_default_matrix(self):
        engine = RiskEngine.from_repository(InMemoryRepository(), settings=Settings())
        with pytest.raises(InvalidConfigurationError):
            engine.calculate_kpis(ORG)


class TestMatrixAndTreatment:
    def test_activate_default(self, engine, repo):
        current = repo.get_active_default(ORG)
        candidate = repo.save_matrix(clone_matrix(current, "Candidate"))
        swap = engine.activate_default_matrix(ORG, candidate.matrix_id)
        assert swap.previous_default_id == current.matrix_id
        assert repo.get_active_default(ORG).matrix_id == candidate.matrix_id

    def test_escalations(self, engine, repo, risk):
        rule = EscalationRule(
            name="medium to manager",
            condition=EscalationCondition(risk_level=RiskLevel.MEDIUM, min_score=9),
            actions=(EscalationAction(EscalationActionType.NOTIFY, target_role=EscalationRole.MANAGER),),
        )
        default = repo.get_active_default(ORG)
        repo.save_matrix(dataclasses.replace(default, escalation_rules=(rule,)))

        [match] = engine.check_escalations(risk.risk_id)
        assert match.rule.name == "medium to manager"
        assert match.risk_id == risk.risk_id
        assert match.triggered_at == FIXED_NOW

    def test_apply_treatment(self, engine, repo, risk):
        treated = engine.apply_treatment(risk.risk_id, [
            AppliedControl("c1", effectiveness=0.5, implementation_cost=5_000, status=ControlStatus.IMPLEMENTED),
        ])
        assert treated.treatment.status == TreatmentStatus.MONITORED
        assert treated.treatment.residual_risk.value == pytest.approx(0.09)
        assert treated.treatment.roi.annual_savings == pytest.approx(22_680)
        assert repo.get_risk(risk.risk_id) == treated
