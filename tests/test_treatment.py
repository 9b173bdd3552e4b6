"""Tests for residual risk, ROI and the classification rules."""

import math
from datetime import date

import pytest

from conftest import FIXED_NOW, ORG, make_asset
from magerisk.calculator import (
    RiskCalculator,
    apply_treatment,
    calculate_residual_risk,
    calculate_treatment_roi,
    determine_default_strategy,
    determine_priority,
    determine_review_frequency,
    determine_risk_category,
    next_review_date,
    total_control_effectiveness,
)
from magerisk.matrix import RiskLevel
from magerisk.triad import (
    AppliedControl,
    AssetType,
    ControlStatus,
    Priority,
    ResidualRisk,
    ReviewFrequency,
    RiskCalculation,
    RiskCategory,
    TreatmentStatus,
    TreatmentStrategy,
)


def _calc() -> RiskCalculation:
    return RiskCalculation.compose(
        threat_probability=0.6, vulnerability_level=0.8, aggregated_impact=0.5,
        temporal_factor=1.2, environmental_factor=1.1, asset_value=100_000,
    )


def _control(control_id="c1", effectiveness=0.5, cost=1_000.0, status=ControlStatus.IMPLEMENTED):
    return AppliedControl(control_id, effectiveness, cost, status)


class TestResidualRisk:
    def test_no_controls_keeps_base(self):
        residual = calculate_residual_risk(_calc(), [])
        assert residual.probability == pytest.approx(0.6)
        assert residual.impact == pytest.approx(0.5)
        assert residual.value == pytest.approx(0.24)

    def test_controls_cut_probability_and_half_impact(self):
        residual = calculate_residual_risk(_calc(), [_control(effectiveness=0.5)])
        assert residual.probability == pytest.approx(0.3)
        assert residual.impact == pytest.approx(0.375)
        assert residual.value == pytest.approx(0.3 * 0.8 * 0.375)
        assert residual.risk_level == RiskLevel.VERY_LOW  # 0.09 < 0.2

    def test_planned_controls_do_not_count(self):
        controls = [_control(effectiveness=0.9, status=ControlStatus.PLANNED)]
        assert total_control_effectiveness(controls) == 0.0
        assert calculate_residual_risk(_calc(), controls).value == pytest.approx(0.24)

    def test_combined_effectiveness_is_not_additive(self):
        controls = [_control("c1", 0.6), _control("c2", 0.6)]
        assert total_control_effectiveness(controls) == pytest.approx(0.84)

    def test_full_effectiveness(self):
        residual = calculate_residual_risk(_calc(), [_control(effectiveness=1.0)])
        assert residual.value == 0.0
        assert residual.risk_level == RiskLevel.VERY_LOW

    def test_residual_level_uses_value_thresholds(self):
        calc = RiskCalculation.compose(
            threat_probability=1.0, vulnerability_level=0.7, aggregated_impact=1.0,
            temporal_factor=1.0, environmental_factor=1.0,
        )
        residual = calculate_residual_risk(calc, [])
        assert residual.value == pytest.approx(0.7)
        assert residual.risk_level == RiskLevel.HIGH


class TestTreatmentROI:
    def test_positive_roi(self):
        residual = ResidualRisk(probability=0.3, impact=0.375, value=0.09)
        roi = calculate_treatment_roi(0.3168, residual, [_control(cost=5_000)], asset_value=100_000)
        assert roi.annual_savings == pytest.approx(22_680)
        assert roi.investment_cost == 5_000
        assert roi.roi_pct == pytest.approx((22_680 - 5_000) / 5_000 * 100)
        assert roi.payback_period_years == pytest.approx(5_000 / 22_680)

    def test_zero_investment(self):
        residual = ResidualRisk(value=0.1)
        roi = calculate_treatment_roi(0.3, residual, [_control(cost=0)], asset_value=1_000)
        assert roi.roi_pct == 0.0
        assert math.isinf(roi.payback_period_years)

    def test_no_savings_never_pays_back(self):
        residual = ResidualRisk(value=0.3)
        roi = calculate_treatment_roi(0.3, residual, [_control(cost=100)], asset_value=1_000)
        assert roi.roi_pct == pytest.approx(-100)
        assert math.isinf(roi.payback_period_years)


class TestClassificationRules:
    @pytest.mark.parametrize("risk,priority", [
        (0.9, Priority.CRITICAL), (0.8, Priority.CRITICAL), (0.7, Priority.HIGH),
        (0.4, Priority.MEDIUM), (0.39, Priority.LOW),
    ])
    def test_priority(self, risk, priority):
        assert determine_priority(risk) == priority

    @pytest.mark.parametrize("risk,frequency", [
        (0.85, ReviewFrequency.WEEKLY), (0.6, ReviewFrequency.MONTHLY),
        (0.5, ReviewFrequency.QUARTERLY), (0.1, ReviewFrequency.ANNUALLY),
    ])
    def test_review_frequency(self, risk, frequency):
        assert determine_review_frequency(risk) == frequency

    def test_next_review_dates(self):
        today = date(2026, 1, 31)
        assert next_review_date(ReviewFrequency.WEEKLY, today) == date(2026, 2, 7)
        assert next_review_date(ReviewFrequency.MONTHLY, today) == date(2026, 2, 28)
        assert next_review_date(ReviewFrequency.QUARTERLY, today) == date(2026, 4, 30)
        assert next_review_date("annually", date(2024, 2, 29)) == date(2025, 2, 28)

    def test_default_strategy(self):
        assert determine_default_strategy(RiskLevel.LOW) == TreatmentStrategy.ACCEPT
        assert determine_default_strategy("critical") == TreatmentStrategy.MITIGATE

    def test_category_by_asset_type(self):
        assert determine_risk_category(make_asset(asset_type=AssetType.SOFTWARE)) == RiskCategory.TECHNICAL
        assert determine_risk_category(make_asset(asset_type=AssetType.KEY_DATA)) == RiskCategory.COMPLIANCE


class TestApplyTreatment:
    @pytest.fixture
    def risk(self, repo):
        calculator = RiskCalculator(repo, repo, repo, repo, repo, clock=lambda: FIXED_NOW)
        return calculator.create_calculated_risk("a1", "t1", "v1", ORG, "analyst")

    @pytest.mark.parametrize("statuses,expected", [
        ((), TreatmentStatus.ANALYZED),
        ((ControlStatus.PLANNED,), TreatmentStatus.TREATMENT_PLANNED),
        ((ControlStatus.IMPLEMENTED, ControlStatus.IMPLEMENTING), TreatmentStatus.TREATMENT_IN_PROGRESS),
        ((ControlStatus.IMPLEMENTED, ControlStatus.IMPLEMENTED), TreatmentStatus.MONITORED),
    ])
    def test_status_follows_controls(self, risk, statuses, expected):
        controls = [_control(f"c{i}", status=s) for i, s in enumerate(statuses)]
        treated = apply_treatment(risk, controls, asset_value=100_000, now=FIXED_NOW)
        assert treated.treatment.status == expected

    def test_records_residual_and_roi(self, risk):
        treated = apply_treatment(risk, [_control(effectiveness=0.5, cost=5_000)], asset_value=100_000)
        assert treated.treatment.residual_risk.value == pytest.approx(0.09)
        assert treated.treatment.roi.annual_savings == pytest.approx((0.3168 - 0.09) * 100_000)
        assert treated.total_control_effectiveness == pytest.approx(0.5)
        assert treated.calculation == risk.calculation
        assert treated.version == risk.version
