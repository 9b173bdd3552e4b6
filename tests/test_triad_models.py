"""Tests for the triad entity snapshots and the Risk value struct."""

import dataclasses
import math
from datetime import date

import pytest

from conftest import FIXED_NOW, ORG, make_asset, make_threat, make_vulnerability
from magerisk.errors import ValidationError
from magerisk.matrix import RiskLevel
from magerisk.triad import (
    AppliedControl,
    AssetValuation,
    ControlStatus,
    DimensionImpact,
    EconomicImpact,
    MatrixPosition,
    MonteCarloSummary,
    QuantitativeAnalysis,
    ResidualRisk,
    Risk,
    RiskCalculation,
    RiskClassification,
    Seasonality,
    Treatment,
    TreatmentROI,
    TreatmentStatus,
    combined_effectiveness,
)


def _calculation(**overrides) -> RiskCalculation:
    params = dict(
        threat_probability=0.6,
        vulnerability_level=0.8,
        aggregated_impact=0.5,
        temporal_factor=1.2,
        environmental_factor=1.1,
        asset_value=100_000,
    )
    params.update(overrides)
    return RiskCalculation.compose(**params)


def _risk(**overrides) -> Risk:
    calc = _calculation()
    fields = dict(
        risk_id="DAT-A24-abcd1234",
        name="Denial of service on Customer Database",
        organization_id=ORG,
        asset_id="a1",
        threat_id="t1",
        vulnerability_id="v1",
        threat_code="A.24",
        calculation=calc,
        classification=RiskClassification(risk_level=RiskLevel.MEDIUM),
        position=MatrixPosition.from_calculation(calc.threat_probability, calc.aggregated_impact),
        created_at=FIXED_NOW,
        updated_at=FIXED_NOW,
    )
    fields.update(overrides)
    return Risk(**fields)


class TestEntities:
    def test_asset_coerces_enums(self):
        asset = make_asset(asset_type="software", exposure="public")
        assert asset.asset_type.value == "software"
        assert asset.exposure.value == "public"

    def test_asset_rejects_negative_value(self):
        with pytest.raises(ValidationError):
            make_asset(economic_value=-1)

    def test_valuation_bounds(self):
        assert AssetValuation(confidentiality=10).max_value == 10
        with pytest.raises(ValidationError):
            AssetValuation(integrity=11)

    def test_threat_probability_bounds(self):
        with pytest.raises(ValidationError):
            make_threat(base_probability=1.2)

    def test_seasonality_months(self):
        assert Seasonality(has_seasonality=True, peak_months=[11, 12]).peak_months == (11, 12)
        with pytest.raises(ValidationError):
            Seasonality(peak_months=(13,))

    def test_vulnerability_dimension_names(self):
        vuln = make_vulnerability()
        assert vuln.impact_on("integrity") == 0.5
        assert make_vulnerability(affected_dimensions={}).impact_on("integrity") == 0.0
        with pytest.raises(ValidationError):
            make_vulnerability(affected_dimensions={"secrecy": 0.5})

    def test_vulnerability_level_bounds(self):
        with pytest.raises(ValidationError):
            make_vulnerability(vulnerability_level=-0.1)


class TestRiskCalculation:
    def test_compose_derives_risk_and_economics(self):
        calc = _calculation()
        assert calc.base_risk == pytest.approx(0.24)
        assert calc.adjusted_risk == pytest.approx(0.3168)
        assert calc.economic_impact.potential_loss == pytest.approx(50_000)
        assert calc.economic_impact.expected_loss == pytest.approx(15_840)
        assert calc.economic_impact.annualized_loss == calc.economic_impact.expected_loss

    def test_adjusted_risk_capped_at_one(self):
        calc = _calculation(
            threat_probability=1.0, vulnerability_level=1.0, aggregated_impact=1.0,
            temporal_factor=2.0, environmental_factor=1.5,
        )
        assert calc.adjusted_risk == 1.0

    def test_inconsistent_base_rejected(self):
        with pytest.raises(ValidationError):
            RiskCalculation(
                threat_probability=0.5, vulnerability_level=0.5, aggregated_impact=0.5,
                base_risk=0.5, adjusted_risk=0.5,
            )

    def test_factor_ranges(self):
        with pytest.raises(ValidationError):
            _calculation(temporal_factor=0.9)
        with pytest.raises(ValidationError):
            _calculation(environmental_factor=1.6)

    def test_no_asset_value_means_no_economics(self):
        assert _calculation(asset_value=None).economic_impact == EconomicImpact()

    def test_dimension_impact_bounds(self):
        assert DimensionImpact(confidentiality=0.2, integrity=0.3).total == pytest.approx(0.5)
        with pytest.raises(ValidationError):
            DimensionImpact(availability=1.5)


class TestMatrixPosition:
    @pytest.mark.parametrize("value,level", [
        (0.0, 1), (0.2, 1), (0.21, 2), (0.5, 3), (0.6, 3), (0.61, 4), (1.0, 5),
    ])
    def test_to_level(self, value, level):
        assert MatrixPosition.to_level(value) == level

    def test_worked_example_position(self):
        position = MatrixPosition.from_calculation(0.6, 0.5)
        assert position.matrix_position == "33"
        assert position.risk_score == 9

    def test_levels_bounded(self):
        with pytest.raises(ValidationError):
            MatrixPosition(probability_level=0, impact_level=3)


class TestTreatmentBlocks:
    def test_combined_effectiveness_counts_implemented_only(self):
        controls = (
            AppliedControl("c1", effectiveness=0.5, status=ControlStatus.IMPLEMENTED),
            AppliedControl("c2", effectiveness=0.5, status="implemented"),
            AppliedControl("c3", effectiveness=0.9, status=ControlStatus.PLANNED),
        )
        assert combined_effectiveness(controls) == pytest.approx(0.75)

    def test_combined_effectiveness_empty(self):
        assert combined_effectiveness(()) == 0.0

    def test_control_bounds(self):
        with pytest.raises(ValidationError):
            AppliedControl("c1", effectiveness=1.5)
        with pytest.raises(ValidationError):
            AppliedControl("c1", implementation_cost=-10)

    def test_residual_bounds(self):
        with pytest.raises(ValidationError):
            ResidualRisk(value=1.2)


class TestRisk:
    def test_derived_properties(self):
        risk = _risk()
        assert risk.adjusted_risk == pytest.approx(0.3168)
        assert risk.expected_loss == pytest.approx(15_840)
        assert risk.risk_level == RiskLevel.MEDIUM
        assert risk.inherent_risk_level == RiskLevel.LOW  # 0.24 >= 0.2
        assert risk.total_control_effectiveness == 0.0

    def test_inherent_level_uses_value_thresholds(self):
        calc = _calculation(threat_probability=1.0, vulnerability_level=0.5, aggregated_impact=1.0)
        assert _risk(calculation=calc).inherent_risk_level == RiskLevel.MEDIUM  # 0.5

    def test_round_trip_preserves_nested_blocks(self):
        risk = _risk(
            treatment=Treatment(
                status=TreatmentStatus.MONITORED,
                applied_controls=(
                    AppliedControl("c1", 0.4, 2_000, ControlStatus.IMPLEMENTED, date(2026, 1, 10)),
                ),
                residual_risk=ResidualRisk(probability=0.36, impact=0.4, value=0.19, risk_level="low"),
                roi=TreatmentROI(investment_cost=2_000, annual_savings=0, roi_pct=-100),
            ),
            quantitative=QuantitativeAnalysis(
                monte_carlo=MonteCarloSummary(
                    iterations=5_000, p5=0.1, p50=0.3, p95=0.5, last_simulation=FIXED_NOW,
                ),
            ),
            next_review_date=date(2027, 3, 15),
            version=4,
        )
        data = risk.to_dict()
        assert data["position"]["matrix_position"] == "33"
        assert data["treatment"]["roi"]["payback_period_years"] is None

        restored = Risk.from_dict(data)
        assert restored == risk
        assert math.isinf(restored.treatment.roi.payback_period_years)

    def test_replace_keeps_invariants(self):
        risk = _risk()
        updated = dataclasses.replace(risk, description="reviewed")
        assert updated.calculation is risk.calculation
        assert updated.description == "reviewed"
