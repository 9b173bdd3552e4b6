"""Tests for organizational Value at Risk."""

import math

import pytest

from magerisk.errors import ErrorCode, ValidationError
from magerisk.simulation import LossExposure, VaRConfig, VaRSimulator, make_rng


def _portfolio():
    return [
        LossExposure(adjusted_risk=0.3, expected_loss=15_000, risk_id="r1"),
        LossExposure(adjusted_risk=0.1, expected_loss=200_000, risk_id="r2"),
        LossExposure(adjusted_risk=0.6, expected_loss=5_000, risk_id="r3"),
    ]


def _run(seed: int = 11, **kwargs):
    return VaRSimulator(VaRConfig(simulations=5_000), rng=make_rng(seed)).run(_portfolio(), **kwargs)


class TestVaRValidation:
    @pytest.mark.parametrize("confidence", [0.5, 0.99])
    def test_confidence_bounds_accepted(self, confidence):
        assert _run(confidence_level=confidence).confidence_level == confidence

    @pytest.mark.parametrize("confidence", [0.49, 1.0])
    def test_confidence_bounds_rejected(self, confidence):
        with pytest.raises(ValidationError) as info:
            _run(confidence_level=confidence)
        assert info.value.error_code == ErrorCode.INVALID_CONFIDENCE_LEVEL

    @pytest.mark.parametrize("horizon", [0, 366])
    def test_horizon_bounds_rejected(self, horizon):
        with pytest.raises(ValidationError):
            _run(time_horizon=horizon)


class TestVaR:
    def test_higher_confidence_never_lowers_var(self):
        var_95 = _run(confidence_level=0.95)
        var_99 = _run(confidence_level=0.99)
        assert var_99.var >= var_95.var
        assert var_95.var_99 >= var_95.var_95

    def test_expected_shortfall_at_least_var(self):
        result = _run(confidence_level=0.95)
        assert result.expected_shortfall >= result.var

    def test_horizon_scales_var_only(self):
        annual = _run(time_horizon=365)
        monthly = _run(time_horizon=30)
        assert monthly.var == pytest.approx(annual.var * math.sqrt(30 / 365))
        assert monthly.var_95 == annual.var_95
        assert monthly.expected_shortfall == annual.expected_shortfall

    def test_summary_fields(self):
        result = _run()
        assert result.risk_count == 3
        assert result.simulation_count == 5_000
        assert result.total_expected_loss == pytest.approx(220_000)
        assert result.to_dict()["risk_count"] == 3

    def test_empty_portfolio(self):
        result = VaRSimulator(rng=make_rng(1)).run([], confidence_level=0.9, time_horizon=10)
        assert result.var == 0.0
        assert result.expected_shortfall == 0.0
        assert result.risk_count == 0
        assert result.confidence_level == 0.9

    def test_zero_probability_means_zero_loss(self):
        exposures = [LossExposure(adjusted_risk=0.0, expected_loss=1_000_000)]
        result = VaRSimulator(rng=make_rng(2)).run(exposures)
        assert result.var == 0.0
        assert result.var_99 == 0.0

    def test_certain_loss_stays_within_variability(self):
        exposures = [LossExposure(adjusted_risk=1.0, expected_loss=1_000)]
        result = VaRSimulator(rng=make_rng(3)).run(exposures, confidence_level=0.99)
        assert 800 <= result.var <= 1_200
        assert 800 <= result.var_95 <= 1_200

    def test_batches_do_not_change_sample_count(self):
        simulator = VaRSimulator(VaRConfig(simulations=5_000, batch_size=1_500), rng=make_rng(4))
        losses = simulator.simulate_losses(_portfolio())
        assert losses.shape == (5_000,)
        assert (losses >= 0).all()

    def test_same_seed_reproducible(self):
        assert _run(seed=5).to_dict() == _run(seed=5).to_dict()
