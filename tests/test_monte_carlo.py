"""Tests for single-risk Monte Carlo simulation."""

import numpy as np
import pytest

from magerisk.errors import ValidationError
from magerisk.simulation import (
    MonteCarloSimulator,
    NormalVariationSampler,
    SimulationConfig,
    distribution_bins,
    make_rng,
    order_statistic,
)
from magerisk.triad import RiskCalculation


def _calc(**overrides) -> RiskCalculation:
    params = dict(
        threat_probability=0.6, vulnerability_level=0.8, aggregated_impact=0.5,
        temporal_factor=1.2, environmental_factor=1.1,
    )
    params.update(overrides)
    return RiskCalculation.compose(**params)


class TestSampler:
    def test_standard_normal_moments(self, rng):
        z = NormalVariationSampler(rng).standard_normal(50_000)
        assert abs(z.mean()) < 0.02
        assert z.std() == pytest.approx(1.0, abs=0.02)
        assert np.isfinite(z).all()

    def test_perturb_is_clamped(self, rng):
        samples = NormalVariationSampler(rng).perturb(0.95, 0.5, 10_000)
        assert samples.min() >= 0.0
        assert samples.max() <= 1.0

    def test_zero_variability_returns_base(self, rng):
        samples = NormalVariationSampler(rng).perturb(0.4, 0.0, 100)
        assert (samples == 0.4).all()


class TestOrderStatistics:
    def test_order_statistic_uses_floor_index(self):
        values = np.arange(100, dtype=float)
        assert order_statistic(values, 0.05) == 5.0
        assert order_statistic(values, 0.5) == 50.0
        assert order_statistic(values, 0.95) == 95.0

    def test_bins_cover_all_samples(self, rng):
        values = rng.random(1_000)
        bins = distribution_bins(values, 20)
        assert len(bins) == 20
        assert sum(b.count for b in bins) == 1_000
        assert sum(b.frequency for b in bins) == pytest.approx(1.0)
        assert bins[0].min == pytest.approx(values.min())
        assert bins[-1].max == pytest.approx(values.max())

    def test_zero_width_range_goes_to_first_bin(self):
        bins = distribution_bins(np.full(50, 0.3), 10)
        assert bins[0].count == 50
        assert all(b.count == 0 for b in bins[1:])


class TestMonteCarloSimulator:
    def test_percentiles_are_ordered(self, rng):
        result = MonteCarloSimulator(rng=rng).run(_calc(), iterations=5_000)
        stats = result.statistics
        assert stats.min <= stats.p5 <= stats.median <= stats.p95 <= stats.max
        assert 0.0 <= stats.min and stats.max <= 1.0
        ci = result.confidence_interval
        assert (ci.p5, ci.p50, ci.p95) == (stats.p5, stats.median, stats.p95)
        assert result.interval_width >= 0

    def test_iteration_bounds(self, rng):
        simulator = MonteCarloSimulator(rng=rng)
        with pytest.raises(ValidationError):
            simulator.run(_calc(), iterations=999)
        with pytest.raises(ValidationError):
            simulator.run(_calc(), iterations=100_001)
        assert simulator.run(_calc(), iterations=1_000).iterations == 1_000

    def test_default_iterations_from_config(self, rng):
        simulator = MonteCarloSimulator(SimulationConfig(iterations=1_500), rng=rng)
        assert simulator.run(_calc()).iterations == 1_500

    def test_same_seed_same_result(self):
        first = MonteCarloSimulator(rng=make_rng(99)).run(_calc(), iterations=2_000)
        second = MonteCarloSimulator(rng=make_rng(99)).run(_calc(), iterations=2_000)
        assert first.to_dict() == second.to_dict()

    def test_zero_variability_collapses_to_clamped_product(self, rng):
        config = SimulationConfig(
            probability_variability=0, vulnerability_variability=0, impact_variability=0,
            temporal_variability=0, environmental_variability=0,
        )
        result = MonteCarloSimulator(config, rng=rng).run(_calc(), iterations=1_000)
        # Every factor is clamped to [0, 1], so temporal 1.2 and environmental 1.1 count as 1
        assert result.statistics.mean == pytest.approx(0.24)
        assert result.statistics.std_dev == pytest.approx(0.0)
        assert result.distribution_bins[0].count == 1_000

    def test_histogram_has_configured_bins(self, rng):
        result = MonteCarloSimulator(SimulationConfig(histogram_bins=12), rng=rng).run(
            _calc(), iterations=2_000, risk_id="r1",
        )
        assert len(result.distribution_bins) == 12
        assert result.to_dict()["risk_id"] == "r1"

    def test_mean_tracks_base_risk(self, rng):
        result = MonteCarloSimulator(rng=rng).run(_calc(), iterations=20_000)
        assert result.statistics.mean == pytest.approx(0.24, rel=0.1)
