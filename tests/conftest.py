"""Pytest configuration and shared fixtures."""

import sys
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from magerisk.matrix.builder import create_magerit_standard  # noqa: E402
from magerisk.repository.memory import InMemoryRepository  # noqa: E402
from magerisk.service import RiskEngine  # noqa: E402
from magerisk.settings import Settings  # noqa: E402
from magerisk.triad.config import (  # noqa: E402
    AssetType,
    BusinessCriticality,
    ExploitMaturity,
    Exposure,
    GeographicRelevance,
)
from magerisk.triad.models import Asset, AssetValuation, Threat, Vulnerability  # noqa: E402

ORG = "org-1"
FIXED_NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def make_asset(asset_id: str = "a1", **overrides) -> Asset:
    """Asset from the worked example: value 100k, internal, high criticality."""
    fields = dict(
        asset_id=asset_id,
        organization_id=ORG,
        name="Customer Database",
        asset_type=AssetType.DATA,
        valuation=AssetValuation(
            confidentiality=5, integrity=5, availability=5, authenticity=5, traceability=5,
        ),
        economic_value=100_000,
        exposure=Exposure.INTERNAL,
        business_criticality=BusinessCriticality.HIGH,
    )
    fields.update(overrides)
    return Asset(**fields)


def make_threat(threat_id: str = "t1", **overrides) -> Threat:
    fields = dict(
        threat_id=threat_id,
        magerit_code="A.24",
        name="Denial of service",
        base_probability=0.6,
        susceptible_asset_types=(AssetType.DATA, AssetType.SOFTWARE),
        geographic_relevance=GeographicRelevance.MEDIUM,
    )
    fields.update(overrides)
    return Threat(**fields)


def make_vulnerability(vulnerability_id: str = "v1", asset_id: str = "a1", **overrides) -> Vulnerability:
    fields = dict(
        vulnerability_id=vulnerability_id,
        asset_id=asset_id,
        vulnerability_level=0.8,
        affected_dimensions={dim: 0.5 for dim in (
            "confidentiality", "integrity", "availability", "authenticity", "traceability",
        )},
        exploit_code_maturity=ExploitMaturity.FUNCTIONAL,
    )
    fields.update(overrides)
    return Vulnerability(**fields)


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def repo():
    """In-memory store holding the worked-example triad and a default matrix."""
    repository = InMemoryRepository()
    repository.add_asset(make_asset())
    repository.add_threat(make_threat())
    repository.add_vulnerability(make_vulnerability())
    repository.save_matrix(create_magerit_standard(ORG))
    return repository


@pytest.fixture
def engine(repo):
    return RiskEngine.from_repository(
        repo,
        settings=Settings(random_seed=7, monte_carlo_iterations=2_000, var_simulations=5_000),
        clock=lambda: FIXED_NOW,
    )
