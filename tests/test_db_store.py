"""Tests for the SQLAlchemy-backed matrix and risk store."""

import dataclasses

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from conftest import FIXED_NOW, ORG
from magerisk.calculator import RiskCalculator
from magerisk.db import RiskMatrixRecord, SqlRiskStore, build_engine
from magerisk.errors import ConflictError, InvalidConfigurationError, NotFoundError
from magerisk.matrix import RiskLevel, clone_matrix, create_magerit_standard, generate_default_matrix


@pytest.fixture
def store():
    return SqlRiskStore.from_engine(build_engine("sqlite+pysqlite:///:memory:"))


@pytest.fixture
def stored_risk(repo, store):
    """Worked-example risk calculated in memory, then persisted in SQL."""
    calculator = RiskCalculator(repo, repo, repo, repo, repo, clock=lambda: FIXED_NOW)
    risk = calculator.create_calculated_risk("a1", "t1", "v1", ORG, "analyst")
    return store.add_risk(risk)


class TestMatrixPersistence:
    def test_round_trip(self, store):
        matrix = store.save_matrix(create_magerit_standard(ORG))
        loaded = store.get_matrix(matrix.matrix_id)
        assert loaded.cells == matrix.cells
        assert loaded.is_default
        assert loaded.is_valid
        assert store.get_active_default(ORG).matrix_id == matrix.matrix_id

    def test_missing_matrix(self, store):
        assert store.get_matrix("nope") is None
        assert store.get_active_default(ORG) is None

    def test_list_by_organization(self, store):
        store.save_matrix(create_magerit_standard(ORG))
        store.save_matrix(generate_default_matrix("org-2"))
        assert len(store.list_matrices(ORG)) == 1
        assert len(store.list_matrices("org-2")) == 1

    def test_activate_swaps_default(self, store):
        first = store.save_matrix(create_magerit_standard(ORG))
        second = store.save_matrix(clone_matrix(first, "Second"))
        assert not second.is_default

        swap = store.activate_default(ORG, second.matrix_id)
        assert swap.previous_default_id == first.matrix_id
        assert swap.new_default_id == second.matrix_id
        assert store.get_active_default(ORG).matrix_id == second.matrix_id
        assert not store.get_matrix(first.matrix_id).is_default

    def test_saving_new_default_clears_previous(self, store):
        first = store.save_matrix(create_magerit_standard(ORG))
        second = store.save_matrix(create_magerit_standard(ORG))
        defaults = [m for m in store.list_matrices(ORG) if m.is_default]
        assert [m.matrix_id for m in defaults] == [second.matrix_id]
        assert not store.get_matrix(first.matrix_id).is_default

    def test_activate_rejects_unknown_and_inactive(self, store):
        first = store.save_matrix(create_magerit_standard(ORG))
        inactive = store.save_matrix(dataclasses.replace(clone_matrix(first, "Old"), is_active=False))
        with pytest.raises(NotFoundError):
            store.activate_default(ORG, "missing")
        with pytest.raises(InvalidConfigurationError):
            store.activate_default(ORG, inactive.matrix_id)
        assert store.get_active_default(ORG).matrix_id == first.matrix_id

    def test_index_rejects_second_default_row(self, store):
        first = store.save_matrix(create_magerit_standard(ORG))
        second = store.save_matrix(clone_matrix(first, "Second"))
        with pytest.raises(IntegrityError):
            with store._session_factory.begin() as session:
                record = session.scalars(
                    select(RiskMatrixRecord).where(RiskMatrixRecord.id == second.matrix_id)
                ).one()
                record.is_default = True


class TestRiskPersistence:
    def test_round_trip(self, store, stored_risk):
        loaded = store.get_risk(stored_risk.risk_id)
        assert loaded == stored_risk
        assert loaded.risk_level == RiskLevel.MEDIUM
        assert [r.risk_id for r in store.list_risks(ORG)] == [stored_risk.risk_id]
        assert store.list_risks("org-2") == []

    def test_duplicate_add(self, store, stored_risk):
        with pytest.raises(ConflictError):
            store.add_risk(stored_risk)

    def test_update_bumps_version(self, store, stored_risk):
        updated = store.update_risk(dataclasses.replace(stored_risk, description="reviewed"))
        assert updated.version == stored_risk.version + 1
        loaded = store.get_risk(stored_risk.risk_id)
        assert loaded.version == updated.version
        assert loaded.description == "reviewed"

    def test_stale_update_conflicts(self, store, stored_risk):
        store.update_risk(stored_risk)
        with pytest.raises(ConflictError) as info:
            store.update_risk(stored_risk)
        assert info.value.retryable

    def test_update_missing(self, store, stored_risk):
        with pytest.raises(NotFoundError):
            store.update_risk(dataclasses.replace(stored_risk, risk_id="ghost"))
