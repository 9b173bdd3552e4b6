"""SQL-backed matrix and risk repository.

Implements the MatrixRepository and RiskRepository protocols on
SQLAlchemy. The default-matrix swap runs in one transaction and the
partial unique index rejects any interleaving that would leave two
defaults; risk updates are optimistic on the ``version`` column.
"""

import dataclasses
import logging
from typing import Optional

from sqlalchemy import Engine, select, update
from sqlalchemy.orm import Session, sessionmaker

from magerisk.db.base import Base
from magerisk.db.engine import get_engine, get_session_factory
from magerisk.db.models import RiskMatrixRecord, RiskRecord
from magerisk.errors.exceptions import ConflictError, NotFoundError
from magerisk.matrix.models import RiskMatrix
from magerisk.matrix.registry import DefaultSwap, plan_default_swap
from magerisk.triad.models import Risk

logger = logging.getLogger(__name__)


def _to_matrix(record: RiskMatrixRecord) -> RiskMatrix:
    return RiskMatrix.from_dict({
        **record.payload,
        "is_default": record.is_default,
        "is_active": record.is_active,
    })


def _to_risk(record: RiskRecord) -> Risk:
    return Risk.from_dict({**record.payload, "version": record.version})


class SqlRiskStore:
    """Matrix and risk persistence on a SQLAlchemy engine.

    Example:
        store = SqlRiskStore.from_engine(build_engine("sqlite+pysqlite:///:memory:"))
        store.save_matrix(create_magerit_standard("org-1"))
        store.get_active_default("org-1")
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @classmethod
    def from_engine(cls, engine: Optional[Engine] = None, create_schema: bool = True) -> "SqlRiskStore":
        engine = engine or get_engine()
        if create_schema:
            Base.metadata.create_all(engine)
        return cls(get_session_factory(engine))

    # =========================================================================
    # Matrices
    # =========================================================================

    def get_matrix(self, matrix_id: str) -> Optional[RiskMatrix]:
        with self._session_factory() as session:
            record = session.get(RiskMatrixRecord, matrix_id)
            return _to_matrix(record) if record is not None else None

    def list_matrices(self, organization_id: str) -> list[RiskMatrix]:
        with self._session_factory() as session:
            records = session.scalars(
                select(RiskMatrixRecord)
                .where(RiskMatrixRecord.organization_id == organization_id)
                .order_by(RiskMatrixRecord.created_at, RiskMatrixRecord.id)
            )
            return [_to_matrix(r) for r in records]

    def get_active_default(self, organization_id: str) -> Optional[RiskMatrix]:
        with self._session_factory() as session:
            record = session.scalars(
                select(RiskMatrixRecord).where(
                    RiskMatrixRecord.organization_id == organization_id,
                    RiskMatrixRecord.is_default.is_(True),
                    RiskMatrixRecord.is_active.is_(True),
                )
            ).first()
            return _to_matrix(record) if record is not None else None

    def save_matrix(self, matrix: RiskMatrix) -> RiskMatrix:
        """Insert or replace a matrix; a default-flagged matrix is swapped in."""
        with self._session_factory.begin() as session:
            record = session.get(RiskMatrixRecord, matrix.matrix_id)
            if record is None:
                record = RiskMatrixRecord(id=matrix.matrix_id, is_default=False)
                session.add(record)
            record.organization_id = matrix.organization_id
            record.name = matrix.name
            record.version = matrix.version
            record.is_active = matrix.is_active
            record.payload = matrix.to_dict()
            session.flush()

            if matrix.is_default:
                self._swap_in_session(session, matrix.organization_id, matrix.matrix_id)
            else:
                record.is_default = False

        return self.get_matrix(matrix.matrix_id)

    def activate_default(self, organization_id: str, matrix_id: str) -> DefaultSwap:
        with self._session_factory.begin() as session:
            return self._swap_in_session(session, organization_id, matrix_id)

    def _swap_in_session(self, session: Session, organization_id: str, matrix_id: str) -> DefaultSwap:
        records = session.scalars(
            select(RiskMatrixRecord)
            .where(RiskMatrixRecord.organization_id == organization_id)
            .with_for_update()
        ).all()
        swap = plan_default_swap([_to_matrix(r) for r in records], organization_id, matrix_id)

        # Clear first so the partial unique index never sees two defaults
        session.execute(
            update(RiskMatrixRecord)
            .where(
                RiskMatrixRecord.organization_id == organization_id,
                RiskMatrixRecord.id != matrix_id,
                RiskMatrixRecord.is_default.is_(True),
            )
            .values(is_default=False)
        )
        session.execute(
            update(RiskMatrixRecord)
            .where(RiskMatrixRecord.id == matrix_id)
            .values(is_default=True)
        )
        session.expire_all()
        logger.info(
            "Default matrix for %s: %s -> %s",
            organization_id, swap.previous_default_id, swap.new_default_id,
        )
        return swap

    # =========================================================================
    # Risks
    # =========================================================================

    def get_risk(self, risk_id: str) -> Optional[Risk]:
        with self._session_factory() as session:
            record = session.get(RiskRecord, risk_id)
            return _to_risk(record) if record is not None else None

    def list_risks(self, organization_id: str) -> list[Risk]:
        with self._session_factory() as session:
            records = session.scalars(
                select(RiskRecord)
                .where(RiskRecord.organization_id == organization_id)
                .order_by(RiskRecord.created_at, RiskRecord.id)
            )
            return [_to_risk(r) for r in records]

    def add_risk(self, risk: Risk) -> Risk:
        with self._session_factory.begin() as session:
            if session.get(RiskRecord, risk.risk_id) is not None:
                raise ConflictError(f"Risk {risk.risk_id} already exists", resource_id=risk.risk_id)
            session.add(RiskRecord(
                id=risk.risk_id,
                organization_id=risk.organization_id,
                asset_id=risk.asset_id,
                threat_id=risk.threat_id,
                vulnerability_id=risk.vulnerability_id,
                risk_level=risk.risk_level.value,
                adjusted_risk=risk.adjusted_risk,
                version=risk.version,
                payload=risk.to_dict(),
            ))
        return risk

    def update_risk(self, risk: Risk) -> Risk:
        """Compare-and-set on ``version``.

        Raises:
            NotFoundError: no such risk.
            ConflictError: stored version differs from ``risk.version``.
        """
        stored = dataclasses.replace(risk, version=risk.version + 1)
        with self._session_factory.begin() as session:
            result = session.execute(
                update(RiskRecord)
                .where(RiskRecord.id == risk.risk_id, RiskRecord.version == risk.version)
                .values(
                    version=stored.version,
                    risk_level=stored.risk_level.value,
                    adjusted_risk=stored.adjusted_risk,
                    payload=stored.to_dict(),
                )
            )
            if result.rowcount == 0:
                current = session.get(RiskRecord, risk.risk_id)
                if current is None:
                    raise NotFoundError(
                        f"Risk {risk.risk_id} not found",
                        resource_type="risk",
                        resource_id=risk.risk_id,
                    )
                raise ConflictError(
                    f"Risk {risk.risk_id} was modified concurrently",
                    resource_id=risk.risk_id,
                    expected_version=risk.version,
                    actual_version=current.version,
                )
        return stored
