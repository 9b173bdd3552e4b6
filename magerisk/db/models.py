"""SQLAlchemy ORM models for the risk engine.

Tables:
- risk_matrices: versioned matrix configurations; at most one default
  per organization (partial unique index)
- risks: evaluated risk triads with an optimistic version counter
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    func,
    true,
)

from magerisk.db.base import Base


class RiskMatrixRecord(Base):
    """Risk matrix; the full configuration lives in ``payload``."""

    __tablename__ = "risk_matrices"

    id = Column(String(64), primary_key=True)
    organization_id = Column(String(64), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    version = Column(String(20), nullable=False, default="1.0")
    is_default = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    payload = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


Index(
    "uq_risk_matrices_one_default",
    RiskMatrixRecord.organization_id,
    unique=True,
    sqlite_where=RiskMatrixRecord.is_default == true(),
    postgresql_where=RiskMatrixRecord.is_default == true(),
)


class RiskRecord(Base):
    """Risk snapshot with queryable summary columns."""

    __tablename__ = "risks"

    id = Column(String(64), primary_key=True)
    organization_id = Column(String(64), nullable=False, index=True)
    asset_id = Column(String(64), nullable=False)
    threat_id = Column(String(64), nullable=False)
    vulnerability_id = Column(String(64), nullable=False)
    risk_level = Column(String(20), index=True)
    adjusted_risk = Column(Float)
    version = Column(Integer, nullable=False, default=1)
    payload = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_risks_org_level", "organization_id", "risk_level"),
    )
