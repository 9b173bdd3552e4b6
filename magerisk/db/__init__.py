"""Database package for the risk engine."""

from magerisk.db.base import Base
from magerisk.db.engine import build_engine, get_engine, get_session_factory
from magerisk.db.models import RiskMatrixRecord, RiskRecord
from magerisk.db.store import SqlRiskStore

__all__ = [
    "Base",
    "build_engine",
    "get_engine",
    "get_session_factory",
    "RiskMatrixRecord",
    "RiskRecord",
    "SqlRiskStore",
]
