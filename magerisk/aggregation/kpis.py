"""Risk Matrix KPIs.

Evaluates a matrix's KPI definitions over an organization's risks and
grades each value against its red / yellow thresholds.
"""

import logging
from datetime import datetime, timedelta
from typing import Sequence

import pandas as pd

from magerisk.aggregation.metrics import risks_frame
from magerisk.aggregation.models import KPIResult
from magerisk.matrix.config import KPICalculation, KPIStatus
from magerisk.matrix.models import KPIDefinition, RiskMatrix
from magerisk.triad.models import Risk

logger = logging.getLogger(__name__)


def _filter(df: pd.DataFrame, kpi: KPIDefinition, now: datetime) -> pd.DataFrame:
    if kpi.risk_levels:
        df = df[df["risk_level"].isin([lv.value for lv in kpi.risk_levels])]
    if kpi.categories:
        df = df[df["category"].isin(list(kpi.categories))]
    if kpi.date_range_days:
        cutoff = pd.Timestamp(now - timedelta(days=kpi.date_range_days))
        df = df[df["created_at"] >= cutoff]
    return df


def kpi_value(kpi: KPIDefinition, matched: pd.DataFrame, total: int) -> float:
    """Value of one KPI; empty selections give 0.

    ``percentage`` is matched / total x 100 and ``ratio`` the same share
    as a fraction.
    """
    calculation = kpi.calculation
    if calculation == KPICalculation.COUNT:
        return float(len(matched))
    if calculation == KPICalculation.SUM:
        return float(matched["adjusted_risk"].sum())
    if calculation == KPICalculation.AVERAGE:
        return float(matched["adjusted_risk"].mean()) if len(matched) else 0.0
    if total == 0:
        return 0.0
    share = len(matched) / total
    return share * 100 if calculation == KPICalculation.PERCENTAGE else share


def kpi_status(kpi: KPIDefinition, value: float) -> KPIStatus:
    if kpi.red is not None and kpi.red.evaluate(value):
        return KPIStatus.RED
    if kpi.yellow is not None and kpi.yellow.evaluate(value):
        return KPIStatus.YELLOW
    return KPIStatus.GREEN


def calculate_kpis(matrix: RiskMatrix, risks: Sequence[Risk], now: datetime) -> list[KPIResult]:
    """Evaluate every KPI defined on ``matrix``."""
    df = risks_frame(risks)
    results = []
    for kpi in matrix.kpis:
        matched = _filter(df, kpi, now)
        value = kpi_value(kpi, matched, len(df))
        results.append(KPIResult(
            name=kpi.name,
            calculation=kpi.calculation,
            value=value,
            status=kpi_status(kpi, value),
            description=kpi.description,
            matched_risks=len(matched),
        ))
    logger.debug("Calculated %d KPIs for matrix %s", len(results), matrix.matrix_id)
    return results
