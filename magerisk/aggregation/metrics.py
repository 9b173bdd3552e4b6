"""Portfolio Metrics.

Read-side statistics over a set of risks, computed with pandas.
"""

import logging
from datetime import datetime
from typing import Optional, Sequence

import pandas as pd

from magerisk.aggregation.models import PortfolioSummary, RiskTrend, TopRisk
from magerisk.triad.models import Risk

logger = logging.getLogger(__name__)

TOP_RISK_COUNT = 10
TREND_WINDOW_DAYS = 30

_COLUMNS = [
    "risk_id",
    "name",
    "risk_level",
    "category",
    "business_function",
    "treatment_status",
    "adjusted_risk",
    "expected_loss",
    "created_at",
    "updated_at",
]


def risks_frame(risks: Sequence[Risk]) -> pd.DataFrame:
    """One row per risk, in input order."""
    return pd.DataFrame(
        [
            {
                "risk_id": r.risk_id,
                "name": r.name,
                "risk_level": r.classification.risk_level.value,
                "category": r.classification.category.value,
                "business_function": r.classification.business_function.value,
                "treatment_status": r.treatment.status.value,
                "adjusted_risk": r.adjusted_risk,
                "expected_loss": r.expected_loss,
                "created_at": pd.Timestamp(r.created_at),
                "updated_at": pd.Timestamp(r.updated_at),
            }
            for r in risks
        ],
        columns=_COLUMNS,
    )


def _counts(df: pd.DataFrame, column: str) -> dict[str, int]:
    return {str(k): int(v) for k, v in df.groupby(column, sort=True).size().items()}


def _trend(df: pd.DataFrame, current_average: float, now: datetime) -> Optional[RiskTrend]:
    end = pd.Timestamp(now)
    start = end - pd.Timedelta(days=TREND_WINDOW_DAYS)
    recent = df[(df["updated_at"] >= start) & (df["updated_at"] <= end)]
    if recent.empty:
        return None

    previous_average = float(recent["adjusted_risk"].mean())
    if current_average > previous_average:
        direction = "increasing"
    elif current_average < previous_average:
        direction = "decreasing"
    else:
        direction = "stable"

    percentage = (
        abs(current_average - previous_average) / previous_average * 100
        if previous_average > 0
        else 0.0
    )
    return RiskTrend(
        direction=direction,
        percentage=percentage,
        previous_average=previous_average,
        current_average=current_average,
    )


def summarize_portfolio(risks: Sequence[Risk], now: datetime) -> PortfolioSummary:
    """Counts, mean, top risks and recent trend for a risk set.

    Top risks are sorted by adjusted risk descending; ties keep input order.
    """
    if not risks:
        return PortfolioSummary()

    df = risks_frame(risks)
    average = float(df["adjusted_risk"].mean())

    top = df.sort_values("adjusted_risk", ascending=False, kind="mergesort").head(TOP_RISK_COUNT)

    summary = PortfolioSummary(
        total_risks=len(df),
        average_risk=average,
        risk_by_level=_counts(df, "risk_level"),
        risk_by_category=_counts(df, "category"),
        risk_by_business_function=_counts(df, "business_function"),
        top_risks=[
            TopRisk(
                risk_id=row.risk_id,
                name=row.name,
                risk_level=row.risk_level,
                adjusted_risk=float(row.adjusted_risk),
                expected_loss=float(row.expected_loss),
            )
            for row in top.itertuples(index=False)
        ],
        trend=_trend(df, average, now),
    )
    logger.debug("Summarized %d risks (mean %.4f)", summary.total_risks, average)
    return summary


def treatment_status_counts(risks: Sequence[Risk]) -> dict[str, int]:
    if not risks:
        return {}
    return _counts(risks_frame(risks), "treatment_status")
