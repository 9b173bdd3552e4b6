"""Risk Aggregation.

Dashboard statistics and matrix KPIs over an organization's risks.
"""

from magerisk.aggregation.kpis import calculate_kpis, kpi_status, kpi_value
from magerisk.aggregation.metrics import (
    TOP_RISK_COUNT,
    TREND_WINDOW_DAYS,
    risks_frame,
    summarize_portfolio,
    treatment_status_counts,
)
from magerisk.aggregation.models import KPIResult, PortfolioSummary, RiskTrend, TopRisk

__all__ = [
    # Models
    "KPIResult",
    "PortfolioSummary",
    "RiskTrend",
    "TopRisk",
    # Metrics
    "TOP_RISK_COUNT",
    "TREND_WINDOW_DAYS",
    "risks_frame",
    "summarize_portfolio",
    "treatment_status_counts",
    # KPIs
    "calculate_kpis",
    "kpi_status",
    "kpi_value",
]
