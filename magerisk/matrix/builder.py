"""Risk Matrix Builders.

Deterministic construction of default cell tables, generic matrices and
the MAGERIT standard 5x5 matrix.
"""

import dataclasses
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from magerisk.matrix.config import (
    DEFAULT_SCALE_LEVELS,
    LEVEL_ACTIONS,
    LEVEL_COLORS,
    MAGERIT_IMPACT_SCALE,
    MAGERIT_PROBABILITY_SCALE,
    RiskLevel,
    level_for_score,
)
from magerisk.matrix.models import (
    DimensionScale,
    MatrixCell,
    NumericRange,
    RiskMatrix,
    ScaleLevel,
)

logger = logging.getLogger(__name__)

_ACTION_DESCRIPTIONS = {
    RiskLevel.VERY_LOW: "Accept the risk and keep routine monitoring",
    RiskLevel.LOW: "Monitor the risk periodically",
    RiskLevel.MEDIUM: "Plan mitigation measures",
    RiskLevel.HIGH: "Mitigate with priority",
    RiskLevel.CRITICAL: "Avoid or mitigate immediately",
}


def generate_default_cells(
    probability_levels: int = DEFAULT_SCALE_LEVELS,
    impact_levels: int = DEFAULT_SCALE_LEVELS,
) -> tuple[MatrixCell, ...]:
    """Build the exhaustive cell table, classifying each score = p x i."""
    cells = []
    for p in range(1, probability_levels + 1):
        for i in range(1, impact_levels + 1):
            score = p * i
            level = level_for_score(score)
            cells.append(MatrixCell(
                probability_level=p,
                impact_level=i,
                risk_level=level,
                risk_score=score,
                color=LEVEL_COLORS[level],
                action=LEVEL_ACTIONS[level],
                action_description=_ACTION_DESCRIPTIONS[level],
            ))
    return tuple(cells)


def _uniform_scale(levels: int, upper: float = 1.0) -> DimensionScale:
    step = upper / levels
    return DimensionScale(
        levels=levels,
        scale=tuple(
            ScaleLevel(
                level=n,
                label=f"Level {n}",
                range=NumericRange(min=round((n - 1) * step, 10), max=round(n * step, 10)),
            )
            for n in range(1, levels + 1)
        ),
    )


def generate_default_matrix(
    organization_id: str,
    probability_levels: int = DEFAULT_SCALE_LEVELS,
    impact_levels: int = DEFAULT_SCALE_LEVELS,
    name: str = "Default Risk Matrix",
) -> RiskMatrix:
    """Matrix with evenly spaced [0,1] scales and the default cell table."""
    return RiskMatrix(
        organization_id=organization_id,
        name=name,
        probability=_uniform_scale(probability_levels),
        impact=_uniform_scale(impact_levels),
        cells=generate_default_cells(probability_levels, impact_levels),
    )


def create_magerit_standard(organization_id: str) -> RiskMatrix:
    """The MAGERIT v3 standard 5x5 matrix, flagged as default."""
    probability = DimensionScale(
        levels=DEFAULT_SCALE_LEVELS,
        scale=tuple(
            ScaleLevel(
                level=level,
                label=label,
                description=description,
                range=NumericRange(min=low, max=high),
                color=color,
            )
            for level, label, description, low, high, color in MAGERIT_PROBABILITY_SCALE
        ),
    )
    impact = DimensionScale(
        levels=DEFAULT_SCALE_LEVELS,
        scale=tuple(
            ScaleLevel(
                level=level,
                label=label,
                description=description,
                range=NumericRange(min=low, max=high),
                business_impact=business_impact,
                color=color,
            )
            for level, label, description, low, high, business_impact, color in MAGERIT_IMPACT_SCALE
        ),
    )
    matrix = RiskMatrix(
        organization_id=organization_id,
        name="MAGERIT v3 Standard Matrix",
        description="Standard 5x5 risk matrix following MAGERIT v3",
        probability=probability,
        impact=impact,
        cells=generate_default_cells(),
        is_default=True,
    )
    logger.debug("Built MAGERIT standard matrix %s for %s", matrix.matrix_id, organization_id)
    return matrix


def clone_matrix(
    source: RiskMatrix,
    new_name: str,
    organization_id: Optional[str] = None,
) -> RiskMatrix:
    """Copy a matrix under a new id; the copy is never the default."""
    return dataclasses.replace(
        source,
        matrix_id=uuid.uuid4().hex[:12],
        name=new_name,
        organization_id=organization_id or source.organization_id,
        version="1.0",
        is_default=False,
        is_active=True,
        created_at=datetime.now(timezone.utc),
    )
