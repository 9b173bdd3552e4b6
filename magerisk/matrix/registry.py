"""Default Matrix Registry.

Plans the activation of an organization's default matrix. The plan is
an intent (new default, previous default to clear); persistence applies
it atomically so readers never observe two defaults.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from magerisk.errors.exceptions import InvalidConfigurationError, NotFoundError
from magerisk.matrix.models import RiskMatrix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DefaultSwap:
    """Intent to make ``new_default_id`` the organization's only default."""
    organization_id: str
    new_default_id: str
    previous_default_id: Optional[str] = None

    @property
    def is_noop(self) -> bool:
        return self.previous_default_id == self.new_default_id


def plan_default_swap(
    matrices: Iterable[RiskMatrix],
    organization_id: str,
    new_default_id: str,
) -> DefaultSwap:
    """Validate the target matrix and build the swap intent.

    Raises:
        NotFoundError: target matrix does not belong to the organization.
        InvalidConfigurationError: target is inactive or misconfigured.
    """
    owned = [m for m in matrices if m.organization_id == organization_id]
    target = next((m for m in owned if m.matrix_id == new_default_id), None)
    if target is None:
        raise NotFoundError(
            f"Risk matrix {new_default_id} not found for organization {organization_id}",
            resource_type="risk_matrix",
            resource_id=new_default_id,
        )
    if not target.is_active:
        raise InvalidConfigurationError(
            f"Risk matrix {new_default_id} is inactive and cannot become the default",
            violations=["matrix inactive"],
        )
    violations = target.validate_configuration()
    if violations:
        raise InvalidConfigurationError(
            f"Risk matrix {new_default_id} failed validation",
            violations=violations,
        )

    previous = next(
        (m.matrix_id for m in owned if m.is_default and m.is_active and m.matrix_id != new_default_id),
        new_default_id if target.is_default else None,
    )
    swap = DefaultSwap(
        organization_id=organization_id,
        new_default_id=new_default_id,
        previous_default_id=previous,
    )
    logger.debug("Planned default swap %s -> %s", previous, new_default_id)
    return swap


def apply_default_swap(
    matrices: Iterable[RiskMatrix],
    swap: DefaultSwap,
) -> list[RiskMatrix]:
    """Return the matrices whose default flag changes under ``swap``."""
    changed = []
    for matrix in matrices:
        if matrix.organization_id != swap.organization_id:
            continue
        should_be_default = matrix.matrix_id == swap.new_default_id
        if matrix.is_default != should_be_default:
            changed.append(dataclasses.replace(matrix, is_default=should_be_default))
    return changed
