"""Result values for callers that prefer not to handle exceptions.

The engine itself raises; ``capture`` converts a raised
``RiskEngineError`` into an ``Err`` carrying its code and message.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, TypeVar, Union

from magerisk.errors.config import ErrorCode
from magerisk.errors.exceptions import RiskEngineError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    error_code: ErrorCode
    message: str
    details: list = field(default_factory=list)

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise RiskEngineError(self.message, self.error_code, self.details)


Result = Union[Ok[T], Err]


def capture(func: Callable[..., T], *args: Any, **kwargs: Any) -> Result:
    """Call ``func`` and wrap its outcome.

    Only engine errors are converted; anything else is a defect and
    propagates.
    """
    try:
        return Ok(func(*args, **kwargs))
    except RiskEngineError as exc:
        return Err(exc.error_code, exc.message, list(exc.details))
