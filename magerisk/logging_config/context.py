"""Request Context.

Identifiers of the current engine call (request, organization, actor)
kept in one context variable so that nested and concurrent calls never
see each other's values. Every log record emitted inside a
``RequestContext`` carries them.
"""

import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

_EMPTY: Mapping[str, Any] = MappingProxyType({})
_context_var: ContextVar[Mapping[str, Any]] = ContextVar("magerisk_context", default=_EMPTY)


def generate_request_id() -> str:
    return uuid.uuid4().hex


def current_context() -> dict[str, Any]:
    """Bound identifiers of the innermost active context."""
    return dict(_context_var.get())


@dataclass
class RequestContext:
    """Bind identifiers for the duration of a ``with`` block.

    Fields left empty are inherited from an enclosing context; the
    request id is generated only for an outermost context.

    Example:
        with RequestContext(organization_id="org-1", actor_id="analyst"):
            engine.calculate_organizational_var("org-1")
    """

    request_id: str = ""
    organization_id: str = ""
    actor_id: str = ""
    extra: dict[str, Any] = field(default_factory=dict)
    _token: Optional[Any] = field(default=None, repr=False)

    def __enter__(self) -> "RequestContext":
        outer = _context_var.get()
        self.request_id = self.request_id or outer.get("request_id") or generate_request_id()
        self.organization_id = self.organization_id or outer.get("organization_id", "")
        self.actor_id = self.actor_id or outer.get("actor_id", "")

        bound = {**outer, **self.extra, "request_id": self.request_id}
        if self.organization_id:
            bound["organization_id"] = self.organization_id
        if self.actor_id:
            bound["actor_id"] = self.actor_id
        self._token = _context_var.set(MappingProxyType(bound))
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        _context_var.reset(self._token)
        self._token = None

    def bind(self, **kwargs: Any) -> None:
        """Add fields to the active context."""
        self.extra.update(kwargs)
        _context_var.set(MappingProxyType({**_context_var.get(), **kwargs}))
