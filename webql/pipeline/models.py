"""Pipeline state models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from webql.cache.models import CacheEntry
from webql.context import InvocationContext
from webql.query.keyspec import KeySpec
from webql.query.models import Step
from webql.resources.registry import ResolvedResource


class KeyOutcome(str, Enum):
    """How a single key of a step was settled in a pass."""

    INVOKED = "invoked"  # resolver called
    CACHED = "cached"  # served from the resolver cache
    DEFERRED = "deferred"  # parameters unresolved, retried after delegation
    DELEGATED = "delegated"  # unknown key, forwarded to the delegate
    MISSING = "missing"  # nothing can serve it, settles to None
    UNRESOLVED = "unresolved"  # still unresolved on the retry pass


@dataclass
class KeyPlan:
    """Decision for one key of a step before anything is executed."""

    key: str
    spec: KeySpec
    params: Any
    interpolated: Any
    outcome: KeyOutcome
    resource: ResolvedResource | None = None
    cache_entry: CacheEntry | None = None


@dataclass
class CallState:
    """Mutable state of one call across its phases."""

    context: InvocationContext
    result: Any = field(default_factory=dict)
    deferred: list[Step] = field(default_factory=list)
    delegated: list[Step] = field(default_factory=list)
    outcomes: dict[str, int] = field(default_factory=dict)

    @property
    def buffer(self) -> dict[str, Any]:
        return self.context.buffer

    def count(self, outcome: KeyOutcome) -> None:
        self.outcomes[outcome.value] = self.outcomes.get(outcome.value, 0) + 1
