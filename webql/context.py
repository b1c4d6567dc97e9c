"""Per-call invocation context.

Every ``WebQL.call`` builds a fresh ``InvocationContext`` and publishes it
through a context variable while resolvers run, so overlapping calls on one
engine never share a buffer. Resolvers read it with
``get_invocation_context()``::

    def orders(params):
        ctx = get_invocation_context()
        user = ctx.buffer["user"]
        ctx.request_cache("orders", ttl=timedelta(minutes=5))
        ...
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from webql.cache.store import ResolverCache
from webql.query.interpolation import DEFAULT_THIS_KEYWORD, interpolate
from webql.query.keyspec import KeySpec
from webql.query.models import Step


@dataclass(frozen=True, slots=True)
class CacheDirective:
    """Request to cache a key's final value once the call settles."""

    result_key: str
    ttl: timedelta | None = None
    single_serve: bool = False


@dataclass
class InvocationContext:
    """State of one call, visible to the resolvers it invokes.

    ``query`` is the normalised step list, not the object passed to
    ``WebQL.call``: bare keys appear as ``Step({key: None})`` and a single
    step is wrapped in a list.
    """

    query: list[Step]
    cache: ResolverCache
    buffer: dict[str, Any] = field(default_factory=dict)
    cache_directives: list[CacheDirective] = field(default_factory=list)
    this_keyword: str = DEFAULT_THIS_KEYWORD
    current_key: KeySpec | None = None

    def interpolate(self, params: Any) -> Any:
        """Expand placeholders in ``params`` against this call's buffer."""
        return interpolate(params, self.buffer, self.this_keyword)

    def request_cache(
        self,
        result_key: str,
        ttl: timedelta | None = None,
        single_serve: bool = False,
    ) -> None:
        """Ask for ``result_key``'s final value to be cached after the call."""
        self.cache_directives.append(CacheDirective(result_key, ttl, single_serve))


_invocation_context: ContextVar[InvocationContext | None] = ContextVar(
    "invocation_context", default=None
)


def get_invocation_context() -> InvocationContext | None:
    """Context of the call currently invoking resolvers, if any."""
    return _invocation_context.get()


@contextmanager
def active_context(ctx: InvocationContext) -> Iterator[InvocationContext]:
    """Publish ``ctx`` for the duration of the block, restoring the previous one."""
    token = _invocation_context.set(ctx)
    try:
        yield ctx
    finally:
        _invocation_context.reset(token)
