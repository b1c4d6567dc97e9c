"""Builtin resolvers addressed with the reserved ``@`` prefix.

``{"@echo": {"a": 1}}`` is served by the ``echo`` builtin here rather than by
caller resources. Builtins follow the ordinary resolver contract and can
read the active invocation context.
"""

from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from webql.context import get_invocation_context

Resolver = Callable[..., Any]


class BuiltinRegistry:
    """Name -> resolver mapping for builtins."""

    def __init__(self, builtins: Mapping[str, Resolver] | None = None) -> None:
        self._builtins: dict[str, Resolver] = dict(builtins or {})

    def register(self, name: str) -> Callable[[Resolver], Resolver]:
        """Decorator registering a function under ``name``."""

        def decorator(func: Resolver) -> Resolver:
            self._builtins[name] = func
            return func

        return decorator

    def add(self, name: str, func: Resolver) -> None:
        self._builtins[name] = func

    def get(self, name: str) -> Resolver | None:
        return self._builtins.get(name)

    def names(self) -> list[str]:
        return sorted(self._builtins)

    def copy(self) -> "BuiltinRegistry":
        return BuiltinRegistry(self._builtins)

    def __contains__(self, name: object) -> bool:
        return name in self._builtins


BUILTINS = BuiltinRegistry()


@BUILTINS.register("echo")
def echo(value: Any = None) -> Any:
    """Return the (interpolated) argument unchanged."""
    return value


@BUILTINS.register("now")
def now(*_args: Any) -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(UTC).isoformat()


@BUILTINS.register("merge")
def merge(*mappings: Any) -> dict[str, Any]:
    """Shallow-merge mapping arguments left to right; other arguments are skipped."""
    merged: dict[str, Any] = {}
    for mapping in mappings:
        if isinstance(mapping, Mapping):
            merged.update(mapping)
    return merged


@BUILTINS.register("buffer")
def buffer(*_args: Any) -> dict[str, Any]:
    """Snapshot of the buffer of the call in progress."""
    context = get_invocation_context()
    return dict(context.buffer) if context is not None else {}


def default_builtins() -> BuiltinRegistry:
    """A fresh copy of the process-wide builtin registry."""
    return BUILTINS.copy()
