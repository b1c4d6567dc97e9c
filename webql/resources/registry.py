"""Resource registry: resolver lookup for step keys.

Lookup order for a resolver key:

1. Keys carrying the builtin prefix are served by the builtin registry only.
2. Resources added to this registry with ``add``.
3. The instance fallback set with ``set_method``.
4. The process-wide fallback set with ``set_shared_method``, consulted only
   when the instance has no fallback of its own.

The delegate key is never resolvable as an ordinary resource.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

from webql.observability.logging import get_logger
from webql.resources.builtins import BuiltinRegistry, default_builtins

logger = get_logger(__name__)

Resolver = Callable[..., Any]
ResourceMethod = Callable[[str], Resolver | None]


class ResolverSource(str, Enum):
    """Where a resolver was found."""

    LOCAL = "local"
    INSTANCE_FALLBACK = "instance_fallback"
    SHARED_FALLBACK = "shared_fallback"
    BUILTIN = "builtin"


@dataclass(frozen=True, slots=True)
class ResolvedResource:
    """A resolver together with the source that supplied it."""

    func: Resolver
    source: ResolverSource


class ResourceRegistry:
    """Resolver functions available to one engine instance."""

    _shared_method: ClassVar[ResourceMethod | None] = None

    def __init__(
        self,
        builtins: BuiltinRegistry | None = None,
        builtin_prefix: str = "@",
        delegate_key: str = "__delegate__",
    ) -> None:
        self._resources: dict[str, Resolver] = {}
        self._method: ResourceMethod | None = None
        self._builtins = builtins if builtins is not None else default_builtins()
        self.builtin_prefix = builtin_prefix
        self.delegate_key = delegate_key

    @property
    def builtins(self) -> BuiltinRegistry:
        return self._builtins

    def add(self, resources: Mapping[str, Resolver]) -> "ResourceRegistry":
        """Merge resolvers in; later additions overwrite earlier ones."""
        self._resources.update(resources)
        logger.debug("resources_added", keys=sorted(resources))
        return self

    def set_method(self, method: ResourceMethod | None) -> "ResourceRegistry":
        """Set this instance's fallback lookup (None removes it)."""
        self._method = method
        return self

    @classmethod
    def set_shared_method(cls, method: ResourceMethod | None) -> None:
        """Set the process-wide fallback lookup (None removes it)."""
        ResourceRegistry._shared_method = method

    @property
    def delegate(self) -> Resolver | None:
        return self._resources.get(self.delegate_key)

    def is_builtin_key(self, resolver_key: str) -> bool:
        return resolver_key.startswith(self.builtin_prefix)

    def resolve(self, resolver_key: str) -> ResolvedResource | None:
        """Find the resolver for a key, or None when no source has one."""
        if self.is_builtin_key(resolver_key):
            func = self._builtins.get(resolver_key[len(self.builtin_prefix) :])
            return ResolvedResource(func, ResolverSource.BUILTIN) if func else None

        if resolver_key == self.delegate_key:
            return None

        func = self._resources.get(resolver_key)
        if func is not None:
            return ResolvedResource(func, ResolverSource.LOCAL)

        if self._method is not None:
            func = self._method(resolver_key)
            return ResolvedResource(func, ResolverSource.INSTANCE_FALLBACK) if func else None

        shared = ResourceRegistry._shared_method
        if shared is not None:
            func = shared(resolver_key)
            if func:
                return ResolvedResource(func, ResolverSource.SHARED_FALLBACK)

        return None

    def registered_keys(self) -> list[str]:
        """Locally registered resolver keys, excluding the delegate."""
        return sorted(key for key in self._resources if key != self.delegate_key)

    def __contains__(self, resolver_key: object) -> bool:
        return resolver_key in self._resources
