"""WebQL engine - the public entry point.

Register resolver functions, then run declarative queries against them::

    engine = WebQL().add_resources({
        "user": lambda: {"id": 1, "name": "Ann"},
        "greeting": lambda user: "Hi " + user["name"],
    })
    await engine.call([{"user": None}, {"greeting": "_user"}])
    # {"user": {"id": 1, "name": "Ann"}, "greeting": "Hi Ann"}

The resource registry, its fallback lookups and the resolver cache belong
to the engine instance and are shared by all of its calls. Everything else
(buffer, result, cache directives) is allocated per call.
"""

import time
from collections.abc import Callable, Mapping
from typing import Any
from uuid import uuid4

import structlog

from webql.cache.store import ResolverCache
from webql.config.models.engine import EngineConfig
from webql.config.settings import Settings
from webql.observability.logging import get_logger
from webql.observability.metrics import observe_call
from webql.pipeline.runner import ResolutionPipeline
from webql.query.models import normalize_query
from webql.resources.builtins import BuiltinRegistry
from webql.resources.registry import ResourceMethod, ResourceRegistry

logger = get_logger(__name__)


class WebQL:
    """Query-resolution engine."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        cache: ResolverCache | None = None,
        builtins: BuiltinRegistry | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Engine configuration (defaults apply when omitted)
            cache: Resolver cache, e.g. one with a custom clock
            builtins: Registry serving keys with the builtin prefix
        """
        self._config = config or EngineConfig()
        self._cache = cache if cache is not None else ResolverCache()
        self._registry = ResourceRegistry(
            builtins=builtins,
            builtin_prefix=self._config.builtin_prefix,
            delegate_key=self._config.delegate_key,
        )
        self._pipeline = ResolutionPipeline(self._registry, self._cache, self._config)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "WebQL":
        """Build an engine from the loaded configuration files."""
        if settings is None:
            from webql.config import get_settings

            settings = get_settings()
        return cls(config=settings.engine)

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def cache(self) -> ResolverCache:
        return self._cache

    @property
    def registry(self) -> ResourceRegistry:
        return self._registry

    def add_resources(self, resources: Mapping[str, Callable[..., Any]]) -> "WebQL":
        """Register resolvers by key; later additions overwrite earlier ones.

        The delegate is registered the same way, under ``__delegate__``.
        """
        self._registry.add(resources)
        return self

    def set_resource_method(self, method: ResourceMethod | None) -> "WebQL":
        """Fallback ``(key) -> resolver | None`` for keys not registered here."""
        self._registry.set_method(method)
        return self

    @staticmethod
    def set_shared_resource_method(method: ResourceMethod | None) -> None:
        """Process-wide fallback for engines without their own resource method."""
        ResourceRegistry.set_shared_method(method)

    async def call(self, query: Any) -> Any:
        """Resolve a query and return its result.

        Args:
            query: A step (key string or key -> params mapping) or a list of steps

        Returns:
            A mapping of result keys to values, or the value of a dominant key

        Raises:
            InvalidQueryError: If the query has an unsupported shape
            Exception: Whatever a resolver or the delegate raised
        """
        steps = normalize_query(query)
        started = time.perf_counter()

        with structlog.contextvars.bound_contextvars(call_id=uuid4().hex):
            try:
                state = await self._pipeline.run(steps)
            except Exception:
                observe_call("error", time.perf_counter() - started)
                raise

            elapsed = time.perf_counter() - started
            observe_call("success", elapsed)
            logger.info(
                "call_completed",
                steps=len(steps),
                outcomes=state.outcomes,
                delegated=len(state.delegated),
                duration_ms=round(elapsed * 1000, 3),
            )
        return state.result
