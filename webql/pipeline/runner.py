"""Resolution pipeline.

Runs a normalised query in three phases:

1. Main pass - every step in order. Each step waits for the previous one,
   so later steps can interpolate earlier results from the buffer.
2. Delegate phase - unknown keys collected in the main pass are sent to
   the delegate in one batch.
3. Retry pass - steps whose parameters referenced missing buffer values
   run once more against the enriched buffer. Anything still unresolved
   settles to None.

A resolver exception aborts the call: remaining steps are not started and
no partial result is returned.
"""

import inspect
import time
from collections.abc import Callable, MutableMapping
from typing import Any

from webql.cache.store import ResolverCache
from webql.config.models.engine import EngineConfig
from webql.context import InvocationContext, active_context
from webql.observability.logging import get_logger
from webql.observability.metrics import record_step
from webql.pipeline.delegation import run_delegate_phase
from webql.pipeline.models import CallState, KeyOutcome, KeyPlan
from webql.query.interpolation import interpolate, is_resolved
from webql.query.keyspec import ResolutionMode, parse_key_spec
from webql.query.models import Step
from webql.resources.registry import ResourceRegistry

logger = get_logger(__name__)


def resolver_arguments(params: Any) -> tuple[Any, ...]:
    """Positional arguments for a resolver call.

    Lists and tuples are spread, ``None`` means no arguments, anything
    else is passed as the single argument.
    """
    if params is None:
        return ()
    if isinstance(params, list | tuple):
        return tuple(params)
    return (params,)


async def call_resolver(func: Callable[..., Any], params: Any) -> Any:
    """Call a sync or async resolver and return its settled value."""
    value = func(*resolver_arguments(params))
    if inspect.isawaitable(value):
        value = await value
    return value


class ResolutionPipeline:
    """Drives one call through its main, delegate and retry phases."""

    def __init__(
        self,
        registry: ResourceRegistry,
        cache: ResolverCache,
        config: EngineConfig | None = None,
    ) -> None:
        self._registry = registry
        self._cache = cache
        self._config = config or EngineConfig()

    async def run(self, steps: list[Step]) -> CallState:
        """Resolve ``steps`` and return the settled call state."""
        context = InvocationContext(
            query=steps,
            cache=self._cache,
            this_keyword=self._config.this_keyword,
        )
        state = CallState(context=context)

        with active_context(context):
            await self._run_pass(steps, state, retry=False)

            await run_delegate_phase(
                state, self._registry.delegate, self._config.builtin_prefix
            )

            if state.deferred and self._config.retry_deferred:
                deferred, state.deferred = state.deferred, []
                logger.debug("retry_pass_started", steps=len(deferred))
                await self._run_pass(deferred, state, retry=True)

        if self._config.cache_directives_enabled:
            self._apply_cache_directives(state)

        return state

    async def _run_pass(self, steps: list[Step], state: CallState, retry: bool) -> None:
        for step in steps:
            await self._run_step(step, state, retry)

    async def _run_step(self, step: Step, state: CallState, retry: bool) -> None:
        plans = [self._plan_key(key, params, state) for key, params in step]

        if any(plan.outcome is KeyOutcome.DEFERRED for plan in plans):
            if retry:
                for plan in plans:
                    logger.warning(
                        "step_unresolved",
                        key=plan.key,
                        missing=not is_resolved(plan.interpolated),
                    )
                    self._settle(plan, None, KeyOutcome.UNRESOLVED, state)
                return
            state.deferred.append(step)
            for plan in plans:
                logger.debug("step_deferred", key=plan.key)
                self._settle(plan, None, KeyOutcome.DEFERRED, state)
            return

        delegated: dict[str, Any] = {}
        for plan in plans:
            self._lookup(plan)
            if plan.outcome is KeyOutcome.DELEGATED:
                if retry:
                    logger.warning("step_unresolved", key=plan.key, reason="delegate already ran")
                    self._settle(plan, None, KeyOutcome.UNRESOLVED, state)
                else:
                    delegated[plan.key] = plan.interpolated
                    self._settle(plan, None, KeyOutcome.DELEGATED, state)
            elif plan.outcome is KeyOutcome.CACHED:
                assert plan.cache_entry is not None
                logger.debug("cache_hit", key=plan.key)
                self._settle(plan, plan.cache_entry.value, KeyOutcome.CACHED, state)
            elif plan.outcome is KeyOutcome.INVOKED:
                value = await self._invoke(plan, state)
                self._settle(plan, value, KeyOutcome.INVOKED, state)
            else:
                logger.debug("builtin_not_found", key=plan.key)
                self._settle(plan, None, KeyOutcome.MISSING, state)

        if delegated:
            logger.debug("step_delegated", keys=sorted(delegated))
            state.delegated.append(Step(delegated))

    def _plan_key(self, key: str, params: Any, state: CallState) -> KeyPlan:
        spec = parse_key_spec(key, self._config.builtin_prefix)
        interpolated = interpolate(params, state.buffer, self._config.this_keyword)
        outcome = KeyOutcome.INVOKED if is_resolved(interpolated) else KeyOutcome.DEFERRED
        return KeyPlan(
            key=key,
            spec=spec,
            params=params,
            interpolated=interpolated,
            outcome=outcome,
        )

    def _lookup(self, plan: KeyPlan) -> None:
        """Decide how a key with resolved parameters is served."""
        resolver_key = plan.spec.resolver_key

        if self._config.cache_enabled:
            entry = self._cache.lookup(resolver_key, plan.interpolated)
            if entry is not None:
                plan.cache_entry = entry
                plan.outcome = KeyOutcome.CACHED
                return

        resource = self._registry.resolve(resolver_key)
        if resource is not None:
            plan.resource = resource
            plan.outcome = KeyOutcome.INVOKED
        elif self._registry.is_builtin_key(resolver_key):
            plan.outcome = KeyOutcome.MISSING
        else:
            plan.outcome = KeyOutcome.DELEGATED

    async def _invoke(self, plan: KeyPlan, state: CallState) -> Any:
        assert plan.resource is not None
        context = state.context
        context.current_key = plan.spec
        started = time.perf_counter()
        try:
            value = await call_resolver(plan.resource.func, plan.interpolated)
        except Exception as exc:
            logger.error(
                "resolver_failed",
                key=plan.key,
                resolver_key=plan.spec.resolver_key,
                source=plan.resource.source.value,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise
        finally:
            context.current_key = None

        logger.debug(
            "resolver_invoked",
            key=plan.key,
            source=plan.resource.source.value,
            duration_ms=round((time.perf_counter() - started) * 1000, 3),
        )
        return value

    def _settle(self, plan: KeyPlan, value: Any, outcome: KeyOutcome, state: CallState) -> None:
        """Fold a key's value into the result and the buffer."""
        spec = plan.spec
        if spec.mode is ResolutionMode.STANDARD:
            if isinstance(state.result, MutableMapping):
                state.result[spec.result_key] = value
            else:
                logger.debug("result_not_a_mapping", key=plan.key)
        elif spec.mode is ResolutionMode.DOMINANT and value is not None:
            state.result = value
        state.buffer[spec.result_key] = value

        state.count(outcome)
        record_step(outcome.value)

    def _apply_cache_directives(self, state: CallState) -> None:
        """Store values that resolvers asked to cache during the call."""
        context = state.context
        for directive in context.cache_directives:
            match = self._find_step_key(context.query, directive.result_key)
            if match is None:
                logger.warning("cache_directive_unmatched", result_key=directive.result_key)
                continue

            resolver_key, params = match
            params = interpolate(params, state.buffer, self._config.this_keyword)
            if not is_resolved(params) or directive.result_key not in state.buffer:
                logger.debug("cache_directive_skipped", result_key=directive.result_key)
                continue
            if self._cache.has(resolver_key, params):
                continue

            self._cache.store(
                resolver_key,
                params,
                state.buffer[directive.result_key],
                ttl=directive.ttl,
                single_serve=directive.single_serve,
            )

    def _find_step_key(self, steps: list[Step], result_key: str) -> tuple[str, Any] | None:
        for step in steps:
            for key, params in step:
                spec = parse_key_spec(key, self._config.builtin_prefix)
                if spec.result_key == result_key:
                    return spec.resolver_key, params
        return None
