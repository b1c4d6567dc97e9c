"""Unit tests for resolver-requested caching."""

from datetime import timedelta

import pytest

from tests.conftest import FrozenClock
from webql.cache.store import ResolverCache
from webql.config.models.engine import EngineConfig
from webql.context import get_invocation_context
from webql.engine import WebQL


def make_cached_resolver(calls: list[str], ttl: timedelta | None = None, single_serve: bool = False):
    def rates(currency: str) -> dict[str, float]:
        calls.append(currency)
        ctx = get_invocation_context()
        assert ctx is not None
        ctx.request_cache(ctx.current_key.result_key, ttl=ttl, single_serve=single_serve)
        return {currency: 1.0}

    return rates


class TestCacheDirectives:
    """Resolvers can ask for their result to be cached."""

    @pytest.mark.asyncio
    async def test_result_cached_for_duration(
        self, engine: WebQL, clock: FrozenClock
    ) -> None:
        calls: list[str] = []
        engine.add_resources({"rates": make_cached_resolver(calls, ttl=timedelta(hours=1))})

        await engine.call([{"rates": "EUR"}])
        clock.advance(minutes=30)
        result = await engine.call([{"rates": "EUR"}])

        assert result == {"rates": {"EUR": 1.0}}
        assert calls == ["EUR"]

        clock.advance(minutes=31)
        await engine.call([{"rates": "EUR"}])
        assert calls == ["EUR", "EUR"]

    @pytest.mark.asyncio
    async def test_cache_keyed_by_params(self, engine: WebQL) -> None:
        calls: list[str] = []
        engine.add_resources({"rates": make_cached_resolver(calls)})

        await engine.call([{"rates": "EUR"}])
        await engine.call([{"rates": "USD"}])

        assert calls == ["EUR", "USD"]
        assert engine.cache.has("rates", "EUR")
        assert engine.cache.has("rates", "USD")

    @pytest.mark.asyncio
    async def test_renamed_key_cached_under_resolver_key(self, engine: WebQL) -> None:
        calls: list[str] = []
        engine.add_resources({"rates": make_cached_resolver(calls)})

        await engine.call([{"rates>eur": "EUR"}])

        assert engine.cache.has("rates", "EUR")
        assert await engine.call([{"rates": "EUR"}]) == {"rates": {"EUR": 1.0}}
        assert calls == ["EUR"]

    @pytest.mark.asyncio
    async def test_single_serve_directive(self, engine: WebQL) -> None:
        calls: list[str] = []
        engine.add_resources({"rates": make_cached_resolver(calls, single_serve=True)})

        await engine.call([{"rates": "EUR"}])  # invoked, cached once
        await engine.call([{"rates": "EUR"}])  # served from cache
        await engine.call([{"rates": "EUR"}])  # invoked again

        assert calls == ["EUR", "EUR"]

    @pytest.mark.asyncio
    async def test_cache_hit_skips_resolver_and_directive(self, engine: WebQL) -> None:
        engine.cache.store("rates", "EUR", "pinned", single_serve=True)
        calls: list[str] = []
        engine.add_resources({"rates": make_cached_resolver(calls)})

        # the pinned entry is served, so the resolver never asks for caching
        assert await engine.call([{"rates": "EUR"}]) == {"rates": "pinned"}
        assert len(engine.cache) == 0
        assert calls == []

    @pytest.mark.asyncio
    async def test_unmatched_directive_is_ignored(self, engine: WebQL) -> None:
        def noisy() -> int:
            get_invocation_context().request_cache("nothing_here")
            return 1

        engine.add_resources({"noisy": noisy})
        assert await engine.call(["noisy"]) == {"noisy": 1}
        assert len(engine.cache) == 0

    @pytest.mark.asyncio
    async def test_directives_disabled(self, clock: FrozenClock) -> None:
        engine = WebQL(
            config=EngineConfig(cache_directives_enabled=False),
            cache=ResolverCache(clock=clock),
        )
        calls: list[str] = []
        engine.add_resources({"rates": make_cached_resolver(calls)})

        await engine.call([{"rates": "EUR"}])
        await engine.call([{"rates": "EUR"}])

        assert calls == ["EUR", "EUR"]
