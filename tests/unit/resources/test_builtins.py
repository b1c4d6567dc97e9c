"""Unit tests for builtin resolvers."""

from datetime import datetime

import pytest

from webql.engine import WebQL
from webql.resources.builtins import BUILTINS, BuiltinRegistry, default_builtins, echo, merge


class TestBuiltinRegistry:
    """Registration and lookup."""

    def test_register_decorator(self) -> None:
        registry = BuiltinRegistry()

        @registry.register("double")
        def double(x: int) -> int:
            return x * 2

        assert registry.get("double") is double
        assert "double" in registry

    def test_default_builtins_is_a_copy(self) -> None:
        copy = default_builtins()
        copy.add("extra", echo)
        assert "extra" not in BUILTINS

    def test_default_names(self) -> None:
        assert {"echo", "now", "merge", "buffer"} <= set(BUILTINS.names())


class TestBuiltinFunctions:
    """Behaviour of the shipped builtins."""

    def test_echo(self) -> None:
        assert echo({"a": 1}) == {"a": 1}
        assert echo() is None

    def test_merge_skips_non_mappings(self) -> None:
        assert merge({"a": 1}, 5, {"b": 2, "a": 3}) == {"a": 3, "b": 2}

    def test_now_is_iso_timestamp(self) -> None:
        value = BUILTINS.get("now")()
        assert datetime.fromisoformat(value).tzinfo is not None

    def test_buffer_outside_call(self) -> None:
        assert BUILTINS.get("buffer")() == {}


class TestBuiltinsThroughEngine:
    """Builtins are addressed with the '@' prefix in queries."""

    @pytest.mark.asyncio
    async def test_echo_interpolates(self, engine: WebQL) -> None:
        engine.add_resources({"user": lambda: {"name": "Ann"}})
        result = await engine.call(["user", {"@echo>copy": "_user.name"}])
        assert result == {"user": {"name": "Ann"}, "copy": "Ann"}

    @pytest.mark.asyncio
    async def test_merge_spreads_list(self, engine: WebQL) -> None:
        result = await engine.call([{"@merge>m": [{"a": 1}, {"b": 2}]}])
        assert result == {"m": {"a": 1, "b": 2}}

    @pytest.mark.asyncio
    async def test_buffer_snapshot(self, engine: WebQL) -> None:
        engine.add_resources({"a": lambda: 1})
        result = await engine.call(["?a", "@buffer>snap"])
        assert result == {"snap": {"a": 1}}

    @pytest.mark.asyncio
    async def test_unknown_builtin_is_none_and_not_delegated(self, engine: WebQL) -> None:
        seen: list = []

        async def delegate(steps):
            seen.extend(steps)
            return {}

        engine.add_resources({"__delegate__": delegate})
        result = await engine.call(["@nope"])
        assert result == {"@nope": None}
        assert seen == []
