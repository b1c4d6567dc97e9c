"""Tests for Prometheus metrics."""

from collections.abc import Generator

import pytest
from prometheus_client import REGISTRY

from webql.observability.metrics import (
    metrics_enabled,
    observe_call,
    record_cache_lookup,
    record_delegate_call,
    record_step,
    set_metrics_enabled,
)


def sample(name: str, **labels: str) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


@pytest.fixture(autouse=True)
def metrics_on() -> Generator[None, None, None]:
    set_metrics_enabled(True)
    yield
    set_metrics_enabled(True)


class TestRecording:
    """Recording helpers increment their counters."""

    def test_record_step(self) -> None:
        before = sample("webql_step_outcomes_total", outcome="invoked")
        record_step("invoked")
        assert sample("webql_step_outcomes_total", outcome="invoked") == before + 1

    def test_record_cache_lookup(self) -> None:
        before = sample("webql_cache_lookups_total", result="hit")
        record_cache_lookup("hit")
        assert sample("webql_cache_lookups_total", result="hit") == before + 1

    def test_record_delegate_call(self) -> None:
        before = sample("webql_delegate_calls_total", status="success")
        record_delegate_call("success")
        assert sample("webql_delegate_calls_total", status="success") == before + 1

    def test_observe_call(self) -> None:
        before = sample("webql_call_latency_seconds_count", status="success")
        observe_call("success", 0.01)
        assert sample("webql_call_latency_seconds_count", status="success") == before + 1


class TestEnabledFlag:
    """Disabling metrics makes the helpers no-ops."""

    def test_disabled_records_nothing(self) -> None:
        set_metrics_enabled(False)
        assert metrics_enabled() is False

        before = sample("webql_step_outcomes_total", outcome="missing")
        record_step("missing")
        assert sample("webql_step_outcomes_total", outcome="missing") == before

    @pytest.mark.asyncio
    async def test_engine_call_counts_outcomes(self) -> None:
        from webql import WebQL

        before = sample("webql_step_outcomes_total", outcome="invoked")
        await WebQL().add_resources({"one": lambda: 1}).call("one")
        assert sample("webql_step_outcomes_total", outcome="invoked") == before + 1
