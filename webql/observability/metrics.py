"""Prometheus metrics for the resolution engine.

Tracks step outcomes, cache effectiveness, delegate usage and call latency.
"""

from prometheus_client import Counter, Histogram

STEP_OUTCOMES = Counter(
    "webql_step_outcomes_total",
    "Number of query keys settled, by outcome",
    labelnames=["outcome"],
)

CACHE_LOOKUPS = Counter(
    "webql_cache_lookups_total",
    "Number of resolver cache lookups, by result",
    labelnames=["result"],
)

DELEGATE_CALLS = Counter(
    "webql_delegate_calls_total",
    "Number of delegate invocations",
    labelnames=["status"],
)

CALL_LATENCY = Histogram(
    "webql_call_latency_seconds",
    "Latency of a full call() in seconds",
    labelnames=["status"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

_enabled = True


def set_metrics_enabled(enabled: bool) -> None:
    """Turn metric recording on or off process-wide."""
    global _enabled
    _enabled = enabled


def metrics_enabled() -> bool:
    return _enabled


def record_step(outcome: str) -> None:
    """Count one settled key (invoked, cached, deferred, delegated, missing)."""
    if _enabled:
        STEP_OUTCOMES.labels(outcome=outcome).inc()


def record_cache_lookup(result: str) -> None:
    """Count one cache lookup (hit, miss, expired)."""
    if _enabled:
        CACHE_LOOKUPS.labels(result=result).inc()


def record_delegate_call(status: str) -> None:
    if _enabled:
        DELEGATE_CALLS.labels(status=status).inc()


def observe_call(status: str, seconds: float) -> None:
    if _enabled:
        CALL_LATENCY.labels(status=status).observe(seconds)
