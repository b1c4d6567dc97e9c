"""Resolution pipeline: step execution, delegation and the per-call context."""

from webql.context import (
    CacheDirective,
    InvocationContext,
    active_context,
    get_invocation_context,
)
from webql.pipeline.models import CallState, KeyOutcome, KeyPlan
from webql.pipeline.runner import ResolutionPipeline, call_resolver, resolver_arguments

__all__ = [
    "CacheDirective",
    "InvocationContext",
    "active_context",
    "get_invocation_context",
    "CallState",
    "KeyOutcome",
    "KeyPlan",
    "ResolutionPipeline",
    "call_resolver",
    "resolver_arguments",
]
