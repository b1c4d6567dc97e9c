"""Delegate phase: hand unknown keys to an external resolver.

Keys that no local source can serve, but whose parameters are fully
resolved, are collected during the main pass. After it, the delegate is
called once with all of them::

    async def delegate(steps: list[dict[str, Any]]) -> dict[str, Any]:
        # steps == [{"weather": {"city": "Oslo"}}, {"!stock>price": "ACME"}]
        ...

The returned mapping is merged into the result (or replaces it when any
delegated key is dominant) and always merged into the buffer, so deferred
steps can interpolate delegated values on the retry pass.
"""

import inspect
from collections.abc import Callable, Mapping, MutableMapping
from typing import Any

from webql.exceptions import DelegateResponseError
from webql.observability.logging import get_logger
from webql.observability.metrics import record_delegate_call
from webql.pipeline.models import CallState
from webql.query.keyspec import ResolutionMode, parse_key_spec

logger = get_logger(__name__)


def has_dominant_key(state: CallState, builtin_prefix: str = "@") -> bool:
    """Whether any delegated key is written in dominant notation."""
    return any(
        parse_key_spec(key, builtin_prefix).mode is ResolutionMode.DOMINANT
        for step in state.delegated
        for key in step.keys()
    )


async def run_delegate_phase(
    state: CallState,
    delegate: Callable[..., Any] | None,
    builtin_prefix: str = "@",
) -> None:
    """Invoke the delegate for the collected steps and merge its response."""
    if not state.delegated:
        return

    keys = [key for step in state.delegated for key in step.keys()]
    if delegate is None:
        logger.debug("delegate_not_configured", keys=keys)
        return

    payload = [step.to_dict() for step in state.delegated]
    logger.debug("delegate_invoked", keys=keys)
    try:
        response = delegate(payload)
        if inspect.isawaitable(response):
            response = await response
    except Exception as exc:
        record_delegate_call("error")
        logger.error(
            "delegate_failed",
            keys=keys,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        raise

    if not isinstance(response, Mapping):
        record_delegate_call("error")
        raise DelegateResponseError(
            f"Delegate must return a mapping, got {type(response).__name__}"
        )
    record_delegate_call("success")

    if has_dominant_key(state, builtin_prefix):
        state.result = response
    elif isinstance(state.result, MutableMapping):
        state.result.update(response)
    else:
        logger.debug("delegate_response_not_merged", reason="result is not a mapping")

    state.buffer.update(response)
    logger.debug("delegate_merged", keys=sorted(response))
