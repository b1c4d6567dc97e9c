"""WebQL - declarative query resolution over registered resolver functions."""

from webql.cache import CacheEntry, ResolverCache
from webql.config.models.engine import EngineConfig
from webql.context import InvocationContext, get_invocation_context
from webql.engine import WebQL
from webql.exceptions import (
    ConfigurationError,
    DelegateResponseError,
    InvalidQueryError,
    WebQLError,
)
from webql.query import UNRESOLVED, KeySpec, ResolutionMode, parse_key_spec
from webql.resources import BUILTINS, BuiltinRegistry

__all__ = [
    "WebQL",
    "EngineConfig",
    "CacheEntry",
    "ResolverCache",
    "InvocationContext",
    "get_invocation_context",
    "KeySpec",
    "ResolutionMode",
    "parse_key_spec",
    "UNRESOLVED",
    "BUILTINS",
    "BuiltinRegistry",
    "WebQLError",
    "InvalidQueryError",
    "DelegateResponseError",
    "ConfigurationError",
]
