"""Resolver lookup: caller resources, fallbacks and builtins."""

from webql.resources.builtins import BUILTINS, BuiltinRegistry, default_builtins
from webql.resources.registry import (
    ResolvedResource,
    ResolverSource,
    ResourceRegistry,
)

__all__ = [
    "BUILTINS",
    "BuiltinRegistry",
    "default_builtins",
    "ResolvedResource",
    "ResolverSource",
    "ResourceRegistry",
]
