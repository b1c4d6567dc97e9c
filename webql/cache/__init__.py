"""Resolver result caching."""

from webql.cache.models import CacheEntry
from webql.cache.store import ResolverCache, cache_key

__all__ = ["CacheEntry", "ResolverCache", "cache_key"]
