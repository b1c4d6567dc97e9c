"""Resolver result cache.

Entries are keyed by the resolver key followed by the canonical JSON of the
already-interpolated parameters, so ``user`` with ``{"id": 1}`` is stored
under ``user{"id":1}``.

The cache has no locking. It lives on the engine instance and is shared by
every call made through that instance; callers that need read-modify-write
consistency must serialise their calls.
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from webql.cache.models import CacheEntry
from webql.observability.logging import get_logger
from webql.observability.metrics import record_cache_lookup
from webql.query.interpolation import canonical_json

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def cache_key(resolver_key: str, params: Any) -> str:
    """Cache key for a resolver key and interpolated parameters."""
    return resolver_key + canonical_json(params)


class ResolverCache:
    """In-memory map of (resolver key, params) to cached results."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._clock = clock or utc_now

    def lookup(self, resolver_key: str, params: Any) -> CacheEntry | None:
        """Return the live entry for this key, or None on a miss.

        Expired entries are removed and reported as a miss. Single-serve
        entries are removed as they are returned.
        """
        key = cache_key(resolver_key, params)
        entry = self._entries.get(key)
        if entry is None:
            record_cache_lookup("miss")
            return None

        if entry.is_expired(self._clock()):
            del self._entries[key]
            record_cache_lookup("expired")
            logger.debug("cache_entry_expired", resolver_key=resolver_key, cache_key=key)
            return None

        if entry.single_serve:
            del self._entries[key]

        record_cache_lookup("hit")
        return entry

    def store(
        self,
        resolver_key: str,
        params: Any,
        value: Any,
        ttl: timedelta | None = None,
        single_serve: bool = False,
    ) -> CacheEntry:
        """Store ``value`` for this key, replacing any existing entry."""
        entry = CacheEntry.create(value, self._clock(), ttl=ttl, single_serve=single_serve)
        self._entries[cache_key(resolver_key, params)] = entry
        logger.debug(
            "cache_entry_stored",
            resolver_key=resolver_key,
            ttl_seconds=ttl.total_seconds() if ttl is not None else None,
            single_serve=single_serve,
        )
        return entry

    def has(self, resolver_key: str, params: Any) -> bool:
        """Whether an entry exists, without consuming or expiring it."""
        return cache_key(resolver_key, params) in self._entries

    def invalidate(self, resolver_key: str, params: Any) -> bool:
        """Remove one entry. Returns whether it existed."""
        return self._entries.pop(cache_key(resolver_key, params), None) is not None

    def purge_expired(self) -> int:
        """Drop all expired entries. Returns the number removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
