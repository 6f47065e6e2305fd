"""
cache_store.py
--------------
An in-memory TTL cache for catalog API responses.

Features:
- Entries keyed by a fingerprint of (logical key, params), not by raw URL
- One process-wide TTL; expired entries are purged on access
- Single-entry, prefix and full invalidation
- Hit/miss counters for the admin stats endpoint

The cache is unbounded for the life of the process and is only ever touched
from the event loop, so it carries no lock.
"""
from __future__ import annotations
from dataclasses import dataclass
from time import monotonic
from typing import Any, Callable, Dict, Mapping, Optional

DEFAULT_TTL_SECONDS = 300.0


def fingerprint(logical_key: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """
    Build the cache identity for a logical request.

    Params are sorted by name so insertion order never matters:
    fingerprint("movies:now_playing", {"page": 2}) -> "movies:now_playing:page:2"
    """
    if not params:
        return logical_key
    sorted_params = "|".join(f"{name}:{params[name]}" for name in sorted(params))
    return f"{logical_key}:{sorted_params}"


@dataclass
class CacheEntry:
    value: Any
    stored_at: float
    expires_at: float


class ResponseCache:
    """
    A minimal TTL cache.
    - get(): returns the stored value or None (expired entries are purged on access)
    - set(): stores a value for ttl_seconds, replacing any previous entry
    - invalidate*(): drop one entry, every entry under a logical key, or everything
    - stats(): size/hit/miss counters
    """
    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Optional[Callable[[], float]] = None) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl = ttl_seconds
        self._clock = clock or monotonic
        self._store: Dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0

    def _now(self) -> float:
        return self._clock()

    def _live_entry(self, key: str) -> Optional[CacheEntry]:
        entry = self._store.get(key)
        if entry is None:
            return None
        # Expired? Purge and miss.
        if self._now() > entry.expires_at:
            del self._store[key]
            return None
        return entry

    def get(self, logical_key: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        entry = self._live_entry(fingerprint(logical_key, params))
        if entry is None:
            self._misses += 1
            return None
        self._hits += 1
        return entry.value

    def has(self, logical_key: str, params: Optional[Mapping[str, Any]] = None) -> bool:
        return self._live_entry(fingerprint(logical_key, params)) is not None

    def set(self, logical_key: str, params: Optional[Mapping[str, Any]], value: Any) -> CacheEntry:
        now = self._now()
        entry = CacheEntry(value=value, stored_at=now, expires_at=now + self.ttl)
        self._store[fingerprint(logical_key, params)] = entry
        return entry

    def invalidate(self, logical_key: str, params: Optional[Mapping[str, Any]] = None) -> None:
        self._store.pop(fingerprint(logical_key, params), None)

    def invalidate_by_prefix(self, logical_key: str) -> int:
        stale = [key for key in self._store if key.startswith(logical_key)]
        for key in stale:
            del self._store[key]
        return len(stale)

    def invalidate_all(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)

    def stats(self) -> dict:
        return {
            "size": len(self._store),
            "ttl_seconds": self.ttl,
            "hits": self._hits,
            "misses": self._misses,
            "keys": list(self._store),
        }

    def clear(self) -> None:
        """Drop every entry and reset the counters."""
        self._store.clear()
        self._hits = self._misses = 0
