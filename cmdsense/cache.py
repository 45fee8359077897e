# cmdsense/cache.py
"""
Bounded result cache shared by the analyzer, history search and completion.

Eviction is by insertion order: when full, the oldest inserted key goes,
no matter how often it was read. Keys are opaque strings; callers prefix
them with a namespace (``search:``, ``patterns:``...) so whole categories
can be dropped with ``invalidate_prefix``.
"""
import hashlib
import time
from collections import deque
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Deque, Dict, Iterable, List, Tuple

from cmdsense.constants import DEFAULT_CACHE_CAPACITY
from cmdsense.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CacheEntry:
    """A cached value and when it was stored."""

    key: str
    value: Any
    inserted_at: float = field(default_factory=time.time)


@dataclass
class CacheStats:
    """Cache performance counters."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    invalidations: int = 0

    @property
    def hit_rate(self) -> float:
        """Hit rate percentage."""
        total = self.hits + self.misses
        return (self.hits / total * 100) if total > 0 else 0.0


class ResultCache:
    """Thread-safe key/value store with FIFO eviction and prefix invalidation."""

    def __init__(self, capacity: int = DEFAULT_CACHE_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Cache capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._entries: Dict[str, CacheEntry] = {}
        self._order: Deque[str] = deque()
        self._lock = Lock()
        self._stats = CacheStats()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(**vars(self._stats))

    def get(self, key: str) -> Tuple[Any, bool]:
        """Return ``(value, True)`` for a cached key, ``(None, False)`` otherwise."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._stats.misses += 1
                return None, False
            self._stats.hits += 1
            return entry.value, True

    def put(self, key: str, value: Any) -> None:
        """Store a value; replacing an existing key keeps its queue position."""
        with self._lock:
            if key in self._entries:
                self._entries[key] = CacheEntry(key=key, value=value)
                return

            while len(self._entries) >= self._capacity:
                oldest = self._order.popleft()
                self._entries.pop(oldest, None)
                self._stats.evictions += 1
                logger.debug(f"Evicted cache entry '{oldest}'")

            self._entries[key] = CacheEntry(key=key, value=value)
            self._order.append(key)

    def invalidate_prefix(self, prefix: str) -> int:
        """Remove every entry whose key starts with ``prefix``."""
        with self._lock:
            doomed = [key for key in self._order if key.startswith(prefix)]
            if not doomed:
                return 0
            doomed_set = set(doomed)
            for key in doomed:
                del self._entries[key]
            self._order = deque(key for key in self._order if key not in doomed_set)
            self._stats.invalidations += len(doomed)

        logger.debug(f"Invalidated {len(doomed)} cache entries with prefix '{prefix}'")
        return len(doomed)

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._entries.clear()
            self._order.clear()

    def keys(self) -> List[str]:
        """Keys in insertion order."""
        with self._lock:
            return list(self._order)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def fingerprint(values: Iterable[str]) -> str:
    """Stable sha1 digest of a sequence of strings, for use inside cache keys."""
    digest = hashlib.sha1()
    for value in values:
        digest.update(value.encode("utf-8", "surrogateescape"))
        digest.update(b"\x1f")
    return digest.hexdigest()
