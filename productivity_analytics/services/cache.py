"""Thread-safe LRU cache with time-to-live"""
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Hashable, Optional

logger = logging.getLogger(__name__)

class TTLCache:
    """LRU cache whose entries expire after ``ttl`` seconds.

    Values are stored and returned as-is; callers cache immutable results
    (or results they never mutate) and put the history version into the key
    so that a write can never be served a result from an older history.
    """

    def __init__(self, max_entries: int = 1000, ttl: float = 3600, clock: Callable[[], float] = time.monotonic):
        self.max_entries = max_entries
        self.ttl = ttl
        self.clock = clock
        self.cache: OrderedDict = OrderedDict()
        self.timestamps: Dict[Hashable, float] = {}
        self._lock = threading.Lock()

        # Stats
        self.hits = 0
        self.misses = 0

    def get(self, key: Hashable) -> Optional[Any]:
        """Get item from cache if it exists and has not expired"""
        with self._lock:
            if key not in self.cache:
                self.misses += 1
                return None

            if self.clock() - self.timestamps[key] > self.ttl:
                del self.cache[key]
                del self.timestamps[key]
                self.misses += 1
                return None

            self.cache.move_to_end(key)
            self.hits += 1
            return self.cache[key]

    def set(self, key: Hashable, value: Any):
        with self._lock:
            if key in self.cache:
                self.cache.move_to_end(key)
            elif len(self.cache) >= self.max_entries:
                oldest_key = next(iter(self.cache))
                del self.cache[oldest_key]
                del self.timestamps[oldest_key]

            self.cache[key] = value
            self.timestamps[key] = self.clock()

    def discard_where(self, predicate: Callable[[Hashable], bool]) -> int:
        """Drop every entry whose key matches; returns how many were dropped"""
        with self._lock:
            stale = [key for key in self.cache if predicate(key)]
            for key in stale:
                del self.cache[key]
                del self.timestamps[key]
        if stale:
            logger.debug(f"Discarded {len(stale)} cache entries")
        return len(stale)

    def clear(self):
        with self._lock:
            self.cache.clear()
            self.timestamps.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self.cache)

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "size": len(self.cache),
                "max_entries": self.max_entries,
                "ttl": self.ttl,
                "hits": self.hits,
                "misses": self.misses,
                "hit_rate": self.hit_rate,
            }
