"""Bounded, chronologically ordered observation history"""
import bisect
import itertools
import logging
import threading
from typing import Iterable, List, Tuple
from productivity_analytics.models.observation import Observation

logger = logging.getLogger(__name__)

class ObservationHistory:
    """Rolling observation buffer guarded by a single lock.

    Entries stay sorted by timestamp with ties kept in insertion order.
    When full, the oldest observations are evicted first. Every write bumps
    ``version`` so readers can tell which history a derived result belongs to.
    """

    def __init__(self, capacity: int = 5000):
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self.capacity = capacity
        self._entries: List[Tuple] = []
        self._sequence = itertools.count()
        self._lock = threading.RLock()
        self.version = 0

    def append(self, observation: Observation) -> int:
        """Insert an observation in timestamp order; returns the new version"""
        with self._lock:
            self._insert(observation)
            self.version += 1
            return self.version

    def extend(self, observations: Iterable[Observation]) -> int:
        """Insert several observations as one write"""
        with self._lock:
            for observation in observations:
                self._insert(observation)
            self.version += 1
            return self.version

    def _insert(self, observation: Observation):
        bisect.insort(self._entries, (observation.timestamp, next(self._sequence), observation))
        overflow = len(self._entries) - self.capacity
        if overflow > 0:
            del self._entries[:overflow]
            logger.debug(f"Evicted {overflow} observations from history")

    def snapshot(self) -> Tuple[Tuple[Observation, ...], int]:
        """Consistent copy of the history together with its version"""
        with self._lock:
            return tuple(entry[2] for entry in self._entries), self.version

    def clear(self):
        with self._lock:
            self._entries.clear()
            self.version += 1

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
