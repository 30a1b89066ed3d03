"""In-memory freshness cache keyed by game id.

Entries are never swept. A stale entry stays in the map until the next miss
overwrites it. Set ``max_entries`` to cap memory when many distinct games are
queried; the least recently written entry is evicted first.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Callable, Optional

from .models import AggregatedResult, CacheEntry

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 20.0


class FreshnessCache:
    """Per-game TTL cache with lazy staleness checks."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be non-negative")
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def is_fresh(self, entry: CacheEntry) -> bool:
        return entry.age(self._clock()) < self.ttl_seconds

    def get(self, game_id: str) -> Optional[CacheEntry]:
        """Return the entry for ``game_id`` if it is still fresh."""
        with self._lock:
            entry = self._entries.get(game_id)
        if entry is None or not self.is_fresh(entry):
            return None
        return entry

    def put(self, game_id: str, data: AggregatedResult) -> CacheEntry:
        """Store ``data``, replacing whatever was cached for ``game_id``."""
        entry = CacheEntry(data=data, created_at=self._clock())
        with self._lock:
            self._entries[game_id] = entry
            self._entries.move_to_end(game_id)
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    logger.debug("Evicted cache entry for gameId %s", evicted)
        return entry
