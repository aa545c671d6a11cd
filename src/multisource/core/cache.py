"""In-memory result cache with lazy TTL expiry."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from multisource.models import CacheEntry
from multisource.models import CacheStats
from multisource.models import CacheStatsEntry

logger = logging.getLogger(__name__)


class ResultCache:
    """Cache of aggregated values keyed by cache key.

    Entries are only visible while ``now < expires_at``. Expired entries are
    evicted when read; there is no background sweep.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._clock = clock

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def get(self, key: str) -> CacheEntry | None:
        """Get a live entry, evicting it if it has expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        if entry.is_expired(self._clock()):
            logger.debug("Cache entry %s expired", key)
            del self._entries[key]
            return None

        return entry

    def set(self, key: str, data: Any, ttl: float, sources: list[str]) -> CacheEntry:
        """Store a value for ``ttl`` seconds."""
        entry = CacheEntry.create(data, ttl, sources, now=self._clock())
        self._entries[key] = entry
        return entry

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self, key: str | None = None) -> None:
        """Clear one entry or the whole cache."""
        if key is not None:
            self.delete(key)
        else:
            self._entries.clear()

    def stats(self) -> CacheStats:
        """Size and per-entry ages, oldest first.

        Expired entries that have not been read yet are still listed.
        """
        now = self._clock()
        entries = [
            CacheStatsEntry(key=key, sources=list(entry.sources), age_ms=entry.age_ms(now))
            for key, entry in self._entries.items()
        ]
        entries.sort(key=lambda e: e.age_ms, reverse=True)
        return CacheStats(size=len(self._entries), entries=entries)
