# src/quote_sync/sync/dedup_cache.py

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

MAX_CACHE_SIZE = 1000


class DedupCache:
    """
    Bounded memory of processed trigger event ids (process lifetime only).

    When full, the oldest half by insertion order is dropped in one pass before the
    new id goes in. Lookups do not refresh recency.
    """

    def __init__(self, max_size: int = MAX_CACHE_SIZE) -> None:
        self._max_size = max(2, int(max_size))
        # dict keeps insertion order; values are unused.
        self._ids: dict[str, None] = {}

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, event_id: object) -> bool:
        return isinstance(event_id, str) and self.is_processed(event_id)

    def is_processed(self, event_id: str | None) -> bool:
        if not event_id:
            return False
        return event_id in self._ids

    def mark_processed(self, event_id: str | None) -> None:
        if not event_id or event_id in self._ids:
            return

        if len(self._ids) >= self._max_size:
            evict = self._max_size // 2
            for old in list(self._ids)[:evict]:
                del self._ids[old]
            logger.debug("Dedup cache full; evicted %d oldest event ids", evict)

        self._ids[event_id] = None
