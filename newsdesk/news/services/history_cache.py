"""
History cache for the "Old News" archive.

Holds the most recent first page per category key. Created once per process
and handed to every feed session; only the orchestrators write to it.
"""

from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Union

import structlog

from ..models import Category, FeedPage, HistoryEntry, category_key

logger = structlog.get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class HistoryCache:
    """
    Last-write-wins store of page-1 results keyed by category.

    Every mutation completes synchronously, so within one event loop a write
    can never interleave with another write for the same key.

    Features:
    - At most one entry per category key (``all`` for the unselected feed)
    - Newest-first listing
    - Optional bounds: maximum entry count and maximum entry age
    - Hit/miss/eviction statistics
    """

    def __init__(
        self,
        max_entries: Optional[int] = None,
        max_age: Optional[timedelta] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be positive")
        if max_age is not None and max_age <= timedelta(0):
            raise ValueError("max_age must be positive")

        self.max_entries = max_entries
        self.max_age = max_age
        self._clock = clock
        self._entries: "OrderedDict[str, HistoryEntry]" = OrderedDict()
        self.cache_stats = {
            "writes": 0,
            "hits": 0,
            "misses": 0,
            "evictions": 0,
        }

    @classmethod
    def from_settings(cls, settings) -> "HistoryCache":
        max_age = settings.news_history_max_age_seconds
        return cls(
            max_entries=settings.news_history_max_entries,
            max_age=timedelta(seconds=max_age) if max_age else None,
        )

    def add(self, category: Optional[Category], page: FeedPage) -> HistoryEntry:
        """Store ``page`` under the category key, replacing whatever was there."""
        key = category_key(category)
        entry = HistoryEntry(key=key, page=page, inserted_at=self._clock())

        self._entries.pop(key, None)
        self._entries[key] = entry
        self.cache_stats["writes"] += 1

        self._evict()
        logger.debug("History entry stored", category=key, articles=len(page.articles))
        return entry

    def get(self, category: Union[Category, str, None]) -> Optional[HistoryEntry]:
        key = self._key(category)
        self._evict_expired()

        entry = self._entries.get(key)
        if entry is None:
            self.cache_stats["misses"] += 1
        else:
            self.cache_stats["hits"] += 1
        return entry

    def all(self) -> List[HistoryEntry]:
        """All live entries, most recently inserted first."""
        self._evict_expired()
        return list(reversed(self._entries.values()))

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, category) -> bool:
        return self.get(category) is not None

    def get_stats(self) -> Dict[str, int]:
        return {**self.cache_stats, "entries": len(self._entries)}

    @staticmethod
    def _key(category: Union[Category, str, None]) -> str:
        if category is None or isinstance(category, Category):
            return category_key(category)
        return category.strip().lower()

    def _evict(self) -> None:
        self._evict_expired()
        if self.max_entries is None:
            return
        while len(self._entries) > self.max_entries:
            key, _ = self._entries.popitem(last=False)
            self.cache_stats["evictions"] += 1
            logger.debug("History entry evicted", category=key, reason="capacity")

    def _evict_expired(self) -> None:
        if self.max_age is None:
            return
        cutoff = self._clock() - self.max_age
        # Insertion order is age order, so expired entries sit at the front
        while self._entries:
            key, entry = next(iter(self._entries.items()))
            if entry.inserted_at > cutoff:
                break
            del self._entries[key]
            self.cache_stats["evictions"] += 1
            logger.debug("History entry evicted", category=key, reason="age")
