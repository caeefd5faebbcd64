"""Lookup list cache management."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class LookupCacheEntry:
    """A fetched list and the moment it was fetched."""

    key: str
    values: list[str]
    fetched_at: datetime


class LookupCache:
    """
    In-memory cache for small enumerated lists read from fixed cell ranges.

    Entries are replaced wholesale and expire ``ttl_seconds`` after they were
    fetched. Expiry is checked when an entry is read; there is no sweeper.
    Each call touches a single dict slot, so concurrent requests on one event
    loop can only race as last-writer-wins.
    """

    def __init__(
        self,
        ttl_seconds: int = 300,
        max_entries: Optional[int] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._entries: dict[str, LookupCacheEntry] = {}
        self._ttl = timedelta(seconds=ttl_seconds)
        self._max_entries = max_entries
        self._clock = clock

    @staticmethod
    def make_key(spreadsheet_id: str, list_name: str) -> str:
        """Build the cache key for one list of one spreadsheet."""
        return f"{spreadsheet_id}_{list_name}"

    @property
    def ttl_seconds(self) -> int:
        return int(self._ttl.total_seconds())

    def get(self, key: str) -> Optional[list[str]]:
        """
        Return the cached values, or None on a miss.

        An entry exactly ``ttl_seconds`` old is already a miss.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._clock() - entry.fetched_at >= self._ttl:
            del self._entries[key]
            return None

        return list(entry.values)

    def put(self, key: str, values: list[str]) -> None:
        """Insert or replace an entry stamped with the current time."""
        if (
            self._max_entries is not None
            and key not in self._entries
            and len(self._entries) >= self._max_entries
        ):
            oldest = min(self._entries.values(), key=lambda e: e.fetched_at)
            del self._entries[oldest.key]

        self._entries[key] = LookupCacheEntry(
            key=key, values=list(values), fetched_at=self._clock()
        )

    def invalidate(self, key: str) -> bool:
        """Drop one entry. Returns True if it was present."""
        return self._entries.pop(key, None) is not None

    def clear(self):
        """Clear all entries."""
        self._entries.clear()

    def size(self) -> int:
        """Get the current number of entries, expired ones included."""
        return len(self._entries)
