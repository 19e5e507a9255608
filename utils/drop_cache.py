"""Time- and size-bounded cache of parsed drop tables, keyed by monster name."""
import time
from typing import Callable, Dict, NamedTuple, Optional

from config import DROP_CACHE_EXPIRY, DROP_CACHE_SIZE
from utils.drop_models import DropTable
from utils.logger import setup_logger

logger = setup_logger("DropCache")


class CacheEntry(NamedTuple):
    data: DropTable
    timestamp: float


class DropTableCache:
    """Drop tables live for `expiry` seconds; at most `max_size` are kept.

    Reads never delete. Stale entries are only removed by `sweep()` or pushed
    out by `put()` when the cache is full.
    """

    def __init__(self, max_size: int = DROP_CACHE_SIZE, expiry: float = DROP_CACHE_EXPIRY,
                 clock: Callable[[], float] = time.time):
        self.max_size = max_size
        self.expiry = expiry
        self.clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def __len__(self):
        return len(self._entries)

    def __contains__(self, key):
        return key.lower() in self._entries

    def get(self, key: str) -> Optional[DropTable]:
        entry = self._entries.get(key.lower())
        if entry and self.clock() - entry.timestamp < self.expiry:
            return entry.data
        return None

    def put(self, key: str, table: DropTable):
        if len(self._entries) >= self.max_size:
            self._evict_oldest()
        self._entries[key.lower()] = CacheEntry(table, self.clock())

    def _evict_oldest(self):
        if not self._entries:
            return
        oldest_key = min(self._entries, key=lambda k: self._entries[k].timestamp)
        del self._entries[oldest_key]
        logger.info(f"Evicted oldest cache entry: {oldest_key}")

    def sweep(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        now = self.clock()
        expired = [key for key, entry in self._entries.items() if now - entry.timestamp >= self.expiry]
        for key in expired:
            del self._entries[key]

        if expired:
            logger.info(f"Cleaned up {len(expired)} expired cache entries")
        return len(expired)

    def clear(self):
        self._entries.clear()
