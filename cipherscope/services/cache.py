import hashlib
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CacheStats:
    """Hit/miss counters of one cache instance."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


class AnalysisCache(Generic[T]):
    """
    Bounded LRU cache of analysis results.

    Owned by whoever constructs it and passed in explicitly. Clearing it
    only costs latency; results are identical with or without it.
    """

    def __init__(self, max_size: int = 128):
        self.max_size = max_size
        self.stats = CacheStats()
        self._entries: OrderedDict[str, T] = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def fingerprint(text: str, options_key: str = "") -> str:
        """SHA-256 of the content plus the option set it was analyzed with."""
        digest = hashlib.sha256(text.encode("utf-8", errors="surrogatepass")).hexdigest()
        return f"{digest}:{options_key}"

    def get(self, key: str) -> T | None:
        """Get item from cache."""
        with self._lock:
            if key not in self._entries:
                self.stats.misses += 1
                return None
            # Move to end (most recently used)
            self._entries.move_to_end(key)
            self.stats.hits += 1
            logger.debug("Cache hit for %s", key[:16])
            return self._entries[key]

    def put(self, key: str, value: T) -> None:
        """Set item in cache."""
        if self.max_size <= 0:
            return
        with self._lock:
            if key in self._entries:
                self._entries.pop(key)
            elif len(self._entries) >= self.max_size:
                # Remove least recently used item
                self._entries.popitem(last=False)
                self.stats.evictions += 1
            self._entries[key] = value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries
