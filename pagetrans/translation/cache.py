"""
In-memory translation cache with absolute expiry.

Maps a cache key to the ordered translations of one page's fragments. The
lock is held only inside get/put/clear, never while a caller talks to the
remote service.
"""

from __future__ import annotations

import hashlib
import json
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

from pagetrans.logger import get_logger

logger = get_logger(__name__)

Translations = Tuple[str, ...]


def compute_cache_key(texts: Sequence[str], source_language: str, target_language: str) -> str:
    """
    Content-addressed key for (fragment texts in order, source, target).

    The parts are JSON-encoded before hashing, so a separator character inside
    a fragment can never make two different fragment lists collide.
    """
    payload = json.dumps([list(texts), source_language, target_language], ensure_ascii=False)
    return hashlib.sha256(payload.encode('utf-8')).hexdigest()


@dataclass
class CacheEntry:
    value: Translations
    expires_at: float


class TranslationCache:
    """Thread-safe keyed store of translated fragment lists."""

    def __init__(self, max_entries: Optional[int] = None, clock: Callable[[], float] = time.monotonic):
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[Translations]:
        """Look up a key. Absent or expired entries are a miss (None)."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if entry.expires_at <= now:
                del self._entries[key]
                self._misses += 1
                return None
            self._hits += 1
            return entry.value

    def put(self, key: str, value: Sequence[str], ttl: float) -> None:
        """Store value under key until ttl seconds from now. Last write wins."""
        entry = CacheEntry(value=tuple(value), expires_at=self._clock() + ttl)
        with self._lock:
            self._entries[key] = entry
            if self.max_entries is not None and len(self._entries) > self.max_entries:
                self._evict_locked()

    def _evict_locked(self) -> None:
        """Drop expired entries, then the soonest-expiring ones, down to max_entries."""
        now = self._clock()
        expired = [k for k, entry in self._entries.items() if entry.expires_at <= now]
        for k in expired:
            del self._entries[k]

        overflow = len(self._entries) - self.max_entries
        if overflow > 0:
            by_expiry = sorted(self._entries.items(), key=lambda item: item[1].expires_at)
            for k, _ in by_expiry[:overflow]:
                del self._entries[k]
            logger.debug("Evicted %d cache entries over max_entries=%s", overflow, self.max_entries)

    def clear(self) -> None:
        """Clear all cached translations."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                'entries': len(self._entries),
                'hits': self._hits,
                'misses': self._misses,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
