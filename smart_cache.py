"""
Snapshot Cache - market snapshots keyed by canonical query
A changed query is a different key, so edits to the term selection never
serve a stale snapshot. Only snapshots that found comparable data are stored.
"""

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from config import CACHE

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """Single cache entry with metadata"""
    snapshot: Any
    timestamp: datetime
    ttl: int
    hits: int = 0

    def is_expired(self) -> bool:
        """Check if entry has expired"""
        return self.age_seconds() > self.ttl

    def age_seconds(self) -> float:
        """Get age in seconds"""
        return (datetime.now() - self.timestamp).total_seconds()


class SnapshotCache:
    """
    Thread-safe LRU cache with TTL

    Features:
    - Keys are normalized canonical queries
    - LRU eviction when max size reached
    - Hit/miss/eviction/expiration tracking
    """

    def __init__(self, max_size: int = None, ttl: int = None):
        self.max_size = max_size or CACHE.max_size
        self.ttl = ttl if ttl is not None else CACHE.ttl_snapshot
        self._cache: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.RLock()
        self._stats = {
            'hits': 0,
            'misses': 0,
            'evictions': 0,
            'expirations': 0
        }

    @staticmethod
    def make_key(query: str) -> str:
        """Case and whitespace insensitive key"""
        return " ".join((query or "").lower().split())

    def get(self, query: str) -> Optional[Any]:
        """Get cached snapshot if present and not expired"""
        key = self.make_key(query)

        with self._lock:
            if key not in self._cache:
                self._stats['misses'] += 1
                return None

            entry = self._cache[key]

            if entry.is_expired():
                del self._cache[key]
                self._stats['expirations'] += 1
                self._stats['misses'] += 1
                return None

            # Move to end (most recently used)
            self._cache.move_to_end(key)
            entry.hits += 1
            self._stats['hits'] += 1
            return entry.snapshot

    def set(self, query: str, snapshot: Any, ttl: int = None) -> None:
        """Store snapshot in cache"""
        key = self.make_key(query)
        if not key:
            return

        with self._lock:
            if key in self._cache:
                del self._cache[key]
            # Evict oldest if at capacity
            while len(self._cache) >= self.max_size:
                self._cache.popitem(last=False)
                self._stats['evictions'] += 1

            self._cache[key] = CacheEntry(
                snapshot=snapshot,
                timestamp=datetime.now(),
                ttl=ttl if ttl is not None else self.ttl,
            )

    def invalidate(self, query: str) -> bool:
        """Remove specific entry from cache"""
        key = self.make_key(query)

        with self._lock:
            if key in self._cache:
                del self._cache[key]
                return True
            return False

    def clear(self) -> int:
        """Clear all cache entries, return count cleared"""
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
            return count

    def cleanup_expired(self) -> int:
        """Remove all expired entries, return count removed"""
        with self._lock:
            expired_keys = [k for k, v in self._cache.items() if v.is_expired()]
            for key in expired_keys:
                del self._cache[key]
            self._stats['expirations'] += len(expired_keys)
        return len(expired_keys)

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics"""
        with self._lock:
            total_requests = self._stats['hits'] + self._stats['misses']
            hit_rate = (
                self._stats['hits'] / total_requests * 100
                if total_requests > 0 else 0
            )
            return {
                'size': len(self._cache),
                'max_size': self.max_size,
                'ttl': self.ttl,
                'hits': self._stats['hits'],
                'misses': self._stats['misses'],
                'hit_rate': f"{hit_rate:.1f}%",
                'evictions': self._stats['evictions'],
                'expirations': self._stats['expirations'],
            }

    def get_entries(self, limit: int = 20) -> list:
        """Get recent cache entries for debugging"""
        with self._lock:
            entries = []
            for key, entry in list(self._cache.items())[-limit:]:
                entries.append({
                    'query': key[:50] + '...' if len(key) > 50 else key,
                    'age': f"{entry.age_seconds():.1f}s",
                    'expires_in': f"{max(0, entry.ttl - entry.age_seconds()):.1f}s",
                    'hits': entry.hits
                })
            return entries


def start_cache_cleanup(cache: SnapshotCache, interval: int = 60) -> threading.Thread:
    """Start background thread for periodic cache cleanup"""

    def cleanup_loop():
        while True:
            time.sleep(interval)
            removed = cache.cleanup_expired()
            if removed > 0:
                logger.info(f"[CACHE] Cleaned up {removed} expired entries")

    thread = threading.Thread(target=cleanup_loop, daemon=True)
    thread.start()
    logger.info(f"[CACHE] Background cleanup started (every {interval}s)")
    return thread
