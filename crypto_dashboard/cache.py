# crypto_dashboard/cache.py
"""
Process-local TTL cache for feed payloads.

One ResponseCache is built at startup and handed to the routes through a
dependency. It is not shared across server instances; feed data is
short-lived and can always be fetched again.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .logging_setup import get_logger

logger = get_logger("crypto_dashboard.cache")

Clock = Callable[[], float]

# Expired entries are swept on every Nth put, so keys nobody reads again still go away
SWEEP_EVERY = 256


@dataclass(frozen=True)
class CacheEntry:
    key: str
    payload: Any
    expires_at: float


class ResponseCache:
    def __init__(self, clock: Optional[Clock] = None, sweep_every: int = SWEEP_EVERY):
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._sweep_every = max(1, sweep_every)
        self._puts = 0

    def _now(self) -> float:
        return self._clock() if self._clock else time.time()

    def get(self, key: str) -> Optional[Any]:
        """Payload for `key` while fresh, else None. Expired entries are dropped."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._now() < entry.expires_at:
            return entry.payload
        with self._lock:
            # Only drop it if nobody replaced it in the meantime
            if self._entries.get(key) is entry:
                del self._entries[key]
        return None

    def put(self, key: str, payload: Any, ttl: float) -> None:
        entry = CacheEntry(key=key, payload=payload, expires_at=self._now() + ttl)
        with self._lock:
            self._entries[key] = entry
            self._puts += 1
            sweep = self._puts % self._sweep_every == 0
        if sweep:
            self.purge_expired()

    def purge_expired(self) -> int:
        """Drop every entry past its expiry. Returns the count."""
        now = self._now()
        with self._lock:
            stale = [k for k, e in self._entries.items() if now >= e.expires_at]
            for k in stale:
                del self._entries[k]
        if stale:
            logger.debug("CACHE_PURGED", extra={"count": len(stale), "remaining": len(self._entries)})
        return len(stale)

    def invalidate(self, key_or_prefix: str) -> int:
        """Drop `key_or_prefix` itself and every key starting with it. Returns the count."""
        with self._lock:
            doomed = [k for k in self._entries if k == key_or_prefix or k.startswith(key_or_prefix)]
            for k in doomed:
                del self._entries[k]
        if doomed:
            logger.debug("CACHE_INVALIDATED", extra={"prefix": key_or_prefix, "count": len(doomed)})
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


def user_key(user_id: int, feed: str, pref_id: Optional[int] = None) -> str:
    # The preferences record id is part of the key: a payload built from an
    # older record can never be served once a newer one exists
    return f"user:{user_id}:{pref_id or 0}:{feed}"


def user_prefix(user_id: int) -> str:
    return f"user:{user_id}:"
