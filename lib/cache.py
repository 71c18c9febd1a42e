# =============================================================================
# lib/cache.py - Key/Value Cache with Expiry
# =============================================================================
# Catalog reads are cached for days at a time, and (optionally) redeemed
# download tokens are remembered until they expire. Both go through the
# Cache protocol below so the backing store is a deployment choice:
#
# - MemoryCache: key -> (value, expires_at) dict, for a single process
# - RedisCache:  shared across processes/instances
#
# Values must be JSON-serializable (RedisCache stores them as JSON).
#
# Usage:
#   cache = MemoryCache()
#   cache.set("search:zh:7zip:1:20", payload, ttl=7 * DAY)
#   cache.get("search:zh:7zip:1:20")
#   cache.clear("search:")   # -> number of keys removed
# =============================================================================

from __future__ import annotations

import json
import logging
import threading
import time
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)

# TTL helpers (seconds)
MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR


class Cache(Protocol):
    """Minimal cache interface used by services."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any, ttl: float) -> None: ...

    def add(self, key: str, value: Any, ttl: float) -> bool: ...

    def delete(self, key: str) -> None: ...

    def clear(self, prefix: str = "") -> int: ...


class MemoryCache:
    """
    In-process cache.

    Expired entries are dropped on access, and writes sweep every expired
    entry at most once per `sweep_interval` seconds. When more than
    `max_entries` keys are stored, the oldest writes are evicted first.
    The clock is injectable so expiry can be tested without sleeping.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 10_000,
        sweep_interval: float = MINUTE,
    ):
        self._clock = clock
        self._data: dict[str, tuple[Any, float]] = {}
        self._lock = threading.Lock()
        self._max_entries = max_entries
        self._sweep_interval = sweep_interval
        self._last_sweep = clock()

    def _live(self, key: str) -> tuple[Any, float] | None:
        item = self._data.get(key)
        if item is None:
            return None
        if item[1] <= self._clock():
            del self._data[key]
            return None
        return item

    def _store(self, key: str, value: Any, ttl: float) -> None:
        now = self._clock()
        if now - self._last_sweep >= self._sweep_interval:
            self._data = {k: v for k, v in self._data.items() if v[1] > now}
            self._last_sweep = now
        self._data.pop(key, None)
        self._data[key] = (value, now + ttl)
        # dicts keep insertion order, so the first keys are the oldest writes
        while len(self._data) > self._max_entries:
            del self._data[next(iter(self._data))]

    def size(self) -> int:
        """Stored entries, including expired ones not swept yet."""
        with self._lock:
            return len(self._data)

    def get(self, key: str) -> Any | None:
        with self._lock:
            item = self._live(key)
            return item[0] if item else None

    def set(self, key: str, value: Any, ttl: float) -> None:
        with self._lock:
            self._store(key, value, ttl)

    def add(self, key: str, value: Any, ttl: float) -> bool:
        """Set only if the key is absent (or expired). Returns True if set."""
        with self._lock:
            if self._live(key) is not None:
                return False
            self._store(key, value, ttl)
            return True

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self, prefix: str = "") -> int:
        with self._lock:
            keys = [k for k in self._data if k.startswith(prefix)]
            for k in keys:
                del self._data[k]
            return len(keys)

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for _, expires_at in self._data.values() if expires_at > now)


class RedisCache:
    """
    Redis-backed cache.

    All keys are namespaced with `namespace` so clear("") never touches
    keys owned by other applications sharing the database.
    """

    def __init__(self, client, namespace: str = "appshelf:"):
        self._client = client
        self._namespace = namespace

    @classmethod
    def from_url(cls, url: str, namespace: str = "appshelf:") -> "RedisCache":
        import redis

        client = redis.Redis.from_url(url, decode_responses=True)
        logger.info("Redis cache initialized")
        return cls(client, namespace=namespace)

    def _key(self, key: str) -> str:
        return f"{self._namespace}{key}"

    @staticmethod
    def _ttl_ms(ttl: float) -> int:
        return max(int(ttl * 1000), 1)

    def get(self, key: str) -> Any | None:
        raw = self._client.get(self._key(key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Dropping undecodable cache value for {key}")
            self._client.delete(self._key(key))
            return None

    def set(self, key: str, value: Any, ttl: float) -> None:
        self._client.set(self._key(key), json.dumps(value, default=str), px=self._ttl_ms(ttl))

    def add(self, key: str, value: Any, ttl: float) -> bool:
        return bool(
            self._client.set(
                self._key(key),
                json.dumps(value, default=str),
                px=self._ttl_ms(ttl),
                nx=True,
            )
        )

    def delete(self, key: str) -> None:
        self._client.delete(self._key(key))

    def clear(self, prefix: str = "") -> int:
        removed = 0
        batch: list[str] = []
        for full_key in self._client.scan_iter(match=f"{self._key(prefix)}*", count=500):
            batch.append(full_key)
            if len(batch) >= 500:
                removed += self._client.delete(*batch)
                batch = []
        if batch:
            removed += self._client.delete(*batch)
        return removed
