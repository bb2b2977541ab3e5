"""
In-memory query cache with staleness tracking and snapshot/restore.

Keys are tuples such as ``("articles", page, limit)`` or ``("article", "12")``;
a *prefix* is any leading slice of a key, so ``("articles",)`` addresses every
cached list page. Writes are last-write-wins and the cache is never
authoritative: anything may be refetched at any time.
"""

from __future__ import annotations

import copy
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Tuple

Key = Tuple[Any, ...]


@dataclass
class CacheEntry:
    value: Any
    updated_at: float
    stale: bool = False


def _matches(key: Key, prefix: Key) -> bool:
    return key[: len(prefix)] == prefix


class QueryCache:
    def __init__(
        self,
        *,
        stale_time: float = 5.0,
        gc_time: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.stale_time = stale_time
        self.gc_time = gc_time
        self._clock = clock
        self._entries: Dict[Key, CacheEntry] = {}
        self._lock = threading.RLock()

    def _collect(self) -> None:
        now = self._clock()
        expired = [k for k, e in self._entries.items() if now - e.updated_at > self.gc_time]
        for key in expired:
            del self._entries[key]

    def get(self, key: Key) -> Any:
        """Cached value for ``key`` (stale or not), or None."""
        with self._lock:
            self._collect()
            entry = self._entries.get(key)
            return entry.value if entry else None

    def contains(self, key: Key) -> bool:
        with self._lock:
            self._collect()
            return key in self._entries

    def is_stale(self, key: Key) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return True
            return entry.stale or self._clock() - entry.updated_at > self.stale_time

    def set(self, key: Key, value: Any) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(value=value, updated_at=self._clock())

    def update(self, key: Key, updater: Callable[[Any], Any]) -> bool:
        """Replace a cached value in place; returns False when ``key`` is absent."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            entry.value = updater(entry.value)
            return True

    def remove(self, key: Key) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def keys(self, prefix: Key = ()) -> list[Key]:
        with self._lock:
            return [k for k in self._entries if _matches(k, prefix)]

    def invalidate(self, prefix: Key = ()) -> int:
        """Mark every entry under ``prefix`` stale so the next read refetches."""
        with self._lock:
            count = 0
            for key, entry in self._entries.items():
                if _matches(key, prefix):
                    entry.stale = True
                    count += 1
            return count

    def fetch(self, key: Key, loader: Callable[[], Any]) -> Any:
        """Return the cached value if fresh, otherwise load, store and return it."""
        with self._lock:
            if not self.is_stale(key) and key in self._entries:
                return self._entries[key].value
        value = loader()
        self.set(key, value)
        return value

    def snapshot(self, prefixes: Iterable[Key] = ((),)) -> Dict[Key, CacheEntry]:
        """Deep copy of every entry under any of ``prefixes``."""
        prefixes = list(prefixes)
        with self._lock:
            return {
                key: copy.deepcopy(entry)
                for key, entry in self._entries.items()
                if any(_matches(key, p) for p in prefixes)
            }

    def restore(self, snapshot: Dict[Key, CacheEntry], prefixes: Iterable[Key] = ((),)) -> None:
        """Put the entries under ``prefixes`` back exactly as ``snapshot`` saw them."""
        prefixes = list(prefixes)
        with self._lock:
            for key in [k for k in self._entries if any(_matches(k, p) for p in prefixes)]:
                if key not in snapshot:
                    del self._entries[key]
            for key, entry in snapshot.items():
                self._entries[key] = entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["CacheEntry", "Key", "QueryCache"]
