"""Process-local key-value backend for tests and single-process development."""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Optional, Tuple


class MemoryKVStore:
    """Dictionary-backed store honouring per-key time-to-live."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._items: Dict[str, Tuple[bytes, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            entry = self._items.get(key)
            if entry is None:
                return None
            value, deadline = entry
            if deadline <= self._clock():
                del self._items[key]
                return None
            return value

    def put(self, key: str, value: bytes, ttl_seconds: int) -> None:
        with self._lock:
            now = self._clock()
            expired = [k for k, (_, deadline) in self._items.items() if deadline <= now]
            for stale_key in expired:
                del self._items[stale_key]
            self._items[key] = (value, now + ttl_seconds)

    def delete(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


__all__ = ["MemoryKVStore"]
