from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from typing import Callable

from bela360.application.ports.key_value_store import KeyValueStorePort


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryKeyValueStore(KeyValueStorePort):
    """Process-local key-value store with per-key expiry. Expired keys are dropped on access."""

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._values: dict[str, tuple[str, datetime]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._values.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at <= self._clock():
                del self._values[key]
                return None
            return value

    def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._values[key] = (value, self._clock() + timedelta(seconds=ttl_seconds))

    def delete(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
