from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Any

from config.settings import MAPPED_ITEM_CACHE_MAX_ENTRIES, MAPPED_ITEM_CACHE_TTL_SECONDS

_MISSING = object()


class TTLCache:
    """Small LRU map whose entries expire after ``ttl_seconds``."""

    def __init__(
        self,
        *,
        max_entries: int = MAPPED_ITEM_CACHE_MAX_ENTRIES,
        ttl_seconds: int = MAPPED_ITEM_CACHE_TTL_SECONDS,
        clock=time.time,
    ):
        self.max_entries = int(max_entries)
        self.ttl_seconds = int(ttl_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: OrderedDict[str, tuple[float, Any]] = OrderedDict()

    def get(self, key, default=None):
        now = self._clock()
        with self._lock:
            value = self._entries.get(key, _MISSING)
            if value is _MISSING:
                return default
            expires_at, payload = value
            if expires_at < now:
                self._entries.pop(key, None)
                return default
            self._entries.move_to_end(key)
            return payload

    def has(self, key) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def set(self, key, payload, *, ttl_seconds=None):
        ttl = self.ttl_seconds if ttl_seconds is None else max(1, int(ttl_seconds))
        expires_at = self._clock() + ttl
        with self._lock:
            self._entries[key] = (expires_at, payload)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self):
        with self._lock:
            self._entries.clear()
