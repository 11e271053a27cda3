"""Bounded, mergeable, persisted map from item id to the richest MediaItem seen so far."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from typing import Any

from config.settings import (
    ITEM_CACHE_MAX_SIZE,
    ITEM_CACHE_NAMESPACE,
    ITEM_CACHE_PRUNE_COUNT,
    ITEM_CACHE_SAVE_DELAY_SECONDS,
)
from metadata.storage import KeyValueStore, MemoryStore
from metadata.types import MediaItem

logger = logging.getLogger(__name__)

# Only overwritten when the incoming item actually carries a value.
_STICKY_FIELDS = ("image_url", "details")

ChangeListener = Callable[[list[str]], None]


def storage_key_for(namespace: str) -> str:
    return f"{namespace}-media-registry"


def merge_items(existing: MediaItem, incoming: MediaItem) -> MediaItem:
    merged: dict[str, Any] = {**existing, **incoming}
    for key in _STICKY_FIELDS:
        if not incoming.get(key) and existing.get(key):
            merged[key] = existing[key]
    return merged  # type: ignore[return-value]


class MediaItemRegistry:
    def __init__(
        self,
        store: KeyValueStore | None = None,
        *,
        storage_key: str | None = None,
        max_size: int = ITEM_CACHE_MAX_SIZE,
        prune_count: int = ITEM_CACHE_PRUNE_COUNT,
        save_delay_seconds: float = ITEM_CACHE_SAVE_DELAY_SECONDS,
    ) -> None:
        self._store = store if store is not None else MemoryStore()
        self.storage_key = storage_key or storage_key_for(ITEM_CACHE_NAMESPACE)
        self.max_size = max(1, int(max_size))
        self.prune_count = max(1, int(prune_count))
        self.save_delay_seconds = max(0.0, float(save_delay_seconds))
        self._lock = threading.Lock()
        # dict keeps insertion order, which drives eviction.
        self._items: dict[str, MediaItem] = {}
        self._listeners: list[ChangeListener] = []
        self._save_lock = threading.Lock()
        self._save_timer: threading.Timer | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        with self._lock:
            return item_id in self._items

    def get_item(self, item_id: str) -> MediaItem | None:
        """A copy of the cached record; mutate it through register_item."""
        with self._lock:
            item = self._items.get(item_id)
            return dict(item) if item is not None else None  # type: ignore[return-value]

    def snapshot(self) -> dict[str, MediaItem]:
        with self._lock:
            return {key: dict(value) for key, value in self._items.items()}  # type: ignore[misc]

    def register_item(self, item: MediaItem) -> bool:
        return self.register_items([item])

    def register_items(self, items: Iterable[MediaItem]) -> bool:
        """Merge a batch in one pass; returns False when nothing changed.

        An unchanged batch neither persists nor notifies listeners.
        """
        changed_ids: list[str] = []
        with self._lock:
            for item in items:
                item_id = item.get("id") if isinstance(item, dict) else None
                if not item_id:
                    continue
                existing = self._items.get(item_id)
                if existing is None:
                    self._items[item_id] = dict(item)  # type: ignore[assignment]
                    changed_ids.append(item_id)
                    continue
                merged = merge_items(existing, item)
                if merged == existing:
                    continue
                self._items[item_id] = merged
                changed_ids.append(item_id)
            if not changed_ids:
                return False
            evicted = self._prune_locked()
        if evicted:
            logger.info("[ITEM_CACHE] evicted=%s size=%s", evicted, len(self))
        self._schedule_save()
        self._notify(changed_ids)
        return True

    def _prune_locked(self) -> int:
        evicted = 0
        while len(self._items) > self.max_size:
            oldest = list(self._items)[: self.prune_count]
            for key in oldest:
                del self._items[key]
            evicted += len(oldest)
        return evicted

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, changed_ids: list[str]) -> None:
        for listener in list(self._listeners):
            try:
                listener(list(changed_ids))
            except Exception:
                logger.exception("[ITEM_CACHE] change listener failed")

    def load(self) -> int:
        """Replace the in-memory map with the persisted one; returns the item count."""
        payload = self._store.get(self.storage_key)
        if not isinstance(payload, dict):
            return 0
        with self._lock:
            self._items = {
                key: value
                for key, value in payload.items()
                if isinstance(key, str) and isinstance(value, dict) and value.get("id")
            }
            self._prune_locked()
            count = len(self._items)
        logger.info("[ITEM_CACHE] loaded key=%s items=%s", self.storage_key, count)
        return count

    def _schedule_save(self) -> None:
        if self.save_delay_seconds <= 0:
            self.flush()
            return
        with self._save_lock:
            if self._save_timer is not None:
                self._save_timer.cancel()
            timer = threading.Timer(self.save_delay_seconds, self.flush)
            timer.daemon = True
            self._save_timer = timer
            timer.start()

    def flush(self) -> None:
        # Snapshot and write under one lock so an older flush cannot land last.
        with self._save_lock:
            if self._save_timer is not None:
                self._save_timer.cancel()
                self._save_timer = None
            with self._lock:
                payload = dict(self._items)
            try:
                self._store.set(self.storage_key, payload)
            except Exception:
                logger.exception("[ITEM_CACHE] persist failed key=%s", self.storage_key)

    def clear(self) -> None:
        with self._lock:
            cleared = list(self._items)
            self._items = {}
        self._schedule_save()
        if cleared:
            self._notify(cleared)
