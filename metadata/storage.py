from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Protocol

from config.settings import ITEM_CACHE_STORE_PATH

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: dict[str, Any] = {}
        self.writes = 0

    def get(self, key: str) -> Any:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value
            self.writes += 1

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class JsonFileStore:
    """All keys live in one JSON document, rewritten atomically on every set."""

    def __init__(self, path: str | None = None) -> None:
        self._path = Path(path or ITEM_CACHE_STORE_PATH)
        self._lock = threading.Lock()
        self._data: dict[str, Any] = {}
        self._loaded = False

    def _load_locked(self) -> None:
        if self._loaded:
            return
        self._loaded = True
        try:
            if self._path.exists():
                payload = json.loads(self._path.read_text(encoding="utf-8"))
                if isinstance(payload, dict):
                    self._data = payload
        except (OSError, ValueError):
            logger.warning("[STORE] unreadable store path=%s; starting empty", self._path)
            self._data = {}

    def _persist_locked(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(f"{self._path.suffix}.tmp")
        tmp_path.write_text(json.dumps(self._data, ensure_ascii=True, separators=(",", ":")), encoding="utf-8")
        tmp_path.replace(self._path)

    def get(self, key: str) -> Any:
        with self._lock:
            self._load_locked()
            return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._load_locked()
            self._data[key] = value
            self._persist_locked()

    def delete(self, key: str) -> None:
        with self._lock:
            self._load_locked()
            if self._data.pop(key, None) is not None:
                self._persist_locked()
