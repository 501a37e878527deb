from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from config.settings import settings

log = logging.getLogger("primoboost.storage.local_cache")

# Serializes read-modify-write across handler threads in this process.
_write_lock = threading.RLock()


class LocalCache:
    """
    Durable key-value store backed by one JSON file.

    Values are kept as raw JSON strings per key (`submissions`, `adminSettings`),
    so a corrupt value only poisons its own key. The file is re-read on every
    call. Writers within one process are serialized; separate processes sharing
    the file still race (last write wins). No TTL or eviction.
    """

    def __init__(self, path: Optional[str | Path] = None):
        self.path = Path(path or settings.LOCAL_CACHE_PATH)

    def _load(self) -> Dict[str, str]:
        try:
            if not self.path.exists() or self.path.stat().st_size == 0:
                return {}
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            log.error(
                "local_cache_load_failed",
                extra={"extra": {"path": str(self.path), "error_type": type(e).__name__, "error_message": str(e)}},
            )
            return {}
        if not isinstance(data, dict):
            log.warning("local_cache_unexpected_shape", extra={"extra": {"path": str(self.path), "type": type(data).__name__}})
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=self.path.parent, prefix=self.path.name, suffix=".tmp", delete=False
        ) as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            tmp = f.name
        try:
            os.replace(tmp, self.path)
        except OSError:
            os.unlink(tmp)
            raise

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        with _write_lock:
            data = self._load()
            data[key] = value
            self._save(data)

    def get_json(self, key: str) -> Optional[Any]:
        raw = self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            log.warning("local_cache_invalid_json", extra={"extra": {"key": key, "error_message": str(e)}})
            return None

    def set_json(self, key: str, value: Any) -> None:
        self.set(key, json.dumps(value, ensure_ascii=False, default=str))

    def update_json(self, key: str, change: Callable[[Optional[Any]], Any]) -> Any:
        """Atomically replace the value under `key` with change(current value)."""
        with _write_lock:
            value = change(self.get_json(key))
            self.set_json(key, value)
            return value
