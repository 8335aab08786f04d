"""Persistence utilities for the budget tracker core services."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import PersistenceError
from .models import SaveResult

__all__ = ["DEFAULT_STORAGE_KEY", "FileStore", "KeyValueStore", "MemoryStore", "PersistenceManager"]

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "budget_tracker_data"


class KeyValueStore:
    """Minimal string key-value store interface used by the persistence manager."""

    name = "store"

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError


class FileStore(KeyValueStore):
    """File-based store keeping one JSON document per key, written crash-safe."""

    name = "file"

    def __init__(self, base_path: Path) -> None:
        self._base_path = Path(base_path)

    def _path_for(self, key: str) -> Path:
        return self._base_path / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Unable to read from {path}") from exc

    def set_item(self, key: str, value: str) -> None:
        path = self._path_for(key)
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            self._base_path.mkdir(parents=True, exist_ok=True)
            with temp_path.open("w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
            # Use replace for atomic move on POSIX; ensures crash-safe persistence.
            temp_path.replace(path)
        except OSError as exc:
            raise PersistenceError(f"Unable to write to {path}") from exc

    def remove_item(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise PersistenceError(f"Unable to remove {path}") from exc

    @property
    def base_path(self) -> Path:
        return self._base_path


class MemoryStore(KeyValueStore):
    """Process-lifetime store; ``quota`` caps the total encoded size in bytes."""

    name = "memory"

    def __init__(self, quota: Optional[int] = None) -> None:
        self._items: Dict[str, str] = {}
        self._quota = quota

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._quota is not None:
            used = sum(len(v.encode("utf-8")) for k, v in self._items.items() if k != key)
            if used + len(value.encode("utf-8")) > self._quota:
                raise PersistenceError(f"Storage quota of {self._quota} bytes exceeded")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class PersistenceManager:
    """Saves the ledger under one key, falling back to a second store on failure."""

    def __init__(
        self,
        primary: KeyValueStore,
        fallback: Optional[KeyValueStore] = None,
        key: str = DEFAULT_STORAGE_KEY,
    ) -> None:
        self.primary = primary
        self.fallback = fallback
        self.key = key

    def save(self, payload: Dict[str, Any]) -> SaveResult:
        try:
            self.primary.set_item(self.key, json.dumps(payload))
            return SaveResult(ok=True, storage=self.primary.name)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Primary %s store rejected %s: %s", self.primary.name, self.key, exc)
            error_name = type(exc).__name__

        if self.fallback is None:
            return SaveResult(ok=False, error=error_name)
        try:
            self.fallback.set_item(self.key, json.dumps(payload))
            return SaveResult(ok=True, storage=self.fallback.name)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Fallback %s store rejected %s: %s", self.fallback.name, self.key, exc)
            return SaveResult(ok=False, error=type(exc).__name__)

    def load(self) -> Optional[Dict[str, Any]]:
        try:
            raw = self.primary.get_item(self.key)
            if not raw and self.fallback is not None:
                raw = self.fallback.get_item(self.key)
            if not raw:
                return None
            payload = json.loads(raw)
        except (OSError, ValueError) as exc:
            # Corrupted or unreadable data is treated as absent.
            logger.warning("Discarding unreadable data for %s: %s", self.key, exc)
            return None
        if not isinstance(payload, dict):
            logger.warning("Discarding non-object payload for %s", self.key)
            return None
        return payload

    def clear(self) -> None:
        for store in (self.primary, self.fallback):
            if store is None:
                continue
            try:
                store.remove_item(self.key)
            except PersistenceError as exc:
                logger.warning("Unable to clear %s from %s store: %s", self.key, store.name, exc)
