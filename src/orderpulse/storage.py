"""Durable string key-value storage.

Everything orderpulse persists (shown feedback ids, the guest session id,
queued feedback) goes through :class:`PersistentKeyValueStore`.  Any medium
that can get and set a string by key can back it.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Protocol

from orderpulse.exceptions import PersistenceError

_logger = logging.getLogger(__name__)


class PersistentKeyValueStore(Protocol):
    """Structural interface for durable string storage.

    ``set`` and ``delete`` must be durable by the time they return.
    Implementations raise :class:`~orderpulse.exceptions.PersistenceError`
    when a write cannot be made durable.
    """

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryKeyValueStore:
    """Process-local store, mainly for tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore:
    """Store backed by a single JSON object on disk.

    The file is read once on construction.  Every write rewrites the whole
    object through a temporary file, ``fsync`` and ``os.replace`` so a crash
    leaves either the old or the new content, never a torn file.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._data: dict[str, str] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError:
            _logger.warning("Could not read state file %s; starting empty", self._path, exc_info=True)
            return {}

        try:
            raw = json.loads(text)
        except json.JSONDecodeError:
            _logger.warning("State file %s is not valid JSON; starting empty", self._path)
            return {}
        if not isinstance(raw, dict):
            _logger.warning("State file %s does not hold an object; starting empty", self._path)
            return {}
        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def _flush(self, key: str) -> None:
        tmp_path = self._path.with_suffix(f"{self._path.suffix}.{os.getpid()}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as fh:
                json.dump(self._data, fh, sort_keys=True)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise PersistenceError(f"Could not write {self._path}: {exc}", key=key) from exc

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush(key)

    def delete(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush(key)
