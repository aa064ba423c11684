"""Key-value backends used to persist the history and print queue lists."""

from __future__ import annotations

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol


class KeyValueStoreError(RuntimeError):
    """Raised when the underlying storage medium cannot be read or written."""


class KeyValueStore(Protocol):
    """Define the minimal contract shared by every storage backend."""

    def get_item(self, key: str) -> Optional[str]:
        """Return the raw text stored under ``key`` or ``None`` when absent."""

    def set_item(self, key: str, value: str) -> None:
        """Replace the raw text stored under ``key``."""

    def remove_item(self, key: str) -> None:
        """Delete ``key``; missing keys are ignored."""


_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileKeyValueStore:
    """Store each key as a ``<key>.json`` file inside a directory."""

    def __init__(self, directory: Path) -> None:
        """Remember the target directory; it is created lazily on first write."""

        self._directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        """Return the file path for ``key`` after validating its characters."""

        if not key or not _KEY_PATTERN.match(key):
            raise KeyValueStoreError(f"Clave de almacenamiento inválida: {key!r}")
        return self._directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored text or ``None`` if the file does not exist."""

        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise KeyValueStoreError(f"No fue posible leer '{path.name}': {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        """Write the text through a temporary file so readers never see partial data."""

        path = self._path_for(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            handle, temp_name = tempfile.mkstemp(prefix=f".{key}-", suffix=".tmp", dir=self._directory)
            try:
                with os.fdopen(handle, "w", encoding="utf-8") as stream:
                    stream.write(value)
                os.replace(temp_name, path)
            except BaseException:
                Path(temp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise KeyValueStoreError(f"No fue posible escribir '{path.name}': {exc}") from exc

    def remove_item(self, key: str) -> None:
        """Remove the file for ``key`` when present."""

        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise KeyValueStoreError(f"No fue posible eliminar '{path.name}': {exc}") from exc


class InMemoryKeyValueStore:
    """Volatile backend used for throwaway sessions and unit tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove_item(self, key: str) -> None:
        self._values.pop(key, None)


def read_json_list(store: KeyValueStore, key: str) -> List[Any]:
    """Return the JSON list stored under ``key``.

    Missing keys and payloads that are not JSON arrays yield an empty list.
    Invalid JSON raises :class:`ValueError`.
    """

    raw = store.get_item(key)
    if not raw:
        return []
    parsed = json.loads(raw)
    return parsed if isinstance(parsed, list) else []


def write_json_list(store: KeyValueStore, key: str, items: Iterable[Any]) -> None:
    """Serialize ``items`` as a compact JSON array under ``key``."""

    store.set_item(key, json.dumps(list(items), ensure_ascii=False, separators=(",", ":")))
