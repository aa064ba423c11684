"""Data access layer for reading and writing the barcode history list."""

from __future__ import annotations

from typing import Iterable, List

from barcodegen.daos.key_value_store import (
    KeyValueStore,
    KeyValueStoreError,
    read_json_list,
    write_json_list,
)
from barcodegen.dtos.barcode_entry import BarcodeEntry

HISTORY_STORAGE_KEY = "barcodegen_history_v1"


class HistoryDAOError(RuntimeError):
    """Raised when an operation against the history storage fails."""


class HistoryDAO:
    """Provide list-level helpers backed by a single key-value entry."""

    def __init__(self, store: KeyValueStore, storage_key: str = HISTORY_STORAGE_KEY) -> None:
        """Persist the backend and the key that holds the history."""
        self._store = store
        self._storage_key = storage_key

    def list_entries(self) -> List[BarcodeEntry]:
        """Return the stored entries in their persisted order, newest first."""
        try:
            records = read_json_list(self._store, self._storage_key)
        except KeyValueStoreError as exc:
            raise HistoryDAOError(str(exc)) from exc
        except ValueError as exc:
            raise HistoryDAOError("El historial almacenado está dañado.") from exc

        entries: List[BarcodeEntry] = []
        for record in records:
            entry = BarcodeEntry.from_dict(record) if isinstance(record, dict) else None
            if entry is not None:
                entries.append(entry)
        return entries

    def replace_entries(self, entries: Iterable[BarcodeEntry]) -> None:
        """Overwrite the stored list with ``entries``."""
        try:
            write_json_list(self._store, self._storage_key, (entry.to_dict() for entry in entries))
        except (KeyValueStoreError, TypeError, ValueError) as exc:
            raise HistoryDAOError("No fue posible guardar el historial.") from exc

    def remove_all(self) -> None:
        """Delete the stored history key."""
        try:
            self._store.remove_item(self._storage_key)
        except KeyValueStoreError as exc:
            raise HistoryDAOError("No fue posible limpiar el historial.") from exc
