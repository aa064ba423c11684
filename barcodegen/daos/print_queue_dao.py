"""Data access layer for the slots placed on the A4 print sheet."""

from __future__ import annotations

from typing import Iterable, List

from barcodegen.daos.key_value_store import (
    KeyValueStore,
    KeyValueStoreError,
    read_json_list,
    write_json_list,
)
from barcodegen.dtos.barcode_entry import QueueSlotItem

PRINT_QUEUE_STORAGE_KEY = "barcodegen_print_queue"


class PrintQueueDAOError(RuntimeError):
    """Raised when the print queue cannot be read or written."""


class PrintQueueDAO:
    """Persist the ordered print queue under its own storage key."""

    def __init__(self, store: KeyValueStore, storage_key: str = PRINT_QUEUE_STORAGE_KEY) -> None:
        self._store = store
        self._storage_key = storage_key

    def load_slots(self) -> List[QueueSlotItem]:
        """Return the stored slots in sheet order, skipping malformed records."""
        try:
            records = read_json_list(self._store, self._storage_key)
        except KeyValueStoreError as exc:
            raise PrintQueueDAOError(str(exc)) from exc
        except ValueError as exc:
            raise PrintQueueDAOError("La hoja de impresión almacenada está dañada.") from exc

        slots: List[QueueSlotItem] = []
        for record in records:
            slot = QueueSlotItem.from_dict(record) if isinstance(record, dict) else None
            if slot is not None:
                slots.append(slot)
        return slots

    def save_slots(self, slots: Iterable[QueueSlotItem]) -> None:
        """Overwrite the stored queue with ``slots``."""
        try:
            write_json_list(self._store, self._storage_key, (slot.to_dict() for slot in slots))
        except (KeyValueStoreError, TypeError, ValueError) as exc:
            raise PrintQueueDAOError("No fue posible guardar la hoja de impresión.") from exc
