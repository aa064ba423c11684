"""Business logic to manage the persisted barcode history."""

import logging
from typing import List

from barcodegen.daos.history_dao import HistoryDAO, HistoryDAOError
from barcodegen.dtos.barcode_entry import BarcodeEntry


logger = logging.getLogger(__name__)


class HistoryService:
    """Expose the get/save/delete/clear contract without ever raising storage errors."""

    def __init__(self, dao: HistoryDAO) -> None:
        """Create the service with its associated DAO instance."""
        self.dao = dao

    def get_history(self) -> List[BarcodeEntry]:
        """Return the stored entries, or an empty list when unreadable."""
        try:
            return self.dao.list_entries()
        except HistoryDAOError as exc:
            logger.error("No fue posible leer el historial: %s", exc)
            return []

    def save_entry(self, entry: BarcodeEntry) -> None:
        """Store ``entry`` first, replacing any record that shares its id."""
        history = self.get_history()
        updated = [entry] + [item for item in history if item.id != entry.id]
        try:
            self.dao.replace_entries(updated)
        except HistoryDAOError as exc:
            logger.error("No fue posible guardar el código %s: %s", entry.id, exc)

    def delete_entry(self, entry_id: str) -> List[BarcodeEntry]:
        """Remove every record with ``entry_id`` and return the resulting list."""
        target = str(entry_id)
        history = self.get_history()
        updated = [item for item in history if item.id != target]
        try:
            self.dao.replace_entries(updated)
        except HistoryDAOError as exc:
            logger.error("No fue posible eliminar el código %s: %s", target, exc)
            return self.get_history()
        return updated

    def clear_history(self) -> None:
        """Erase the stored list."""
        try:
            self.dao.remove_all()
        except HistoryDAOError as exc:
            logger.error("No fue posible limpiar el historial: %s", exc)
