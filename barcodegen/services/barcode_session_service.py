"""Business logic that owns the history, current selection and print queue."""

from __future__ import annotations

import logging
import uuid
from enum import Enum
from typing import Callable, List, Optional, Tuple

from barcodegen.daos.print_queue_dao import PrintQueueDAO, PrintQueueDAOError
from barcodegen.dtos.barcode_entry import BarcodeEntry, QueueSlotItem
from barcodegen.dtos.session_snapshot import SHEET_CAPACITY, SessionSnapshot
from barcodegen.services.history_service import HistoryService
from barcodegen.services.identifier_allocator import AllocationFailure, IdentifierAllocator


logger = logging.getLogger(__name__)

__all__ = [
    "AllocationFailure",
    "BarcodeSessionError",
    "BarcodeSessionService",
    "EmptySheet",
    "NoEntry",
    "PrintMode",
    "QueueFull",
]


class BarcodeSessionError(RuntimeError):
    """Raised when a session-level operation cannot be completed."""


class QueueFull(BarcodeSessionError):
    """Raised when a slot is requested on a sheet that is already full."""

    def __init__(self, capacity: int = SHEET_CAPACITY) -> None:
        super().__init__(f"Hoja llena (máximo {capacity} por página A4).")
        self.capacity = capacity


class NoEntry(BarcodeSessionError):
    """Raised when an operation needs a barcode and none is available."""

    def __init__(self, message: str = "No hay un código seleccionado.") -> None:
        super().__init__(message)


class EmptySheet(BarcodeSessionError):
    """Raised when the print sheet is requested without any slot filled."""

    def __init__(self) -> None:
        super().__init__("La hoja está vacía. Agrega códigos primero.")


class PrintMode(str, Enum):
    """Enumerate what the print action sends to the printer."""

    SINGLE = "single"
    SHEET = "sheet"


def _new_print_id() -> str:
    """Return an identifier unique for every slot insertion."""

    return uuid.uuid4().hex


class BarcodeSessionService:
    """Coordinate identifier generation, selection and the A4 print queue.

    Every mutation of ``history``, ``currentEntry`` and ``printQueue`` goes
    through this class so the three stay consistent with each other.
    """

    def __init__(
        self,
        history_service: HistoryService,
        queue_dao: PrintQueueDAO,
        allocator: Optional[IdentifierAllocator] = None,
        print_id_factory: Optional[Callable[[], str]] = None,
        capacity: int = SHEET_CAPACITY,
    ) -> None:
        """Store the dependencies and load the persisted state."""

        self._history_service = history_service
        self._queue_dao = queue_dao
        self._allocator = allocator or IdentifierAllocator()
        self._print_id_factory = print_id_factory or _new_print_id
        self._capacity = capacity

        self._history: List[BarcodeEntry] = self._history_service.get_history()
        self._current: Optional[BarcodeEntry] = self._history[0] if self._history else None
        self._queue: List[QueueSlotItem] = self._load_queue()

    # ------------------------------------------------------------------
    # Estado
    # ------------------------------------------------------------------
    def _load_queue(self) -> List[QueueSlotItem]:
        """Read the stored queue, trimming it to the sheet capacity."""

        try:
            slots = self._queue_dao.load_slots()
        except PrintQueueDAOError as exc:
            logger.error("No fue posible cargar la hoja de impresión: %s", exc)
            return []
        if len(slots) > self._capacity:
            logger.warning(
                "La hoja almacenada tenía %s espacios; se conservan los primeros %s.",
                len(slots),
                self._capacity,
            )
            slots = slots[: self._capacity]
        return slots

    def _persist_queue(self) -> None:
        """Write the current queue; failures are logged and ignored."""

        try:
            self._queue_dao.save_slots(self._queue)
        except PrintQueueDAOError as exc:
            logger.error("No fue posible guardar la hoja de impresión: %s", exc)

    def get_snapshot(self) -> SessionSnapshot:
        """Return the immutable view state for the presentation layer."""

        return SessionSnapshot(
            history=tuple(self._history),
            currentEntry=self._current,
            printQueue=tuple(self._queue),
            sheetCapacity=self._capacity,
        )

    def find_entry(self, entry_id: str) -> Optional[BarcodeEntry]:
        """Return the history record with ``entry_id`` if present."""

        target = str(entry_id)
        for entry in self._history:
            if entry.id == target:
                return entry
        return None

    # ------------------------------------------------------------------
    # Historial
    # ------------------------------------------------------------------
    def generate(self, label: Optional[str] = None) -> BarcodeEntry:
        """Allocate a new identifier, persist it and select it.

        Raises:
            AllocationFailure: when no free identifier was found; state is untouched.
        """

        existing_ids = {entry.id for entry in self._history}
        entry = self._allocator.allocate(existing_ids, label)
        self._history_service.save_entry(entry)
        self._history = [entry] + [item for item in self._history if item.id != entry.id]
        self._current = entry
        logger.info("Código generado %s", entry.id)
        return entry

    def select_entry(self, entry_id: str) -> Optional[BarcodeEntry]:
        """Select the history record with ``entry_id``; stale ids are ignored."""

        entry = self.find_entry(entry_id)
        if entry is not None:
            self._current = entry
        return entry

    def delete_entry(self, entry_id: str) -> None:
        """Delete a barcode from storage, history, selection and every sheet slot."""

        target = str(entry_id)
        remaining = self._history_service.delete_entry(target)

        new_history = [entry for entry in remaining if entry.id != target]
        new_current = self._current
        if new_current is not None and new_current.id == target:
            new_current = new_history[0] if new_history else None
        new_queue = [slot for slot in self._queue if slot.id != target]
        queue_changed = len(new_queue) != len(self._queue)

        self._history, self._current, self._queue = new_history, new_current, new_queue
        if queue_changed:
            self._persist_queue()
        logger.info("Código eliminado %s", target)

    def clear_history(self) -> None:
        """Erase the whole history and everything that referenced it."""

        self._history_service.clear_history()
        self._history, self._current, self._queue = [], None, []
        self._persist_queue()

    # ------------------------------------------------------------------
    # Hoja de impresión
    # ------------------------------------------------------------------
    def enqueue(self, entry: Optional[BarcodeEntry]) -> QueueSlotItem:
        """Append a copy of ``entry`` to the next free sheet slot.

        Raises:
            NoEntry: when ``entry`` is ``None``.
            QueueFull: when every slot is already taken.
        """

        if entry is None:
            raise NoEntry()
        if len(self._queue) >= self._capacity:
            raise QueueFull(self._capacity)
        slot = QueueSlotItem.from_entry(entry, self._print_id_factory())
        self._queue = self._queue + [slot]
        self._persist_queue()
        return slot

    def enqueue_current(self) -> QueueSlotItem:
        """Place the selected barcode on the sheet."""

        return self.enqueue(self._current)

    def enqueue_entry(self, entry_id: str) -> QueueSlotItem:
        """Place the history record with ``entry_id`` on the sheet."""

        entry = self.find_entry(entry_id)
        if entry is None:
            raise NoEntry("El código solicitado ya no existe en el historial.")
        return self.enqueue(entry)

    def dequeue(self, print_id: str) -> None:
        """Remove a single slot; unknown ids are ignored."""

        remaining = [slot for slot in self._queue if slot.printId != print_id]
        if len(remaining) != len(self._queue):
            self._queue = remaining
            self._persist_queue()

    def clear_queue(self) -> None:
        """Empty every slot of the sheet."""

        self._queue = []
        self._persist_queue()

    def prepare_print(self, mode: PrintMode) -> Tuple[BarcodeEntry, ...]:
        """Return the barcodes that the print action must lay out.

        Raises:
            NoEntry: single mode without a selected barcode.
            EmptySheet: sheet mode with no slot filled.
            BarcodeSessionError: ``mode`` is not a known print mode.
        """

        try:
            mode = PrintMode(mode)
        except ValueError as exc:
            raise BarcodeSessionError(f"Modo de impresión desconocido: {mode}.") from exc
        if mode is PrintMode.SINGLE:
            if self._current is None:
                raise NoEntry("No hay un código seleccionado para imprimir.")
            return (self._current,)
        if not self._queue:
            raise EmptySheet()
        return tuple(slot.to_entry() for slot in self._queue)
