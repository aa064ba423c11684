"""Read-only view state handed from the session service to the views."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from barcodegen.dtos.barcode_entry import BarcodeEntry, QueueSlotItem

SHEET_CAPACITY = 20


@dataclass(frozen=True)
class SessionSnapshot:
    """Capture the history, current selection and print queue at one instant."""

    history: Tuple[BarcodeEntry, ...]
    currentEntry: Optional[BarcodeEntry]
    printQueue: Tuple[QueueSlotItem, ...]
    sheetCapacity: int = SHEET_CAPACITY

    @property
    def freeSlots(self) -> int:
        """Return how many sheet positions are still empty."""

        return max(0, self.sheetCapacity - len(self.printQueue))

    def sheet_slots(self) -> Tuple[Optional[QueueSlotItem], ...]:
        """Return the sheet positions in order, padding empty ones with ``None``."""

        padding = (None,) * self.freeSlots
        return tuple(self.printQueue[: self.sheetCapacity]) + padding
