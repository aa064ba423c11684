"""Data transfer objects shared by the barcode generator layers."""

from barcodegen.dtos.barcode_entry import BARCODE_FORMAT, BarcodeEntry, QueueSlotItem
from barcodegen.dtos.session_snapshot import SHEET_CAPACITY, SessionSnapshot

__all__ = [
    "BARCODE_FORMAT",
    "BarcodeEntry",
    "QueueSlotItem",
    "SHEET_CAPACITY",
    "SessionSnapshot",
]
