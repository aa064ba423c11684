"""Controller dedicated to the barcode generator and print sheet workflows."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

from barcodegen.dtos.barcode_entry import BarcodeEntry, QueueSlotItem
from barcodegen.dtos.session_snapshot import SessionSnapshot
from barcodegen.services.barcode_renderer import BarcodeRenderer, BarcodeRenderError
from barcodegen.services.barcode_session_service import (
    AllocationFailure,
    BarcodeSessionError,
    BarcodeSessionService,
    PrintMode,
)
from barcodegen.services.naming_service import NamingService
from barcodegen.services.print_sheet_service import PrintSheetService, PrintSheetServiceError


class BarcodeController:
    """Expose generator actions to the desktop view as ``(result, error)`` pairs."""

    def __init__(
        self,
        session_service: BarcodeSessionService,
        renderer: BarcodeRenderer,
        sheet_service: PrintSheetService,
        naming_service: NamingService,
        export_dir: Path,
    ) -> None:
        """Store dependencies required to manipulate barcodes and exports."""

        self._session_service = session_service
        self._renderer = renderer
        self._sheet_service = sheet_service
        self._naming_service = naming_service
        self._export_dir = export_dir

    def getExportDirectory(self) -> Path:
        """Provide the default folder for downloaded images and sheets."""

        return self._export_dir

    def get_snapshot(self) -> SessionSnapshot:
        """Return the current history, selection and sheet state."""

        return self._session_service.get_snapshot()

    def generate_barcode(self, label: str) -> Tuple[Optional[BarcodeEntry], Optional[str]]:
        """Create a new unique barcode with an optional label."""

        try:
            entry = self._session_service.generate(label)
        except AllocationFailure:
            return None, "Error crítico: no fue posible generar un código único."
        return entry, None

    def select_barcode(self, entry_id: str) -> Optional[BarcodeEntry]:
        """Change the selected barcode; unknown ids keep the current one."""

        return self._session_service.select_entry(entry_id)

    def delete_barcode(self, entry_id: str) -> None:
        """Delete the barcode from the history and from every sheet slot."""

        self._session_service.delete_entry(entry_id)

    def clear_history(self) -> None:
        """Erase the history together with the sheet."""

        self._session_service.clear_history()

    def add_current_to_sheet(self) -> Tuple[Optional[QueueSlotItem], Optional[str]]:
        """Place the selected barcode in the next free slot."""

        try:
            slot = self._session_service.enqueue_current()
        except BarcodeSessionError as exc:
            return None, str(exc)
        return slot, None

    def add_to_sheet(self, entry_id: str) -> Tuple[Optional[QueueSlotItem], Optional[str]]:
        """Place the history barcode with ``entry_id`` in the next free slot."""

        try:
            slot = self._session_service.enqueue_entry(entry_id)
        except BarcodeSessionError as exc:
            return None, str(exc)
        return slot, None

    def remove_from_sheet(self, print_id: str) -> None:
        """Free a single sheet slot."""

        self._session_service.dequeue(print_id)

    def clear_sheet(self) -> None:
        """Free every sheet slot."""

        self._session_service.clear_queue()

    def export_current_png(self, destination: Optional[Path] = None) -> Tuple[Optional[Path], Optional[str]]:
        """Save the selected barcode as PNG under ``barcode-<label or id>.png``."""

        current = self._session_service.get_snapshot().currentEntry
        if current is None:
            return None, "No hay un código seleccionado para descargar."
        target = destination or self._export_dir / self._naming_service.png_filename(current)
        try:
            return self._renderer.save_png(current.id, target), None
        except BarcodeRenderError as exc:
            return None, str(exc)

    def validate_print(self, mode: PrintMode) -> Optional[str]:
        """Return the reason why ``mode`` cannot be printed, if any."""

        try:
            self._session_service.prepare_print(mode)
        except BarcodeSessionError as exc:
            return str(exc)
        return None

    def export_print_document(
        self,
        mode: PrintMode,
        destination: Optional[Path] = None,
    ) -> Tuple[Optional[Path], Optional[str]]:
        """Write the printable DOCX for the selected barcode or the whole sheet."""

        try:
            entries = self._session_service.prepare_print(mode)
        except BarcodeSessionError as exc:
            return None, str(exc)

        try:
            if PrintMode(mode) is PrintMode.SINGLE:
                target = destination or self._export_dir / self._naming_service.sheet_filename(entries[0])
                return self._sheet_service.build_single(entries[0], target), None
            target = destination or self._export_dir / self._naming_service.sheet_filename()
            return self._sheet_service.build_sheet(entries, target), None
        except PrintSheetServiceError as exc:
            return None, str(exc)
