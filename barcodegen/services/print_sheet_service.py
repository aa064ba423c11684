"""Build printable A4 documents with the barcodes placed on the sheet."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional, Sequence

from docx import Document
from docx.enum.section import WD_ORIENT
from docx.enum.table import WD_CELL_VERTICAL_ALIGNMENT, WD_ROW_HEIGHT_RULE
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Mm, Pt

from barcodegen.dtos.barcode_entry import BarcodeEntry
from barcodegen.dtos.session_snapshot import SHEET_CAPACITY
from barcodegen.services.barcode_renderer import (
    SHEET_OPTIONS,
    BarcodeRenderer,
    BarcodeRenderError,
    RenderOptions,
)


logger = logging.getLogger(__name__)

SHEET_COLUMNS = 4
SHEET_ROWS = 5
A4_WIDTH_MM = 210
A4_HEIGHT_MM = 297
PAGE_MARGIN_MM = 10
CELL_HEIGHT_MM = 54
CELL_PICTURE_WIDTH_MM = 42
SINGLE_PICTURE_WIDTH_MM = 120
EMPTY_LABEL = "Sin nombre"


class PrintSheetServiceError(RuntimeError):
    """Raised when the printable document cannot be generated."""


class PrintSheetService:
    """Lay out barcodes on a 4 x 5 A4 grid or on a single page."""

    def __init__(
        self,
        renderer: Optional[BarcodeRenderer] = None,
        options: RenderOptions = SHEET_OPTIONS,
    ) -> None:
        self._renderer = renderer or BarcodeRenderer()
        self._options = options

    @staticmethod
    def _new_a4_document() -> Document:
        """Return an empty portrait A4 document with narrow margins."""

        document = Document()
        section = document.sections[0]
        section.orientation = WD_ORIENT.PORTRAIT
        section.page_width = Mm(A4_WIDTH_MM)
        section.page_height = Mm(A4_HEIGHT_MM)
        for side in ("left_margin", "right_margin", "top_margin", "bottom_margin"):
            setattr(section, side, Mm(PAGE_MARGIN_MM))
        return document

    def _picture_stream(self, entry: BarcodeEntry, options: RenderOptions) -> io.BytesIO:
        """Render ``entry`` and return a PNG stream python-docx can embed."""

        try:
            return io.BytesIO(self._renderer.render_png(entry.id, options))
        except BarcodeRenderError as exc:
            raise PrintSheetServiceError(str(exc)) from exc

    def build_sheet(self, entries: Sequence[BarcodeEntry], destination: Path) -> Path:
        """Write the sheet with ``entries`` in slot order, leaving the rest empty."""

        if len(entries) > SHEET_CAPACITY:
            raise PrintSheetServiceError(
                f"La hoja admite como máximo {SHEET_CAPACITY} códigos."
            )

        document = self._new_a4_document()
        table = document.add_table(rows=SHEET_ROWS, cols=SHEET_COLUMNS)
        table.style = "Table Grid"
        for row in table.rows:
            row.height = Mm(CELL_HEIGHT_MM)
            row.height_rule = WD_ROW_HEIGHT_RULE.EXACTLY

        for index in range(SHEET_CAPACITY):
            cell = table.cell(index // SHEET_COLUMNS, index % SHEET_COLUMNS)
            cell.vertical_alignment = WD_CELL_VERTICAL_ALIGNMENT.CENTER
            paragraph = cell.paragraphs[0]
            paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
            if index >= len(entries):
                continue
            entry = entries[index]
            label_run = paragraph.add_run(entry.label or EMPTY_LABEL)
            label_run.bold = True
            label_run.font.size = Pt(9)
            picture = cell.add_paragraph()
            picture.alignment = WD_ALIGN_PARAGRAPH.CENTER
            picture.add_run().add_picture(
                self._picture_stream(entry, self._options),
                width=Mm(CELL_PICTURE_WIDTH_MM),
            )

        return self._save(document, destination)

    def build_single(self, entry: BarcodeEntry, destination: Path) -> Path:
        """Write a page that contains only ``entry``."""

        document = self._new_a4_document()
        title = document.add_paragraph()
        title.alignment = WD_ALIGN_PARAGRAPH.CENTER
        title_run = title.add_run(entry.label or EMPTY_LABEL)
        title_run.bold = True
        title_run.font.size = Pt(16)

        picture = document.add_paragraph()
        picture.alignment = WD_ALIGN_PARAGRAPH.CENTER
        picture.add_run().add_picture(
            self._picture_stream(entry, RenderOptions()),
            width=Mm(SINGLE_PICTURE_WIDTH_MM),
        )
        return self._save(document, destination)

    @staticmethod
    def _save(document: Document, destination: Path) -> Path:
        """Persist the document, translating filesystem errors."""

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            document.save(str(destination))
        except OSError as exc:
            logger.error("No fue posible guardar la hoja %s: %s", destination, exc)
            raise PrintSheetServiceError(f"No fue posible guardar el archivo destino: {exc}") from exc
        return destination
