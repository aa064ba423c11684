"""Helpers to generate filesystem friendly names for exported barcodes."""

import re
from typing import Optional

from barcodegen.dtos.barcode_entry import BarcodeEntry


INVALID_WINDOWS_CHARS_PATTERN = r'[<>:"/\\|?*\x00-\x1F]'
WHITESPACE_PATTERN = r"\s+"
WINDOWS_RESERVED_NAMES = {
    "CON",
    "PRN",
    "AUX",
    "NUL",
    *(f"COM{index}" for index in range(1, 10)),
    *(f"LPT{index}" for index in range(1, 10)),
}
MAX_WINDOWS_NAME_LENGTH = 80
PNG_PREFIX = "barcode"
SHEET_PREFIX = "hoja-a4"


class NamingService:
    """Build export file names that stay valid on Windows."""

    def slugify_for_windows(self, name: str) -> str:
        """Return a sanitized slug valid for Windows file systems."""

        clean_name = (name or "").strip()
        clean_name = re.sub(INVALID_WINDOWS_CHARS_PATTERN, "", clean_name)
        clean_name = re.sub(WHITESPACE_PATTERN, "_", clean_name)
        if clean_name.upper() in WINDOWS_RESERVED_NAMES:
            clean_name = f"_{clean_name}_"
        return clean_name.rstrip(". ")[:MAX_WINDOWS_NAME_LENGTH]

    def png_filename(self, entry: BarcodeEntry) -> str:
        """Return ``barcode-<label or id>.png`` for the downloaded symbol."""

        stem = self.slugify_for_windows(entry.label or "") or entry.id
        return f"{PNG_PREFIX}-{stem}.png"

    def sheet_filename(self, entry: Optional[BarcodeEntry] = None) -> str:
        """Return the DOCX name for a full sheet or a single barcode page."""

        if entry is None:
            return f"{SHEET_PREFIX}.docx"
        stem = self.slugify_for_windows(entry.label or "") or entry.id
        return f"{PNG_PREFIX}-{stem}.docx"
