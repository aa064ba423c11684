"""Render Code 128 symbols as Pillow images for previews and exports."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from barcode import Code128
from barcode.errors import BarcodeError
from barcode.writer import ImageWriter
from PIL import Image


logger = logging.getLogger(__name__)


class BarcodeRenderError(RuntimeError):
    """Raised when a symbol cannot be drawn or saved."""


@dataclass(frozen=True)
class RenderOptions:
    """Presentation parameters passed to the image writer (sizes in millimetres)."""

    module_width: float = 0.4
    module_height: float = 15.0
    show_text: bool = True
    font_size: int = 14
    quiet_zone: float = 2.5
    dpi: int = 300

    def to_writer_options(self) -> Dict[str, Any]:
        """Translate the options into the keys understood by ``ImageWriter``."""

        return {
            "module_width": self.module_width,
            "module_height": self.module_height,
            "quiet_zone": self.quiet_zone,
            "write_text": self.show_text,
            "font_size": self.font_size if self.show_text else 0,
            "text_distance": 4.0 if self.show_text else 0,
            "dpi": self.dpi,
            "background": "white",
            "foreground": "black",
        }


PREVIEW_OPTIONS = RenderOptions(module_width=0.3, module_height=12.0, dpi=120)
SHEET_OPTIONS = RenderOptions(module_width=0.3, module_height=10.0, font_size=10)


class BarcodeRenderer:
    """Draw barcode symbols; callers only pass ids and never read state back."""

    def __init__(self, default_options: Optional[RenderOptions] = None) -> None:
        self._default_options = default_options or RenderOptions()

    def render_image(self, value: str, options: Optional[RenderOptions] = None) -> Image.Image:
        """Return the symbol for ``value`` as an RGB image."""

        if not value or not str(value).strip():
            raise BarcodeRenderError("No hay un valor para dibujar el código.")
        effective = options or self._default_options
        try:
            symbol = Code128(str(value).strip(), writer=ImageWriter())
            image = symbol.render(effective.to_writer_options())
        except (BarcodeError, OSError, ValueError) as exc:
            logger.error("No fue posible dibujar el código %s: %s", value, exc)
            raise BarcodeRenderError(f"No fue posible dibujar el código {value}.") from exc
        return image.convert("RGB")

    def render_png(self, value: str, options: Optional[RenderOptions] = None) -> bytes:
        """Return the PNG bytes for ``value``."""

        buffer = io.BytesIO()
        self.render_image(value, options).save(buffer, format="PNG")
        return buffer.getvalue()

    def save_png(self, value: str, destination: Path, options: Optional[RenderOptions] = None) -> Path:
        """Write the PNG for ``value`` to ``destination`` and return the path."""

        data = self.render_png(value, options)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(data)
        except OSError as exc:
            raise BarcodeRenderError(f"No fue posible guardar el archivo destino: {exc}") from exc
        return destination
