"""Data Transfer Objects for generated barcodes and print sheet slots."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional

BARCODE_FORMAT = "CODE128"
BARCODE_ID_LENGTH = 9
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MILLISECOND = timedelta(milliseconds=1)


def _to_epoch_millis(value: datetime) -> int:
    """Return the timestamp as integer milliseconds since the epoch."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - _EPOCH) // _ONE_MILLISECOND


def _from_epoch_millis(raw: Any) -> Optional[datetime]:
    """Parse a stored timestamp, accepting epoch milliseconds or ISO text."""

    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        try:
            return _EPOCH + timedelta(milliseconds=raw)
        except (OverflowError, ValueError):
            return None
    if isinstance(raw, str) and raw.strip():
        try:
            parsed = datetime.fromisoformat(raw.strip())
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def normalize_barcode_id(raw: Any) -> Optional[str]:
    """Return the identifier as a 9-digit string or ``None`` when invalid."""

    if isinstance(raw, bool) or raw is None:
        return None
    value = str(raw).strip()
    if len(value) != BARCODE_ID_LENGTH or not (value.isascii() and value.isdigit()):
        return None
    return value


def normalize_label(raw: Optional[str]) -> Optional[str]:
    """Trim the label and collapse empty values to ``None``."""

    if raw is None:
        return None
    clean = str(raw).strip()
    return clean or None


@dataclass(frozen=True)
class BarcodeEntry:
    """Represent a generated barcode persisted in the history."""

    id: str
    createdAt: datetime
    label: Optional[str] = None
    format: str = BARCODE_FORMAT

    @property
    def displayName(self) -> str:
        """Return the label or the placeholder used by the views."""

        return self.label or "Sin nombre"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the entry to the flat record stored on disk."""

        payload: Dict[str, Any] = {
            "id": self.id,
            "createdAt": _to_epoch_millis(self.createdAt),
            "format": self.format,
        }
        if self.label:
            payload["label"] = self.label
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Optional["BarcodeEntry"]:
        """Build an entry from a stored record, returning ``None`` if malformed."""

        if not isinstance(payload, Mapping):
            return None
        entry_id = normalize_barcode_id(payload.get("id"))
        if entry_id is None:
            return None
        created_at = _from_epoch_millis(payload.get("createdAt"))
        if created_at is None:
            created_at = _EPOCH
        label = payload.get("label")
        return cls(
            id=entry_id,
            createdAt=created_at,
            label=normalize_label(label) if isinstance(label, str) else None,
            format=str(payload.get("format") or BARCODE_FORMAT),
        )


@dataclass(frozen=True)
class QueueSlotItem:
    """Represent one placement of a barcode inside the A4 print sheet."""

    printId: str
    id: str
    createdAt: datetime
    label: Optional[str] = None
    format: str = BARCODE_FORMAT

    @classmethod
    def from_entry(cls, entry: BarcodeEntry, print_id: str) -> "QueueSlotItem":
        """Copy the entry fields into a new slot identified by ``print_id``."""

        return cls(
            printId=print_id,
            id=entry.id,
            createdAt=entry.createdAt,
            label=entry.label,
            format=entry.format,
        )

    @property
    def displayName(self) -> str:
        """Return the label or the placeholder used by the views."""

        return self.label or "Sin nombre"

    def to_entry(self) -> BarcodeEntry:
        """Return the embedded entry fields."""

        return BarcodeEntry(id=self.id, createdAt=self.createdAt, label=self.label, format=self.format)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the slot to the flat record stored on disk."""

        payload = self.to_entry().to_dict()
        payload["printId"] = self.printId
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Optional["QueueSlotItem"]:
        """Build a slot from a stored record, returning ``None`` if malformed."""

        entry = BarcodeEntry.from_dict(payload)
        if entry is None:
            return None
        print_id = payload.get("printId")
        if not isinstance(print_id, str) or not print_id.strip():
            return None
        return cls.from_entry(entry, print_id.strip())
