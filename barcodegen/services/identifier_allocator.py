"""Allocate unique 9-digit identifiers for new barcodes."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from typing import AbstractSet, Callable, Optional, Protocol

from barcodegen.dtos.barcode_entry import BARCODE_FORMAT, BarcodeEntry, normalize_label

logger = logging.getLogger(__name__)

MIN_BARCODE_VALUE = 100_000_000
MAX_BARCODE_VALUE = 999_999_999
DEFAULT_MAX_ATTEMPTS = 100


class RandomSource(Protocol):
    """Subset of :class:`random.Random` used by the allocator."""

    def randint(self, a: int, b: int) -> int:
        """Return an integer N such that ``a <= N <= b``."""


class AllocationFailure(RuntimeError):
    """Raised when every attempt produced an identifier already in use."""

    def __init__(self, attempts: int) -> None:
        super().__init__(
            f"No fue posible generar un código único tras {attempts} intentos."
        )
        self.attempts = attempts


def _utcnow() -> datetime:
    """Return the current UTC timestamp with millisecond precision."""

    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


class IdentifierAllocator:
    """Draw random identifiers and probe them against the known ids.

    The identifier space holds 900,000,000 values, so a bounded number of
    draws is enough until the history grows close to that size.
    """

    def __init__(
        self,
        random_source: Optional[RandomSource] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts debe ser mayor que cero.")
        self._random = random_source or random.SystemRandom()
        self._max_attempts = max_attempts
        self._clock = clock or _utcnow

    def draw_candidate(self) -> str:
        """Return one uniformly drawn 9-digit identifier without a leading zero."""

        return str(self._random.randint(MIN_BARCODE_VALUE, MAX_BARCODE_VALUE))

    def allocate(self, existing_ids: AbstractSet[str], label: Optional[str] = None) -> BarcodeEntry:
        """Return a new entry whose id is absent from ``existing_ids``.

        Raises:
            AllocationFailure: when ``max_attempts`` draws all collided.
        """

        for _ in range(self._max_attempts):
            candidate = self.draw_candidate()
            if candidate not in existing_ids:
                return BarcodeEntry(
                    id=candidate,
                    createdAt=self._clock(),
                    label=normalize_label(label),
                    format=BARCODE_FORMAT,
                )

        logger.error(
            "Se agotaron %s intentos para generar un código único (%s códigos existentes).",
            self._max_attempts,
            len(existing_ids),
        )
        raise AllocationFailure(self._max_attempts)
