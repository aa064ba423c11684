"""Tests for the bounded-retry identifier allocator."""

from datetime import datetime, timezone

import pytest

from barcodegen.services.identifier_allocator import (
    MAX_BARCODE_VALUE,
    MIN_BARCODE_VALUE,
    AllocationFailure,
    IdentifierAllocator,
)


class CountingRandom:
    """Always return the same value and count how many draws were made."""

    def __init__(self, value: int) -> None:
        self.value = value
        self.calls = 0
        self.bounds = None

    def randint(self, a: int, b: int) -> int:
        self.calls += 1
        self.bounds = (a, b)
        return self.value


FIXED_NOW = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


def test_allocate_returns_nine_digit_entry() -> None:
    """The entry carries the drawn id, the clock time and the fixed format."""

    source = CountingRandom(123456789)
    allocator = IdentifierAllocator(random_source=source, clock=lambda: FIXED_NOW)

    entry = allocator.allocate(set(), "  Asset 1  ")

    assert entry.id == "123456789"
    assert entry.createdAt == FIXED_NOW
    assert entry.label == "Asset 1"
    assert entry.format == "CODE128"
    assert source.bounds == (MIN_BARCODE_VALUE, MAX_BARCODE_VALUE)


@pytest.mark.parametrize("label", [None, "", "   "])
def test_blank_labels_are_stored_as_absent(label) -> None:
    """Whitespace-only labels collapse to ``None``."""

    allocator = IdentifierAllocator(random_source=CountingRandom(987654321))

    assert allocator.allocate(set(), label).label is None


def test_allocation_fails_after_exactly_max_attempts() -> None:
    """A random source that always collides exhausts the budget of 100 draws."""

    source = CountingRandom(555555555)
    allocator = IdentifierAllocator(random_source=source)
    existing = frozenset({"555555555"})

    with pytest.raises(AllocationFailure) as excinfo:
        allocator.allocate(existing, "Nada")

    assert source.calls == 100
    assert excinfo.value.attempts == 100
    assert existing == {"555555555"}


def test_custom_retry_budget_is_respected() -> None:
    """The retry budget is injectable."""

    source = CountingRandom(555555555)
    allocator = IdentifierAllocator(random_source=source, max_attempts=3)

    with pytest.raises(AllocationFailure):
        allocator.allocate({"555555555"})

    assert source.calls == 3


def test_invalid_retry_budget_is_rejected() -> None:
    """A budget below one would never draw."""

    with pytest.raises(ValueError):
        IdentifierAllocator(max_attempts=0)


def test_default_source_draws_values_without_leading_zero() -> None:
    """Draws from the system random source stay inside the 9-digit range."""

    allocator = IdentifierAllocator()

    for _ in range(200):
        candidate = allocator.draw_candidate()
        assert len(candidate) == 9
        assert candidate[0] != "0"
        assert MIN_BARCODE_VALUE <= int(candidate) <= MAX_BARCODE_VALUE
