"""Unit tests for the barcode session service using in-memory doubles."""

from __future__ import annotations

import itertools
import logging
from datetime import datetime, timezone
from typing import Iterator, List, Optional

import pytest

from barcodegen.daos.history_dao import HISTORY_STORAGE_KEY, HistoryDAO
from barcodegen.daos.key_value_store import InMemoryKeyValueStore, KeyValueStoreError
from barcodegen.daos.print_queue_dao import PrintQueueDAO
from barcodegen.dtos.barcode_entry import BarcodeEntry, QueueSlotItem
from barcodegen.services.barcode_session_service import (
    AllocationFailure,
    BarcodeSessionError,
    BarcodeSessionService,
    EmptySheet,
    NoEntry,
    PrintMode,
    QueueFull,
)
from barcodegen.services.history_service import HistoryService
from barcodegen.services.identifier_allocator import IdentifierAllocator


class SequenceRandom:
    """Return pre-defined values in order, then repeat the last one."""

    def __init__(self, values: List[int]) -> None:
        self._values = values
        self.calls = 0

    def randint(self, a: int, b: int) -> int:
        value = self._values[min(self.calls, len(self._values) - 1)]
        self.calls += 1
        return value


class FailingWriteStore(InMemoryKeyValueStore):
    """Store that reads normally but refuses every write for one key."""

    def __init__(self, failing_key: str) -> None:
        super().__init__()
        self.failing_key = failing_key

    def set_item(self, key: str, value: str) -> None:
        if key == self.failing_key:
            raise KeyValueStoreError("disco lleno")
        super().set_item(key, value)


def _entry(entry_id: str, label: Optional[str] = None) -> BarcodeEntry:
    return BarcodeEntry(id=entry_id, createdAt=datetime(2024, 1, 1, tzinfo=timezone.utc), label=label)


def _print_ids() -> Iterator[str]:
    return (f"print-{index}" for index in itertools.count(1))


def _build_service(
    store: Optional[InMemoryKeyValueStore] = None,
    random_values: Optional[List[int]] = None,
    seed_history: Optional[List[BarcodeEntry]] = None,
) -> BarcodeSessionService:
    store = store if store is not None else InMemoryKeyValueStore()
    history_service = HistoryService(HistoryDAO(store))
    for entry in reversed(seed_history or []):
        history_service.save_entry(entry)
    allocator = IdentifierAllocator(
        random_source=SequenceRandom(random_values) if random_values else None,
        clock=lambda: datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc),
    )
    ids = _print_ids()
    return BarcodeSessionService(
        history_service,
        PrintQueueDAO(store),
        allocator=allocator,
        print_id_factory=lambda: next(ids),
    )


def test_generate_on_empty_history_selects_and_persists_entry() -> None:
    """A first generation should be stored, listed and selected."""

    store = InMemoryKeyValueStore()
    service = _build_service(store)

    entry = service.generate("Asset 1")

    assert len(entry.id) == 9 and entry.id.isdigit()
    assert entry.label == "Asset 1"
    assert entry.format == "CODE128"
    assert HistoryService(HistoryDAO(store)).get_history() == [entry]
    snapshot = service.get_snapshot()
    assert snapshot.currentEntry == entry
    assert snapshot.history == (entry,)


def test_generate_skips_identifiers_already_in_history() -> None:
    """Collisions with the history should trigger a new draw."""

    existing = _entry("111111111")
    service = _build_service(random_values=[111111111, 222222222], seed_history=[existing])

    entry = service.generate(None)

    assert entry.id == "222222222"
    assert [item.id for item in service.get_snapshot().history] == ["222222222", "111111111"]


def test_generate_failure_leaves_state_untouched() -> None:
    """Exhausting the retry budget must not change history nor selection."""

    existing = _entry("111111111", "A")
    store = InMemoryKeyValueStore()
    service = _build_service(store, random_values=[111111111], seed_history=[existing])
    before = service.get_snapshot()

    with pytest.raises(AllocationFailure):
        service.generate("Nuevo")

    assert service.get_snapshot() == before
    assert HistoryService(HistoryDAO(store)).get_history() == [existing]


def test_loading_selects_first_history_entry() -> None:
    """A new session should start with the most recent barcode selected."""

    service = _build_service(seed_history=[_entry("111111111"), _entry("222222222")])

    assert service.get_snapshot().currentEntry.id == "111111111"


def test_select_entry_ignores_unknown_ids() -> None:
    """Stale references keep the current selection."""

    service = _build_service(seed_history=[_entry("111111111"), _entry("222222222")])

    assert service.select_entry("222222222").id == "222222222"
    assert service.select_entry("999999999") is None
    assert service.get_snapshot().currentEntry.id == "222222222"


def test_enqueue_same_entry_twice_creates_distinct_slots() -> None:
    """Duplicate copies of one barcode are allowed on the sheet."""

    service = _build_service()
    entry = service.generate("Caja")

    first = service.enqueue(entry)
    second = service.enqueue(entry)

    assert first.printId != second.printId
    assert (first.id, first.label) == (second.id, second.label) == (entry.id, "Caja")
    assert len(service.get_snapshot().printQueue) == 2


def test_enqueue_without_entry_raises_no_entry() -> None:
    """Adding nothing to the sheet is a user error."""

    service = _build_service()

    with pytest.raises(NoEntry):
        service.enqueue(None)
    with pytest.raises(NoEntry):
        service.enqueue_current()
    with pytest.raises(NoEntry):
        service.enqueue_entry("123456789")


def test_queue_never_exceeds_twenty_slots() -> None:
    """The 21st slot is rejected and the sheet stays at 20."""

    service = _build_service()
    entry = service.generate("Lote")
    for _ in range(20):
        service.enqueue(entry)

    with pytest.raises(QueueFull):
        service.enqueue(entry)

    snapshot = service.get_snapshot()
    assert len(snapshot.printQueue) == 20
    assert snapshot.freeSlots == 0


def test_dequeue_frees_a_slot_for_a_new_copy() -> None:
    """Removing one slot from a full sheet allows one more insertion."""

    service = _build_service()
    entry = service.generate("Lote")
    slots = [service.enqueue(entry) for _ in range(20)]

    service.dequeue(slots[5].printId)
    service.enqueue(entry)

    assert len(service.get_snapshot().printQueue) == 20


def test_dequeue_unknown_print_id_is_noop() -> None:
    """Unknown slot identifiers are ignored."""

    service = _build_service()
    entry = service.generate(None)
    service.enqueue(entry)

    service.dequeue("missing")

    assert len(service.get_snapshot().printQueue) == 1


def test_clear_queue_empties_sheet() -> None:
    """Resetting the sheet removes every slot but keeps the history."""

    service = _build_service()
    entry = service.generate(None)
    service.enqueue(entry)
    service.enqueue(entry)

    service.clear_queue()

    snapshot = service.get_snapshot()
    assert snapshot.printQueue == ()
    assert snapshot.history == (entry,)


def test_delete_current_entry_selects_next_and_purges_queue() -> None:
    """Deleting the selected barcode cascades to selection and every slot."""

    a = _entry("111111111", "A")
    b = _entry("222222222", "B")
    store = InMemoryKeyValueStore()
    service = _build_service(store, seed_history=[a, b])
    service.enqueue(a)
    service.enqueue(b)
    service.enqueue(a)

    service.delete_entry("111111111")

    snapshot = service.get_snapshot()
    assert snapshot.history == (b,)
    assert snapshot.currentEntry == b
    assert [slot.id for slot in snapshot.printQueue] == ["222222222"]
    assert HistoryService(HistoryDAO(store)).get_history() == [b]
    assert [slot.id for slot in PrintQueueDAO(store).load_slots()] == ["222222222"]


def test_delete_last_entry_clears_selection() -> None:
    """Deleting the only barcode leaves nothing selected."""

    service = _build_service()
    entry = service.generate(None)

    service.delete_entry(entry.id)

    snapshot = service.get_snapshot()
    assert snapshot.history == ()
    assert snapshot.currentEntry is None


def test_delete_other_entry_keeps_selection() -> None:
    """Deleting a non-selected barcode keeps the current one."""

    a = _entry("111111111")
    b = _entry("222222222")
    service = _build_service(seed_history=[a, b])

    service.delete_entry("222222222")

    assert service.get_snapshot().currentEntry == a


def test_delete_with_failed_history_write_still_drops_entry(caplog) -> None:
    """A store that refuses the delete does not bring the barcode back into the session."""

    a = _entry("111111111", "A")
    b = _entry("222222222", "B")
    store = FailingWriteStore("sin-uso")
    service = _build_service(store, seed_history=[a, b])
    service.enqueue(a)
    service.enqueue(b)
    store.failing_key = HISTORY_STORAGE_KEY

    with caplog.at_level(logging.ERROR):
        service.delete_entry("111111111")

    snapshot = service.get_snapshot()
    assert snapshot.history == (b,)
    assert snapshot.currentEntry == b
    assert [slot.id for slot in snapshot.printQueue] == ["222222222"]
    assert [entry.id for entry in HistoryService(HistoryDAO(store)).get_history()] == ["111111111", "222222222"]
    assert "No fue posible eliminar" in caplog.text


def test_clear_history_cascades_to_selection_and_sheet() -> None:
    """Erasing the history also empties the sheet."""

    service = _build_service()
    entry = service.generate(None)
    service.enqueue(entry)

    service.clear_history()

    snapshot = service.get_snapshot()
    assert snapshot.history == ()
    assert snapshot.currentEntry is None
    assert snapshot.printQueue == ()


def test_queue_is_restored_in_a_new_session() -> None:
    """The sheet survives a restart of the application."""

    store = InMemoryKeyValueStore()
    service = _build_service(store)
    entry = service.generate("Persistente")
    slot = service.enqueue(entry)

    restored = _build_service(store)

    assert restored.get_snapshot().printQueue == (slot,)


def test_oversized_stored_queue_is_trimmed() -> None:
    """Stored queues beyond the sheet capacity keep only the first 20 slots."""

    store = InMemoryKeyValueStore()
    entry = _entry("333333333")
    PrintQueueDAO(store).save_slots(QueueSlotItem.from_entry(entry, f"p{index}") for index in range(25))

    service = _build_service(store)

    queue = service.get_snapshot().printQueue
    assert len(queue) == 20
    assert queue[0].printId == "p0"


def test_queue_write_failure_does_not_raise() -> None:
    """Storage faults on the sheet are logged and the in-memory state still updates."""

    store = FailingWriteStore("barcodegen_print_queue")
    service = _build_service(store)
    entry = service.generate(None)

    service.enqueue(entry)

    assert len(service.get_snapshot().printQueue) == 1


def test_prepare_print_requires_selection_or_slots() -> None:
    """Printing needs a selected barcode or a non-empty sheet."""

    service = _build_service()
    with pytest.raises(NoEntry):
        service.prepare_print(PrintMode.SINGLE)
    with pytest.raises(EmptySheet):
        service.prepare_print(PrintMode.SHEET)

    entry = service.generate("Uno")
    service.enqueue(entry)

    assert service.prepare_print(PrintMode.SINGLE) == (entry,)
    assert service.prepare_print("sheet") == (entry,)


def test_snapshot_pads_sheet_slots_to_capacity() -> None:
    """The sheet is always drawn with 20 positions."""

    service = _build_service()
    entry = service.generate(None)
    slot = service.enqueue(entry)

    slots = service.get_snapshot().sheet_slots()

    assert len(slots) == 20
    assert slots[0] == slot
    assert all(item is None for item in slots[1:])


def test_prepare_print_rejects_unknown_mode() -> None:
    """Mode names outside single and sheet are reported as session errors."""

    service = _build_service()
    service.generate(None)

    with pytest.raises(BarcodeSessionError):
        service.prepare_print("poster")
