"""Tests for the bounded EntryBuffer."""

import pytest

from logscope.core.buffer import DuplicateIdError, EntryBuffer


class TestEntryBuffer:
    """Tests for ordering, capacity and id uniqueness."""

    def test_keeps_arrival_order(self, make_entry):
        buffer = EntryBuffer(10)
        for entry_id in ("c", "a", "b"):
            buffer.append(make_entry(id=entry_id))
        assert [e.id for e in buffer] == ["c", "a", "b"]

    def test_evicts_oldest_when_full(self, make_entry):
        buffer = EntryBuffer(3)
        for i in range(5):
            buffer.append(make_entry(id=f"e{i}"))
        assert len(buffer) == 3
        assert [e.id for e in buffer.snapshot()] == ["e2", "e3", "e4"]
        assert buffer.evicted == 2

    def test_never_exceeds_capacity(self, make_entry):
        buffer = EntryBuffer(2)
        for i in range(50):
            buffer.append(make_entry(id=str(i)))
            assert len(buffer) <= 2

    def test_duplicate_id_rejected(self, make_entry):
        buffer = EntryBuffer(10)
        buffer.append(make_entry(id="x"))
        with pytest.raises(DuplicateIdError):
            buffer.append(make_entry(id="x", message="other"))
        assert len(buffer) == 1

    def test_duplicate_error_is_value_error(self):
        assert issubclass(DuplicateIdError, ValueError)

    def test_evicted_id_can_be_reused(self, make_entry):
        buffer = EntryBuffer(1)
        buffer.append(make_entry(id="x"))
        buffer.append(make_entry(id="y"))
        buffer.append(make_entry(id="x"))
        assert [e.id for e in buffer] == ["x"]

    def test_contains_by_id(self, make_entry):
        buffer = EntryBuffer(10)
        buffer.append(make_entry(id="x"))
        assert "x" in buffer
        assert "y" not in buffer

    def test_unbounded(self, make_entry):
        buffer = EntryBuffer(None)
        for i in range(2000):
            buffer.append(make_entry(id=str(i)))
        assert len(buffer) == 2000

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            EntryBuffer(0)

    def test_snapshot_is_a_copy(self, make_entry):
        buffer = EntryBuffer(10)
        buffer.append(make_entry(id="x"))
        snapshot = buffer.snapshot()
        snapshot.clear()
        assert len(buffer) == 1

    def test_clear(self, make_entry):
        buffer = EntryBuffer(10)
        buffer.append(make_entry(id="x"))
        buffer.clear()
        assert len(buffer) == 0
        assert "x" not in buffer
