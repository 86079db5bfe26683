"""
Unit tests for the changeset store.

Tests insert/update/delete tracking and the coalescing rules between them.
"""

import pytest

from tabledit.exceptions import InvalidArgumentError
from tabledit.tracker import (
    CellChange,
    ChangeKind,
    ChangesetStore,
    DeleteChange,
    InsertChange,
    UpdateChange,
)


class TestUpdateCell:
    """Test update_cell coalescing"""

    def setup_method(self):
        """Set up test fixtures."""
        self.store = ChangesetStore(row_count=lambda: 5)

    def test_first_edit_creates_update(self):
        change = self.store.update_cell(2, "age", 2, 30, 31.0)

        assert isinstance(change, UpdateChange)
        assert change.cell_changes == [CellChange(2, "age", 30, 31.0)]
        assert self.store.has_changes()

    def test_edit_to_same_value_is_noop(self):
        assert self.store.update_cell(2, "age", 2, 30, 30.0) is None
        assert not self.store.has_changes()

    def test_revert_by_hand_clears_row(self):
        self.store.update_cell(2, "age", 2, 30, 31.0)
        result = self.store.update_cell(2, "age", 2, 30, 30.0)

        assert result is None
        assert self.store.get_row_state(2) is None
        assert not self.store.has_changes()

    def test_repeated_edit_keeps_first_old_value(self):
        self.store.update_cell(0, "name", 1, "Bob", "Rob")
        change = self.store.update_cell(0, "name", 1, "Rob", "Robert")

        cell = change.find(1)
        assert cell.old_value == "Bob"
        assert cell.new_value == "Robert"
        assert len(change.cell_changes) == 1

    def test_reverting_one_of_two_cells_keeps_the_other(self):
        self.store.update_cell(0, "name", 1, "Bob", "Rob")
        self.store.update_cell(0, "age", 2, 41, 42.0)
        change = self.store.update_cell(0, "name", 1, "Bob", "Bob")

        assert [cell.column_name for cell in change.cell_changes] == ["age"]

    def test_cell_changes_keep_edit_order(self):
        self.store.update_cell(0, "age", 2, 41, 42.0)
        change = self.store.update_cell(0, "name", 1, "Bob", "Rob")

        assert [cell.column_index for cell in change.cell_changes] == [2, 1]

    def test_bool_edit_is_not_equal_to_number(self):
        change = self.store.update_cell(0, "flag", 0, 1, True)

        assert isinstance(change, UpdateChange)

    def test_edit_inserted_row_amends_insert(self):
        self.store.insert_row(4, [None, None, None])
        change = self.store.update_cell(4, "name", 1, None, "Alice")

        assert isinstance(change, InsertChange)
        assert change.values == [None, "Alice", None]
        assert self.store.counts()[ChangeKind.UPDATE] == 0

    def test_edit_inserted_row_column_out_of_range(self):
        self.store.insert_row(4, [None, None])

        with pytest.raises(InvalidArgumentError):
            self.store.update_cell(4, "x", 5, None, "a")

    def test_edit_deleted_row_is_ignored(self):
        self.store.delete_row(1)
        change = self.store.update_cell(1, "name", 1, "Carol", "Caz")

        assert isinstance(change, DeleteChange)
        assert isinstance(self.store.get_row_state(1), DeleteChange)

    def test_row_index_out_of_range(self):
        with pytest.raises(InvalidArgumentError):
            self.store.update_cell(5, "age", 2, 1, 2)

    @pytest.mark.parametrize("row_index", [-1, True, "1", 1.0])
    def test_invalid_row_index(self, row_index):
        with pytest.raises(InvalidArgumentError):
            self.store.update_cell(row_index, "age", 2, 1, 2)


class TestInsertAndDelete:
    """Test insert_row and delete_row"""

    def setup_method(self):
        """Set up test fixtures."""
        self.store = ChangesetStore()

    def test_insert_tracks_copy_of_values(self):
        values = [None, "Alice", 28]
        change = self.store.insert_row(3, values)
        values[1] = "changed"

        assert change.values == [None, "Alice", 28]
        assert change.kind == ChangeKind.INSERT

    def test_insert_twice_rejected(self):
        self.store.insert_row(3, [1])

        with pytest.raises(InvalidArgumentError):
            self.store.insert_row(3, [2])

    def test_delete_existing_row(self):
        change = self.store.delete_row(1)

        assert isinstance(change, DeleteChange)
        assert 1 in self.store

    def test_delete_replaces_update(self):
        self.store.update_cell(1, "name", 1, "Carol", "Caz")
        self.store.delete_row(1)

        assert isinstance(self.store.get_row_state(1), DeleteChange)
        assert len(self.store) == 1

    def test_delete_inserted_row_cancels_insert(self):
        self.store.insert_row(3, [None, "Alice", 28])

        assert self.store.delete_row(3) is None
        assert not self.store.has_changes()

    def test_delete_is_idempotent(self):
        self.store.delete_row(1)
        self.store.delete_row(1)

        assert self.store.counts()[ChangeKind.DELETE] == 1


class TestQueries:
    """Test read-side helpers"""

    def setup_method(self):
        """Set up test fixtures."""
        self.store = ChangesetStore()
        self.store.delete_row(4)
        self.store.insert_row(6, [None])
        self.store.update_cell(0, "name", 1, "Bob", "Rob")

    def test_entries_sorted_by_row(self):
        assert [index for index, _ in self.store.entries()] == [0, 4, 6]

    def test_counts(self):
        assert self.store.counts() == {
            ChangeKind.INSERT: 1,
            ChangeKind.UPDATE: 1,
            ChangeKind.DELETE: 1,
        }

    def test_cell_changed(self):
        assert self.store.cell_changed(0, 1)
        assert not self.store.cell_changed(0, 2)
        assert not self.store.cell_changed(4, 1)

    def test_to_dict(self):
        result = self.store.to_dict()

        assert result["4"] == {"type": "delete"}
        assert result["6"] == {"type": "insert", "values": [None]}
        assert result["0"]["cell_changes"][0]["new_value"] == "Rob"

    def test_revert_all_clears_and_bumps_epoch(self):
        epoch = self.store.epoch
        self.store.revert_all()

        assert not self.store.has_changes()
        assert self.store.epoch == epoch + 1


class TestCompactAfterRemoval:
    """Test compact_after_removal"""

    def test_shifts_later_entries(self):
        store = ChangesetStore()
        store.insert_row(3, ["a"])
        store.insert_row(4, ["b"])
        store.insert_row(5, ["c"])
        store.delete_row(4)

        store.compact_after_removal(4)

        assert [(i, c.values) for i, c in store.entries()] == [(3, ["a"]), (4, ["c"])]

    def test_removed_row_still_tracked(self):
        store = ChangesetStore()
        store.insert_row(3, ["a"])

        with pytest.raises(InvalidArgumentError):
            store.compact_after_removal(3)
