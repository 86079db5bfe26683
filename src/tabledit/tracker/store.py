"""
Changeset store: the pending mutation tracker.

Holds one ``RowChange`` per modified row index of the current grid snapshot
and applies the coalescing rules:

- edits to an inserted row stay part of the insert
- edits to a deleted row are ignored
- an edit that restores a cell's original value drops that cell change, and
  an update left with no cell changes drops the row
- deleting an inserted row cancels the insert outright
"""

import logging
from collections.abc import Callable
from typing import Any, Sequence

from prometheus_client import Counter

from utils.metrics import get_or_create_metric

from tabledit.codec import CellValue, values_equal
from tabledit.exceptions import InvalidArgumentError

from .models import CellChange, ChangeKind, DeleteChange, InsertChange, RowChange, UpdateChange

logger = logging.getLogger(__name__)

CHANGESET_OPERATIONS = get_or_create_metric(
    lambda: Counter(
        "tabledit_changeset_operations_total",
        "Changeset operations applied, by operation and outcome",
        ["operation", "outcome"],
    ),
    "tabledit_changeset_operations_total",
)


class ChangesetStore:
    """
    Pending row changes for one table view session, keyed by row index.

    Row indices address the session's current grid snapshot and are only
    meaningful until the next ``revert_all()``.
    """

    def __init__(self, row_count: Callable[[], int] | None = None):
        """
        Args:
            row_count: Optional callable returning the snapshot length, used
                to reject out-of-range row indices
        """
        self._changes: dict[int, RowChange] = {}
        self._row_count = row_count
        self.epoch = 0

    def __len__(self) -> int:
        return len(self._changes)

    def __contains__(self, row_index: int) -> bool:
        return row_index in self._changes

    def _check_row_index(self, row_index: int) -> None:
        if not isinstance(row_index, int) or isinstance(row_index, bool) or row_index < 0:
            raise InvalidArgumentError(f"Invalid row index: {row_index!r}")
        if self._row_count is not None:
            count = self._row_count()
            if row_index >= count:
                raise InvalidArgumentError(
                    f"Row index {row_index} out of range for snapshot of {count} rows"
                )

    def insert_row(self, row_index: int, values: Sequence[CellValue]) -> InsertChange:
        """
        Track a row the caller has just appended to the snapshot.

        Raises:
            InvalidArgumentError: If the index is out of range or already tracked
        """
        self._check_row_index(row_index)
        if row_index in self._changes:
            raise InvalidArgumentError(
                f"Row {row_index} already has a pending {self._changes[row_index].kind.value}"
            )

        change = InsertChange(values=list(values))
        self._changes[row_index] = change
        CHANGESET_OPERATIONS.labels(operation="insert", outcome="tracked").inc()
        logger.debug(f"Tracked insert at row {row_index}")
        return change

    def update_cell(
        self,
        row_index: int,
        column_name: str,
        column_index: int,
        old_value: CellValue,
        new_value: CellValue,
    ) -> RowChange | None:
        """
        Record a cell edit and coalesce it with earlier edits of the row.

        Args:
            row_index: Row of the edited cell
            column_name: Column name of the edited cell
            column_index: Column position in the snapshot
            old_value: Value the cell held in the snapshot
            new_value: Value entered by the operator

        Returns:
            The row's change after the edit, or None if the row is unchanged
        """
        self._check_row_index(row_index)
        existing = self._changes.get(row_index)

        if isinstance(existing, InsertChange):
            if not 0 <= column_index < len(existing.values):
                raise InvalidArgumentError(
                    f"Column index {column_index} out of range for inserted row {row_index}"
                )
            existing.values[column_index] = new_value
            CHANGESET_OPERATIONS.labels(operation="update", outcome="insert_amended").inc()
            return existing

        if isinstance(existing, DeleteChange):
            logger.debug(f"Ignoring edit of row {row_index}, it is marked for deletion")
            CHANGESET_OPERATIONS.labels(operation="update", outcome="ignored").inc()
            return existing

        update = existing if isinstance(existing, UpdateChange) else UpdateChange()
        cell = update.find(column_index)

        if cell is None:
            if values_equal(new_value, old_value):
                CHANGESET_OPERATIONS.labels(operation="update", outcome="noop").inc()
                return existing
            update.cell_changes.append(CellChange(column_index, column_name, old_value, new_value))
        elif values_equal(new_value, cell.old_value):
            update.cell_changes.remove(cell)
        else:
            cell.new_value = new_value

        if not update.cell_changes:
            self._changes.pop(row_index, None)
            CHANGESET_OPERATIONS.labels(operation="update", outcome="reverted").inc()
            logger.debug(f"Row {row_index} reverted to its original values")
            return None

        self._changes[row_index] = update
        CHANGESET_OPERATIONS.labels(operation="update", outcome="tracked").inc()
        return update

    def delete_row(self, row_index: int) -> RowChange | None:
        """
        Mark a row for deletion.

        An inserted row is dropped from the changeset instead (it never
        existed server-side); the caller removes it from the snapshot.

        Returns:
            The DeleteChange, or None when an insert was cancelled
        """
        self._check_row_index(row_index)
        existing = self._changes.get(row_index)

        if isinstance(existing, InsertChange):
            del self._changes[row_index]
            CHANGESET_OPERATIONS.labels(operation="delete", outcome="insert_cancelled").inc()
            logger.debug(f"Cancelled pending insert at row {row_index}")
            return None

        change = DeleteChange()
        self._changes[row_index] = change
        CHANGESET_OPERATIONS.labels(operation="delete", outcome="tracked").inc()
        return change

    def get_row_state(self, row_index: int) -> RowChange | None:
        return self._changes.get(row_index)

    def cell_changed(self, row_index: int, column_index: int) -> bool:
        """True if the cell carries a pending update (for highlighting)."""
        change = self._changes.get(row_index)
        return isinstance(change, UpdateChange) and change.find(column_index) is not None

    def has_changes(self) -> bool:
        return bool(self._changes)

    def entries(self) -> list[tuple[int, RowChange]]:
        """Tracked changes in ascending row index order."""
        return sorted(self._changes.items())

    def counts(self) -> dict[ChangeKind, int]:
        counts = {kind: 0 for kind in ChangeKind}
        for change in self._changes.values():
            counts[change.kind] += 1
        return counts

    def compact_after_removal(self, row_index: int) -> None:
        """
        Shift entries above a removed snapshot row down by one.

        Called after a cancelled insert's row is removed from the snapshot so
        later inserted rows keep addressing their own rows.
        """
        if row_index in self._changes:
            raise InvalidArgumentError(f"Row {row_index} still has a pending change")

        self._changes = {
            (index - 1 if index > row_index else index): change
            for index, change in self._changes.items()
        }

    def revert_all(self) -> None:
        """Drop every pending change."""
        if self._changes:
            logger.debug(f"Discarding {len(self._changes)} pending change(s)")
        self._changes.clear()
        self.epoch += 1

    def to_dict(self) -> dict[str, Any]:
        return {str(index): change.to_dict() for index, change in self.entries()}
