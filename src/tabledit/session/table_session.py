"""
Table view session.

Ties one loaded grid snapshot to its changeset. Every snapshot replacement
(page change, sort, filter, refresh, successful commit) clears the changeset
before any further edit is accepted, so row indices from an older snapshot
are never reused.
"""

from typing import Any, Sequence

from opentelemetry import trace

from utils.logging import ContextLogger
from utils.tracing import add_span_event, trace_operation

from tabledit.codec import CellValue, format_row_csv, format_row_insert, from_edit_text, to_edit_text
from tabledit.commit import CommitCoordinator, CommitResult, CommitStatus
from tabledit.config import EditorConfig
from tabledit.exceptions import InvalidArgumentError, TableditError
from tabledit.synthesizer import generate_sql
from tabledit.tracker import ChangesetStore, InsertChange, RowChange, UpdateChange

from .pending import PendingStatements
from .snapshot import GridSnapshot, PageRequest


class TableSession:
    """
    Edit session for one table view.

    Owns the snapshot, the changeset and the commit coordinator; none of
    them is shared with another view.
    """

    def __init__(
        self,
        table_name: str,
        connection_id: str,
        backend: Any = None,
        page_size: int | None = None,
        primary_key_column: str | None = None,
        reload_after_commit: bool = True,
        config: EditorConfig | None = None,
    ):
        """
        Args:
            table_name: Table shown in the view
            connection_id: Backend connection the table belongs to
            backend: Implements MutationBackend and, for paging, TableDataBackend
            page_size: Rows per page (default from config)
            primary_key_column: Single-column primary key, if already known
            reload_after_commit: Reload the page after a successful commit
            config: Editor configuration (default: from environment)
        """
        config = config or EditorConfig.from_env()
        self.table_name = table_name
        self.connection_id = connection_id
        self.backend = backend
        self.primary_key_column = primary_key_column
        self.reload_after_commit = reload_after_commit
        self.page = PageRequest(limit=page_size or config.page_size)
        self.snapshot = GridSnapshot.empty()
        self.changeset = ChangesetStore(row_count=lambda: len(self.snapshot))
        self.pending = PendingStatements()
        self.coordinator = (
            CommitCoordinator(backend, self.changeset, connection_id) if backend is not None else None
        )
        self.stale = False
        self.log = ContextLogger(__name__, table_name=table_name, connection_id=connection_id)

    # ---------- loading ----------

    def open(self) -> GridSnapshot:
        """Detect the primary key and load the first page."""
        self.load_primary_key()
        return self.refresh()

    def load_primary_key(self) -> str | None:
        """
        Look up the primary key column from the table structure.

        Failures are logged and leave the key unknown; statements then fall
        back to full-row matching.
        """
        try:
            structure = self.backend.get_table_structure(self.connection_id, self.table_name)
        except Exception as e:
            self.log.error(f"Failed to fetch table structure: {e}")
            return self.primary_key_column

        for column in (structure or {}).get("columns", []):
            if column.get("is_primary_key"):
                self.primary_key_column = column["name"]
                break
        self.log.debug(f"Primary key column: {self.primary_key_column}")
        return self.primary_key_column

    def replace_snapshot(self, snapshot: GridSnapshot) -> None:
        """Install a new snapshot; pending changes never survive this."""
        if self.changeset.has_changes():
            self.log.info(f"Discarding {len(self.changeset)} pending change(s) on reload")
            add_span_event("changeset_cleared", entries=len(self.changeset))
        self.changeset.revert_all()
        self.pending.clear()
        self.snapshot = snapshot
        self.stale = False

    def refresh(self) -> GridSnapshot:
        """
        Reload the current page from the backend.

        If loading fails the current snapshot and changeset are kept and the
        error propagates.
        """
        page = self.page
        with trace_operation(
            "reload_page",
            kind=trace.SpanKind.CLIENT,
            table=self.table_name,
            offset=page.offset,
            limit=page.limit,
        ):
            filters = page.active_filters()
            result = self.backend.get_table_data(
                self.connection_id,
                self.table_name,
                limit=page.limit,
                offset=page.offset,
                filters=filters,
                sort_column=page.sort_column,
                sort_direction=page.sort_direction if page.sort_column else None,
            )
            count = self.backend.get_table_count(self.connection_id, self.table_name, filters)
            self.replace_snapshot(GridSnapshot.from_result(result, total_count=count))

        self.log.debug(f"Loaded {len(self.snapshot)} row(s) at offset {page.offset}")
        return self.snapshot

    def _reload_with(self, page: PageRequest) -> GridSnapshot:
        previous = self.page
        self.page = page
        try:
            return self.refresh()
        except Exception:
            self.page = previous
            raise

    def next_page(self) -> bool:
        """Move one page forward; False if already on the last known page."""
        offset = self.page.offset + self.page.limit
        total = self.snapshot.total_count
        if total is not None and offset >= total:
            return False
        self._reload_with(PageRequest(offset, self.page.limit, self.page.sort_column,
                                      self.page.sort_direction, self.page.filters))
        return True

    def previous_page(self) -> bool:
        """Move one page back; False if already on the first page."""
        offset = max(0, self.page.offset - self.page.limit)
        if offset == self.page.offset:
            return False
        self._reload_with(PageRequest(offset, self.page.limit, self.page.sort_column,
                                      self.page.sort_direction, self.page.filters))
        return True

    def toggle_sort(self, column: str) -> PageRequest:
        """Cycle sorting on a column: ascending, descending, then unsorted."""
        if column not in self.snapshot.columns:
            raise InvalidArgumentError(f"Unknown column: {column!r}")

        if self.page.sort_column != column:
            sort_column, direction = column, "ASC"
        elif self.page.sort_direction == "ASC":
            sort_column, direction = column, "DESC"
        else:
            sort_column, direction = None, "ASC"

        self._reload_with(PageRequest(self.page.offset, self.page.limit, sort_column,
                                      direction, self.page.filters))
        return self.page

    def set_filters(self, filters: list[dict[str, Any]]) -> None:
        """Apply filters and reload from the first page."""
        self._reload_with(PageRequest(0, self.page.limit, self.page.sort_column,
                                      self.page.sort_direction, list(filters)))

    # ---------- editing ----------

    def cell_value(self, row_index: int, column: str | int) -> CellValue:
        """Value currently displayed for a cell, pending edits included."""
        column_index = self.snapshot.column_index(column)
        original = self.snapshot.value(row_index, column_index)
        change = self.changeset.get_row_state(row_index)
        if isinstance(change, InsertChange):
            return change.values[column_index]
        if isinstance(change, UpdateChange):
            cell = change.find(column_index)
            if cell is not None:
                return cell.new_value
        return original

    def row_values(self, row_index: int) -> list[CellValue]:
        return [self.cell_value(row_index, i) for i in range(len(self.snapshot.columns))]

    def edit_text(self, row_index: int, column: str | int) -> str:
        """Text to seed the cell editor with."""
        return to_edit_text(self.cell_value(row_index, column))

    def edit_cell(self, row_index: int, column: str | int, text: str) -> RowChange | None:
        """Apply text typed into a cell editor, coerced to the cell's original type."""
        column_index = self.snapshot.column_index(column)
        original = self.snapshot.value(row_index, column_index)
        return self.set_cell(row_index, column_index, from_edit_text(text, original))

    def set_cell(self, row_index: int, column: str | int, value: CellValue) -> RowChange | None:
        column_index = self.snapshot.column_index(column)
        original = self.snapshot.value(row_index, column_index)
        return self.changeset.update_cell(
            row_index, self.snapshot.columns[column_index], column_index, original, value
        )

    def add_row(self, values: Sequence[CellValue] | None = None) -> int:
        """Append a new row (all NULL by default) and track it as an insert."""
        if not self.snapshot.columns:
            raise InvalidArgumentError("Cannot add a row before a page is loaded")
        if values is None:
            values = [None] * len(self.snapshot.columns)
        row_index = self.snapshot.append_row(values)
        self.changeset.insert_row(row_index, values)
        self.log.debug("Row added", row_index=row_index)
        return row_index

    def duplicate_row(self, row_index: int) -> int:
        """Append a copy of a row's displayed values as a new insert."""
        return self.add_row(self.row_values(row_index))

    def delete_row(self, row_index: int) -> RowChange | None:
        """
        Mark a row for deletion, or cancel it if it is a pending insert.

        A cancelled insert's row is removed from the snapshot and later
        inserted rows move up by one.
        """
        was_insert = isinstance(self.changeset.get_row_state(row_index), InsertChange)
        change = self.changeset.delete_row(row_index)
        if was_insert:
            self.snapshot.remove_row(row_index)
            self.changeset.compact_after_removal(row_index)
        self.log.debug("Row deleted", row_index=row_index, cancelled_insert=was_insert)
        return change

    def discard(self) -> None:
        """Throw away every pending change, including added rows."""
        self.log.info(f"Discarding {len(self.changeset)} pending change(s)")
        self.changeset.revert_all()
        self.snapshot.drop_appended_rows()
        self.pending.clear()

    def has_changes(self) -> bool:
        return self.changeset.has_changes()

    def copy_row_csv(self, row_index: int) -> str:
        return format_row_csv(self.row_values(row_index))

    def copy_row_sql(self, row_index: int) -> str:
        return format_row_insert(self.table_name, self.snapshot.columns, self.row_values(row_index))

    # ---------- statements & commit ----------

    def statements(self) -> list[str]:
        """Statements synthesized from the pending changes."""
        return generate_sql(
            self.changeset,
            self.snapshot.rows,
            self.table_name,
            self.snapshot.columns,
            self.primary_key_column,
        )

    def pending_statements(self) -> PendingStatements:
        """Pending statements, re-synced with the current changes."""
        self.pending.sync(self.statements())
        return self.pending

    @property
    def is_committing(self) -> bool:
        return self.coordinator is not None and self.coordinator.is_committing

    def commit(self, statements: Sequence[str] | None = None) -> CommitResult:
        """
        Commit the given text, or the pending (possibly edited) statements.

        On success the page is reloaded when ``reload_after_commit`` is set.
        A reload failure is logged and leaves the session marked ``stale``.
        """
        if self.coordinator is None:
            raise TableditError("No backend configured for this session")

        if statements is None:
            statements = self.pending_statements().statements

        result = self.coordinator.commit(statements)
        if result.status == CommitStatus.FAILED:
            self.log.warning(f"Commit failed, {len(self.changeset)} change(s) kept for retry")
        if not result.succeeded:
            return result

        self.pending.clear()
        if result.changeset_cleared:
            self.snapshot.drop_appended_rows()
            self.stale = True

        if self.reload_after_commit:
            try:
                self.refresh()
            except Exception as e:
                self.log.error(f"Reload after commit failed: {e}", exc_info=True)
        return result
