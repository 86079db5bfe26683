"""
Grid snapshot and page request models.
"""

from dataclasses import dataclass, field
from typing import Any, Sequence

from utils.sql_safety import validate_integer_param

from tabledit.codec import CellValue
from tabledit.config import DEFAULT_PAGE_SIZE
from tabledit.exceptions import InvalidArgumentError

SORT_DIRECTIONS = ("ASC", "DESC")


@dataclass
class GridSnapshot:
    """
    One loaded page of a table, holding original (pre-edit) values.

    Rows at or past ``loaded_row_count`` were appended locally for pending
    inserts; only those may be removed again.
    """

    columns: list[str]
    rows: list[list[CellValue]]
    loaded_row_count: int | None = None
    total_count: int | None = None
    execution_time_ms: float | None = None

    def __post_init__(self):
        self.columns = list(self.columns)
        self.rows = [list(row) for row in self.rows]
        for index, row in enumerate(self.rows):
            if len(row) != len(self.columns):
                raise InvalidArgumentError(
                    f"Row {index} has {len(row)} values for {len(self.columns)} columns"
                )
        if self.loaded_row_count is None:
            self.loaded_row_count = len(self.rows)

    @classmethod
    def from_result(cls, result: dict[str, Any], total_count: int | None = None) -> "GridSnapshot":
        """Build from a backend result ``{"columns": [...], "rows": [[...]], ...}``."""
        if "columns" not in result:
            raise InvalidArgumentError("Backend result has no columns")
        return cls(
            columns=result["columns"],
            rows=result.get("rows") or [],
            total_count=total_count if total_count is not None else result.get("total_count"),
            execution_time_ms=result.get("execution_time_ms"),
        )

    @classmethod
    def empty(cls) -> "GridSnapshot":
        return cls(columns=[], rows=[])

    def __len__(self) -> int:
        return len(self.rows)

    def column_index(self, column: str | int) -> int:
        """Resolve a column name or position to a position."""
        if isinstance(column, int) and not isinstance(column, bool):
            if not 0 <= column < len(self.columns):
                raise InvalidArgumentError(f"Column index {column} out of range")
            return column
        try:
            return self.columns.index(column)
        except ValueError:
            raise InvalidArgumentError(f"Unknown column: {column!r}") from None

    def row(self, row_index: int) -> list[CellValue]:
        if not isinstance(row_index, int) or not 0 <= row_index < len(self.rows):
            raise InvalidArgumentError(f"Row index {row_index!r} out of range")
        return self.rows[row_index]

    def value(self, row_index: int, column_index: int) -> CellValue:
        return self.row(row_index)[self.column_index(column_index)]

    def append_row(self, values: Sequence[CellValue]) -> int:
        """Append a locally inserted row; returns its index."""
        if len(values) != len(self.columns):
            raise InvalidArgumentError(
                f"Row has {len(values)} values for {len(self.columns)} columns"
            )
        self.rows.append(list(values))
        return len(self.rows) - 1

    def remove_row(self, row_index: int) -> None:
        """Remove a locally inserted row."""
        self.row(row_index)
        if row_index < self.loaded_row_count:
            raise InvalidArgumentError(f"Row {row_index} was loaded from the backend")
        del self.rows[row_index]

    def drop_appended_rows(self) -> None:
        del self.rows[self.loaded_row_count:]


@dataclass
class PageRequest:
    """Paging, sorting and filtering of the rows to load."""

    offset: int = 0
    limit: int = DEFAULT_PAGE_SIZE
    sort_column: str | None = None
    sort_direction: str = "ASC"
    filters: list[dict[str, Any]] = field(default_factory=list)

    def __post_init__(self):
        try:
            validate_integer_param(self.offset, "offset")
            validate_integer_param(self.limit, "limit", min_value=1)
        except ValueError as e:
            raise InvalidArgumentError(str(e)) from e
        self.sort_direction = self.sort_direction.upper()
        if self.sort_direction not in SORT_DIRECTIONS:
            raise InvalidArgumentError(f"Invalid sort direction: {self.sort_direction!r}")

    def active_filters(self) -> list[dict[str, Any]]:
        return [f for f in self.filters if f.get("enabled", True)]
