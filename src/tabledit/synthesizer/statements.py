"""
SQL statement synthesis from the changeset.

Generates one INSERT, UPDATE or DELETE per tracked row, in ascending row
order, against the current grid snapshot. Rows are addressed by the primary
key when one is known, otherwise by matching every column's original value.
A full-row match may hit zero or several identical rows; that cannot be
detected locally and is left to the backend.
"""

import logging
from datetime import UTC, datetime
from enum import Enum
from typing import Sequence

from opentelemetry import trace
from prometheus_client import Counter

from utils.metrics import get_or_create_metric
from utils.sql_safety import quote_identifier
from utils.tracing import trace_operation

from tabledit.codec import CellValue, to_sql_literal
from tabledit.exceptions import InvalidArgumentError
from tabledit.tracker import ChangesetStore, DeleteChange, InsertChange, UpdateChange

logger = logging.getLogger(__name__)

STATEMENTS_GENERATED = get_or_create_metric(
    lambda: Counter(
        "tabledit_statements_generated_total",
        "SQL statements synthesized from pending changes",
        ["kind"],
    ),
    "tabledit_statements_generated_total",
)


class StatementKind(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    OTHER = "OTHER"


def classify_statement(sql: str) -> StatementKind:
    """Kind of a (possibly operator-edited) statement, by its leading keyword."""
    words = sql.lstrip().split(None, 1)
    if not words:
        return StatementKind.OTHER
    keyword = words[0].upper()
    for kind in (StatementKind.INSERT, StatementKind.UPDATE, StatementKind.DELETE):
        if keyword == kind.value:
            return kind
    return StatementKind.OTHER


def generate_sql(
    changeset: ChangesetStore,
    snapshot_rows: Sequence[Sequence[CellValue]],
    table_name: str,
    column_names: Sequence[str],
    primary_key_column: str | None = None,
) -> list[str]:
    """
    Generate the statements that apply the pending changes.

    Args:
        changeset: Pending changes keyed by snapshot row index
        snapshot_rows: Rows of the current snapshot (original values)
        table_name: Target table
        column_names: Column names in grid order
        primary_key_column: Single-column primary key, if known

    Returns:
        One statement per changeset entry, in ascending row index order
    """
    with trace_operation(
        "generate_sql",
        kind=trace.SpanKind.INTERNAL,
        table=table_name,
        entry_count=len(changeset),
    ):
        pk_index = _resolve_primary_key(column_names, primary_key_column)
        statements = []

        for row_index, change in changeset.entries():
            if isinstance(change, InsertChange):
                statement = _generate_insert_sql(table_name, column_names, change.values)
            else:
                original = _snapshot_row(snapshot_rows, row_index, len(column_names))
                where_clause = _build_predicate(column_names, original, pk_index)

                if isinstance(change, UpdateChange):
                    statement = _generate_update_sql(table_name, change, where_clause)
                elif isinstance(change, DeleteChange):
                    statement = _generate_delete_sql(table_name, where_clause)
                else:
                    raise InvalidArgumentError(f"Unknown change at row {row_index}: {change!r}")

            STATEMENTS_GENERATED.labels(kind=change.kind.name).inc()
            statements.append(statement)

        logger.debug(f"Generated {len(statements)} statement(s) for {table_name}")
        return statements


def render_script(statements: Sequence[str], table_name: str) -> str:
    """
    Render statements as the preview text shown before commit.

    One statement per line after a short comment header.
    """
    lines = [
        f"-- Pending changes for {table_name}",
        f"-- Generated: {datetime.now(UTC).isoformat()}",
        f"-- Statements: {len(statements)}",
        "",
    ]
    lines.extend(statements)
    return "\n".join(lines) + "\n"


def _resolve_primary_key(column_names: Sequence[str], primary_key_column: str | None) -> int | None:
    if primary_key_column is None:
        return None
    try:
        return list(column_names).index(primary_key_column)
    except ValueError:
        logger.warning(
            f"Primary key column {primary_key_column!r} is not among the grid columns, "
            "falling back to full-row matching"
        )
        return None


def _snapshot_row(
    snapshot_rows: Sequence[Sequence[CellValue]], row_index: int, width: int
) -> Sequence[CellValue]:
    if not 0 <= row_index < len(snapshot_rows):
        raise InvalidArgumentError(
            f"Row index {row_index} out of range for snapshot of {len(snapshot_rows)} rows"
        )
    row = snapshot_rows[row_index]
    if len(row) != width:
        raise InvalidArgumentError(
            f"Snapshot row {row_index} has {len(row)} values for {width} columns"
        )
    return row


def _match_condition(column_name: str, value: CellValue) -> str:
    if value is None:
        return f"{quote_identifier(column_name)} IS NULL"
    return f"{quote_identifier(column_name)} = {to_sql_literal(value)}"


def _build_predicate(
    column_names: Sequence[str], original: Sequence[CellValue], pk_index: int | None
) -> str:
    """WHERE predicate addressing one snapshot row."""
    if pk_index is not None:
        return _match_condition(column_names[pk_index], original[pk_index])

    return " AND ".join(
        _match_condition(name, value) for name, value in zip(column_names, original)
    )


def _generate_insert_sql(
    table: str, column_names: Sequence[str], values: Sequence[CellValue]
) -> str:
    """Generate INSERT statement."""
    if len(values) != len(column_names):
        raise InvalidArgumentError(
            f"Inserted row has {len(values)} values for {len(column_names)} columns"
        )

    columns_str = ", ".join(quote_identifier(col) for col in column_names)
    values_str = ", ".join(to_sql_literal(value) for value in values)

    return f"INSERT INTO {quote_identifier(table)} ({columns_str}) VALUES ({values_str});"


def _generate_update_sql(table: str, change: UpdateChange, where_clause: str) -> str:
    """Generate UPDATE statement."""
    set_clause = ", ".join(
        f"{quote_identifier(cell.column_name)}={to_sql_literal(cell.new_value)}"
        for cell in change.cell_changes
    )
    return f"UPDATE {quote_identifier(table)} SET {set_clause} WHERE {where_clause};"


def _generate_delete_sql(table: str, where_clause: str) -> str:
    """Generate DELETE statement."""
    return f"DELETE FROM {quote_identifier(table)} WHERE {where_clause};"
