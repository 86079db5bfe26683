"""
Row change variants held by the changeset.

Each tracked row carries exactly one of ``InsertChange``, ``UpdateChange``
or ``DeleteChange``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from tabledit.codec import CellValue


class ChangeKind(str, Enum):
    """Lifecycle state of a tracked row."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class CellChange:
    """One edited cell of an existing row."""

    column_index: int
    column_name: str
    old_value: CellValue
    new_value: CellValue

    def to_dict(self) -> dict[str, Any]:
        return {
            "column_index": self.column_index,
            "column_name": self.column_name,
            "old_value": self.old_value,
            "new_value": self.new_value,
        }


@dataclass
class InsertChange:
    """A row appended to the snapshot that does not exist server-side yet."""

    values: list[CellValue]
    kind: ChangeKind = field(default=ChangeKind.INSERT, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind.value, "values": list(self.values)}


@dataclass
class UpdateChange:
    """Edited cells of an existing row, at most one entry per column."""

    cell_changes: list[CellChange] = field(default_factory=list)
    kind: ChangeKind = field(default=ChangeKind.UPDATE, init=False)

    def find(self, column_index: int) -> CellChange | None:
        for change in self.cell_changes:
            if change.column_index == column_index:
                return change
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "cell_changes": [change.to_dict() for change in self.cell_changes],
        }


@dataclass
class DeleteChange:
    """An existing row marked for removal. Its values stay in the snapshot."""

    kind: ChangeKind = field(default=ChangeKind.DELETE, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind.value}


RowChange = Union[InsertChange, UpdateChange, DeleteChange]
