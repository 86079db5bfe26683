"""
Pending mutation tracking for a paged table snapshot.

Tracks inserted, updated and deleted rows by their index in the current
snapshot, coalescing repeated edits so that reverting a cell by hand leaves
no trace.
"""

from .models import CellChange, ChangeKind, DeleteChange, InsertChange, RowChange, UpdateChange
from .store import ChangesetStore

__all__ = [
    "ChangesetStore",
    "ChangeKind",
    "CellChange",
    "InsertChange",
    "UpdateChange",
    "DeleteChange",
    "RowChange",
]
