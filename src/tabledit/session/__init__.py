"""
Table view sessions: snapshot, pending changes and commit for one table.
"""

from .pending import PendingStatements
from .snapshot import GridSnapshot, PageRequest
from .table_session import TableSession

__all__ = [
    "TableSession",
    "GridSnapshot",
    "PageRequest",
    "PendingStatements",
]
