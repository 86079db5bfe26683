"""
Commit coordination and backend collaborators.
"""

from .backend import DBAPIBackend, MutationBackend, TableDataBackend
from .coordinator import CommitCoordinator, CommitResult, CommitState, CommitStatus

__all__ = [
    "CommitCoordinator",
    "CommitResult",
    "CommitState",
    "CommitStatus",
    "MutationBackend",
    "TableDataBackend",
    "DBAPIBackend",
]
