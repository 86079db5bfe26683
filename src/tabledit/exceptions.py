"""
Error kinds raised by the table editor.

Tracking and synthesis errors indicate a caller bug.
Commit failures are normally reported through a FAILED ``CommitResult``;
``CommitFailedError`` exists for callers that prefer an exception.
"""


class TableditError(Exception):
    """Base class for table editor errors."""


class InvalidArgumentError(TableditError, ValueError):
    """A row or column index, or a value, does not fit the current snapshot."""


class CommitInProgressError(TableditError):
    """A commit was requested while another one is still running."""


class CommitFailedError(TableditError):
    """The backend rejected a commit batch. The message is the backend's, verbatim."""

    def __init__(self, message: str, statements: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.statements = list(statements or [])


class EditDocumentError(InvalidArgumentError):
    """An edit document is malformed or does not match its own rows."""
