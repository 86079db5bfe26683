"""
Statement synthesis.

Turns the pending changeset into ordered INSERT/UPDATE/DELETE text for the
operator to review, edit and commit.
"""

from .statements import StatementKind, classify_statement, generate_sql, render_script

__all__ = [
    "generate_sql",
    "render_script",
    "classify_statement",
    "StatementKind",
]
