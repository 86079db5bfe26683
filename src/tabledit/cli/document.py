"""
Edit documents.

An edit document captures one loaded page and the edits an operator made to
it, so a session can be replayed outside the desktop client:

    {
      "table": "users",
      "columns": ["id", "name", "age"],
      "primary_key": "id",
      "rows": [[1, "Ann", 30]],
      "edits": [
        {"op": "update", "row": 0, "column": "age", "text": "31"},
        {"op": "insert", "values": [null, "Bob", 22]},
        {"op": "duplicate", "row": 0},
        {"op": "delete", "row": 0}
      ],
      "overrides": {"0": "UPDATE ..."}
    }
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from tabledit.exceptions import EditDocumentError, InvalidArgumentError
from tabledit.session import GridSnapshot, TableSession

logger = logging.getLogger(__name__)

EDIT_OPERATIONS = ("update", "insert", "duplicate", "delete")


@dataclass
class EditDocument:
    table: str
    columns: list[str]
    rows: list[list[Any]]
    edits: list[dict[str, Any]] = field(default_factory=list)
    primary_key: str | None = None
    overrides: dict[int, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "EditDocument":
        if not isinstance(data, dict):
            raise EditDocumentError("Edit document must be a JSON object")

        for key in ("table", "columns", "rows"):
            if key not in data:
                raise EditDocumentError(f"Edit document is missing '{key}'")
        if not isinstance(data["table"], str) or not data["table"]:
            raise EditDocumentError("'table' must be a non-empty string")
        if not isinstance(data["columns"], list) or not all(isinstance(c, str) for c in data["columns"]):
            raise EditDocumentError("'columns' must be a list of column names")
        if not isinstance(data["rows"], list) or not all(isinstance(r, list) for r in data["rows"]):
            raise EditDocumentError("'rows' must be a list of rows")

        edits = data.get("edits", [])
        if not isinstance(edits, list):
            raise EditDocumentError("'edits' must be a list")
        for position, edit in enumerate(edits):
            if not isinstance(edit, dict) or edit.get("op") not in EDIT_OPERATIONS:
                raise EditDocumentError(
                    f"Edit {position} must be an object with 'op' in {', '.join(EDIT_OPERATIONS)}"
                )

        overrides = {}
        for key, text in (data.get("overrides") or {}).items():
            try:
                overrides[int(key)] = text
            except ValueError:
                raise EditDocumentError(f"Override key {key!r} is not a statement index") from None
            if not isinstance(text, str):
                raise EditDocumentError(f"Override {key} must be statement text")

        return cls(
            table=data["table"],
            columns=data["columns"],
            rows=data["rows"],
            edits=edits,
            primary_key=data.get("primary_key"),
            overrides=overrides,
        )


def load_document(path: str) -> EditDocument:
    """Read and validate an edit document from a JSON file."""
    try:
        with open(path) as f:
            data = json.load(f)
    except OSError as e:
        raise EditDocumentError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise EditDocumentError(f"{path} is not valid JSON: {e}") from e
    return EditDocument.from_dict(data)


def replay(document: EditDocument, session: TableSession) -> None:
    """
    Load the document's rows into the session and apply its edits in order.

    Operator overrides are applied to the pending statements last.
    """
    try:
        session.replace_snapshot(GridSnapshot(columns=document.columns, rows=document.rows))
    except InvalidArgumentError as e:
        raise EditDocumentError(str(e)) from e
    if document.primary_key is not None:
        session.primary_key_column = document.primary_key

    for position, edit in enumerate(document.edits):
        try:
            _apply_edit(session, edit)
        except (InvalidArgumentError, KeyError, TypeError, AttributeError) as e:
            raise EditDocumentError(f"Edit {position} ({edit.get('op')}) failed: {e}") from e

    logger.info(
        f"Replayed {len(document.edits)} edit(s) on {document.table}: "
        f"{len(session.changeset)} pending change(s)"
    )

    if document.overrides:
        pending = session.pending_statements()
        for index, text in sorted(document.overrides.items()):
            pending.edit(index, text)


def _apply_edit(session: TableSession, edit: dict[str, Any]) -> None:
    op = edit["op"]
    if op == "update":
        if "text" in edit:
            session.edit_cell(edit["row"], edit["column"], edit["text"])
        else:
            session.set_cell(edit["row"], edit["column"], edit["value"])
    elif op == "insert":
        session.add_row(edit.get("values"))
    elif op == "duplicate":
        session.duplicate_row(edit["row"])
    elif op == "delete":
        session.delete_row(edit["row"])
