"""
CLI command implementations.

This module contains the implementation of the two CLI commands:
- preview: Print the statements an edit document produces
- apply: Commit those statements to a PostgreSQL database
"""

import argparse
import json
import logging
import sys

import psycopg2

from utils.tracing import add_span_attributes, trace_function

from tabledit.commit import DBAPIBackend
from tabledit.config import EditorConfig
from tabledit.session import TableSession
from tabledit.synthesizer import render_script

from .document import load_document, replay

logger = logging.getLogger(__name__)

CLI_CONNECTION_ID = "cli"


def _write_output(text: str, output: str | None) -> None:
    if output:
        with open(output, 'w') as f:
            f.write(text)
        logger.info(f"Output written to {output}")
    else:
        sys.stdout.write(text)


@trace_function("cli.preview", component="cli")
def cmd_preview(args: argparse.Namespace, config: EditorConfig) -> int:
    """
    Print the pending statements for an edit document

    Args:
        args: Parsed command-line arguments
        config: Editor configuration

    Returns:
        Process exit status
    """
    document = load_document(args.input)
    session = TableSession(document.table, CLI_CONNECTION_ID, config=config)
    replay(document, session)

    pending = session.pending_statements()
    statements = pending.statements
    add_span_attributes(table=document.table, statement_count=len(statements))

    if args.format == 'json':
        payload = {
            "table": document.table,
            "primary_key": session.primary_key_column,
            "changes": session.changeset.to_dict(),
            "statements": [
                {"sql": text, "kind": kind.value, "edited": pending.is_edited(index)}
                for index, (text, kind) in enumerate(pending.items())
            ],
        }
        text = json.dumps(payload, indent=2) + "\n"
    else:
        text = render_script(statements, document.table)

    _write_output(text, args.output)
    return 0


@trace_function("cli.apply", component="cli")
def cmd_apply(args: argparse.Namespace, config: EditorConfig) -> int:
    """
    Commit the pending statements of an edit document in one transaction

    Args:
        args: Parsed command-line arguments
        config: Editor configuration

    Returns:
        Process exit status

    Raises:
        CommitFailedError: If the database rejected the batch
    """
    document = load_document(args.input)

    if args.dry_run:
        session = TableSession(document.table, CLI_CONNECTION_ID, config=config)
        replay(document, session)
        statements = session.pending_statements().statements
        logger.info(f"Dry run: {len(statements)} statement(s) not executed")
        _write_output(render_script(statements, document.table), None)
        return 0

    backend = DBAPIBackend(lambda _connection_id: psycopg2.connect(args.dsn))
    session = TableSession(
        document.table,
        CLI_CONNECTION_ID,
        backend=backend,
        config=config,
        reload_after_commit=False,
    )
    replay(document, session)

    result = session.commit()
    add_span_attributes(table=document.table, status=result.status.value)
    result.raise_for_status()

    if result.succeeded:
        print(f"Committed {len(result.statements)} statement(s) to {document.table}")
    else:
        print("No pending changes")
    return 0
