"""
Command-line argument parser configuration.

This module sets up the argument parser for the tabledit CLI tool,
defining all commands and their options.
"""

import argparse


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="tabledit",
        description="Replay table edits and turn them into INSERT/UPDATE/DELETE statements",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show the statements an edit document produces
  tabledit preview --input edits.json

  # Same, as JSON with the pending changes, written to a file
  tabledit preview --input edits.json --format json --output pending.json

  # Commit the statements in one transaction
  tabledit apply --input edits.json --dsn "postgresql://app@localhost/appdb"

  # Print what would be committed without connecting
  tabledit apply --input edits.json --dsn "postgresql://app@localhost/appdb" --dry-run
        """
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default=None,
        help='Logging level (default: LOG_LEVEL or INFO)'
    )
    parser.add_argument(
        '--log-json',
        action='store_true',
        help='Emit logs as JSON lines'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # ========== Preview command ==========
    preview_parser = subparsers.add_parser('preview', help='Print the pending statements')
    preview_parser.add_argument(
        '--input',
        required=True,
        help='Edit document (JSON)'
    )
    preview_parser.add_argument(
        '--format',
        choices=['text', 'json'],
        default='text',
        help='Output format (default: text)'
    )
    preview_parser.add_argument(
        '--output',
        help='Write to this file instead of stdout'
    )

    # ========== Apply command ==========
    apply_parser = subparsers.add_parser('apply', help='Commit the pending statements')
    apply_parser.add_argument(
        '--input',
        required=True,
        help='Edit document (JSON)'
    )
    apply_parser.add_argument(
        '--dsn',
        required=True,
        help='PostgreSQL connection string'
    )
    apply_parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Print the statements without executing them'
    )

    return parser
