"""
Command-line interface for the table editor.

This module replays edit documents captured from a table view and turns
them into the statements the editor would commit.

Available commands:
- preview: Print the pending statements (text script or JSON)
- apply: Commit the pending statements to PostgreSQL in one transaction

Exit status: 0 on success, 1 when the database rejects the batch,
2 for a malformed edit document.
"""

import logging
import sys

from utils.logging import setup_logging, shutdown_logging
from utils.metrics import MetricsPublisher
from utils.tracing import initialize_tracing, shutdown_tracing

from tabledit.config import EditorConfig
from tabledit.exceptions import CommitFailedError, InvalidArgumentError

from .commands import cmd_apply, cmd_preview
from .document import EditDocument, load_document, replay
from .parser import create_parser

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_COMMIT_FAILED = 1
EXIT_BAD_DOCUMENT = 2


def run(argv: list[str] | None = None) -> int:
    """Parse arguments, run one command and return its exit status."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_BAD_DOCUMENT

    config = EditorConfig.from_env()
    if args.log_level:
        config.log_level = args.log_level
    if args.log_json:
        config.log_json = True

    # Setup logging
    setup_logging(level=config.log_level, log_file=config.log_file, json_format=config.log_json)
    initialize_tracing(otlp_endpoint=config.otlp_endpoint, console_export=config.trace_console)
    if config.metrics_port:
        MetricsPublisher(config.metrics_port).start()

    try:
        if args.command == 'preview':
            return cmd_preview(args, config)
        return cmd_apply(args, config)
    except CommitFailedError as e:
        logger.error(f"Commit failed: {e.message}")
        print(e.message, file=sys.stderr)
        return EXIT_COMMIT_FAILED
    except InvalidArgumentError as e:
        logger.error(f"Invalid edit document: {e}")
        print(f"error: {e}", file=sys.stderr)
        return EXIT_BAD_DOCUMENT
    finally:
        shutdown_tracing()
        shutdown_logging()


def main() -> None:
    """Main entry point for the tabledit CLI"""
    sys.exit(run())


__all__ = [
    'main',
    'run',
    'cmd_preview',
    'cmd_apply',
    'create_parser',
    'EditDocument',
    'load_document',
    'replay',
]


if __name__ == '__main__':
    main()
