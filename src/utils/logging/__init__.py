"""
Logging configuration for the table editor

Provides JSON-formatted or colourised console logging, optional rotating
log files, and a context logger that stamps every line of a table session
with the table and connection it belongs to.

Usage:
    import logging

    from utils.logging import setup_logging

    # Setup logging (call once at application startup)
    setup_logging(level="INFO", log_file="~/.tabledit/tabledit.log")

    logger = logging.getLogger(__name__)
    logger.info("Generated statements", extra={"table_name": "users", "count": 3})
"""

from .config import configure_from_env, setup_logging, shutdown_logging
from .formatters import ConsoleFormatter, JSONFormatter
from .handlers import ContextLogger

__all__ = [
    "setup_logging",
    "configure_from_env",
    "shutdown_logging",
    "JSONFormatter",
    "ConsoleFormatter",
    "ContextLogger",
]
