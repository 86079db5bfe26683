"""
Logger wrappers.

Provides ContextLogger, used by table sessions to stamp every log line with
the table name and connection it refers to.
"""

import logging
from typing import Any


class ContextLogger:
    """
    Logger wrapper that adds bound context to all log messages

    Usage:
        logger = ContextLogger(__name__, table_name="users", connection_id="local")
        logger.info("Row deleted", row_index=4)
        # Output carries table_name, connection_id and row_index
    """

    def __init__(self, name: str, **context):
        self.logger = logging.getLogger(name)
        self.context = context

    def _log(self, level: int, msg: str, *args, exc_info=None, **kwargs) -> None:
        if not self.logger.isEnabledFor(level):
            return
        self.logger.log(
            level,
            msg,
            *args,
            exc_info=exc_info,
            extra={**self.context, **kwargs},
            stacklevel=3,
        )

    def debug(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, exc_info=None, **kwargs) -> None:
        self._log(logging.ERROR, msg, *args, exc_info=exc_info, **kwargs)

    def bind(self, **context) -> "ContextLogger":
        """Return a new logger carrying this context plus ``context``."""
        return ContextLogger(self.logger.name, **{**self.context, **context})

    def update_context(self, **context) -> None:
        self.context.update(context)

    def get_context(self) -> dict[str, Any]:
        return self.context.copy()
