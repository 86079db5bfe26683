"""
Backend collaborators.

The editor talks to its execution backend through two small protocols. The
desktop client implements them over its RPC bridge; ``DBAPIBackend`` is a
direct implementation over any DB-API 2.0 driver, used by the command line.
"""

import logging
from typing import Any, Callable, Protocol, Sequence

from utils.retry import retry_transient

logger = logging.getLogger(__name__)


class MutationBackend(Protocol):
    def execute_mutations(self, connection_id: str, statements: Sequence[str]) -> None:
        """Run the batch all-or-nothing; raise with a readable message on failure."""
        ...


class TableDataBackend(Protocol):
    def get_table_structure(self, connection_id: str, table_name: str) -> dict[str, Any]:
        ...

    def get_table_data(
        self,
        connection_id: str,
        table_name: str,
        limit: int,
        offset: int,
        filters: list[dict[str, Any]],
        sort_column: str | None = None,
        sort_direction: str | None = None,
    ) -> dict[str, Any]:
        ...

    def get_table_count(
        self, connection_id: str, table_name: str, filters: list[dict[str, Any]]
    ) -> int:
        ...


class DBAPIBackend:
    """
    Executes mutation batches over a DB-API 2.0 connection.

    The whole batch runs on one cursor inside one transaction: it is committed
    once at the end, or rolled back on the first error, which is re-raised.
    """

    def __init__(self, connect: Callable[[str], Any], connect_retries: int = 3):
        """
        Args:
            connect: Opens a connection for a connection id (e.g. a DSN)
            connect_retries: Retries on transient connection errors
        """
        self._connect = retry_transient(max_retries=connect_retries)(connect)

    def execute_mutations(self, connection_id: str, statements: Sequence[str]) -> None:
        connection = self._connect(connection_id)
        try:
            cursor = connection.cursor()
            try:
                for index, statement in enumerate(statements):
                    logger.debug(f"Executing statement {index + 1}/{len(statements)}")
                    cursor.execute(statement)
            finally:
                cursor.close()
            connection.commit()
        except Exception:
            logger.warning(f"Rolling back batch of {len(statements)} statement(s)")
            try:
                connection.rollback()
            except Exception:
                # The batch error is the one surfaced to the caller
                logger.warning("Rollback failed", exc_info=True)
            raise
        finally:
            connection.close()
