"""
Query Executor - runs ad-hoc SQL and builds the results grid.

The query text is submitted verbatim: no parameter binding, no escaping,
no validation. Failures are isolated so the UI keeps running:
- a rejected query yields an empty result with an error message
- a row that cannot be read is skipped (or raises, under the strict policy);
  if the failed read closes the stream, the result is flagged as cut off
- a cell that cannot be rendered becomes the NULL sentinel
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from config import ConnectionConfig, RowErrorPolicy
from sql import statement_type
from .coercion import coerce_row
from .connection import ConnectionHandle, DatabaseConnectionError, get_connection_manager

logger = logging.getLogger(__name__)


class ExecutionError(Exception):
    """Base class for failures that abort a query execution."""
    pass


class ConnectionFailedError(ExecutionError):
    """Raised when no connection source could be built for the execution."""
    pass


class RowMaterializationError(ExecutionError):
    """Raised under the strict policy when a row cannot be read."""

    def __init__(self, message: str, row_index: int):
        super().__init__(message)
        self.row_index = row_index


@dataclass
class QueryResult:
    """Tabular result of one execution. Rows keep driver order."""
    rows: List[List[str]] = field(default_factory=list)
    columns: List[str] = field(default_factory=list)
    rows_affected: Optional[int] = None
    error: Optional[str] = None
    skipped_rows: int = 0

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def is_rectangular(self) -> bool:
        """True when every row has one cell per column label."""
        width = len(self.columns)
        return all(len(row) == width for row in self.rows)


class QueryExecutor:
    """Executes queries against a live connection handle."""

    # Consecutive read failures after which the result stream is considered dead
    MAX_CONSECUTIVE_ROW_FAILURES = 3

    def __init__(self, row_error_policy: RowErrorPolicy = RowErrorPolicy.SKIP):
        self.row_error_policy = row_error_policy

    def execute(self, handle: ConnectionHandle, query: str) -> QueryResult:
        """
        Run a query and collect every row as display strings.

        Args:
            handle: Live connection handle (from ConnectionManager.connect)
            query: SQL text, passed to the driver as-is

        Returns:
            A new QueryResult. On query rejection it is empty and carries
            the error message.

        Raises:
            ExecutionError: handle missing or closed
            ConnectionFailedError: no sub-connection could be acquired
            RowMaterializationError: a row failed under the strict policy
        """
        if handle is None or handle.closed:
            raise ExecutionError("No open connection; connect before executing a query")

        result = QueryResult()
        kind = statement_type(query)

        try:
            with handle.connection() as conn:
                self._run(conn, query, kind, result)
        except DatabaseConnectionError as e:
            raise ConnectionFailedError(str(e)) from e

        if result.error and result.is_empty:
            return result

        if result.rows_affected is not None:
            logger.info(f"{kind} query executed successfully, {result.rows_affected} rows affected")
            return result

        logger.info(
            f"{kind} query executed, {result.row_count} rows"
            + (f" ({result.skipped_rows} skipped)" if result.skipped_rows else "")
        )
        return result

    def _run(self, conn, query: str, kind: str, result: QueryResult):
        """Submit the query on one sub-connection and fill ``result``."""
        try:
            cursor = conn.execution_options(no_parameters=True).exec_driver_sql(query)
        except SQLAlchemyError as e:
            message = str(e.orig) if getattr(e, "orig", None) is not None else str(e)
            logger.error(f"Failed to execute {kind} query: {message}")
            result.error = message
            return

        try:
            if not cursor.returns_rows:
                result.rows_affected = cursor.rowcount
                return

            result.columns = [str(key) for key in cursor.keys()]
            self._collect_rows(cursor, result)
        finally:
            cursor.close()

    @staticmethod
    def _stream_closed(cursor) -> bool:
        return bool(getattr(cursor, "closed", False))

    def _collect_rows(self, cursor, result: QueryResult):
        """
        Iterate the cursor, coercing each row; isolate per-row failures.

        Drivers usually close the cursor when a fetch fails. A failed read
        that ends the stream is reported in ``result.error`` as a cut-off,
        not counted as a skipped row.
        """
        rows = iter(cursor)
        index = 0
        consecutive_failures = 0
        last_error: Optional[Exception] = None

        while True:
            try:
                row = next(rows)
            except StopIteration:
                if last_error is not None:
                    # The failed read ended the stream
                    result.skipped_rows -= 1
                    self._cut_off(result, last_error)
                break
            except (SQLAlchemyError, ValueError, TypeError) as e:
                if self.row_error_policy == RowErrorPolicy.STRICT:
                    logger.error(f"Failed to read row {index}: {e}")
                    raise RowMaterializationError(f"Failed to read row {index}: {e}", index) from e

                if self._stream_closed(cursor):
                    self._cut_off(result, e)
                    break

                result.skipped_rows += 1
                consecutive_failures += 1
                last_error = e
                logger.warning(f"Skipping row {index}: {e}")
                index += 1
                if consecutive_failures >= self.MAX_CONSECUTIVE_ROW_FAILURES:
                    result.error = f"Result stream failed after {result.row_count} rows: {e}"
                    logger.error(result.error)
                    break
                continue

            consecutive_failures = 0
            last_error = None
            result.rows.append(coerce_row(row))
            index += 1

    @staticmethod
    def _cut_off(result: QueryResult, error: Exception):
        result.error = f"Result stream closed after {result.row_count} rows: {error}"
        logger.error(result.error)


def execute_query(
    db_config: ConnectionConfig,
    query: str,
    row_error_policy: RowErrorPolicy = RowErrorPolicy.SKIP
) -> QueryResult:
    """
    Build a handle from credentials, run one query and release the handle.

    Raises:
        ConnectionFailedError: the connection source could not be built
    """
    try:
        handle = get_connection_manager().connect(db_config)
    except DatabaseConnectionError as e:
        raise ConnectionFailedError(str(e)) from e

    with handle:
        return QueryExecutor(row_error_policy).execute(handle, query)
