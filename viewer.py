"""
Viewer State - the object the UI holds between reruns.

Owns the connection form values, the query editor text, the last result,
the table list and the live connection handle. The UI calls connect(),
execute(), select_table() and disconnect(); none of them raise, every
failure ends up in ``status``.
"""

import logging
from dataclasses import replace
from typing import List, Optional

from config import ConnectionConfig, RowErrorPolicy, ViewerConfig, config as app_config
from database import (
    ConnectionHandle,
    ConnectionManager,
    DatabaseConnectionError,
    ConnectionFailedError,
    ExecutionError,
    QueryExecutor,
    QueryResult,
    SchemaIntrospector,
    get_connection_manager
)
from sql import split_statements

logger = logging.getLogger(__name__)


class DatabaseViewer:
    """Explicit state for one viewer session."""

    def __init__(
        self,
        connection_config: Optional[ConnectionConfig] = None,
        manager: Optional[ConnectionManager] = None,
        row_error_policy: RowErrorPolicy = RowErrorPolicy.SKIP,
        table_preview_limit: int = 100
    ):
        self.config = connection_config or ConnectionConfig()
        self.manager = manager or get_connection_manager()
        self.executor = QueryExecutor(row_error_policy)
        self.table_preview_limit = table_preview_limit

        self.current_query: str = ""
        self.result: QueryResult = QueryResult()
        self.tables: List[str] = []
        self.status: str = "Not connected"
        # Shown in the connection area; query outcomes only go to status
        self.connection_status: str = "Not connected"

        self.handle: Optional[ConnectionHandle] = None
        self.introspector: Optional[SchemaIntrospector] = None

    @property
    def is_connected(self) -> bool:
        return self.handle is not None and not self.handle.closed

    def update_config(self, **changes) -> ConnectionConfig:
        """Replace the connection config with a copy carrying the given changes."""
        self.config = replace(self.config, **changes)
        return self.config

    def connect(self) -> bool:
        """
        Connect with the current config and load the table list.

        Any previous connection is released first, even if the new one fails.
        """
        self.disconnect()

        try:
            self.handle = self.manager.connect(self.config)
        except DatabaseConnectionError as e:
            self.status = f"Failed to connect: {e}"
            self.connection_status = self.status
            return False

        self.introspector = SchemaIntrospector(self.handle)
        self.tables = self.introspector.get_table_names(force_refresh=True)
        self.status = f"Connected to {self.config.display_name} ({len(self.tables)} tables)"
        self.connection_status = self.status
        return True

    def refresh_tables(self) -> List[str]:
        """Reload the table list from the database."""
        if self.introspector is None:
            return []
        self.tables = self.introspector.get_table_names(force_refresh=True)
        return self.tables

    def execute(self, query: Optional[str] = None) -> QueryResult:
        """
        Run the editor query (or ``query``) and replace the last result.

        Returns:
            The new result; empty when nothing could be run
        """
        if query is not None:
            self.current_query = query

        # Previous rows never survive into the next result
        self.result = QueryResult()

        if not self.is_connected:
            self.status = "Not connected. Connect to a database first."
            return self.result

        if not self.current_query.strip():
            self.status = "Enter a query to execute."
            return self.result

        statements = split_statements(self.current_query)
        if len(statements) > 1:
            logger.warning(f"Query text holds {len(statements)} statements; sending it unchanged")

        try:
            self.result = self.executor.execute(self.handle, self.current_query)
        except ConnectionFailedError as e:
            self.status = f"Query failed: {e}"
            self.connection_status = f"Connection to {self.config.display_name} lost: {e}"
            return self.result
        except ExecutionError as e:
            self.status = f"Query failed: {e}"
            return self.result

        if not self.connection_status.startswith("Connected"):
            self.connection_status = f"Connected to {self.config.display_name}"
        self.status = self._describe(self.result)
        return self.result

    def select_table(self, table_name: str) -> str:
        """Fill the editor with a preview query for a table."""
        if self.introspector is None:
            return self.current_query
        self.current_query = self.introspector.preview_query(table_name, self.table_preview_limit)
        return self.current_query

    def disconnect(self):
        """Release the connection handle and forget the table list."""
        if self.handle is not None:
            self.handle.close()
        self.handle = None
        self.introspector = None
        self.tables = []
        self.status = "Not connected"
        self.connection_status = self.status

    @staticmethod
    def _describe(result: QueryResult) -> str:
        if result.error and result.is_empty:
            return f"Failed to execute query: {result.error}"
        if result.rows_affected is not None:
            return f"Query executed successfully. {result.rows_affected} rows affected."

        if result.error:
            return f"Query incomplete. {result.row_count} rows shown. {result.error}"

        status = f"Query executed successfully. {result.row_count} rows."
        if result.skipped_rows:
            status += f" {result.skipped_rows} rows could not be read and were skipped."
        return status


def create_viewer(viewer_config: Optional[ViewerConfig] = None) -> DatabaseViewer:
    viewer_config = viewer_config or app_config.viewer
    return DatabaseViewer(
        connection_config=viewer_config.initial_connection(),
        row_error_policy=viewer_config.row_error_policy,
        table_preview_limit=viewer_config.table_preview_limit
    )
