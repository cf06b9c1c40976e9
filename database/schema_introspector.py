"""
Table listing for the side panel.

Only a flat, sorted list of table names is discovered; columns, keys and
other schema details are out of scope.
"""

import logging
from typing import List, Optional
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from .connection import ConnectionHandle, DatabaseConnectionError

logger = logging.getLogger(__name__)


class SchemaIntrospector:
    """Lists the tables reachable through a connection handle."""

    # Internal tables hidden from the table list
    SYSTEM_TABLES = {
        'schema_migrations',
        'flyway_schema_history',
        # SQLite internal tables
        'sqlite_sequence',
        'sqlite_stat1',
        'sqlite_stat4'
    }

    def __init__(self, handle: ConnectionHandle):
        self.handle = handle
        self._cached_tables: Optional[List[str]] = None

    def get_table_names(self, force_refresh: bool = False) -> List[str]:
        """
        Get all user tables in the connected database, sorted by name.

        Args:
            force_refresh: If True, bypass cache and query again

        Returns:
            Table names, or an empty list if they cannot be read
        """
        if self._cached_tables is not None and not force_refresh:
            return self._cached_tables

        try:
            with self.handle.connection() as conn:
                names = inspect(conn).get_table_names()
        except (SQLAlchemyError, DatabaseConnectionError) as e:
            logger.error(f"Error getting tables: {e}")
            return []

        tables = sorted(name for name in names if name not in self.SYSTEM_TABLES)
        self._cached_tables = tables
        logger.info(f"Found {len(tables)} tables")
        return tables

    def preview_query(self, table_name: str, limit: int) -> str:
        """Build a SELECT for the first rows of a table, quoted for the dialect."""
        preparer = self.handle.engine.dialect.identifier_preparer
        return f"SELECT * FROM {preparer.quote(table_name)} LIMIT {int(limit)}"
