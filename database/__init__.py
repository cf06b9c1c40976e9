"""
Database module for the SQL Viewer.

Provides:
- Pooled connection handles built from user credentials
- Verbatim query execution with per-row failure isolation
- Cell value coercion to display strings
- Flat table listing
"""

from .connection import (
    ConnectionHandle,
    ConnectionManager,
    DatabaseConnectionError,
    get_connection_manager
)
from .coercion import NULL_SENTINEL, coerce_value, coerce_row
from .executor import (
    QueryExecutor,
    QueryResult,
    ExecutionError,
    ConnectionFailedError,
    RowMaterializationError,
    execute_query
)
from .schema_introspector import SchemaIntrospector

__all__ = [
    "ConnectionHandle",
    "ConnectionManager",
    "DatabaseConnectionError",
    "get_connection_manager",
    "NULL_SENTINEL",
    "coerce_value",
    "coerce_row",
    "QueryExecutor",
    "QueryResult",
    "ExecutionError",
    "ConnectionFailedError",
    "RowMaterializationError",
    "execute_query",
    "SchemaIntrospector"
]
