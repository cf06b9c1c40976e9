"""
Database Connection Module.

This module provides:
- ConnectionHandle: an owned, pooled connection source (SQLAlchemy engine)
- ConnectionManager: turns a ConnectionConfig into a live handle
- Scoped sub-connections that are always returned to the pool
"""

import logging
from contextlib import contextmanager
from typing import Optional, Generator, Tuple
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine, URL
from sqlalchemy.pool import QueuePool, StaticPool
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from config import ConnectionConfig

logger = logging.getLogger(__name__)


class DatabaseConnectionError(Exception):
    """Raised when a connection source cannot be established."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ConnectionHandle:
    """
    Owned pooled connection source.

    Hands out short-lived sub-connections via ``connection()``. Must be
    released with ``close()`` (or used as a context manager) once done.
    """

    def __init__(self, engine: Engine, config: ConnectionConfig):
        self._engine: Optional[Engine] = engine
        self.config = config

    @property
    def closed(self) -> bool:
        return self._engine is None

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine."""
        if self._engine is None:
            raise DatabaseConnectionError("Connection handle has been closed")
        return self._engine

    @contextmanager
    def connection(self) -> Generator[Connection, None, None]:
        """
        Context manager for a sub-connection drawn from the pool.

        The sub-connection is returned to the pool on every exit path.

        Raises:
            DatabaseConnectionError: handle closed, or the pool cannot hand
                out a connection (server gone, network dropped, file removed)

        Example:
            with handle.connection() as conn:
                conn.exec_driver_sql("SELECT 1")
        """
        engine = self.engine
        try:
            conn = engine.connect()
        except SQLAlchemyError as e:
            logger.error(f"Lost connection to {self.config.display_name}: {e}")
            raise DatabaseConnectionError(f"Connection lost: {getattr(e, 'orig', None) or e}", e) from e
        try:
            yield conn
        finally:
            conn.close()

    def close(self):
        """Dispose of the pool. Safe to call more than once."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            logger.info(f"Connection to {self.config.display_name} released")

    def __enter__(self) -> "ConnectionHandle":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<ConnectionHandle {self.config.display_name} ({state})>"


class ConnectionManager:
    """Builds connection handles from user-supplied credentials."""

    # Pool settings are fixed; the viewer needs only a handful of connections
    POOL_SIZE = 5
    MAX_OVERFLOW = 10
    POOL_TIMEOUT = 30
    POOL_RECYCLE = 1800

    @staticmethod
    def build_url(db_config: ConnectionConfig) -> URL:
        """
        Build driver options directly from the config fields.

        No defaulting happens here: empty values are left for the driver.
        """
        if db_config.is_sqlite:
            return URL.create(db_config.db_type.drivername, database=db_config.database)
        return URL.create(
            db_config.db_type.drivername,
            username=db_config.username,
            password=db_config.password,
            host=db_config.host,
            database=db_config.database,
        )

    def _create_engine(self, db_config: ConnectionConfig) -> Engine:
        """
        Create SQLAlchemy engine with appropriate settings for each database type.

        Returns:
            Configured SQLAlchemy Engine instance
        """
        url = self.build_url(db_config)

        if db_config.is_sqlite and db_config.database in ("", ":memory:"):
            # A private in-memory database only exists on a single connection
            return create_engine(
                url,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
                isolation_level="AUTOCOMMIT",
                echo=False
            )

        return create_engine(
            url,
            poolclass=QueuePool,
            pool_size=self.POOL_SIZE,
            max_overflow=self.MAX_OVERFLOW,
            pool_timeout=self.POOL_TIMEOUT,
            pool_recycle=self.POOL_RECYCLE,
            pool_pre_ping=True,
            isolation_level="AUTOCOMMIT",
            echo=False
        )

    def connect(self, db_config: ConnectionConfig) -> ConnectionHandle:
        """
        Establish a pooled connection source.

        Args:
            db_config: Credentials supplied by the user

        Returns:
            A live ConnectionHandle

        Raises:
            DatabaseConnectionError: host unreachable, authentication rejected,
                unknown database or pool construction failure
        """
        engine = None
        try:
            engine = self._create_engine(db_config)
            # Pools connect lazily; check one connection out to prove the credentials
            with engine.connect():
                pass
        except OperationalError as e:
            self._discard(engine)
            logger.error(f"Failed to connect to {db_config.display_name}: {e}")
            raise DatabaseConnectionError(f"Connection failed: {e.orig or e}", e) from e
        except SQLAlchemyError as e:
            self._discard(engine)
            logger.error(f"Failed to create connection pool for {db_config.display_name}: {e}")
            raise DatabaseConnectionError(f"Connection failed: {e}", e) from e

        logger.info(f"Connected to {db_config.display_name}")
        return ConnectionHandle(engine, db_config)

    def test_connection(self, db_config: ConnectionConfig) -> Tuple[bool, str]:
        """
        Test database connectivity and release the handle straight away.

        Returns:
            tuple: (success: bool, message: str)
        """
        try:
            with self.connect(db_config) as handle:
                with handle.connection() as conn:
                    row = conn.execute(text("SELECT 1 AS health_check")).fetchone()
        except DatabaseConnectionError as e:
            return False, str(e)
        except SQLAlchemyError as e:
            logger.error(f"Health check failed: {e}")
            return False, f"Health check failed: {e}"

        if row and row[0] == 1:
            return True, f"{db_config.db_type.value.upper()} connection successful"
        return False, "Unexpected result from health check query"

    @staticmethod
    def _discard(engine: Optional[Engine]):
        if engine is not None:
            engine.dispose()


_manager: Optional[ConnectionManager] = None


def get_connection_manager() -> ConnectionManager:
    """Get the shared connection manager."""
    global _manager
    if _manager is None:
        _manager = ConnectionManager()
    return _manager
