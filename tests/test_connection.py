"""Tests for building and releasing connection handles."""

import shutil
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import QueuePool, StaticPool

from config import ConnectionConfig, DatabaseType
from database import ConnectionHandle, ConnectionManager, DatabaseConnectionError


def test_connect_returns_live_handle(manager: ConnectionManager, sqlite_config: ConnectionConfig) -> None:
    handle = manager.connect(sqlite_config)
    try:
        assert isinstance(handle, ConnectionHandle)
        assert not handle.closed
        assert handle.config is sqlite_config
        assert isinstance(handle.engine.pool, QueuePool)

        with handle.connection() as conn:
            assert conn.exec_driver_sql("SELECT count(*) FROM users").scalar() == 2
    finally:
        handle.close()


def test_close_is_idempotent_and_blocks_new_connections(handle: ConnectionHandle) -> None:
    handle.close()
    handle.close()

    assert handle.closed
    with pytest.raises(DatabaseConnectionError):
        with handle.connection():
            pass


def test_handle_as_context_manager(manager: ConnectionManager, sqlite_config: ConnectionConfig) -> None:
    with manager.connect(sqlite_config) as handle:
        assert not handle.closed
    assert handle.closed


def test_in_memory_sqlite_uses_static_pool(manager: ConnectionManager) -> None:
    with manager.connect(ConnectionConfig(db_type=DatabaseType.SQLITE)) as handle:
        assert isinstance(handle.engine.pool, StaticPool)


def test_unopenable_database_raises(manager: ConnectionManager, tmp_path: Path) -> None:
    missing = tmp_path / "no_such_dir" / "viewer.db"
    cfg = ConnectionConfig(database=str(missing), db_type=DatabaseType.SQLITE)

    with pytest.raises(DatabaseConnectionError) as exc_info:
        manager.connect(cfg)

    assert isinstance(exc_info.value.cause, OperationalError)
    assert exc_info.value.__cause__ is exc_info.value.cause


def test_unreachable_host_disposes_engine(manager: ConnectionManager) -> None:
    engine = MagicMock()
    engine.connect.side_effect = OperationalError(
        "connect", {}, Exception("Can't connect to MySQL server on 'db.invalid'")
    )
    cfg = ConnectionConfig(host="db.invalid", username="root", password="pw", database="shop")

    with patch("database.connection.create_engine", return_value=engine):
        with pytest.raises(DatabaseConnectionError) as exc_info:
            manager.connect(cfg)

    assert "db.invalid" in str(exc_info.value)
    engine.dispose.assert_called_once()


def test_build_url_passes_fields_through() -> None:
    cfg = ConnectionConfig(host="db.local", username="root", password="p@ss:word", database="shop")

    url = ConnectionManager.build_url(cfg)

    assert url.drivername == "mysql+pymysql"
    assert url.host == "db.local"
    assert url.username == "root"
    assert url.password == "p@ss:word"
    assert url.database == "shop"
    assert url.port is None


def test_build_url_for_postgresql() -> None:
    cfg = ConnectionConfig(host="pg", username="u", database="d", db_type=DatabaseType.POSTGRESQL)

    assert ConnectionManager.build_url(cfg).drivername == "postgresql+psycopg2"


def test_test_connection_reports_success(manager: ConnectionManager, sqlite_config: ConnectionConfig) -> None:
    ok, message = manager.test_connection(sqlite_config)

    assert ok
    assert message == "SQLITE connection successful"


def test_test_connection_reports_failure(manager: ConnectionManager, tmp_path: Path) -> None:
    cfg = ConnectionConfig(database=str(tmp_path / "missing" / "x.db"), db_type=DatabaseType.SQLITE)

    ok, message = manager.test_connection(cfg)

    assert not ok
    assert message.startswith("Connection failed")


def test_sub_connection_failure_on_live_handle(manager: ConnectionManager, tmp_path: Path) -> None:
    folder = tmp_path / "data"
    folder.mkdir()
    handle = manager.connect(ConnectionConfig(database=str(folder / "x.db"), db_type=DatabaseType.SQLITE))
    handle.engine.dispose()
    shutil.rmtree(folder)

    try:
        with pytest.raises(DatabaseConnectionError) as exc_info:
            with handle.connection():
                pass
        assert str(exc_info.value).startswith("Connection lost")
        assert isinstance(exc_info.value.cause, OperationalError)
    finally:
        handle.close()
