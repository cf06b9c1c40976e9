"""Shared fixtures: a small SQLite database and handles onto it."""

from pathlib import Path

import pytest
from sqlalchemy import create_engine, text

from config import ConnectionConfig, DatabaseType
from database import ConnectionManager


@pytest.fixture()
def sqlite_path(tmp_path: Path) -> Path:
    db_path = tmp_path / "viewer_test.db"
    engine = create_engine(f"sqlite:///{db_path}")
    with engine.begin() as conn:
        conn.execute(text(
            "CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT, avatar BLOB)"
        ))
        conn.execute(text("CREATE TABLE orders (id INTEGER PRIMARY KEY, user_id INTEGER, total REAL)"))
        conn.execute(text("INSERT INTO users (name, avatar) VALUES ('ada', NULL), ('linus', x'FF00')"))
        conn.execute(text("INSERT INTO orders (id, user_id, total) VALUES (1, 1, 9.5)"))
    engine.dispose()
    return db_path


@pytest.fixture()
def sqlite_config(sqlite_path: Path) -> ConnectionConfig:
    return ConnectionConfig(database=str(sqlite_path), db_type=DatabaseType.SQLITE)


@pytest.fixture()
def manager() -> ConnectionManager:
    return ConnectionManager()


@pytest.fixture()
def handle(manager: ConnectionManager, sqlite_config: ConnectionConfig):
    handle = manager.connect(sqlite_config)
    yield handle
    handle.close()
