"""
Configuration module for the SQL Viewer.

This module handles:
- Connection credentials as an immutable value (ConnectionConfig)
- Viewer defaults loaded from the environment (form prefill, logging)
- Row error policy for query execution
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
from enum import Enum

# Load .env file BEFORE any os.getenv calls
from dotenv import load_dotenv
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)


class DatabaseType(Enum):
    """Supported database types."""
    MYSQL = "mysql"
    POSTGRESQL = "postgresql"
    SQLITE = "sqlite"

    @property
    def drivername(self) -> str:
        """SQLAlchemy dialect+driver name for this database type."""
        return _DRIVERNAMES[self]


_DRIVERNAMES = {
    DatabaseType.MYSQL: "mysql+pymysql",
    DatabaseType.POSTGRESQL: "postgresql+psycopg2",
    DatabaseType.SQLITE: "sqlite",
}


class RowErrorPolicy(Enum):
    """What to do when a single row cannot be read from a result stream."""
    SKIP = "skip"
    STRICT = "strict"


@dataclass(frozen=True)
class ConnectionConfig:
    """
    User-supplied connection credentials.

    All fields are free-form and may be empty. Nothing is validated here:
    empty values are handed to the driver, which applies its own defaults.
    For SQLite, ``database`` is the file path (empty means in-memory).
    """
    host: str = ""
    username: str = ""
    password: str = field(default="", repr=False)
    database: str = ""
    db_type: DatabaseType = DatabaseType.MYSQL

    @property
    def is_sqlite(self) -> bool:
        return self.db_type == DatabaseType.SQLITE

    @property
    def display_name(self) -> str:
        """Short human-readable target, without credentials."""
        if self.is_sqlite:
            return f"sqlite:{self.database or ':memory:'}"
        user = f"{self.username}@" if self.username else ""
        return f"{self.db_type.value}://{user}{self.host or 'localhost'}/{self.database}"


@dataclass
class ViewerConfig:
    """
    Viewer defaults.

    Only used to prefill the connection form and configure the UI;
    passwords are never taken from the environment.
    """
    db_type: DatabaseType = field(
        default_factory=lambda: DatabaseType(os.getenv("VIEWER_DB_TYPE", "mysql").lower())
    )
    host: str = field(default_factory=lambda: os.getenv("VIEWER_DB_HOST", ""))
    username: str = field(default_factory=lambda: os.getenv("VIEWER_DB_USERNAME", ""))
    database: str = field(default_factory=lambda: os.getenv("VIEWER_DB_DATABASE", ""))

    log_level: str = field(default_factory=lambda: os.getenv("VIEWER_LOG_LEVEL", "INFO").upper())

    # LIMIT used when a table is clicked in the side panel
    table_preview_limit: int = field(
        default_factory=lambda: int(os.getenv("VIEWER_TABLE_PREVIEW_LIMIT", "100"))
    )

    row_error_policy: RowErrorPolicy = field(
        default_factory=lambda: RowErrorPolicy(os.getenv("VIEWER_ROW_ERROR_POLICY", "skip").lower())
    )

    def initial_connection(self) -> ConnectionConfig:
        """Connection config used to prefill the form."""
        return ConnectionConfig(
            host=self.host,
            username=self.username,
            database=self.database,
            db_type=self.db_type,
        )


class AppConfig:
    """Main application configuration aggregator."""

    def __init__(self):
        self.viewer = ViewerConfig()

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls()


# Global configuration instance
config = AppConfig.from_env()
