"""
Connection factory utilities for sqlbind.

Opens a DB-API connection for the configured dialect and wraps it in a ready
``Database``. SQLite connections use the standard library driver; PostgreSQL
connections use psycopg. MySQL has no bundled driver: open a connection with
the driver of your choice and pass it to ``DBAPIExecutor`` yourself.

Includes retry logic for transient connection failures using tenacity.
"""

from __future__ import annotations

import sqlite3
from typing import TYPE_CHECKING, Any, Optional

import psycopg
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from sqlbind.config import Settings, get_settings
from sqlbind.dialects import get_dialect
from sqlbind.infrastructure.executor import DBAPIExecutor

if TYPE_CHECKING:
    from sqlbind.database import Database


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a PostgreSQL DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((sqlite3.OperationalError,)),
    reraise=True,
)
def get_sqlite_connection(path: str) -> sqlite3.Connection:
    """
    Open a SQLite database in autocommit mode.

    Retries up to 3 times with exponential backoff (a locked database file
    surfaces as ``OperationalError``).
    """
    return sqlite3.connect(path, isolation_level=None, check_same_thread=False)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_postgres_connection(dsn: str) -> psycopg.Connection:
    """
    Acquire a dedicated autocommit psycopg connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return psycopg.connect(dsn, autocommit=True)


def get_connection(settings: Optional[Settings] = None) -> Any:
    """Open a connection for ``settings.dialect``."""
    settings = settings or get_settings()
    dialect = get_dialect(settings.dialect).name
    if dialect == "sqlite":
        return get_sqlite_connection(settings.database)
    if dialect == "postgres":
        return get_postgres_connection(build_dsn(settings))
    raise ValueError(
        f"No bundled driver for dialect '{dialect}'. Open a DB-API connection yourself and "
        f"pass Database(DBAPIExecutor(conn), dialect='{dialect}')."
    )


def open_database(settings: Optional[Settings] = None) -> "Database":
    """
    Connect according to ``settings`` and return a ``Database`` bound to it.

    Example
    -------
        db = open_database()
        user = db.attach(User(name="ana"))
        user.create_table()
        user.save_new()
    """
    from sqlbind.database import Database

    settings = settings or get_settings()
    dialect = get_dialect(settings.dialect)
    connection = get_connection(settings)
    driver_error = psycopg.Error if dialect.name == "postgres" else sqlite3.Error
    # Both bundled connections run in autocommit mode.
    executor = DBAPIExecutor(connection, commit=False, driver_error=driver_error)
    return Database(executor, dialect=dialect)


__all__ = [
    "build_dsn",
    "get_connection",
    "get_postgres_connection",
    "get_sqlite_connection",
    "open_database",
]
