"""
Pytest configuration for sqlbind.

Provides fixtures for:
- An in-memory SQLite database (unit tests)
- A recording executor that captures statements without a driver
- Settings and DSN for the PostgreSQL integration tests
"""

from __future__ import annotations

import os
import sqlite3
from typing import Any, Generator, Iterator, List, Optional, Sequence, Tuple

import psycopg
import pytest

from sqlbind.config import Settings
from sqlbind.database import Database
from sqlbind.infrastructure.db_factory import build_dsn
from sqlbind.infrastructure.executor import DBAPIExecutor, ExecutionResult


class RecordingExecutor:
    """
    Executor double: records every call and replays canned rows.

    ``rows`` is returned by the next ``query`` call; ``rowcount`` and
    ``lastrowid`` by every ``execute`` call.
    """

    def __init__(self, rowcount: int = 1, lastrowid: Optional[int] = None) -> None:
        self.rowcount = rowcount
        self.lastrowid = lastrowid
        self.rows: List[Sequence[Any]] = []
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self.closed = False

    def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecutionResult:
        self.calls.append((sql, tuple(params)))
        return ExecutionResult(rowcount=self.rowcount, lastrowid=self.lastrowid)

    def query(self, sql: str, params: Sequence[Any] = ()) -> Iterator[Sequence[Any]]:
        self.calls.append((sql, tuple(params)))
        return iter(list(self.rows))

    def close(self) -> None:
        self.closed = True

    @property
    def last(self) -> Tuple[str, Tuple[Any, ...]]:
        return self.calls[-1]


@pytest.fixture
def recorder() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def fake_db(recorder: RecordingExecutor) -> Database:
    """Database over the recording executor (SQLite dialect)."""
    return Database(recorder, dialect="sqlite")


@pytest.fixture
def sqlite_db() -> Generator[Database, None, None]:
    """
    Fresh in-memory SQLite database per test.
    """
    connection = sqlite3.connect(":memory:")
    db = Database(DBAPIExecutor(connection, driver_error=sqlite3.Error), dialect="sqlite")
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        dialect="postgres",
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "sqlbind"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return build_dsn(test_settings)


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False
