"""
Integration tests for sqlbind against PostgreSQL.

These tests run against a real PostgreSQL instance and verify that:
1. Generated DDL is accepted (serial keys, foreign keys, BOOLEAN, BIGINT times)
2. Records round-trip through INSERT/SELECT/UPDATE/DELETE
3. Conflict-tolerant inserts report zero rows

Run with: RUN_INTEGRATION_TESTS=1 pytest tests/integration/
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Annotated, Dict, Generator, Optional

import pytest
from pydantic import Field

from sqlbind import Database, Params, Record, db
from sqlbind.config import Settings
from sqlbind.errors import NoMatchingRow
from sqlbind.infrastructure.db_factory import open_database

pytestmark = pytest.mark.skipif(
    os.getenv("RUN_INTEGRATION_TESTS", "0") != "1",
    reason="Integration tests require RUN_INTEGRATION_TESTS=1 and reachable Postgres",
)


class Project(Record):
    id: Annotated[int, db("id,primary,autoinc,table:sqlbind_projects")] = 0
    name: Annotated[str, db("name,unique")] = ""


class Task(Record):
    id: Annotated[int, db("id,primary,autoinc,table:sqlbind_tasks,refresh:id")] = 0
    title: Annotated[str, db("title")] = ""
    done: Annotated[bool, db("done")] = False
    labels: Annotated[Dict[str, str], db("labels")] = Field(default_factory=dict)
    project: Annotated[Optional[Project], db("project_id,foreign")] = None
    created_at: Annotated[Optional[datetime], db("created_at,created")] = None


@pytest.fixture
def pg_db(test_settings: Settings, db_connection_available: bool) -> Generator[Database, None, None]:
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")
    database = open_database(test_settings)
    database.executor.execute("DROP TABLE IF EXISTS sqlbind_tasks")
    database.executor.execute("DROP TABLE IF EXISTS sqlbind_projects")
    database.attach(Project()).create_table()
    database.attach(Task()).create_table()
    try:
        yield database
    finally:
        database.executor.execute("DROP TABLE IF EXISTS sqlbind_tasks")
        database.executor.execute("DROP TABLE IF EXISTS sqlbind_projects")
        database.close()


def _project(database: Database, name: str) -> Project:
    project = database.attach(Project(name=name))
    project.save_new()
    # psycopg reports no lastrowid; load the generated key by name.
    project.get_existing(Params(where="name = %s", args=(name,)))
    return project


class TestRoundTrip:
    """Records survive a trip through PostgreSQL."""

    def test_insert_and_select(self, pg_db: Database):
        project = _project(pg_db, "core")
        before = datetime.now(timezone.utc).replace(microsecond=0)
        task = pg_db.attach(Task(title="ship", done=True, labels={"k": "v"}, project=project))
        assert task.save_new() == 1

        (loaded,) = pg_db.get_many(Task)
        assert loaded.title == "ship"
        assert loaded.done is True
        assert loaded.labels == {"k": "v"}
        assert loaded.project.id == project.id
        assert loaded.created_at >= before

    def test_update_refresh_delete(self, pg_db: Database):
        _project(pg_db, "core")
        pg_db.attach(Task(title="draft")).save_new()

        task = pg_db.attach(Task())
        task.get_existing(Params(where="title = %s", args=("draft",)))
        task.title = "final"
        assert task.save_existing() == 1

        copy = pg_db.attach(Task(id=task.id))
        copy.refresh()
        assert copy.title == "final"

        assert task.delete() == 1
        with pytest.raises(NoMatchingRow):
            copy.refresh()

    def test_on_conflict_do_nothing(self, pg_db: Database):
        _project(pg_db, "core")
        duplicate = pg_db.attach(Project(name="core"))
        assert duplicate.save_new(ignore=True) == 0
