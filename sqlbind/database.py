"""
Database handle: the entry point applications hold on to.

A ``Database`` pairs an ``Executor`` with a ``Dialect`` and owns the schema
registry for every record type attached through it. Two databases never share
schemas, so the same record type may be used against different engines side
by side.

Usage:
    from sqlbind import Database, DBAPIExecutor

    db = Database(DBAPIExecutor(sqlite3.connect("app.db")))
    user = db.attach(User(name="ana"))
    user.create_table(exist_ok=True)
    user.save_new()
    users = db.get_many(User, Params(where="name LIKE ?", args=("a%",)))
"""

from __future__ import annotations

from collections.abc import MutableSequence
from contextlib import closing
from typing import Any, Iterator, List, Optional, Sequence, Type, TypeVar, Union

from sqlbind.binder import Binding
from sqlbind.dialects import Dialect, Statement, get_dialect
from sqlbind.domain.models import Params
from sqlbind.domain.record import Record
from sqlbind.errors import ExecutionFailure, InvalidDestination, MaterializationError
from sqlbind.infrastructure.executor import ExecutionResult, Executor
from sqlbind.materializer import materialize
from sqlbind.schema.models import Schema
from sqlbind.schema.registry import SchemaRegistry
from sqlbind.utils.logging import get_logger

log = get_logger(__name__)

R = TypeVar("R", bound=Record)


def _closing_rows(rows: Iterator[Sequence[Any]]) -> Iterator[Sequence[Any]]:
    # Any iterator works as a row source; generators get closed early.
    try:
        yield from rows
    finally:
        close = getattr(rows, "close", None)
        if close is not None:
            close()


class Database:
    """
    Executor, dialect and schema registry for one relational database.

    Parameters
    ----------
    executor : Executor
        Runs statements against the engine. Closed by ``close()``.
    dialect : str | Dialect
        Engine name ("sqlite", "mysql", "postgres") or a dialect instance.

    Attributes
    ----------
    last_query : str
        SQL text of the most recent statement, set before it runs.
    """

    def __init__(self, executor: Executor, dialect: Union[str, Dialect] = "sqlite") -> None:
        self.executor = executor
        self.dialect: Dialect = get_dialect(dialect) if isinstance(dialect, str) else dialect
        self.registry = SchemaRegistry(self.dialect)
        self.last_query = ""

    # Attaching

    def register(self, record_type: Type[Record]) -> Schema:
        """Build (or return the cached) schema for ``record_type``."""
        return self.registry.get_or_build(record_type)

    def attach(self, record: R) -> R:
        """
        Bind ``record`` to this database and return it.

        The record type's schema is built on first attach. Build errors
        propagate and leave the record unattached.
        """
        if not isinstance(record, Record):
            raise TypeError(f"Only Record instances can be attached, got {type(record).__name__}")
        schema = self.register(type(record))
        record._binding = Binding(self, schema)
        return record

    # Bulk read

    def get_many(
        self,
        record_type: Type[R],
        params: Optional[Params] = None,
        into: Optional[MutableSequence] = None,
    ) -> MutableSequence:
        """
        Run one SELECT and return one attached record per row.

        Parameters
        ----------
        record_type : type[Record]
            Record class to instantiate for each row.
        params : Params, optional
            Filter, ordering and limit.
        into : MutableSequence, optional
            Destination to append to; a new list when omitted.

        Raises
        ------
        InvalidDestination
            If ``into`` is not a mutable sequence or ``record_type`` is not a
            ``Record`` subclass.
        MaterializationError
            If a row cannot be decoded. Records appended before the failure
            stay in ``into`` and are also available as ``exc.partial``.
        """
        if into is None:
            into = []
        elif not isinstance(into, MutableSequence):
            raise InvalidDestination(
                f"get_many needs a mutable sequence to append to, got {type(into).__name__}"
            )
        if not (isinstance(record_type, type) and issubclass(record_type, Record)):
            raise InvalidDestination(f"get_many needs a Record subclass, got {record_type!r}")

        schema = self.register(record_type)
        schema.validate()
        statement = self.dialect.select(schema, params or Params())

        added: List[Any] = []
        with closing(self.fetch(statement, schema.table)) as rows:
            for row in rows:
                record = self.attach(record_type.model_construct())
                try:
                    materialize(schema, row, record)
                except MaterializationError as exc:
                    exc.partial = list(added)
                    log.warning(
                        f"Stopped reading {schema.table} after {len(added)} rows",
                        extra={"table": schema.table, "rows": len(added), "error": str(exc)},
                    )
                    raise
                into.append(record)
                added.append(record)

        log.debug(
            f"Fetched {len(added)} rows from {schema.table}",
            extra={"operation": "select", "table": schema.table, "rowcount": len(added)},
        )
        return into

    # Execution

    def run(self, statement: Statement, operation: str, table: str) -> ExecutionResult:
        """Execute a data-modifying statement and log its outcome."""
        self.last_query = statement.sql
        try:
            result = self.executor.execute(statement.sql, statement.params)
        except ExecutionFailure:
            log.warning(
                f"{operation} on {table} failed",
                extra={"operation": operation, "table": table, "sql": statement.sql},
            )
            raise
        log.debug(
            statement.sql,
            extra={"operation": operation, "table": table, "rowcount": result.rowcount},
        )
        return result

    def fetch(self, statement: Statement, table: str) -> Iterator[Sequence[Any]]:
        """Run a query and return its row iterator. Close it when done."""
        self.last_query = statement.sql
        try:
            rows = self.executor.query(statement.sql, statement.params)
        except ExecutionFailure:
            log.warning(
                f"select on {table} failed",
                extra={"operation": "select", "table": table, "sql": statement.sql},
            )
            raise
        log.debug(statement.sql, extra={"operation": "select", "table": table})
        return _closing_rows(rows)

    # Lifecycle

    def close(self) -> None:
        self.executor.close()
        self.registry.clear()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<Database dialect={self.dialect.name!r} schemas={len(self.registry)}>"


__all__ = ["Database"]
