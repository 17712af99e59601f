"""
Dialect interfaces and the shared statement generator.

A dialect is the single seam where a relational engine plugs in: it maps
field kinds to SQL types and renders CREATE/SELECT/INSERT/UPDATE/DELETE for a
schema. ``AbstractDialect`` implements the generation once; concrete engines
override the small hooks that differ (placeholder style, autoincrement
keyword, conflict-tolerant insert).

Generation is pure. Timestamps for ``created``/``updated`` columns are taken
from the ``now`` argument and returned in ``Statement.stamps`` instead of
being written to the record, so the caller can apply them once the statement
has actually succeeded.
"""

from __future__ import annotations

import abc
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Protocol, Tuple, runtime_checkable

from sqlbind.codec import encode_value
from sqlbind.domain.models import Params
from sqlbind.errors import EmptyUpdate, MalformedQueryParams
from sqlbind.schema.models import ColumnDescriptor, FieldKind, Schema


@dataclass(frozen=True)
class Statement:
    """SQL text, its bound parameters, and timestamps to apply on success."""

    sql: str
    params: Tuple[Any, ...] = ()
    stamps: Tuple[Tuple[ColumnDescriptor, datetime], ...] = field(default=(), repr=False)

    def apply_stamps(self, record: Any) -> None:
        for column, value in self.stamps:
            column.set(record, value)


@runtime_checkable
class Dialect(Protocol):
    """
    Capability interface every supported engine implements.

    Attributes
    ----------
    name : str
        Machine-friendly identifier used in settings and the CLI.
    placeholder : str
        Bound-parameter marker understood by the engine's driver.
    """

    name: str
    placeholder: str

    def get_column_type(self, kind: FieldKind) -> str: ...

    def create_table(self, schema: Schema, exist_ok: bool = False) -> Statement: ...

    def select(self, schema: Schema, params: Params) -> Statement: ...

    def insert(self, schema: Schema, record: Any, ignore: bool, now: datetime) -> Statement: ...

    def update(self, schema: Schema, record: Any, params: Params, now: datetime) -> Statement: ...

    def delete(self, schema: Schema, record: Any) -> Statement: ...

    def key_filter(self, schema: Schema) -> str: ...


_LEADING_WHERE = re.compile(r"^where\b", re.IGNORECASE)
_LEADING_ORDER_BY = re.compile(r"^order\s+by\b", re.IGNORECASE)


def _clean_fragment(value: str, keyword: "re.Pattern[str]", field_name: str) -> str:
    fragment = value.strip(" ,")
    if keyword.match(fragment):
        raise MalformedQueryParams(field_name, value)
    return fragment


class AbstractDialect(abc.ABC):
    """
    Statement generation shared by all engines.

    Subclasses set ``name`` and ``description``, implement
    ``get_column_type`` and override the hooks below where their SQL differs.
    """

    name: str
    description: str
    placeholder: str = "?"
    autoincrement_keyword: str = "AUTOINCREMENT"

    @abc.abstractmethod
    def get_column_type(self, kind: FieldKind) -> str:  # pragma: no cover - interface only
        """Default SQL type for a field kind."""
        raise NotImplementedError

    # Hooks

    def column_type(self, column: ColumnDescriptor) -> str:
        return column.sql_type

    def autoincrement_clause(self, column: ColumnDescriptor) -> str:
        return self.autoincrement_keyword

    def insert_head(self, table: str, ignore: bool) -> str:
        return f"INSERT INTO {table}"

    def insert_tail(self, ignore: bool) -> str:
        return ""

    def empty_insert(self, table: str, ignore: bool) -> str:
        return f"{self.insert_head(table, ignore)} DEFAULT VALUES{self.insert_tail(ignore)}"

    # Statements

    def column_clause(self, column: ColumnDescriptor) -> str:
        parts = [column.name, self.column_type(column)]
        if column.primary:
            parts.append("NOT NULL PRIMARY KEY")
        if column.autoincrement:
            keyword = self.autoincrement_clause(column)
            if keyword:
                parts.append(keyword)
        if column.unique and not column.primary:
            parts.append("UNIQUE")
        if column.default is not None:
            parts.append(f"DEFAULT {column.default}")
        if column.extra:
            parts.append(column.extra)
        return " ".join(parts)

    def create_table(self, schema: Schema, exist_ok: bool = False) -> Statement:
        clauses = [self.column_clause(c) for c in schema.columns]
        foreign = schema.foreign_key
        if foreign is not None:
            clauses.append(
                f"FOREIGN KEY ({foreign.name}) REFERENCES {foreign.foreign_table}({foreign.foreign_column})"
            )
        head = "CREATE TABLE IF NOT EXISTS" if exist_ok else "CREATE TABLE"
        return Statement(f"{head} {schema.table} ({', '.join(clauses)})")

    def select(self, schema: Schema, params: Params) -> Statement:
        sql = f"SELECT * FROM {schema.table}"
        where = _clean_fragment(params.where, _LEADING_WHERE, "where")
        if where:
            sql += " WHERE " + where
        order_by = _clean_fragment(params.order_by, _LEADING_ORDER_BY, "order_by")
        if order_by:
            sql += " ORDER BY " + order_by
        if params.limit:
            sql += f" LIMIT {params.limit}"
        return Statement(sql, tuple(params.args))

    def _include_in_insert(self, column: ColumnDescriptor, record: Any) -> bool:
        if not column.primary:
            return True
        # Generated keys are left to the engine; explicit natural keys are written.
        return not column.autoincrement and not column.is_zero(column.get(record))

    def insert(self, schema: Schema, record: Any, ignore: bool, now: datetime) -> Statement:
        names: List[str] = []
        values: List[Any] = []
        stamps: List[Tuple[ColumnDescriptor, datetime]] = []
        for column in schema.columns:
            if not self._include_in_insert(column, record):
                continue
            value = column.get(record)
            if column.created or column.updated:
                value = now
                stamps.append((column, now))
            names.append(column.name)
            values.append(encode_value(column, value))

        if not names:
            return Statement(self.empty_insert(schema.table, ignore))

        marks = ", ".join([self.placeholder] * len(names))
        sql = (
            f"{self.insert_head(schema.table, ignore)} ({', '.join(names)}) "
            f"VALUES ({marks}){self.insert_tail(ignore)}"
        )
        return Statement(sql, tuple(values), tuple(stamps))

    def update(self, schema: Schema, record: Any, params: Params, now: datetime) -> Statement:
        assignments: List[str] = []
        values: List[Any] = []
        stamps: List[Tuple[ColumnDescriptor, datetime]] = []
        for column in schema.columns:
            if column.primary:
                continue
            value = column.get(record)
            if column.updated:
                value = now
                stamps.append((column, now))
            if params.skip_empty and column.is_zero(value):
                continue
            assignments.append(f"{column.name} = {self.placeholder}")
            values.append(encode_value(column, value))

        if not assignments:
            raise EmptyUpdate(schema.table)

        key = schema.primary_key
        values.append(encode_value(key, key.get(record)))
        sql = f"UPDATE {schema.table} SET {', '.join(assignments)} WHERE {key.name} = {self.placeholder}"
        return Statement(sql, tuple(values), tuple(stamps))

    def delete(self, schema: Schema, record: Any) -> Statement:
        key = schema.primary_key
        sql = f"DELETE FROM {schema.table} WHERE {key.name} = {self.placeholder}"
        return Statement(sql, (encode_value(key, key.get(record)),))

    def key_filter(self, schema: Schema) -> str:
        """WHERE fragment matching one row by primary key."""
        return f"{schema.primary_key.name} = {self.placeholder}"

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


__all__ = ["AbstractDialect", "Dialect", "Statement"]
