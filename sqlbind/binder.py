"""
Per-record binding: ties attached records to their schema and database.

A ``Binding`` is created by ``Database.attach`` and stored on the record.
It holds no reference to the record itself; each record method passes
``self`` in, so copies made with ``model_copy`` or ``copy.deepcopy`` share
the binding yet read and write their own fields.

Every data operation validates the schema first (memoized on the schema),
asks the dialect for a statement, and runs it through the database so the
statement text is mirrored into ``Database.last_query`` before execution.
"""

from __future__ import annotations

from contextlib import closing
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from sqlbind.codec import encode_value
from sqlbind.domain.models import Params
from sqlbind.errors import NoMatchingRow
from sqlbind.materializer import materialize
from sqlbind.schema.models import Schema

if TYPE_CHECKING:
    from sqlbind.database import Database
    from sqlbind.dialects.abstract import Statement


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Binding:
    """CRUD operations for records attached to one database."""

    def __init__(self, db: "Database", schema: Schema) -> None:
        self.db = db
        self.schema = schema

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Binding):
            return NotImplemented
        return self.db is other.db and self.schema is other.schema

    def __hash__(self) -> int:
        return hash((id(self.db), id(self.schema)))

    # Copies of a record stay attached to the same database.
    def __copy__(self) -> "Binding":
        return self

    def __deepcopy__(self, memo: dict) -> "Binding":
        return self

    def __repr__(self) -> str:
        return f"Binding(table={self.schema.table!r})"

    @property
    def dialect(self):
        return self.db.dialect

    def create_table(self, record: Any, exist_ok: bool = False) -> None:
        self.schema.validate()
        statement = self.dialect.create_table(self.schema, exist_ok=exist_ok)
        self.db.run(statement, "create_table", self.schema.table)

    def get_existing(self, record: Any, params: Optional[Params] = None) -> None:
        """Load the first row matching ``params`` into ``record``."""
        self.schema.validate()
        params = (params or Params()).model_copy(update={"limit": 1})
        self._load_one(record, self.dialect.select(self.schema, params))

    def refresh(self, record: Any) -> None:
        """Reload ``record``'s row by its current primary key."""
        self.schema.validate()
        key = self.schema.primary_key
        params = Params(
            where=self.dialect.key_filter(self.schema),
            order_by=self.schema.refresh_order_by,
            limit=1,
            args=(encode_value(key, key.get(record)),),
        )
        self._load_one(record, self.dialect.select(self.schema, params))

    def _load_one(self, record: Any, statement: "Statement") -> None:
        with closing(self.db.fetch(statement, self.schema.table)) as rows:
            row = next(rows, None)
            if row is None:
                raise NoMatchingRow(self.schema.table, statement.sql)
            materialize(self.schema, row, record)

    def save_new(self, record: Any, ignore: bool = False, params: Optional[Params] = None) -> int:
        """INSERT ``record``; return the number of rows inserted."""
        self.schema.validate()
        ignore = ignore or (params is not None and params.or_ignore)
        statement = self.dialect.insert(self.schema, record, ignore, _now())
        result = self.db.run(statement, "insert", self.schema.table)
        statement.apply_stamps(record)

        key = self.schema.primary_key
        if (
            result.rowcount > 0
            and key.autoincrement
            and result.lastrowid is not None
            and key.is_zero(key.get(record))
        ):
            key.set(record, result.lastrowid)
        return result.rowcount

    def save_existing(self, record: Any, params: Optional[Params] = None) -> int:
        """UPDATE ``record``'s row by primary key; return the number of rows updated."""
        self.schema.validate()
        statement = self.dialect.update(self.schema, record, params or Params(), _now())
        result = self.db.run(statement, "update", self.schema.table)
        statement.apply_stamps(record)
        return result.rowcount

    def delete(self, record: Any) -> int:
        """DELETE ``record``'s row by primary key; return the number of rows deleted."""
        self.schema.validate()
        statement = self.dialect.delete(self.schema, record)
        return self.db.run(statement, "delete", self.schema.table).rowcount


__all__ = ["Binding"]
