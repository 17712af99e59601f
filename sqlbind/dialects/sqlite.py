"""
SQLite dialect: the default engine.

SQLite only accepts AUTOINCREMENT on an ``INTEGER PRIMARY KEY`` column, which
is why integers map to ``INTEGER`` rather than a sized type.
"""

from __future__ import annotations

from sqlbind.dialects.abstract import AbstractDialect
from sqlbind.schema.models import FieldKind


class SQLiteDialect(AbstractDialect):
    """Statements for the stdlib ``sqlite3`` driver (qmark placeholders)."""

    name: str = "sqlite"
    description: str = "SQLite 3 via the standard library driver."
    placeholder: str = "?"
    autoincrement_keyword: str = "AUTOINCREMENT"

    _types = {
        FieldKind.STRING: "TEXT",
        FieldKind.INTEGER: "INTEGER",
        FieldKind.BOOLEAN: "INTEGER",
        FieldKind.FLOAT: "REAL",
        FieldKind.TIME: "DATETIME",
    }

    def get_column_type(self, kind: FieldKind) -> str:
        return self._types.get(kind, "TEXT")

    def insert_head(self, table: str, ignore: bool) -> str:
        if ignore:
            return f"INSERT OR IGNORE INTO {table}"
        return f"INSERT INTO {table}"


__all__ = ["SQLiteDialect"]
