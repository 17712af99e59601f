"""
PostgreSQL dialect for psycopg 3.

PostgreSQL has no AUTOINCREMENT keyword; an ``autoinc`` integer column is
declared with a serial type instead.
"""

from __future__ import annotations

from sqlbind.dialects.abstract import AbstractDialect
from sqlbind.schema.models import ColumnDescriptor, FieldKind

_SERIAL_TYPES = {
    "INTEGER": "SERIAL",
    "INT": "SERIAL",
    "BIGINT": "BIGSERIAL",
    "SMALLINT": "SMALLSERIAL",
}


class PostgresDialect(AbstractDialect):
    """Statements for psycopg (``%s`` placeholders, ``ON CONFLICT DO NOTHING``)."""

    name: str = "postgres"
    description: str = "PostgreSQL via psycopg 3."
    placeholder: str = "%s"
    autoincrement_keyword: str = ""

    _types = {
        FieldKind.STRING: "TEXT",
        FieldKind.INTEGER: "BIGINT",
        FieldKind.BOOLEAN: "BOOLEAN",
        FieldKind.FLOAT: "DOUBLE PRECISION",
        # Epoch seconds.
        FieldKind.TIME: "BIGINT",
    }

    def get_column_type(self, kind: FieldKind) -> str:
        return self._types.get(kind, "TEXT")

    def column_type(self, column: ColumnDescriptor) -> str:
        if column.autoincrement:
            return _SERIAL_TYPES.get(column.sql_type.upper(), column.sql_type)
        return column.sql_type

    def insert_tail(self, ignore: bool) -> str:
        return " ON CONFLICT DO NOTHING" if ignore else ""


__all__ = ["PostgresDialect"]
