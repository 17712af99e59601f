from __future__ import annotations

from sqlbind.dialects.abstract import AbstractDialect
from sqlbind.schema.models import FieldKind


class MySQLDialect(AbstractDialect):
    """
    MySQL / MariaDB statements for format-style (``%s``) DB-API drivers.

    Time columns are stored as epoch seconds, so they map to ``BIGINT``: a
    ``DATETIME`` column would reject the integer values written for them.
    """

    name: str = "mysql"
    description: str = "MySQL/MariaDB with %s placeholders."
    placeholder: str = "%s"
    autoincrement_keyword: str = "AUTO_INCREMENT"

    _types = {
        FieldKind.STRING: "VARCHAR(255)",
        FieldKind.INTEGER: "INT",
        FieldKind.BOOLEAN: "INT",
        FieldKind.FLOAT: "FLOAT",
        FieldKind.TIME: "BIGINT",
    }

    def get_column_type(self, kind: FieldKind) -> str:
        return self._types.get(kind, "TEXT")

    def insert_head(self, table: str, ignore: bool) -> str:
        if ignore:
            return f"INSERT IGNORE INTO {table}"
        return f"INSERT INTO {table}"

    def empty_insert(self, table: str, ignore: bool) -> str:
        return f"{self.insert_head(table, ignore)} () VALUES ()"


__all__ = ["MySQLDialect"]
