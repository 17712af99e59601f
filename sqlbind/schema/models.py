"""
Schema data model for sqlbind.

A ``Schema`` is derived once per record type and shared read-only by every
instance of that type. It holds one ``ColumnDescriptor`` per mapped field, in
field-declaration order (depth first through nested models). That order is
the column order of CREATE TABLE and therefore of ``SELECT *``, which is what
lets the materializer read rows positionally.
"""

from __future__ import annotations

import enum
import types
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional, Tuple, Union, get_args, get_origin

from sqlbind.errors import DuplicateOrConflictingKeyRole, MissingPrimaryKey, MissingTableName


class FieldKind(str, enum.Enum):
    """Python-side category of a mapped field; drives type mapping and coercion."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    TIME = "time"
    JSON = "json"
    STRUCT = "struct"
    REFERENCE = "reference"
    OTHER = "other"


_ZERO_VALUES = {
    FieldKind.STRING: "",
    FieldKind.INTEGER: 0,
    FieldKind.FLOAT: 0.0,
}


def unwrap_optional(annotation: Any) -> Any:
    """Return ``X`` for ``Optional[X]`` / ``X | None``; other annotations unchanged."""
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _nested_type(owner: Any, attr: str) -> Any:
    return unwrap_optional(type(owner).model_fields[attr].annotation)


@dataclass(frozen=True)
class ColumnDescriptor:
    """One mapped field: where it lives on the record and how it is stored."""

    name: str
    path: Tuple[str, ...]
    kind: FieldKind
    sql_type: str
    python_type: Any = None
    primary: bool = False
    autoincrement: bool = False
    unique: bool = False
    created: bool = False
    updated: bool = False
    json: bool = False
    foreign: bool = False
    default: Optional[str] = None
    foreign_table: Optional[str] = None
    foreign_column: Optional[str] = None
    # Primary-key column of the referenced record type, for ``foreign`` columns.
    reference: Optional["ColumnDescriptor"] = field(default=None, repr=False)
    extra: str = ""

    @property
    def attribute(self) -> str:
        return ".".join(self.path)

    def get(self, record: Any) -> Any:
        """Read this column's field from ``record``; a missing nested model reads as None."""
        value = record
        for attr in self.path:
            if value is None:
                return None
            value = getattr(value, attr)
        return value

    def set(self, record: Any, value: Any) -> None:
        """Write ``value`` into the field, creating empty nested models along the path."""
        target = record
        for attr in self.path[:-1]:
            child = getattr(target, attr)
            if child is None:
                child = _nested_type(target, attr).model_construct()
                setattr(target, attr, child)
            target = child
        setattr(target, self.path[-1], value)

    def is_zero(self, value: Any) -> bool:
        """Whether ``value`` is the zero value of this column's kind."""
        if value is None:
            return True
        if self.kind == FieldKind.BOOLEAN:
            return value is False
        if self.kind in _ZERO_VALUES:
            # bool is an int subclass; False only counts as zero for BOOLEAN columns.
            return not isinstance(value, bool) and value == _ZERO_VALUES[self.kind]
        if self.kind == FieldKind.JSON:
            return isinstance(value, (dict, list, tuple, set, str)) and len(value) == 0
        return False


@dataclass
class Schema:
    """Column and key metadata for one record type."""

    record_type: type
    table: str = ""
    columns: List[ColumnDescriptor] = field(default_factory=list)
    pkey: int = -1
    fkey: int = -1
    created: int = -1
    updated: int = -1
    refresh_order_by: str = ""
    validated: bool = False

    @property
    def primary_key(self) -> ColumnDescriptor:
        return self.columns[self.pkey]

    @property
    def foreign_key(self) -> Optional[ColumnDescriptor]:
        return self.columns[self.fkey] if self.fkey >= 0 else None

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def validate(self) -> None:
        """
        Check the invariants every statement relies on.

        Runs once; later calls return immediately. A failing schema is never
        marked valid, so the same error is raised on every call.
        """
        if self.validated:
            return
        if not self.table:
            raise MissingTableName(self.record_type)
        if self.pkey < 0:
            raise MissingPrimaryKey(self.record_type)
        if self.fkey == self.pkey:
            raise DuplicateOrConflictingKeyRole(
                self.record_type,
                f"column {self.primary_key.name!r} cannot be both primary and foreign key",
            )
        self.validated = True


def is_time_type(annotation: Any) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, datetime)


__all__ = ["FieldKind", "ColumnDescriptor", "Schema", "unwrap_optional", "is_time_type"]
