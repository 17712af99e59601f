"""
``db`` tag declaration and parser.

A record field opts into a column with ``Annotated`` metadata::

    class User(Record):
        id: Annotated[int, db("id,primary,autoinc,table:users")] = 0
        name: Annotated[str, db("name,unique")] = ""

Tag grammar: ``name[,flag]*[,key:value]*``. The first token is the column
name. Bare flags are ``primary``, ``unique``, ``autoinc``, ``created``,
``updated``, ``foreign`` and ``json``; any other bare token is kept verbatim as
an extra column property (``NOT NULL``, ``CHECK(...)``). Keyed tokens are
``default:``, ``table:``, ``type:`` and ``refresh:``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence, Set as AbstractSet
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple, get_origin

from pydantic import BaseModel

from sqlbind.errors import ForeignKeyNotYetDefined, InvalidFieldType, MalformedTag
from sqlbind.schema.models import ColumnDescriptor, FieldKind, Schema, is_time_type, unwrap_optional

if TYPE_CHECKING:
    from sqlbind.dialects.abstract import Dialect

BARE_FLAGS = frozenset({"primary", "unique", "autoinc", "created", "updated", "foreign", "json"})
KEYED_TOKENS = frozenset({"default", "table", "type", "refresh"})

_JSON_CONTAINERS = (Mapping, Sequence, AbstractSet)

ReferenceResolver = Callable[[type], Optional[Schema]]


@dataclass(frozen=True)
class DBTag:
    """Column declaration attached to a field through ``Annotated``."""

    spec: str


def db(spec: str) -> DBTag:
    return DBTag(spec)


@dataclass(frozen=True)
class ParsedTag:
    """A column plus the schema-level settings its tag carried."""

    column: ColumnDescriptor
    table: str = ""
    refresh: str = ""


def infer_kind(annotation: Any) -> FieldKind:
    """Map a Python annotation to the kind the dialects and the materializer understand."""
    annotation = unwrap_optional(annotation)
    origin = get_origin(annotation)
    if origin is not None:
        if isinstance(origin, type) and issubclass(origin, _JSON_CONTAINERS):
            return FieldKind.JSON
        return FieldKind.OTHER
    if not isinstance(annotation, type):
        return FieldKind.OTHER
    # bool before int: bool is an int subclass.
    if issubclass(annotation, bool):
        return FieldKind.BOOLEAN
    if issubclass(annotation, int):
        return FieldKind.INTEGER
    if issubclass(annotation, float):
        return FieldKind.FLOAT
    if issubclass(annotation, str):
        return FieldKind.STRING
    if is_time_type(annotation):
        return FieldKind.TIME
    if issubclass(annotation, (bytes, bytearray)):
        return FieldKind.OTHER
    if issubclass(annotation, _JSON_CONTAINERS):
        return FieldKind.JSON
    if issubclass(annotation, BaseModel) or hasattr(annotation, "__dataclass_fields__"):
        return FieldKind.STRUCT
    return FieldKind.OTHER


def split_tag(tag: str) -> Tuple[str, List[str], Dict[str, str]]:
    """
    Split a tag into (column name, bare flags, keyed values).

    Raises ``MalformedTag`` for an empty column name or an unknown key.
    """
    tokens = [t.strip() for t in tag.split(",")]
    name = tokens[0] if tokens else ""
    if not name:
        raise MalformedTag(tag, "column name is empty")
    if ":" in name:
        raise MalformedTag(tag, f"first token must be the column name, got {name!r}")

    flags: List[str] = []
    keyed: Dict[str, str] = {}
    for token in tokens[1:]:
        if not token:
            continue
        key, sep, value = token.partition(":")
        if not sep:
            flags.append(token)
            continue
        key = key.strip()
        if key not in KEYED_TOKENS:
            raise MalformedTag(tag, f"unknown key {key!r}")
        keyed[key] = value.strip()
    return name, flags, keyed


def parse_tag(
    tag: str,
    annotation: Any,
    *,
    path: Tuple[str, ...],
    dialect: "Dialect",
    resolve_reference: ReferenceResolver,
) -> ParsedTag:
    """
    Parse one field's tag into a column descriptor.

    ``annotation`` is the field's declared type; it decides the column kind
    and, without an explicit ``type:``, the SQL type via ``dialect``.
    ``resolve_reference`` looks up the schema of a record type named by a
    ``foreign`` column.
    """
    name, flags, keyed = split_tag(tag)
    python_type = unwrap_optional(annotation)

    options: Dict[str, Any] = {}
    extras: List[str] = []
    for flag in flags:
        if flag in BARE_FLAGS:
            options[flag] = True
        else:
            extras.append(flag)

    kind = infer_kind(python_type)
    if options.get("json"):
        kind = FieldKind.JSON

    if (options.get("created") or options.get("updated")) and not is_time_type(python_type):
        raise InvalidFieldType(name, "datetime", python_type)

    sql_type = keyed.get("type", "")
    foreign_table = foreign_column = None
    reference = None
    if options.get("foreign"):
        if not (isinstance(python_type, type) and issubclass(python_type, BaseModel)):
            raise InvalidFieldType(name, "a record type", python_type)
        target = resolve_reference(python_type)
        if target is None:
            raise ForeignKeyNotYetDefined(name, python_type)
        target.validate()
        reference = target.primary_key
        foreign_table = target.table
        foreign_column = reference.name
        kind = FieldKind.REFERENCE
        if not sql_type:
            # A reference column stores the target's key, so it shares the key's type.
            sql_type = reference.sql_type

    if not sql_type:
        sql_type = dialect.get_column_type(kind)

    column = ColumnDescriptor(
        name=name,
        path=path,
        kind=kind,
        sql_type=sql_type,
        python_type=python_type,
        primary=bool(options.get("primary")),
        autoincrement=bool(options.get("autoinc")),
        unique=bool(options.get("unique")),
        created=bool(options.get("created")),
        updated=bool(options.get("updated")),
        json=kind == FieldKind.JSON,
        foreign=bool(options.get("foreign")),
        default=keyed.get("default") or None,
        foreign_table=foreign_table,
        foreign_column=foreign_column,
        reference=reference,
        extra=" ".join(extras),
    )
    return ParsedTag(column=column, table=keyed.get("table", ""), refresh=keyed.get("refresh", ""))


def find_tag(metadata: List[Any]) -> Optional[DBTag]:
    """Return the ``db`` tag among a field's ``Annotated`` metadata, if any."""
    for item in metadata:
        if isinstance(item, DBTag):
            return item
    return None


__all__ = [
    "BARE_FLAGS",
    "KEYED_TOKENS",
    "DBTag",
    "ParsedTag",
    "db",
    "find_tag",
    "infer_kind",
    "parse_tag",
    "split_tag",
]
