"""
Schema builder: turns a record type into a ``Schema``.

Fields are visited in declaration order. Nested models (fields typed as a
pydantic model and not flagged ``json`` or ``foreign``) are descended into and
their tagged fields flattened into the same table, so related columns can be
grouped without a second table. Untagged scalar fields are ignored.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Tuple

from pydantic import BaseModel

from sqlbind.errors import CyclicEmbedding, DuplicateOrConflictingKeyRole
from sqlbind.schema.models import Schema, unwrap_optional
from sqlbind.schema.tags import ParsedTag, ReferenceResolver, find_tag, parse_tag, split_tag
from sqlbind.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlbind.dialects.abstract import Dialect

log = get_logger(__name__)


def _is_model(annotation: Any) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, BaseModel)


def build_schema(
    record_type: type,
    dialect: "Dialect",
    resolve_reference: ReferenceResolver,
) -> Schema:
    """
    Build the schema of ``record_type``.

    Parameters
    ----------
    record_type : type
        A pydantic model whose fields carry ``db(...)`` tags.
    dialect : Dialect
        Supplies SQL types for columns without a ``type:`` override.
    resolve_reference : callable
        Returns the registered schema for a record type, or None. Used for
        ``foreign`` columns.

    Returns
    -------
    Schema
        Unvalidated schema; ``Schema.validate`` runs on first use.

    Raises
    ------
    SchemaError
        On malformed tags, flag/type mismatches, unresolved foreign keys,
        cyclic embedding or duplicated key roles.
    """
    schema = Schema(record_type=record_type)
    _walk(record_type, (), [record_type], schema, dialect, resolve_reference)
    log.debug(
        f"Built schema for {record_type.__name__}",
        extra={"record_type": record_type.__name__, "table": schema.table, "columns": len(schema.columns)},
    )
    return schema


def _walk(
    model: type,
    prefix: Tuple[str, ...],
    chain: List[type],
    schema: Schema,
    dialect: "Dialect",
    resolve_reference: ReferenceResolver,
) -> None:
    for attr, info in model.model_fields.items():
        tag = find_tag(info.metadata)
        annotation = unwrap_optional(info.annotation)
        path = prefix + (attr,)

        if _is_model(annotation):
            flags = split_tag(tag.spec)[1] if tag else []
            if "json" not in flags and "foreign" not in flags:
                if annotation in chain:
                    raise CyclicEmbedding(chain + [annotation])
                if tag:
                    # A tag on an embedded model only contributes schema-level keys.
                    _, _, keyed = split_tag(tag.spec)
                    _apply_schema_keys(schema, keyed.get("table", ""), keyed.get("refresh", ""))
                _walk(annotation, path, chain + [annotation], schema, dialect, resolve_reference)
                continue

        if tag is None:
            continue

        parsed = parse_tag(
            tag.spec,
            info.annotation,
            path=path,
            dialect=dialect,
            resolve_reference=resolve_reference,
        )
        _add_column(schema, parsed)


def _apply_schema_keys(schema: Schema, table: str, refresh: str) -> None:
    # First non-empty value anywhere in the walk wins.
    if table and not schema.table:
        schema.table = table
    if refresh and not schema.refresh_order_by:
        schema.refresh_order_by = refresh


def _add_column(schema: Schema, parsed: ParsedTag) -> None:
    column = parsed.column
    index = len(schema.columns)

    if column.name in schema.column_names:
        raise DuplicateOrConflictingKeyRole(
            schema.record_type, f"column {column.name!r} is declared more than once"
        )

    for flag, slot in (("primary", "pkey"), ("foreign", "fkey"), ("created", "created"), ("updated", "updated")):
        if not getattr(column, flag):
            continue
        current = getattr(schema, slot)
        if current >= 0:
            raise DuplicateOrConflictingKeyRole(
                schema.record_type,
                f"columns {schema.columns[current].name!r} and {column.name!r} are both flagged {flag!r}",
            )
        setattr(schema, slot, index)

    _apply_schema_keys(schema, parsed.table, parsed.refresh)
    schema.columns.append(column)


__all__ = ["build_schema"]
