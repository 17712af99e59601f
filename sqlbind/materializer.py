"""
Row materializer: writes raw driver values back into record fields.

Rows are read positionally, one value per schema column in schema order,
which is the order CREATE TABLE declared them and therefore the order
``SELECT *`` returns them.
"""

from __future__ import annotations

import numbers
from decimal import Decimal
from typing import Any, Callable, Dict, Sequence

from sqlbind.codec import decode_json, decode_time
from sqlbind.errors import RowShapeMismatch, TypeMismatch, UnsupportedStructColumn
from sqlbind.schema.models import ColumnDescriptor, FieldKind, Schema


def _as_string(column: ColumnDescriptor, raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw).decode("utf-8")
    raise TypeMismatch(column.name, f"expected text, got {type(raw).__name__}")


def _as_integer(column: ColumnDescriptor, raw: Any) -> int:
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    raise TypeMismatch(column.name, f"expected integer, got {type(raw).__name__}")


def _as_float(column: ColumnDescriptor, raw: Any) -> float:
    # MySQL and PostgreSQL drivers return DECIMAL/NUMERIC values as Decimal.
    if isinstance(raw, (numbers.Real, Decimal)) and not isinstance(raw, bool):
        return float(raw)
    raise TypeMismatch(column.name, f"expected number, got {type(raw).__name__}")


def _as_boolean(column: ColumnDescriptor, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    # Engines without a boolean type hand back 0/1.
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    raise TypeMismatch(column.name, f"expected boolean or 0/1, got {raw!r}")


def _as_reference(column: ColumnDescriptor, raw: Any) -> Any:
    # Unloaded stand-in holding only the key; call refresh() on it to load the row.
    target = column.python_type.model_construct()
    column.reference.set(target, raw)
    return target


def _as_struct(column: ColumnDescriptor, raw: Any) -> Any:
    raise UnsupportedStructColumn(column.name)


def _as_other(column: ColumnDescriptor, raw: Any) -> Any:
    return raw


_DECODERS: Dict[FieldKind, Callable[[ColumnDescriptor, Any], Any]] = {
    FieldKind.STRING: _as_string,
    FieldKind.INTEGER: _as_integer,
    FieldKind.FLOAT: _as_float,
    FieldKind.BOOLEAN: _as_boolean,
    FieldKind.TIME: decode_time,
    FieldKind.JSON: decode_json,
    FieldKind.REFERENCE: _as_reference,
    FieldKind.STRUCT: _as_struct,
    FieldKind.OTHER: _as_other,
}


def materialize(schema: Schema, row: Sequence[Any], record: Any) -> int:
    """
    Write one result row into ``record``.

    NULL values leave their field untouched. Returns 1 once every column has
    been written, so bulk callers can sum the results. On failure nothing is
    written.

    Raises
    ------
    MaterializationError
        ``RowShapeMismatch``, ``JSONDecodeFailure``, ``InvalidTimeEncoding``,
        ``UnsupportedStructColumn`` or ``TypeMismatch``, naming the column.
    """
    if len(row) != len(schema.columns):
        raise RowShapeMismatch(schema.table, len(schema.columns), len(row))

    # Decode everything before assigning, so a bad value leaves the record as it was.
    decoded = [
        (column, _DECODERS[column.kind](column, raw))
        for column, raw in zip(schema.columns, row)
        if raw is not None
    ]
    for column, value in decoded:
        column.set(record, value)
    return 1


__all__ = ["materialize"]
