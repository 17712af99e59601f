"""
Value codecs shared by statement generation and row materialization.

Storage formats:
- JSON columns hold UTF-8 JSON text produced by a pydantic ``TypeAdapter``
  for the field's annotation, so models, dicts and lists all round-trip.
- Time columns hold whole Unix-epoch seconds (naive values count as UTC);
  decoded values are aware UTC datetimes.
- Reference columns hold the referenced record's primary-key value.
"""

from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Optional

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from sqlbind.errors import InvalidTimeEncoding, JSONDecodeFailure
from sqlbind.schema.models import ColumnDescriptor, FieldKind


@lru_cache(maxsize=None)
def _adapter(python_type: Any) -> TypeAdapter:
    return TypeAdapter(Any if python_type is None else python_type)


def _json_adapter(column: ColumnDescriptor) -> TypeAdapter:
    try:
        return _adapter(column.python_type)
    except TypeError:
        # Unhashable annotations cannot be cached.
        return TypeAdapter(column.python_type)


def encode_json(column: ColumnDescriptor, value: Any) -> Optional[str]:
    if value is None:
        return None
    return _json_adapter(column).dump_json(value).decode("utf-8")


def decode_json(column: ColumnDescriptor, raw: Any) -> Any:
    if isinstance(raw, (bytes, bytearray, memoryview)):
        raw = bytes(raw)
    elif not isinstance(raw, str):
        raise JSONDecodeFailure(column.name, f"expected text or bytes, got {type(raw).__name__}")
    try:
        return _json_adapter(column).validate_json(raw)
    except PydanticValidationError as exc:
        raise JSONDecodeFailure(column.name, f"cannot decode {raw!r}: {exc}") from exc


def encode_time(value: Optional[datetime]) -> Optional[int]:
    """
    Whole Unix-epoch seconds for ``value``.

    A naive datetime is read as UTC, never as host-local time, so the stored
    value does not depend on the machine that wrote it. Decoding always
    returns an aware UTC datetime.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def decode_time(column: ColumnDescriptor, raw: Any) -> datetime:
    if isinstance(raw, bool):
        raise InvalidTimeEncoding(column.name, "expected epoch seconds, got a boolean")
    if isinstance(raw, int):
        seconds = raw
    elif isinstance(raw, str):
        try:
            seconds = int(raw.strip())
        except ValueError as exc:
            raise InvalidTimeEncoding(column.name, f"cannot parse {raw!r} as epoch seconds") from exc
    else:
        raise InvalidTimeEncoding(
            column.name, f"expected integer or numeric string, got {type(raw).__name__}"
        )
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def encode_value(column: ColumnDescriptor, value: Any) -> Any:
    """Convert a field value into what the driver receives as a bound parameter."""
    if column.kind == FieldKind.JSON:
        return encode_json(column, value)
    if column.kind == FieldKind.TIME:
        return encode_time(value)
    if column.kind == FieldKind.REFERENCE and isinstance(value, BaseModel):
        return column.reference.get(value) if column.reference is not None else None
    return value


__all__ = ["decode_json", "decode_time", "encode_json", "encode_time", "encode_value"]
