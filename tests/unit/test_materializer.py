from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, List, Optional

import pytest
from pydantic import BaseModel, Field

from sqlbind import Record, db
from sqlbind.codec import decode_time, encode_time
from sqlbind.dialects import SQLiteDialect
from sqlbind.errors import (
    InvalidTimeEncoding,
    JSONDecodeFailure,
    MaterializationError,
    RowShapeMismatch,
    TypeMismatch,
    UnsupportedStructColumn,
)
from sqlbind.materializer import materialize
from sqlbind.schema.registry import SchemaRegistry

EPOCH = 1_700_000_000


class Preferences(BaseModel):
    theme: str = "light"
    volume: int = 5


class Location(BaseModel):
    lat: Annotated[float, db("lat")] = 0.0
    lng: Annotated[float, db("lng")] = 0.0


class Owner(Record):
    id: Annotated[int, db("id,primary,table:owners")] = 0


class Device(Record):
    id: Annotated[int, db("id,primary,autoinc,table:devices")] = 0
    name: Annotated[str, db("name")] = ""
    online: Annotated[bool, db("online")] = False
    seen_at: Annotated[Optional[datetime], db("seen_at")] = None
    settings: Annotated[Preferences, db("settings,json")] = Field(default_factory=Preferences)
    labels: Annotated[List[str], db("labels")] = Field(default_factory=list)
    location: Location = Field(default_factory=Location)
    owner: Annotated[Optional[Owner], db("owner_id,foreign")] = None


@dataclass
class Opaque:
    value: int = 0


class WithStruct(Record):
    id: Annotated[int, db("id,primary,table:structs")] = 0
    blob: Annotated[Optional[Opaque], db("blob,type:BLOB")] = None


@pytest.fixture
def schema():
    registry = SchemaRegistry(SQLiteDialect())
    registry.get_or_build(Owner)
    return registry.get_or_build(Device)


def _row(**overrides):
    row = {
        "id": 1,
        "name": "sensor",
        "online": 1,
        "seen_at": EPOCH,
        "settings": json.dumps({"theme": "dark", "volume": 3}),
        "labels": '["a", "b"]',
        "lat": 38.7,
        "lng": -9.1,
        "owner_id": 4,
    }
    row.update(overrides)
    return tuple(row.values())


def test_materialize_decodes_every_kind(schema) -> None:
    device = Device()
    assert materialize(schema, _row(), device) == 1

    assert device.id == 1
    assert device.name == "sensor"
    assert device.online is True
    assert device.seen_at == datetime.fromtimestamp(EPOCH, tz=timezone.utc)
    assert device.settings == Preferences(theme="dark", volume=3)
    assert device.labels == ["a", "b"]
    assert device.location.lat == pytest.approx(38.7)
    assert isinstance(device.owner, Owner)
    assert device.owner.id == 4


def test_null_leaves_field_unchanged(schema) -> None:
    device = Device(name="kept", seen_at=datetime(2020, 1, 1, tzinfo=timezone.utc))
    materialize(schema, _row(name=None, seen_at=None, owner_id=None), device)
    assert device.name == "kept"
    assert device.seen_at.year == 2020
    assert device.owner is None


def test_time_accepts_numeric_strings(schema) -> None:
    device = Device()
    materialize(schema, _row(seen_at=str(EPOCH)), device)
    assert int(device.seen_at.timestamp()) == EPOCH


@pytest.mark.parametrize(
    "overrides, error",
    [
        ({"seen_at": "yesterday"}, InvalidTimeEncoding),
        ({"seen_at": 1.5}, InvalidTimeEncoding),
        ({"settings": "{not json"}, JSONDecodeFailure),
        ({"settings": 12}, JSONDecodeFailure),
        ({"id": "one"}, TypeMismatch),
        ({"online": 2}, TypeMismatch),
    ],
)
def test_bad_values_name_the_column(schema, overrides, error) -> None:
    column = next(iter(overrides))
    with pytest.raises(error) as excinfo:
        materialize(schema, _row(**overrides), Device())
    assert isinstance(excinfo.value, MaterializationError)
    assert excinfo.value.column == column


def test_failure_leaves_record_untouched(schema) -> None:
    device = Device(name="before")
    with pytest.raises(JSONDecodeFailure):
        materialize(schema, _row(labels="[broken"), device)
    assert device.name == "before"
    assert device.id == 0


def test_row_length_must_match_schema(schema) -> None:
    with pytest.raises(RowShapeMismatch, match="devices"):
        materialize(schema, (1, "short"), Device())


def test_struct_columns_cannot_be_decoded() -> None:
    schema = SchemaRegistry(SQLiteDialect()).get_or_build(WithStruct)
    with pytest.raises(UnsupportedStructColumn, match="blob"):
        materialize(schema, (1, b"\x00"), WithStruct())


def test_decimal_values_fill_float_columns(schema) -> None:
    device = Device()
    materialize(schema, _row(lat=Decimal("1.5"), lng=Decimal("-2.25")), device)
    assert device.location.lat == 1.5
    assert device.location.lng == -2.25


def test_naive_times_are_stored_as_utc(schema) -> None:
    naive = datetime(2024, 5, 1, 12, 0, 0)
    aware = naive.replace(tzinfo=timezone.utc)
    assert encode_time(naive) == encode_time(aware)

    seen_at = next(c for c in schema.columns if c.name == "seen_at")
    assert decode_time(seen_at, encode_time(naive)) == aware
