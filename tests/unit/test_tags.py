from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

import pytest
from pydantic import BaseModel

from sqlbind.dialects import MySQLDialect, SQLiteDialect
from sqlbind.errors import ForeignKeyNotYetDefined, InvalidFieldType, MalformedTag
from sqlbind.schema.models import FieldKind, Schema
from sqlbind.schema.tags import infer_kind, parse_tag, split_tag

SQLITE = SQLiteDialect()


def _no_references(record_type: type) -> Optional[Schema]:
    return None


def _parse(tag: str, annotation: Any, dialect=SQLITE, resolver=_no_references):
    return parse_tag(tag, annotation, path=("field",), dialect=dialect, resolve_reference=resolver)


def test_split_tag_separates_name_flags_and_keys() -> None:
    name, flags, keyed = split_tag("id, primary ,autoinc,table:users,refresh:id DESC")
    assert name == "id"
    assert flags == ["primary", "autoinc"]
    assert keyed == {"table": "users", "refresh": "id DESC"}


def test_split_tag_ignores_empty_tokens() -> None:
    name, flags, keyed = split_tag("name,,unique,")
    assert name == "name"
    assert flags == ["unique"]
    assert keyed == {}


@pytest.mark.parametrize("tag", ["", " ", ",primary", "table:users"])
def test_split_tag_rejects_missing_column_name(tag: str) -> None:
    with pytest.raises(MalformedTag):
        split_tag(tag)


def test_unknown_key_is_malformed() -> None:
    with pytest.raises(MalformedTag, match="colour"):
        split_tag("name,colour:red")


def test_primary_autoinc_table_tag() -> None:
    parsed = _parse("id,primary,autoinc,table:users", int)
    column = parsed.column
    assert column.name == "id"
    assert column.primary and column.autoincrement
    assert column.kind == FieldKind.INTEGER
    assert column.sql_type == "INTEGER"
    assert parsed.table == "users"


def test_unknown_bare_tokens_become_extra_properties() -> None:
    column = _parse("email,NOT NULL,CHECK(length(email) > 3)", str).column
    assert column.extra == "NOT NULL CHECK(length(email) > 3)"
    assert not column.unique


def test_explicit_type_and_default() -> None:
    column = _parse("score,type:NUMERIC,default:0", float).column
    assert column.sql_type == "NUMERIC"
    assert column.default == "0"


def test_dialect_chooses_default_sql_type() -> None:
    assert _parse("name", str).column.sql_type == "TEXT"
    assert _parse("name", str, dialect=MySQLDialect()).column.sql_type == "VARCHAR(255)"


def test_created_requires_datetime() -> None:
    with pytest.raises(InvalidFieldType, match="created_at"):
        _parse("created_at,created", int)
    column = _parse("created_at,created", Optional[datetime]).column
    assert column.created
    assert column.kind == FieldKind.TIME


def test_json_flag_overrides_kind() -> None:
    column = _parse("tags,json", str).column
    assert column.kind == FieldKind.JSON
    assert column.json


def test_containers_are_json_without_flag() -> None:
    assert _parse("meta", Dict[str, int]).column.kind == FieldKind.JSON
    assert _parse("items", List[str]).column.json


@pytest.mark.parametrize(
    "annotation, expected",
    [
        (bool, FieldKind.BOOLEAN),
        (int, FieldKind.INTEGER),
        (float, FieldKind.FLOAT),
        (str, FieldKind.STRING),
        (datetime, FieldKind.TIME),
        (Optional[int], FieldKind.INTEGER),
        (bytes, FieldKind.OTHER),
        (dict, FieldKind.JSON),
    ],
)
def test_infer_kind(annotation: Any, expected: FieldKind) -> None:
    assert infer_kind(annotation) == expected


class Team(BaseModel):
    id: int = 0


def test_foreign_requires_a_model_type() -> None:
    with pytest.raises(InvalidFieldType):
        _parse("team_id,foreign", int)


def test_foreign_requires_registered_target() -> None:
    with pytest.raises(ForeignKeyNotYetDefined, match="Team"):
        _parse("team_id,foreign", Team)


def test_foreign_takes_target_key_type_and_table() -> None:
    target = Schema(record_type=Team, table="teams")
    key = _parse("id,primary", int).column
    target.columns.append(key)
    target.pkey = 0

    column = _parse("team_id,foreign", Optional[Team], resolver=lambda t: target).column
    assert column.kind == FieldKind.REFERENCE
    assert column.foreign_table == "teams"
    assert column.foreign_column == "id"
    assert column.sql_type == "INTEGER"
    assert column.reference is key
