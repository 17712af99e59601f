from __future__ import annotations

import threading
from typing import Annotated, List, Optional

import pytest

from sqlbind import Record, db
from sqlbind.dialects import SQLiteDialect
from sqlbind.errors import ForeignKeyNotYetDefined, MalformedTag
from sqlbind.schema.registry import SchemaRegistry

THREADS = 8


class Author(Record):
    id: Annotated[int, db("id,primary,autoinc,table:authors")] = 0
    name: Annotated[str, db("name")] = ""


class Book(Record):
    id: Annotated[int, db("id,primary,autoinc,table:books")] = 0
    author: Annotated[Optional[Author], db("author_id,foreign")] = None


class Broken(Record):
    id: Annotated[int, db("id,primary,colour:red,table:broken")] = 0


def test_concurrent_first_builds_share_one_schema() -> None:
    registry = SchemaRegistry(SQLiteDialect())
    barrier = threading.Barrier(THREADS)
    results: List[object] = []
    lock = threading.Lock()

    def worker() -> None:
        barrier.wait()
        schema = registry.get_or_build(Author)
        with lock:
            results.append(schema)

    threads = [threading.Thread(target=worker) for _ in range(THREADS)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == THREADS
    assert all(schema is results[0] for schema in results)
    assert len(registry) == 1


def test_failed_build_is_not_cached() -> None:
    registry = SchemaRegistry(SQLiteDialect())
    for _ in range(2):
        with pytest.raises(MalformedTag):
            registry.get_or_build(Broken)
    assert Broken not in registry


def test_foreign_target_must_be_registered_first() -> None:
    registry = SchemaRegistry(SQLiteDialect())
    with pytest.raises(ForeignKeyNotYetDefined):
        registry.get_or_build(Book)

    registry.get_or_build(Author)
    schema = registry.get_or_build(Book)
    assert schema.foreign_key.foreign_table == "authors"
    assert registry.registered() == [Author, Book]


def test_registries_are_independent() -> None:
    first = SchemaRegistry(SQLiteDialect())
    second = SchemaRegistry(SQLiteDialect())
    assert first.get_or_build(Author) is not second.get_or_build(Author)
    first.clear()
    assert len(first) == 0
    assert Author in second
