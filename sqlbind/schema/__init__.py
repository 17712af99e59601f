"""
Schema package for sqlbind.

Covers everything derived from record-type annotations: the ``db`` tag and its
parser, the schema builder, the data model, and the per-database registry.
"""

from sqlbind.schema.builder import build_schema
from sqlbind.schema.models import ColumnDescriptor, FieldKind, Schema
from sqlbind.schema.registry import SchemaRegistry
from sqlbind.schema.tags import DBTag, db, parse_tag

__all__ = [
    "ColumnDescriptor",
    "DBTag",
    "FieldKind",
    "Schema",
    "SchemaRegistry",
    "build_schema",
    "db",
    "parse_tag",
]
