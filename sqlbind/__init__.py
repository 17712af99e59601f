"""
sqlbind - bind pydantic records to relational table rows.

Annotate record fields with ``db("...")`` tags and sqlbind derives the table
schema once per type, generates CREATE/SELECT/INSERT/UPDATE/DELETE for it and
reads rows back into typed fields:

- Tag parsing and schema building (nested models flattened into columns)
- A per-database, thread-safe schema registry
- SQL generation for SQLite, MySQL and PostgreSQL
- Row materialization with JSON, epoch-time and foreign-key handling

No joins, migrations, transactions or pooling; the driver connection stays
with the caller.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from sqlbind.config import Settings, get_settings
from sqlbind.database import Database
from sqlbind.dialects import (
    AbstractDialect,
    Dialect,
    MySQLDialect,
    PostgresDialect,
    SQLiteDialect,
    Statement,
    available_dialects,
    get_dialect,
)
from sqlbind.domain import Params, Record
from sqlbind.errors import (
    ExecutionFailure,
    MaterializationError,
    NoMatchingRow,
    NotAttached,
    SchemaError,
    SchemaValidationError,
    SqlBindError,
)
from sqlbind.infrastructure import DBAPIExecutor, ExecutionResult, Executor, open_database
from sqlbind.schema import ColumnDescriptor, FieldKind, Schema, db
from sqlbind.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Records and the database handle
    "Database",
    "Params",
    "Record",
    "db",
    "open_database",
    # Schema
    "ColumnDescriptor",
    "FieldKind",
    "Schema",
    # Dialects
    "AbstractDialect",
    "Dialect",
    "MySQLDialect",
    "PostgresDialect",
    "SQLiteDialect",
    "Statement",
    "available_dialects",
    "get_dialect",
    # Execution
    "DBAPIExecutor",
    "ExecutionResult",
    "Executor",
    # Errors
    "ExecutionFailure",
    "MaterializationError",
    "NoMatchingRow",
    "NotAttached",
    "SchemaError",
    "SchemaValidationError",
    "SqlBindError",
    # Logging
    "configure_logging",
    "get_logger",
]
