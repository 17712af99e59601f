"""
Error taxonomy for sqlbind.

Errors fall into four groups that surface at different points of a record's
lifecycle:

- ``SchemaError``: raised while attaching a record type (bad tags, bad field
  types, unresolved foreign keys). Nothing is cached when these are raised.
- ``SchemaValidationError``: raised by the first data operation on a schema
  that was built but is incomplete (no table, no primary key). Raised again on
  every call until the record type is fixed.
- ``MaterializationError``: raised while writing a result row into a record.
- Operational errors (``NoMatchingRow``, ``ExecutionFailure``, ...).
"""

from __future__ import annotations

from typing import Any, List


class SqlBindError(Exception):
    """Base error for all sqlbind failures."""

    pass


# Schema construction


class SchemaError(SqlBindError):
    """Record type could not be turned into a schema."""

    pass


class MalformedTag(SchemaError):
    """A ``db`` tag could not be parsed."""

    def __init__(self, tag: str, reason: str) -> None:
        super().__init__(f"Malformed db tag {tag!r}: {reason}")
        self.tag = tag
        self.reason = reason


class InvalidFieldType(SchemaError):
    """A tag flag does not fit the annotated Python type of its field."""

    def __init__(self, column: str, expected: str, actual: Any) -> None:
        actual_name = getattr(actual, "__name__", repr(actual))
        super().__init__(f"Column {column!r} must be annotated as {expected}, got {actual_name}")
        self.column = column
        self.expected = expected
        self.actual = actual


class ForeignKeyNotYetDefined(SchemaError):
    """A ``foreign`` column references a record type that is not attached yet."""

    def __init__(self, column: str, referenced: type) -> None:
        super().__init__(
            f"Column {column!r} references {referenced.__name__}, which has not been "
            f"attached yet. Attach referenced record types first."
        )
        self.column = column
        self.referenced = referenced


class CyclicEmbedding(SchemaError):
    """Nested models embed each other, so the schema would never end."""

    def __init__(self, chain: List[type]) -> None:
        names = " -> ".join(t.__name__ for t in chain)
        super().__init__(f"Cyclic model embedding: {names}")
        self.chain = chain


# Validation (deferred to first use)


class SchemaValidationError(SqlBindError):
    """A built schema is missing something every statement needs."""

    pass


class MissingTableName(SchemaValidationError):
    """No field declared ``table:<name>``."""

    def __init__(self, record_type: type) -> None:
        super().__init__(f"{record_type.__name__}: no table name declared (use 'table:<name>')")
        self.record_type = record_type


class MissingPrimaryKey(SchemaValidationError):
    """No field was flagged ``primary``."""

    def __init__(self, record_type: type) -> None:
        super().__init__(f"{record_type.__name__}: no primary key declared (use 'primary')")
        self.record_type = record_type


class DuplicateOrConflictingKeyRole(SchemaError, SchemaValidationError):
    """Two columns claim a single-column role, or one column claims two roles."""

    def __init__(self, record_type: type, message: str) -> None:
        super().__init__(f"{record_type.__name__}: {message}")
        self.record_type = record_type


# Materialization


class MaterializationError(SqlBindError):
    """A result value could not be written into its record field."""

    def __init__(self, column: str, message: str) -> None:
        super().__init__(f"Column {column!r}: {message}")
        self.column = column
        # Rows materialized before the failure, filled in by bulk fetches.
        self.partial: List[Any] = []


class JSONDecodeFailure(MaterializationError):
    pass


class InvalidTimeEncoding(MaterializationError):
    pass


class UnsupportedStructColumn(MaterializationError):
    def __init__(self, column: str) -> None:
        super().__init__(column, "structured values must be flagged 'json' to be stored in one column")


class TypeMismatch(MaterializationError):
    pass


class RowShapeMismatch(MaterializationError):
    """The result row and the schema disagree on the number of columns."""

    def __init__(self, table: str, expected: int, actual: int) -> None:
        super().__init__("*", f"table {table!r} returned {actual} columns, schema has {expected}")
        self.table = table
        self.expected = expected
        self.actual = actual


# Operations


class NotAttached(SqlBindError):
    """A data operation was called on a record that was never attached."""

    def __init__(self, record: Any) -> None:
        super().__init__(
            f"{type(record).__name__} instance is not attached to a database; call db.attach() first"
        )


class NoMatchingRow(SqlBindError):
    """A single-row fetch found nothing."""

    def __init__(self, table: str, statement: str) -> None:
        super().__init__(f"No rows in {table!r} matched: {statement}")
        self.table = table
        self.statement = statement


class EmptyUpdate(SqlBindError):
    """Every non-key column was skipped, leaving nothing to SET."""

    def __init__(self, table: str) -> None:
        super().__init__(f"Nothing to update in {table!r}: every column was empty or skipped")
        self.table = table


class MalformedQueryParams(SqlBindError):
    """A raw WHERE/ORDER BY fragment repeats its own keyword."""

    def __init__(self, field: str, value: str) -> None:
        super().__init__(f"Params.{field} must not start with its SQL keyword: {value!r}")
        self.field = field
        self.value = value


class InvalidDestination(SqlBindError):
    """Bulk fetch target is not a mutable sequence of a record type."""

    pass


class UnknownDialect(SqlBindError):
    def __init__(self, name: str, available: List[str]) -> None:
        super().__init__(f"Unknown dialect '{name}'. Available: {', '.join(available)}")
        self.name = name


class ExecutionFailure(SqlBindError):
    """The driver rejected a statement. The driver error is chained as ``__cause__``."""

    def __init__(self, statement: str, error: BaseException) -> None:
        super().__init__(f"{type(error).__name__}: {error} [statement: {statement}]")
        self.statement = statement
        self.error = error


__all__ = [
    "SqlBindError",
    "SchemaError",
    "MalformedTag",
    "InvalidFieldType",
    "ForeignKeyNotYetDefined",
    "CyclicEmbedding",
    "SchemaValidationError",
    "MissingTableName",
    "MissingPrimaryKey",
    "DuplicateOrConflictingKeyRole",
    "MaterializationError",
    "JSONDecodeFailure",
    "InvalidTimeEncoding",
    "UnsupportedStructColumn",
    "TypeMismatch",
    "RowShapeMismatch",
    "NotAttached",
    "NoMatchingRow",
    "EmptyUpdate",
    "MalformedQueryParams",
    "InvalidDestination",
    "UnknownDialect",
    "ExecutionFailure",
]
