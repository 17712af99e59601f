"""
Dialects package for sqlbind.

Re-exports the dialect interfaces and the concrete engines, and keeps the
name -> dialect registry used by settings and the CLI.
"""

from __future__ import annotations

from typing import Callable, Dict, List

from sqlbind.dialects.abstract import AbstractDialect, Dialect, Statement
from sqlbind.dialects.mysql import MySQLDialect
from sqlbind.dialects.postgres import PostgresDialect
from sqlbind.dialects.sqlite import SQLiteDialect
from sqlbind.errors import UnknownDialect


def _dialect_factories() -> Dict[str, Callable[[], Dialect]]:
    """Registry of available dialects."""
    return {
        "sqlite": lambda: SQLiteDialect(),
        "mysql": lambda: MySQLDialect(),
        "postgres": lambda: PostgresDialect(),
    }


def available_dialects() -> List[str]:
    """List available dialect names."""
    return sorted(_dialect_factories().keys())


def get_dialect(name: str) -> Dialect:
    factories = _dialect_factories()
    key = name.lower()
    if key == "postgresql":
        key = "postgres"
    if key not in factories:
        raise UnknownDialect(name, available_dialects())
    return factories[key]()


__all__ = [
    # Abstracts
    "AbstractDialect",
    "Dialect",
    "Statement",
    # Concrete dialects
    "MySQLDialect",
    "PostgresDialect",
    "SQLiteDialect",
    # Registry
    "available_dialects",
    "get_dialect",
]
