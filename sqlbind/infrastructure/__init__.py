"""
Infrastructure package for sqlbind.

Centralizes driver-facing concerns (connection factories, the execution
adapter). Keep this layer focused on I/O, decoupled from schema and
statement-generation logic.
"""

from sqlbind.infrastructure.db_factory import (
    build_dsn,
    get_connection,
    open_database,
)
from sqlbind.infrastructure.executor import DBAPIExecutor, ExecutionResult, Executor

__all__ = [
    "DBAPIExecutor",
    "ExecutionResult",
    "Executor",
    "build_dsn",
    "get_connection",
    "open_database",
]
