"""
Utilities package for sqlbind.

Exports shared helpers for logging and other cross-cutting concerns.
Keep this package lightweight and free of schema or SQL logic.
"""

from sqlbind.utils.logging import ConsoleFormatter, JsonFormatter, configure_logging, get_logger

__all__ = [
    "ConsoleFormatter",
    "JsonFormatter",
    "configure_logging",
    "get_logger",
]
