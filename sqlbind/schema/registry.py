"""
Schema registry: the per-database cache of built schemas.

Each ``Database`` owns one registry. Schemas are built lazily on first attach
and kept for the registry's lifetime. Concurrent first attaches of the same
type build the schema once; every caller receives the same ``Schema`` object.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Dict, List, Optional

from sqlbind.schema.builder import build_schema
from sqlbind.schema.models import Schema
from sqlbind.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlbind.dialects.abstract import Dialect

log = get_logger(__name__)


class SchemaRegistry:
    """
    Thread-safe mapping from record type to schema.

    ``_lock`` guards the dictionaries only. Builds run under a per-type lock
    so unrelated types never wait on each other, and a build may look up
    already-registered types (``foreign`` columns) without deadlocking.
    """

    def __init__(self, dialect: "Dialect") -> None:
        self.dialect = dialect
        self._schemas: Dict[type, Schema] = {}
        self._build_locks: Dict[type, threading.Lock] = {}
        self._lock = threading.Lock()

    def get(self, record_type: type) -> Optional[Schema]:
        """Return the registered schema for ``record_type``, or None."""
        with self._lock:
            return self._schemas.get(record_type)

    def get_or_build(self, record_type: type) -> Schema:
        """
        Return the schema for ``record_type``, building it on first use.

        Build errors propagate and leave nothing cached; a later call retries
        the build.
        """
        with self._lock:
            schema = self._schemas.get(record_type)
            if schema is not None:
                return schema
            build_lock = self._build_locks.setdefault(record_type, threading.Lock())

        with build_lock:
            # Another thread may have finished the build while we waited.
            schema = self.get(record_type)
            if schema is not None:
                return schema

            schema = build_schema(record_type, self.dialect, self.get)
            with self._lock:
                self._schemas[record_type] = schema
            log.info(
                f"Registered {record_type.__name__}",
                extra={"record_type": record_type.__name__, "table": schema.table},
            )
            return schema

    def registered(self) -> List[type]:
        with self._lock:
            return list(self._schemas)

    def __contains__(self, record_type: object) -> bool:
        with self._lock:
            return record_type in self._schemas

    def __len__(self) -> int:
        with self._lock:
            return len(self._schemas)

    def clear(self) -> None:
        """Drop every schema. Called when the owning database closes."""
        with self._lock:
            self._schemas.clear()
            self._build_locks.clear()


__all__ = ["SchemaRegistry"]
