"""
Statement execution contract and its DB-API 2.0 adapter.

sqlbind needs exactly two things from a driver: run a statement and report
how many rows it touched, and run a query and hand back its rows. Anything
richer (pools, transactions, prepared-statement caches) stays with the
caller's connection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Optional, Protocol, Sequence, Tuple, Type, runtime_checkable

from sqlbind.errors import ExecutionFailure
from sqlbind.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of a data-modifying statement."""

    rowcount: int
    lastrowid: Optional[int] = None


@runtime_checkable
class Executor(Protocol):
    """
    What sqlbind consumes from the relational engine.

    Implementations raise ``ExecutionFailure`` for statements the engine
    rejects and never retry on their own.
    """

    def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecutionResult:
        """Run a statement; return affected-row count and last inserted id."""
        ...

    def query(self, sql: str, params: Sequence[Any] = ()) -> Iterator[Sequence[Any]]:
        """Run a query eagerly and return an iterator over its rows."""
        ...

    def close(self) -> None: ...


class DBAPIExecutor:
    """
    ``Executor`` over any DB-API 2.0 connection (sqlite3, psycopg, ...).

    Parameters
    ----------
    connection : Any
        An open DB-API connection. It is owned by this executor once passed in
        and closed by ``close()``.
    commit : bool
        Commit after every ``execute``. Leave on unless the connection runs in
        autocommit mode or the caller manages transactions itself.
    driver_error : type[Exception]
        Base class of the driver's errors (``sqlite3.Error``,
        ``psycopg.Error``); those are wrapped in ``ExecutionFailure``.
    """

    def __init__(
        self,
        connection: Any,
        commit: bool = True,
        driver_error: Type[BaseException] = Exception,
    ) -> None:
        self.connection = connection
        self.commit = commit
        self._driver_error: Tuple[Type[BaseException], ...] = (driver_error,)

    def _run(self, sql: str, params: Sequence[Any]) -> Any:
        cursor = self.connection.cursor()
        try:
            if params:
                cursor.execute(sql, tuple(params))
            else:
                cursor.execute(sql)
        except self._driver_error as exc:
            cursor.close()
            raise ExecutionFailure(sql, exc) from exc
        return cursor

    def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecutionResult:
        cursor = self._run(sql, params)
        try:
            rowcount = cursor.rowcount if cursor.rowcount is not None else -1
            lastrowid = getattr(cursor, "lastrowid", None)
            if self.commit:
                self.connection.commit()
        except self._driver_error as exc:
            raise ExecutionFailure(sql, exc) from exc
        finally:
            cursor.close()
        # DB-API reports -1 when the count is unknown (DDL).
        return ExecutionResult(rowcount=max(rowcount, 0), lastrowid=lastrowid)

    def query(self, sql: str, params: Sequence[Any] = ()) -> Iterator[Sequence[Any]]:
        cursor = self._run(sql, params)
        return self._rows(sql, cursor)

    def _rows(self, sql: str, cursor: Any) -> Iterator[Sequence[Any]]:
        try:
            while True:
                try:
                    row = cursor.fetchone()
                except self._driver_error as exc:
                    raise ExecutionFailure(sql, exc) from exc
                if row is None:
                    break
                yield row
        finally:
            cursor.close()

    def close(self) -> None:
        try:
            self.connection.close()
        except self._driver_error:
            log.warning("Error while closing connection", exc_info=True)


__all__ = ["DBAPIExecutor", "ExecutionResult", "Executor"]
