"""
Base class for records bound to table rows.

Columns are declared with ``typing.Annotated`` metadata:

    class User(Record):
        id: Annotated[int, db("id,primary,autoinc,table:users")] = 0
        name: Annotated[str, db("name,unique")] = ""
        created_at: Annotated[Optional[datetime], db("created_at,created")] = None

Fields without a ``db(...)`` marker are ignored by sqlbind. A record does
nothing on its own; ``Database.attach`` gives it a binding and every data
method below delegates to that binding.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, PrivateAttr

from sqlbind.errors import NotAttached

if TYPE_CHECKING:
    from sqlbind.binder import Binding
    from sqlbind.domain.models import Params


class Record(BaseModel):
    """A pydantic model whose tagged fields map onto one table row."""

    _binding: Any = PrivateAttr(default=None)

    model_config = {
        "validate_assignment": False,
        "arbitrary_types_allowed": True,
    }

    @property
    def attached(self) -> bool:
        return self._binding is not None

    def _bound(self) -> "Binding":
        if self._binding is None:
            raise NotAttached(self)
        return self._binding

    def create_table(self, exist_ok: bool = False) -> None:
        """Issue CREATE TABLE for this record's type."""
        self._bound().create_table(self, exist_ok=exist_ok)

    def get_existing(self, params: Optional["Params"] = None) -> None:
        """
        Load the first row matching ``params`` into this record.

        Raises
        ------
        NoMatchingRow
            If the query returns no rows.
        """
        self._bound().get_existing(self, params)

    def save_new(self, ignore: bool = False, params: Optional["Params"] = None) -> int:
        return self._bound().save_new(self, ignore=ignore, params=params)

    def save_existing(self, params: Optional["Params"] = None) -> int:
        return self._bound().save_existing(self, params)

    def refresh(self) -> None:
        self._bound().refresh(self)

    def delete(self) -> int:
        return self._bound().delete(self)


__all__ = ["Record"]
