"""
Query parameter model for sqlbind.

``Params`` carries the caller-supplied fragments and switches that shape a
generated statement. ``where`` and ``order_by`` are raw SQL injected verbatim;
put placeholders in ``where`` and pass the values in ``args`` whenever a value
comes from outside the program.
"""
from __future__ import annotations

from typing import Any, Optional, Tuple

from pydantic import BaseModel, Field


class Params(BaseModel):
    """
    Filter, ordering and write options for one statement.
    """

    where: str = Field("", description="Raw SQL boolean expression, without the WHERE keyword.")
    order_by: str = Field("", description="Raw SQL ordering, without the ORDER BY keyword.")
    limit: Optional[int] = Field(None, gt=0, description="Maximum number of rows to return.")
    skip_empty: bool = Field(False, description="Leave zero-valued fields out of UPDATE.")
    or_ignore: bool = Field(False, description="Use the conflict-tolerant INSERT variant.")
    args: Tuple[Any, ...] = Field((), description="Bound values for placeholders in `where`.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": True,
    }


__all__ = ["Params"]
