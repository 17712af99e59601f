"""
Domain package for sqlbind.

Contains the record base class and the query parameter model.
"""

from sqlbind.domain.models import Params
from sqlbind.domain.record import Record

__all__ = ["Params", "Record"]
