"""
Translation of driver failures into the domain's PersistenceError.
"""

from contextlib import contextmanager
from datetime import date, datetime

from pymongo.errors import PyMongoError

from clinicrx.domain.errors import PersistenceError


@contextmanager
def persistence_errors():
    """Re-raise any driver error as PersistenceError with the driver's message."""
    try:
        yield
    except PyMongoError as e:
        raise PersistenceError(str(e)) from e


def to_datetime(value: date) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def to_date(value: datetime) -> date:
    return value.date() if isinstance(value, datetime) else value
