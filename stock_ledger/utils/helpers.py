# stock_ledger/utils/helpers.py
"""
Timestamp helpers.

Timestamps are stored as ISO-8601 text with a space separator and fixed
microsecond precision, so string order in SQLite equals chronological order.
"""
from datetime import date, datetime, time
from typing import Union

DateLike = Union[date, datetime]

_TS_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def now() -> datetime:
    """Current local time, the default for created_at and sale dates."""
    return datetime.now()


def as_local(value: datetime) -> datetime:
    """Aware datetimes are converted to naive local time; naive ones pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def to_db_ts(value: datetime) -> str:
    return as_local(value).strftime(_TS_FORMAT)


def from_db_ts(text: str) -> datetime:
    return datetime.strptime(text, _TS_FORMAT)


def range_start(value: DateLike) -> datetime:
    """Lower inclusive bound: a bare date widens to the start of that day."""
    if isinstance(value, datetime):
        return as_local(value)
    return datetime.combine(value, time.min)


def range_end(value: DateLike) -> datetime:
    """Upper inclusive bound: a bare date widens to the last microsecond of that day."""
    if isinstance(value, datetime):
        return as_local(value)
    return datetime.combine(value, time.max)
