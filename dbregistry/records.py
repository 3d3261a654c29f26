"""Base class for typed, read-only access to a fetched row."""

from __future__ import annotations

from abc import ABC
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Iterable, Mapping, TypeVar

RecordT = TypeVar("RecordT", bound="RecordAccessor")

# Non-ISO layouts tried after datetime.fromisoformat, each optionally with a time.
_DATE_FORMATS = (
    "%d %B %Y",
    "%d %b %Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%d-%m-%Y",
    "%d.%m.%Y",
)
_TIME_FORMATS = ("", " %H:%M", " %H:%M:%S")


class RecordFieldError(LookupError):
    """Raised by strict accessors when a field cannot be read."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(message)
        self.key = key


class MissingFieldError(RecordFieldError):
    """The field is absent or empty."""


class MalformedDateError(RecordFieldError):
    """The field holds a value that does not parse as a date."""


class RecordAccessor(ABC):
    """Wraps one row (column name -> raw value) behind typed getters.

    Subclass per table or query and add named properties on top of
    :meth:`get`, :meth:`get_string` and :meth:`get_date`::

        class Account(RecordAccessor):
            @property
            def email(self) -> str | None:
                return self.get_string("email")

    Missing keys are never an error for the tolerant getters; they return
    ``None``, the same as an explicit SQL ``NULL``.
    """

    __slots__ = ("_data",)

    def __init__(self, row: Mapping[str, Any]) -> None:
        if type(self) is RecordAccessor:
            raise TypeError("RecordAccessor must be subclassed")
        self._data: Mapping[str, Any] = MappingProxyType(dict(row.items()))

    @classmethod
    def from_rows(cls: type[RecordT], rows: Iterable[Mapping[str, Any]]) -> list[RecordT]:
        """Wrap each row of a result set (dicts or ``asyncpg.Record``)."""

        return [cls(row) for row in rows]

    @property
    def data(self) -> Mapping[str, Any]:
        """Read-only view of the raw row."""

        return self._data

    def get(self, key: str) -> Any | None:
        """Raw value for ``key`` with no conversion."""

        return self._data.get(key)

    def get_string(self, key: str) -> Any | None:
        """Value for ``key``, or ``None`` when missing or an empty string."""

        value = self._data.get(key)
        if value is None or value == "":
            return None
        return value

    def get_date(self, key: str) -> datetime | None:
        """Value for ``key`` as a datetime; ``None`` if missing or unparseable."""

        value = self._data.get(key)
        if not value:
            return None
        try:
            return _to_datetime(value)
        except (TypeError, ValueError):
            return None

    def require_date(self, key: str) -> datetime:
        """Strict form of :meth:`get_date` that says why it failed."""

        value = self._data.get(key)
        if not value:
            raise MissingFieldError(key, f"Field '{key}' is missing or empty")
        try:
            return _to_datetime(value)
        except (TypeError, ValueError) as exc:
            raise MalformedDateError(key, f"Field '{key}' is not a date: {value!r}") from exc

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {sorted(self._data)}>"


def _to_datetime(value: object) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, bytes):
        value = value.decode()
    if isinstance(value, str):
        return _parse_date_string(value.strip())
    raise TypeError(f"Unsupported date value of type {type(value).__name__}")


def _parse_date_string(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        pass
    for date_format in _DATE_FORMATS:
        for time_format in _TIME_FORMATS:
            try:
                return datetime.strptime(value, date_format + time_format)
            except ValueError:
                continue
    raise ValueError(f"Unrecognized date string: {value!r}")


__all__ = [
    "MalformedDateError",
    "MissingFieldError",
    "RecordAccessor",
    "RecordFieldError",
]
