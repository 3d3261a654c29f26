"""Named connection cache and typed row accessors for PostgreSQL."""

from .connections import ConnectionEntry, ConnectionRegistry
from .models import ConnectionProfile
from .records import MalformedDateError, MissingFieldError, RecordAccessor, RecordFieldError
from .session import SessionManager

__version__ = "0.1.0"

__all__ = [
    "ConnectionEntry",
    "ConnectionProfile",
    "ConnectionRegistry",
    "MalformedDateError",
    "MissingFieldError",
    "RecordAccessor",
    "RecordFieldError",
    "SessionManager",
    "__version__",
]
