"""Named connection cache backed by asyncpg."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterator

import asyncpg

from .models import ConnectionProfile

LOG = logging.getLogger(__name__)

Connector = Callable[..., Awaitable[Any]]


class ConnectionEntry:
    """Cached wrapper owning a single driver connection.

    An entry is created once per identifier. When the connection attempt
    failed the entry is inactive, keeps the driver error in ``error`` and
    never reconnects on its own.
    """

    __slots__ = ("identifier", "error", "created_at", "_connection", "_active")

    def __init__(
        self,
        identifier: str,
        connection: Any = None,
        *,
        error: BaseException | None = None,
    ) -> None:
        self.identifier = identifier
        self.error = error
        self.created_at = datetime.now(tz=timezone.utc)
        self._connection = connection
        self._active = connection is not None and error is None

    @property
    def active(self) -> bool:
        return self._active

    def get_connection(self) -> Any | None:
        """Return the live connection, or ``None`` if the entry is inactive."""

        return self._connection if self._active else None

    async def close(self) -> None:
        """Release the owned connection; safe to call more than once."""

        connection = self._connection
        self._connection = None
        self._active = False
        if connection is None:
            return
        try:
            await connection.close()
        except Exception as exc:
            LOG.debug(
                "Ignoring error while closing connection",
                extra={"identifier": self.identifier, "error": str(exc)},
            )

    def __repr__(self) -> str:
        state = "active" if self._active else "inactive"
        return f"<ConnectionEntry {self.identifier!r} {state}>"


class ConnectionRegistry:
    """Keeps one connection per database name for the lifetime of the owner.

    Lookups are first-writer-wins: once an entry exists for a database name,
    credentials passed to later calls are ignored. Use :meth:`close` to drop
    an entry so the next request opens a fresh connection.
    """

    def __init__(self, connector: Connector | None = None, *, connect_timeout: float = 5.0) -> None:
        self._connector = connector
        self._connect_timeout = connect_timeout
        self._entries: dict[str, ConnectionEntry] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    async def get_or_create(
        self,
        host: str,
        username: str,
        password: str,
        db_name: str,
        *,
        port: int | None = None,
    ) -> ConnectionEntry:
        """Return the entry for ``db_name``, connecting on first use."""

        kwargs: dict[str, object] = {
            "host": host,
            "user": username,
            "password": password,
            "database": db_name,
        }
        if port is not None:
            kwargs["port"] = port
        return await self._get_or_open(db_name, kwargs)

    async def get_handle(
        self,
        host: str,
        username: str,
        password: str,
        db_name: str,
        *,
        port: int | None = None,
    ) -> Any | None:
        """Return the live connection for ``db_name`` or ``None`` if it failed."""

        entry = await self.get_or_create(host, username, password, db_name, port=port)
        return entry.get_connection()

    async def get_or_create_profile(self, profile: ConnectionProfile) -> ConnectionEntry:
        """Same as :meth:`get_or_create`, reading credentials from a profile."""

        return await self._get_or_open(profile.identifier, self._profile_kwargs(profile))

    async def get_handle_for_profile(self, profile: ConnectionProfile) -> Any | None:
        entry = await self.get_or_create_profile(profile)
        return entry.get_connection()

    def get(self, identifier: str) -> ConnectionEntry | None:
        """Look up an existing entry without connecting."""

        return self._entries.get(identifier)

    def identifiers(self) -> tuple[str, ...]:
        return tuple(self._entries)

    async def close(self, identifier: str) -> None:
        """Drop the entry for ``identifier`` and close its connection.

        Unknown identifiers are ignored.
        """

        lock = self._locks.get(identifier)
        if lock is None:
            return
        async with lock:
            entry = self._entries.pop(identifier, None)
            # Waiters still queued on this lock notice it is gone and retry.
            self._locks.pop(identifier, None)
        if entry is None:
            return
        await entry.close()
        LOG.debug("Closed connection", extra={"identifier": identifier})

    async def close_all(self) -> None:
        for identifier in tuple(self._entries):
            await self.close(identifier)

    async def __aenter__(self) -> ConnectionRegistry:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close_all()

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ConnectionEntry]:
        return iter(tuple(self._entries.values()))

    async def _get_or_open(self, identifier: str, kwargs: dict[str, object]) -> ConnectionEntry:
        while True:
            entry = self._entries.get(identifier)
            if entry is not None:
                return entry
            lock = self._locks.setdefault(identifier, asyncio.Lock())
            async with lock:
                if self._locks.get(identifier) is not lock:
                    continue
                # Another caller may have connected while we waited.
                entry = self._entries.get(identifier)
                if entry is None:
                    entry = await self._open(identifier, kwargs)
                    self._entries[identifier] = entry
            return entry

    async def _open(self, identifier: str, kwargs: dict[str, object]) -> ConnectionEntry:
        connector = self._connector or asyncpg.connect
        kwargs.setdefault("timeout", self._connect_timeout)
        try:
            connection = await connector(**kwargs)
        except Exception as exc:
            LOG.warning(
                "Failed to connect to database",
                extra={"identifier": identifier, "error": str(exc)},
            )
            return ConnectionEntry(identifier, error=exc)
        LOG.debug("Opened connection", extra={"identifier": identifier})
        return ConnectionEntry(identifier, connection)

    @staticmethod
    def _profile_kwargs(profile: ConnectionProfile) -> dict[str, object]:
        kwargs: dict[str, object] = {}
        if profile.dsn:
            kwargs["dsn"] = profile.dsn
        else:
            kwargs["host"] = profile.host or "localhost"
            if profile.port is not None:
                kwargs["port"] = profile.port
            if profile.user:
                kwargs["user"] = profile.user
            if profile.database:
                kwargs["database"] = profile.database
        if profile.password:
            kwargs["password"] = profile.password
        return kwargs


__all__ = [
    "ConnectionEntry",
    "ConnectionRegistry",
    "Connector",
]
