"""Shared dataclasses used across registry/session modules."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ConnectionProfile:
    """Runtime representation of the credentials for one database."""

    name: str
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None

    @property
    def identifier(self) -> str:
        """Registry key for this profile (the database name)."""

        return self.database or self.name

    def __repr__(self) -> str:
        masked = "***" if self.password else None
        return (
            f"ConnectionProfile(name={self.name!r}, host={self.host!r}, port={self.port!r}, "
            f"user={self.user!r}, password={masked!r}, database={self.database!r})"
        )


__all__ = ["ConnectionProfile"]
