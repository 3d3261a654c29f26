"""Session manager wiring configured profiles to a connection registry."""

from __future__ import annotations

import logging
from typing import Any

from .config import AppConfig, ConnectionProfileConfig
from .connections import ConnectionEntry, ConnectionRegistry
from .models import ConnectionProfile

LOG = logging.getLogger(__name__)


class SessionManager:
    """Owns the registry for an application and resolves profiles by name."""

    def __init__(
        self,
        *,
        config: AppConfig,
        registry: ConnectionRegistry | None = None,
    ) -> None:
        self._config = config
        self._profiles = tuple(self._from_config(entry) for entry in config.profiles)
        self._registry = (
            registry if registry is not None else ConnectionRegistry(connect_timeout=config.connect_timeout)
        )

    @property
    def profiles(self) -> tuple[ConnectionProfile, ...]:
        """Profiles available in the current config."""

        return self._profiles

    @property
    def registry(self) -> ConnectionRegistry:
        return self._registry

    @property
    def default_profile_name(self) -> str | None:
        if self._config.default_profile:
            return self._config.default_profile
        return self._profiles[0].name if self._profiles else None

    async def connect(self, name: str | None = None) -> ConnectionEntry:
        """Return the registry entry for a profile, connecting on first use."""

        profile = self._resolve(name)
        entry = await self._registry.get_or_create_profile(profile)
        if not entry.active:
            LOG.warning("Profile has no active connection", extra={"profile": profile.name})
        return entry

    async def handle(self, name: str | None = None) -> Any | None:
        """Live connection for a profile, or ``None`` if connecting failed."""

        entry = await self.connect(name)
        return entry.get_connection()

    async def disconnect(self, name: str | None = None) -> None:
        """Close a profile's connection so the next request reconnects."""

        profile = self._resolve(name)
        await self._registry.close(profile.identifier)

    async def shutdown(self) -> None:
        await self._registry.close_all()

    def _resolve(self, name: str | None) -> ConnectionProfile:
        target = name or self.default_profile_name
        if target is None:
            raise ValueError("No connection profiles configured.")
        for profile in self._profiles:
            if profile.name == target:
                return profile
        raise ValueError(f"Profile '{target}' not found.")

    @staticmethod
    def _from_config(profile: ConnectionProfileConfig) -> ConnectionProfile:
        return ConnectionProfile(
            name=profile.name,
            host=profile.host,
            port=profile.port,
            user=profile.user,
            password=profile.password,
            database=profile.database,
            dsn=profile.dsn,
        )


__all__ = ["SessionManager"]
