"""Configuration loading helpers."""

from __future__ import annotations

from pathlib import Path

import tomllib

from pydantic import BaseModel, Field

CONFIG_FILE = Path.home() / ".config" / "dbregistry" / "config.toml"


class ConnectionProfileConfig(BaseModel):
    """Connection profile configuration stored in config.toml."""

    name: str
    dsn: str | None = None
    host: str | None = None
    port: int | None = None
    database: str | None = None
    user: str | None = None
    password: str | None = Field(default=None, repr=False)


class AppConfig(BaseModel):
    """Shape of the configuration file."""

    connect_timeout: float = 5.0
    profiles: list[ConnectionProfileConfig] = Field(default_factory=list)
    default_profile: str | None = None

    def profile(self, name: str) -> ConnectionProfileConfig | None:
        """Return the profile with the given name, if configured."""

        for profile in self.profiles:
            if profile.name == name:
                return profile
        return None

    def with_default_profile(self, name: str) -> AppConfig:
        """Return a copy with the default profile updated."""

        return self.model_copy(update={"default_profile": name})


def load_config() -> AppConfig:
    """Load configuration from disk; fall back to defaults if missing."""

    try:
        data = _read_config_file()
    except FileNotFoundError:
        return AppConfig()
    except (tomllib.TOMLDecodeError, OSError):
        return AppConfig()

    profiles_data = data.get("profiles")
    profiles: list[ConnectionProfileConfig] = []
    if isinstance(profiles_data, list):
        profiles = [
            ConnectionProfileConfig(**profile)
            for profile in profiles_data  # type: ignore[list-item]
            if isinstance(profile, dict)
        ]

    return AppConfig(
        connect_timeout=data.get(
            "connect_timeout", AppConfig.model_fields["connect_timeout"].default
        ),
        profiles=profiles,
        default_profile=data.get("default_profile"),
    )


def save_config(config: AppConfig) -> None:
    """Persist configuration to disk. Passwords are never written."""

    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    lines: list[str] = [f"connect_timeout = {config.connect_timeout}"]
    if config.default_profile:
        lines.append(f'default_profile = "{config.default_profile}"')
    if config.profiles:
        lines.append("")
        for profile in config.profiles:
            lines.append("[[profiles]]")
            lines.append(f'name = "{profile.name}"')
            if profile.dsn:
                lines.append(f'dsn = "{profile.dsn}"')
            if profile.host:
                lines.append(f'host = "{profile.host}"')
            if profile.port is not None:
                lines.append(f"port = {profile.port}")
            if profile.database:
                lines.append(f'database = "{profile.database}"')
            if profile.user:
                lines.append(f'user = "{profile.user}"')
            lines.append("")
    CONFIG_FILE.write_text("\n".join(lines) + "\n")


def _read_config_file() -> dict[str, object]:
    with CONFIG_FILE.open("rb") as handle:
        raw = tomllib.load(handle)
    data: dict[str, object] = {}
    timeout = raw.get("connect_timeout")
    if isinstance(timeout, (int, float)) and not isinstance(timeout, bool):
        data["connect_timeout"] = float(timeout)
    default_profile = raw.get("default_profile")
    if isinstance(default_profile, str):
        data["default_profile"] = default_profile
    profiles = raw.get("profiles")
    if isinstance(profiles, list):
        parsed_profiles: list[dict[str, object]] = []
        for profile in profiles:
            if not isinstance(profile, dict):
                continue
            parsed: dict[str, object] = {}
            for key in ("name", "dsn", "host", "database", "user", "password"):
                value = profile.get(key)
                if isinstance(value, str):
                    parsed[key] = value
            port = profile.get("port")
            if isinstance(port, int):
                parsed["port"] = port
            if parsed.get("name"):
                parsed_profiles.append(parsed)
        if parsed_profiles:
            data["profiles"] = parsed_profiles
    return data


__all__ = [
    "CONFIG_FILE",
    "AppConfig",
    "ConnectionProfileConfig",
    "load_config",
    "save_config",
]
