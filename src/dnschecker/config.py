"""
Configuration for dnschecker.

Settings are read once at startup from an optional YAML file, overlaid by
the process environment. Any missing or malformed required value is fatal:
there is no degraded mode to fall back to.
"""

from __future__ import annotations

import os
from ipaddress import ip_address
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationError,
    field_validator,
)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_LOG_LEVEL = "INFO"
CONFIG_FILE_ENV = "DNSCHECKER_CONFIG"

# Settings field -> environment variables, first non-empty one wins.
ENV_VARS: dict[str, tuple[str, ...]] = {
    "telegram_bot_token": ("TELEGRAM_BOT_TOKEN", "TELEGRAM_TOKEN"),
    "chat_id": ("CHAT_ID",),
    "url": ("URL",),
    "api_key": ("API_KEY",),
    "api_secret": ("API_SECRET",),
    "dns_hostname": ("DNS_HOSTNAME",),
    "log_level": ("RUST_LOG", "LOG_LEVEL"),
    "interface": ("INTERFACE",),
    "check_interval": ("CHECK_INTERVAL",),
    "heartbeat_interval": ("HEARTBEAT_INTERVAL",),
    "request_timeout": ("REQUEST_TIMEOUT",),
    "verify_tls": ("VERIFY_TLS",),
    "nameservers": ("DNS_NAMESERVERS",),
    "lockfile": ("LOCKFILE",),
    "alert_cooldown": ("ALERT_COOLDOWN",),
}

REQUIRED_FIELDS: tuple[str, ...] = (
    "telegram_bot_token",
    "chat_id",
    "url",
    "api_key",
    "api_secret",
    "dns_hostname",
)

_LOG_LEVELS = {
    "ERROR": "ERROR",
    "WARN": "WARNING",
    "WARNING": "WARNING",
    "INFO": "INFO",
    "DEBUG": "DEBUG",
    "TRACE": "DEBUG",
}


class ConfigError(Exception):
    """Raised when the configuration is incomplete or invalid."""


# ---------------------------------------------------------------------------
# Settings model
# ---------------------------------------------------------------------------


class Settings(BaseModel):
    """Immutable runtime settings for the checker."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    telegram_bot_token: SecretStr
    chat_id: str
    url: str
    api_key: str
    api_secret: SecretStr
    dns_hostname: str
    log_level: str = DEFAULT_LOG_LEVEL
    interface: str = ""  # empty = first interface with an IPv4 address
    check_interval: float = Field(default=60.0, gt=0)
    heartbeat_interval: float = Field(default=1800.0, ge=0)  # 0 disables
    request_timeout: float = Field(default=10.0, gt=0)
    verify_tls: bool = False
    nameservers: tuple[str, ...] = ()
    lockfile: Optional[Path] = None
    alert_cooldown: float = Field(default=86400.0, gt=0)

    @field_validator("chat_id", "api_key", "interface", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        # YAML turns numeric chat ids and keys into ints
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value.strip() if isinstance(value, str) else value

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("must be an http:// or https:// URL")
        return value

    @field_validator("dns_hostname")
    @classmethod
    def _check_hostname(cls, value: str) -> str:
        hostname = value.strip().rstrip(".").lower()
        if not hostname or " " in hostname:
            raise ValueError(f"invalid hostname {value!r}")
        return hostname

    @field_validator("log_level", mode="before")
    @classmethod
    def _parse_log_level(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        # RUST_LOG may look like "info,hyper=off"; the last directive naming a level wins
        for directive in reversed(value.split(",")):
            level = directive.rsplit("=", 1)[-1].strip().upper()
            if level in _LOG_LEVELS:
                return _LOG_LEVELS[level]
        raise ValueError(
            f"unknown log level {value!r} (expected one of ERROR, WARN, INFO, DEBUG, TRACE)"
        )

    @field_validator("nameservers", mode="before")
    @classmethod
    def _parse_nameservers(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [part.strip() for part in value.split(",") if part.strip()]
        if isinstance(value, (list, tuple)):
            for server in value:
                ip_address(str(server))
            return tuple(str(server) for server in value)
        return value

    @field_validator("lockfile", mode="before")
    @classmethod
    def _empty_lockfile(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def redacted(self) -> dict[str, Any]:
        """Settings as a plain dict with secrets masked, safe to print or log."""
        return self.model_dump(mode="json")


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text())
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(p) for p in error["loc"])
        parts.append(f"{loc}: {error['msg']}")
    return "Invalid configuration: " + "; ".join(parts)


def load_settings(
    config_file: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """
    Build Settings from an optional YAML file and the environment.

    Environment variables take precedence over file values. Raises
    ConfigError naming every missing required variable, or describing
    the first invalid values.
    """
    env = os.environ if environ is None else environ
    if config_file is None:
        config_file = env.get(CONFIG_FILE_ENV) or None

    data: dict[str, Any] = _read_config_file(Path(config_file)) if config_file else {}

    for field, names in ENV_VARS.items():
        for name in names:
            value = env.get(name)
            if not _is_blank(value):
                data[field] = value.strip()
                break

    missing = [ENV_VARS[f][0] for f in REQUIRED_FIELDS if _is_blank(data.get(f))]
    if missing:
        raise ConfigError(
            "Missing required environment variable(s): " + ", ".join(missing)
        )

    try:
        return Settings(**data)
    except ValidationError as exc:
        raise ConfigError(_describe(exc)) from exc


__all__ = [
    "CONFIG_FILE_ENV",
    "ConfigError",
    "DEFAULT_LOG_LEVEL",
    "ENV_VARS",
    "REQUIRED_FIELDS",
    "Settings",
    "load_settings",
]
