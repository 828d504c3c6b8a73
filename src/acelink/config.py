"""Configuration for the acelink connector.

Reads from config/acelink.ini if present, environment variables override.
Credentials never checked into version control.
"""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass, fields
from pathlib import Path

_CONFIG_FILE = Path(__file__).resolve().parent.parent.parent / "config" / "acelink.ini"

# Settings without which no upstream call can succeed.
REQUIRED = (
    "service_url",
    "keycloak_url",
    "realm",
    "client_id",
    "client_secret",
    "username",
    "password",
)

# (section, ini key, config field)
_INI_KEYS = [
    ("ace", "service_url", "service_url"),
    ("ace", "timeout", "timeout"),
    ("keycloak", "url", "keycloak_url"),
    ("keycloak", "realm", "realm"),
    ("keycloak", "client_id", "client_id"),
    ("keycloak", "client_secret", "client_secret"),
    ("keycloak", "username", "username"),
    ("keycloak", "password", "password"),
    ("gateway", "api_key", "api_key"),
    ("gateway", "host", "host"),
    ("gateway", "port", "port"),
    ("gateway", "log_level", "log_level"),
]


@dataclass(frozen=True)
class AcelinkConfig:
    """Connector configuration. Immutable once loaded."""

    service_url: str = "http://localhost:8080"
    timeout: float = 30.0
    keycloak_url: str = "http://localhost:8081"
    realm: str = ""
    client_id: str = ""
    client_secret: str = ""
    username: str = ""
    password: str = ""
    api_key: str = ""
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "info"

    def missing(self) -> list[str]:
        """Names of required settings that are blank."""
        return [name for name in REQUIRED if not str(getattr(self, name)).strip()]

    def __repr__(self) -> str:
        shown = []
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in ("client_secret", "password", "api_key") and value:
                value = "***"
            shown.append(f"{f.name}={value!r}")
        return f"AcelinkConfig({', '.join(shown)})"


def _coerce(config_key: str, val: str):
    if config_key == "port":
        return int(val)
    if config_key == "timeout":
        return float(val)
    return val


def load_config(config_path: Path | None = None) -> AcelinkConfig:
    """Load config from INI file, then override with environment variables."""
    path = config_path or _CONFIG_FILE
    kwargs: dict = {}

    if path.exists():
        parser = configparser.ConfigParser()
        parser.read(path)
        for section, ini_key, config_key in _INI_KEYS:
            val = parser.get(section, ini_key, fallback=None)
            if val is not None:
                kwargs[config_key] = _coerce(config_key, val)

    for f in fields(AcelinkConfig):
        val = os.getenv(f"ACELINK_{f.name.upper()}")
        if val is not None:
            kwargs[f.name] = _coerce(f.name, val)

    return AcelinkConfig(**kwargs)
