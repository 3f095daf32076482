"""Configuration for the lukkari_backend server.

Settings come from ``LUKKARI_*`` environment variables. A ``.env`` file in
the working directory may supply values for variables the environment does
not already define. The result is a plain dict consumed through
:func:`get_config_value`.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_SERVER_BIND = "0.0.0.0"  # nosec B104 - container default, override via LUKKARI_WEB_HOST
DEFAULT_SERVER_PORT = 3001
DEFAULT_REALIZATION_BASE_URL = "https://lukkari.turkuamk.fi/rest/realization"
DEFAULT_CORS_ORIGIN = "*"

DEFAULT_CONFIG: dict[str, Any] = {
    "server_bind": DEFAULT_SERVER_BIND,
    "server_port": DEFAULT_SERVER_PORT,
    "realization_base_url": DEFAULT_REALIZATION_BASE_URL,
    "precache_enabled": True,
    "debug_logging": False,
    "cors_origin": DEFAULT_CORS_ORIGIN,
}

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


def _parse_flag(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"not a boolean flag: {raw!r}")


def _parse_port(raw: str) -> int:
    port = int(raw)
    if not 0 <= port <= 65535:
        raise ValueError(f"port out of range: {port}")
    return port


# (config key, env vars in priority order, converter)
_ENV_SETTINGS: tuple[tuple[str, tuple[str, ...], Callable[[str], Any]], ...] = (
    ("server_bind", ("LUKKARI_WEB_HOST",), str.strip),
    ("server_port", ("LUKKARI_WEB_PORT", "PORT"), _parse_port),
    ("log_level", ("LUKKARI_LOG_LEVEL",), str.upper),
    ("debug_logging", ("LUKKARI_DEBUG",), _parse_flag),
    ("realization_base_url", ("LUKKARI_REALIZATION_BASE_URL",), lambda value: value.rstrip("/")),
    ("precache_enabled", ("LUKKARI_PRECACHE",), _parse_flag),
    ("cors_origin", ("LUKKARI_CORS_ORIGIN",), str.strip),
)


def parse_env_file(path: Path) -> dict[str, str]:
    """Read ``KEY=VALUE`` pairs from a dotenv-style file.

    Blank lines, ``#`` comments and lines without ``=`` are skipped. An
    optional ``export`` prefix is accepted, and matching outer quotes
    around a value are removed. A missing or unreadable file yields ``{}``.
    """
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except FileNotFoundError:
        return {}
    except OSError:
        logger.debug("Could not read env file %s, ignoring it", path, exc_info=True)
        return {}

    pairs: dict[str, str] = {}
    for line in lines:
        entry = line.strip()
        if not entry or entry.startswith("#"):
            continue
        if entry.startswith("export "):
            entry = entry[len("export ") :].lstrip()

        name, sep, value = entry.partition("=")
        name = name.strip()
        if not sep or not name:
            continue

        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        pairs[name] = value

    return pairs


class ConfigManager:
    """Builds the server config dict from the environment and an optional .env file."""

    def __init__(self, env_file_path: Path | None = None):
        self.env_file_path = env_file_path if env_file_path is not None else Path.cwd() / ".env"

    def load_env_file(self) -> list[str]:
        """Export .env entries into ``os.environ`` without overriding existing variables.

        Returns:
            Names of the variables that were taken from the file
        """
        applied = []
        for name, value in parse_env_file(self.env_file_path).items():
            if name in os.environ:
                continue
            os.environ[name] = value
            applied.append(name)

        if applied:
            logger.debug("Applied %d setting(s) from %s: %s", len(applied), self.env_file_path, applied)
        return applied

    def build_config_from_env(self) -> dict[str, Any]:
        """Apply recognized environment variables on top of :data:`DEFAULT_CONFIG`.

        Unparseable values are logged and leave the default in place.
        ``log_level`` is only present when ``LUKKARI_LOG_LEVEL`` is set.
        """
        cfg = dict(DEFAULT_CONFIG)

        for key, env_names, convert in _ENV_SETTINGS:
            env_name, raw = _first_set(env_names)
            if raw is None:
                continue
            try:
                cfg[key] = convert(raw)
            except ValueError:
                logger.warning("Invalid %s=%r; ignoring", env_name, raw)

        return cfg

    def load_full_config(self) -> dict[str, Any]:
        self.load_env_file()
        return self.build_config_from_env()


def _first_set(env_names: tuple[str, ...]) -> tuple[str, str | None]:
    for name in env_names:
        raw = os.environ.get(name)
        if raw:
            return name, raw
    return env_names[0], None


def get_config_value(config: Any, key: str, default: Any = None) -> Any:
    """Look up ``key`` on a config dict or an attribute-style config object."""
    if isinstance(config, dict):
        return config.get(key, default)
    return getattr(config, key, default)
