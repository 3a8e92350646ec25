"""
User settings for zvm.

Settings are loaded once per invocation from <data dir>/settings.yaml (or
the settings.json written by earlier releases, when no YAML file exists) and
passed into every operation as an immutable value. zvm never writes this
file.

Example settings.yaml:
    version_map_url: https://ziglang.org/download/index.json
    zls_version_map_url: https://releases.zigtools.org/
    always_force_install: false
    use_color: true
    network_timeout: 30

version_map_url also accepts the shorthands "default" and "mach" (the Mach
engine nominated builds); zls_version_map_url accepts "default".
"""

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict

import yaml

from ..core.directory import LEGACY_SETTINGS_FILE, SETTINGS_FILE
from ..core.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_VERSION_MAP_URL = "https://ziglang.org/download/index.json"
DEFAULT_ZLS_VERSION_MAP_URL = "https://releases.zigtools.org/"
MACH_VERSION_MAP_URL = "https://machengine.org/zig/index.json"

# Shorthands accepted in place of a URL
_URL_ALIASES = {
    "version_map_url": {
        "default": DEFAULT_VERSION_MAP_URL,
        "mach": MACH_VERSION_MAP_URL,
    },
    "zls_version_map_url": {"default": DEFAULT_ZLS_VERSION_MAP_URL},
}

# Keys written by earlier releases into settings.json
_LEGACY_KEYS = {
    "versionMapUrl": "version_map_url",
    "zlsVMU": "zls_version_map_url",
    "alwaysForceInstall": "always_force_install",
    "useColor": "use_color",
}


@dataclass(frozen=True)
class Settings:
    """Read-only configuration consumed by the version engine."""

    version_map_url: str = DEFAULT_VERSION_MAP_URL
    zls_version_map_url: str = DEFAULT_ZLS_VERSION_MAP_URL
    always_force_install: bool = False
    use_color: bool = True
    network_timeout: float = 30


def _normalize_keys(config: Dict[str, Any]) -> Dict[str, Any]:
    """Map legacy camelCase keys onto field names and drop unknown keys."""
    known = {f.name for f in fields(Settings)}
    normalized = {}

    for key, value in config.items():
        name = _LEGACY_KEYS.get(key, key)
        if name not in known:
            logger.debug(f"Ignoring unknown settings key: {key}")
            continue
        normalized[name] = value

    return normalized


def _check_types(path: Path, values: Dict[str, Any]) -> None:
    for key in ("version_map_url", "zls_version_map_url"):
        if key in values and not isinstance(values[key], str):
            raise ConfigError(path, f"'{key}' must be a string")

    for key in ("always_force_install", "use_color"):
        if key in values and not isinstance(values[key], bool):
            raise ConfigError(path, f"'{key}' must be true or false")

    timeout = values.get("network_timeout")
    if timeout is not None and (
        isinstance(timeout, bool) or not isinstance(timeout, (int, float))
    ):
        raise ConfigError(path, "'network_timeout' must be a number")


def find_settings_file(root: Path) -> Path:
    """
    Settings file of a data directory.

    settings.yaml wins; a settings.json left by earlier releases is used
    only when settings.yaml does not exist.
    """
    path = root / SETTINGS_FILE
    legacy = root / LEGACY_SETTINGS_FILE
    if not path.exists() and legacy.exists():
        logger.debug(f"Using legacy settings file: {legacy}")
        return legacy
    return path


def _read_document(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix == ".json":
            try:
                return json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(path, f"invalid JSON: {e}") from e
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(path, f"invalid YAML: {e}") from e


def load_settings(path: Path) -> Settings:
    """
    Load settings from a YAML (or legacy JSON) file, falling back to defaults.

    Empty URL values are treated as unset, so a blank entry restores the
    default catalog. NO_COLOR in the environment disables color.

    Args:
        path: Path to settings.yaml or settings.json

    Returns:
        Settings instance

    Raises:
        ConfigError: If the file cannot be parsed or has wrong value types

    Example:
        >>> settings = load_settings(Path("~/.zvm/settings.yaml").expanduser())
        >>> settings.version_map_url
        'https://ziglang.org/download/index.json'
    """
    settings = Settings()

    if path.exists():
        logger.debug(f"Loading settings from {path}")
        config = _read_document(path) or {}
        if not isinstance(config, dict):
            raise ConfigError(path, "top level must be a mapping")

        values = _normalize_keys(config)
        _check_types(path, values)

        for key, aliases in _URL_ALIASES.items():
            if key not in values:
                continue
            value = values[key].strip()
            if not value:
                del values[key]
            else:
                values[key] = aliases.get(value.lower(), value)

        settings = replace(settings, **values)
    else:
        logger.debug(f"Settings file not found, using defaults: {path}")

    if os.environ.get("NO_COLOR"):
        settings = replace(settings, use_color=False)

    return settings
