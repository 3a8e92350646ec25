"""
Configuration loading for zvm.
"""

from .settings import (
    Settings,
    find_settings_file,
    load_settings,
    DEFAULT_VERSION_MAP_URL,
    DEFAULT_ZLS_VERSION_MAP_URL,
    MACH_VERSION_MAP_URL,
)

__all__ = [
    "Settings",
    "find_settings_file",
    "load_settings",
    "DEFAULT_VERSION_MAP_URL",
    "DEFAULT_ZLS_VERSION_MAP_URL",
    "MACH_VERSION_MAP_URL",
]
