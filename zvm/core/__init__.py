"""
Core functionality for zvm.

This package contains the foundational modules that the version engine
depends on: errors, downloads, archives, locks and platform detection.
"""

from .directory import (
    get_data_dir,
    ensure_data_dir,
    DirectoryError,
)

from .locking import (
    LockManager,
    try_lock,
    LockTimeout,
)

from .platform import (
    PlatformInfo,
    detect_platform,
    clear_platform_cache,
)

from .exceptions import (
    ZvmError,
    ConfigError,
    CatalogUnavailable,
    ResolutionError,
    UnknownVersion,
    UnsupportedPlatform,
    InstallError,
    DownloadError,
    IntegrityError,
    ExtractError,
    PublishError,
    AlreadyInstalling,
    Busy,
    NotInstalled,
    BinaryMissing,
    NoVersionSpecified,
)

__all__ = [
    "get_data_dir",
    "ensure_data_dir",
    "DirectoryError",
    "LockManager",
    "try_lock",
    "LockTimeout",
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
    "ZvmError",
    "ConfigError",
    "CatalogUnavailable",
    "ResolutionError",
    "UnknownVersion",
    "UnsupportedPlatform",
    "InstallError",
    "DownloadError",
    "IntegrityError",
    "ExtractError",
    "PublishError",
    "AlreadyInstalling",
    "Busy",
    "NotInstalled",
    "BinaryMissing",
    "NoVersionSpecified",
]
