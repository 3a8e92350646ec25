"""
Centralized exception hierarchy for zvm.

Every error raised by the version engine is a distinct subclass of
ZvmError and carries the identifier (version token, URL or path) it is
about, so the CLI can report it without parsing messages.
"""

from pathlib import Path
from typing import Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class ZvmError(Exception):
    """Base exception for all zvm errors."""

    pass


class ConfigError(ZvmError):
    """Raised when the settings file cannot be parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid settings file {path}: {reason}")


# ============================================================================
# Catalog and Resolution Exceptions
# ============================================================================


class CatalogUnavailable(ZvmError):
    """Raised when the version catalog cannot be fetched or decoded."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Version catalog unavailable ({url}): {reason}")


class ResolutionError(ZvmError):
    """Base exception for version resolution errors."""

    def __init__(self, token: str, message: str):
        self.token = token
        super().__init__(message)


class UnknownVersion(ResolutionError):
    """Raised when a token matches no catalog entry."""

    def __init__(self, token: str):
        super().__init__(token, f"Unknown Zig version: {token!r}")


class UnsupportedPlatform(ResolutionError):
    """Raised when a catalog entry has no artifact for this platform."""

    def __init__(self, token: str, platform_key: str):
        self.platform_key = platform_key
        super().__init__(
            token, f"Version {token!r} is not available for platform {platform_key}"
        )


# ============================================================================
# Installation Exceptions
# ============================================================================


class InstallError(ZvmError):
    """Base exception for installation errors."""

    pass


class DownloadError(InstallError):
    """Raised when an artifact download fails."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Download failed for {url}: {reason}")


class IntegrityError(InstallError):
    """Raised when a downloaded artifact does not match the catalog."""

    def __init__(self, version: str, expected: str, actual: str):
        self.version = version
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Integrity check failed for {version}: "
            f"expected {expected}, got {actual}"
        )


class ExtractError(InstallError):
    """Raised when an archive cannot be unpacked into a valid toolchain."""

    def __init__(self, archive: Path, reason: str):
        self.archive = archive
        self.reason = reason
        super().__init__(f"Failed to extract {archive}: {reason}")


class PublishError(InstallError):
    """Raised when a staged install cannot be moved into the store."""

    def __init__(self, version: str, path: Path, reason: str):
        self.version = version
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to install {version} into {path}: {reason}")


class AlreadyInstalling(InstallError):
    """Raised when another process holds the install lock for too long."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(
            f"Version {version} is being installed by another process. "
            "Try again once it finishes."
        )


# ============================================================================
# Store and Execution Exceptions
# ============================================================================


class Busy(ZvmError):
    """Raised when a destructive operation races with an install."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(f"Version {version} is locked by an in-flight install")


class NotInstalled(ZvmError):
    """Raised when an operation requires a version that is not installed."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(f"Version {version} is not installed")


class BinaryMissing(ZvmError):
    """
    Raised when an installed version has no entry-point binary.

    Installs are published atomically, so this means the directory was
    tampered with and is reported as a defect rather than a user error.
    """

    def __init__(self, path: Path, version: Optional[str] = None):
        self.path = path
        self.version = version
        super().__init__(f"Zig binary not found: {path}")


class NoVersionSpecified(ZvmError):
    """Raised when an operation needs a version token and got none."""

    def __init__(self):
        super().__init__("No Zig version provided")
