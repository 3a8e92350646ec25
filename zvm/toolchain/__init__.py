"""
Zig toolchain management for zvm.

This module provides functionality for:
- Version catalog fetching and resolution
- Toolchain download and installation
- Active version switching
- Running a given toolchain version
"""

from zvm.toolchain.catalog import (
    ArtifactDescriptor,
    ArtifactSet,
    Catalog,
    CatalogClient,
    parse_catalog,
)
from zvm.toolchain.resolver import (
    ArtifactRef,
    VersionResolver,
    normalize_token,
)
from zvm.toolchain.store import Store
from zvm.toolchain.installer import Installer, InstallResult
from zvm.toolchain.activation import ActivationManager, SyncResult
from zvm.toolchain.executor import Executor
from zvm.toolchain.manager import VersionManager

__all__ = [
    "ArtifactDescriptor",
    "ArtifactSet",
    "Catalog",
    "CatalogClient",
    "parse_catalog",
    "ArtifactRef",
    "VersionResolver",
    "normalize_token",
    "Store",
    "Installer",
    "InstallResult",
    "ActivationManager",
    "SyncResult",
    "Executor",
    "VersionManager",
]
