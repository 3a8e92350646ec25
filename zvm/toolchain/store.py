"""
zvm/toolchain/store.py

Filesystem view of the installation root.

A version is installed if and only if <root>/<version> is a directory.
There is no manifest; the installer publishes directories with a single
rename, so presence implies a complete install.
"""

import logging
import uuid
from pathlib import Path
from typing import List, Optional

from ..core.directory import ACTIVE_LINK, LOCK_DIR, STAGING_DIR
from ..core.exceptions import Busy, NotInstalled
from ..core.filesystem import FilesystemError, is_archive, safe_rmtree
from ..core.locking import LockManager, lock_name
from ..core.platform import PlatformInfo, detect_platform

logger = logging.getLogger(__name__)

# Entries of the root that are never versions ("self" holds the zvm binary)
RESERVED_NAMES = frozenset({ACTIVE_LINK, "self"})


def is_version_name(name: str) -> bool:
    """
    Check whether name can address a version directory.

    Example:
        >>> is_version_name("0.11.0"), is_version_name("../etc"), is_version_name("bin")
        (True, False, False)
    """
    return bool(name) and not (
        name.startswith(".")
        or "/" in name
        or "\\" in name
        or name in RESERVED_NAMES
    )


def _is_version_dir(path: Path) -> bool:
    # A symlinked entry is never an install, whatever it points at
    return path.is_dir() and not path.is_symlink()


class Store:
    """
    Installation root abstraction.

    Attributes:
        root: Installation root
        staging_dir: Parent of all private staging directories
        lock_manager: Per-version locks shared with the installer
    """

    def __init__(
        self,
        root: Path,
        platform: Optional[PlatformInfo] = None,
        lock_manager: Optional[LockManager] = None,
    ):
        self.root = Path(root).absolute()
        self.platform = platform or detect_platform()
        self.staging_dir = self.root / STAGING_DIR
        self.lock_manager = lock_manager or LockManager(self.root / LOCK_DIR)

    def path_for(self, version: str) -> Path:
        """
        Directory of a version. Pure, no I/O.

        Raises:
            ValueError: If version cannot name a directory under the root
        """
        if not is_version_name(version):
            raise ValueError(f"Invalid version name: {version!r}")
        return self.root / version

    def binary_path(self, version: str) -> Path:
        """Entry-point binary of a version."""
        return self.path_for(version) / self.platform.binary_name()

    def is_installed(self, version: str) -> bool:
        return is_version_name(version) and _is_version_dir(self.path_for(version))

    def list_installed(self) -> List[str]:
        """Names of installed versions, sorted."""
        if not self.root.is_dir():
            return []

        return sorted(
            entry.name
            for entry in self.root.iterdir()
            if is_version_name(entry.name) and _is_version_dir(entry)
        )

    def new_staging_path(self, version: str, tag: str = "") -> Path:
        """Unique staging directory name for one install attempt."""
        stem = lock_name(version)[: -len(".lock")]
        return self.staging_dir / f"{stem}.{tag}{uuid.uuid4().hex[:12]}"

    def remove(self, version: str) -> None:
        """
        Delete an installed version.

        Raises:
            NotInstalled: If the version is not installed
            Busy: If an install of the version is in flight
        """
        if not self.is_installed(version):
            raise NotInstalled(version)

        with self.lock_manager.try_version_lock(version) as acquired:
            if not acquired:
                raise Busy(version)

            target = self.path_for(version)
            # Re-check under the lock, a concurrent uninstall may have won
            if not _is_version_dir(target):
                raise NotInstalled(version)

            safe_rmtree(target, require_prefix=self.root)
            logger.info(f"Removed {version}: {target}")

    def clean(self) -> List[str]:
        """
        Remove leftovers of interrupted installs.

        Staging directories whose version lock is held belong to a running
        install and are kept. Downloaded archives at the root are removed.
        Installed versions are never touched.

        Returns:
            Names of removed entries
        """
        removed = []

        if self.staging_dir.is_dir():
            for entry in sorted(self.staging_dir.iterdir()):
                version = entry.name.rsplit(".", 1)[0]
                with self.lock_manager.try_version_lock(version) as acquired:
                    if not acquired:
                        logger.info(f"Skipping {entry.name}: install in progress")
                        continue
                    try:
                        if entry.is_dir() and not entry.is_symlink():
                            safe_rmtree(entry, require_prefix=self.staging_dir)
                        else:
                            entry.unlink()
                    except (FilesystemError, OSError) as e:
                        logger.warning(f"Failed to remove {entry}: {e}")
                        continue
                removed.append(f"{STAGING_DIR}/{entry.name}")

        if self.root.is_dir():
            for entry in sorted(self.root.iterdir()):
                stray_link = entry.name.startswith(f".{ACTIVE_LINK}.") and entry.is_symlink()
                if (entry.is_file() and is_archive(entry)) or stray_link:
                    entry.unlink()
                    removed.append(entry.name)

        for name in removed:
            logger.info(f"Cleaned {name}")

        return removed
