"""
zvm/toolchain/activation.py

Active version management.

The active version is the symlink <root>/bin pointing at one installed
version directory, so putting <root>/bin on PATH exposes its `zig`.
The link is only ever replaced with a rename, never edited in place.
"""

import logging
import subprocess
from dataclasses import dataclass
from typing import Callable, Optional

from ..core.directory import ACTIVE_LINK
from ..core.exceptions import NotInstalled
from ..core.filesystem import read_symlink, replace_symlink
from .catalog import Catalog
from .installer import Installer
from .resolver import MASTER, VersionResolver
from .store import Store

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Outcome of a sync with the rolling master build."""

    build: str
    """Build id master resolves to in the catalog"""

    previous_build: Optional[str]
    """Build id of the installed master before syncing, if any"""

    reinstalled: bool
    """True if a new build was downloaded"""

    activated: bool
    """True if the active version pointer was moved to master"""

    @property
    def changed(self) -> bool:
        return self.reinstalled or self.activated


class ActivationManager:
    """Maintains the active-version pointer of a Store."""

    def __init__(self, store: Store):
        self.store = store
        self.link_path = store.root / ACTIVE_LINK

    def activate(self, version: str) -> None:
        """
        Make an installed version the active one.

        Raises:
            NotInstalled: If the version is not installed
        """
        if not self.store.is_installed(version):
            raise NotInstalled(version)

        target = self.store.path_for(version)
        replace_symlink(self.link_path, target)
        logger.info(f"Now using Zig {version}: {self.link_path} -> {target}")

    def current(self) -> Optional[str]:
        """
        Name of the active version.

        Returns:
            Version name, or None if no version is active or the link
            points at a directory that no longer exists
        """
        target = read_symlink(self.link_path)
        if target is None:
            return None

        if target.parent.resolve() != self.store.root.resolve():
            logger.debug(f"Active link points outside the store: {target}")
            return None

        if not self.store.is_installed(target.name):
            logger.debug(f"Active link is dangling: {self.link_path} -> {target}")
            return None

        return target.name

    def deactivate(self, version: str) -> bool:
        """
        Remove the active link if it points at version.

        Returns:
            True if the link was removed
        """
        target = read_symlink(self.link_path)
        if target is None or target.name != version:
            return False

        self.link_path.unlink(missing_ok=True)
        logger.info(f"Cleared active version {version}")
        return True

    def installed_build(self, version: str) -> Optional[str]:
        """
        Ask an installed zig binary for its version.

        Returns:
            Output of `zig version`, or None if it cannot be determined
        """
        if not self.store.is_installed(version):
            return None

        binary = self.store.binary_path(version)
        try:
            result = subprocess.run(
                [str(binary), "version"],
                capture_output=True,
                text=True,
                timeout=30,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning(f"Could not run {binary}: {e}")
            return None

        if result.returncode != 0:
            logger.warning(f"{binary} version exited with {result.returncode}")
            return None

        build = result.stdout.strip()
        logger.debug(f"{version} reports build {build}")
        return build or None

    def sync(
        self,
        fetch_catalog: Callable[[], Catalog],
        installer: Installer,
        resolver: Optional[VersionResolver] = None,
    ) -> SyncResult:
        """
        Bring the installed master up to the catalog's master and use it.

        The catalog is read once. master is reinstalled only when the build
        it reports differs from the catalog's build (or it is missing), and
        the pointer is only moved when master is not already active.

        Args:
            fetch_catalog: Callable returning a fresh catalog
            installer: Installer used when a new build is needed
            resolver: Resolver (default: VersionResolver())

        Raises:
            CatalogUnavailable, ResolutionError, InstallError: As raised by
                the collaborators; the active link is left untouched
        """
        resolver = resolver or VersionResolver()
        ref = resolver.resolve(
            MASTER, fetch_catalog(), self.store.platform.catalog_key()
        )

        previous = self.installed_build(MASTER)
        reinstalled = False
        if previous != ref.expected_build:
            logger.info(
                f"Syncing master: {previous or 'not installed'} -> {ref.expected_build}"
            )
            installer.install(ref, force=self.store.is_installed(MASTER))
            reinstalled = True
        else:
            logger.info(f"master is up to date ({previous})")

        activated = False
        if self.current() != MASTER:
            self.activate(MASTER)
            activated = True

        return SyncResult(
            build=ref.expected_build,
            previous_build=previous,
            reinstalled=reinstalled,
            activated=activated,
        )
