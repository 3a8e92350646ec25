"""
zvm/toolchain/manager.py

Entry point of the version engine used by the CLI.

VersionManager wires the catalog client, resolver, store, installer,
activation manager and executor together around one Settings value. It
returns results or raises ZvmError subclasses; it never prints.
"""

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from ..config.settings import Settings
from ..core.download import DownloadProgress
from ..core.exceptions import NoVersionSpecified, NotInstalled
from ..core.platform import PlatformInfo, detect_platform
from .activation import ActivationManager, SyncResult
from .catalog import Catalog, CatalogClient
from .executor import Executor
from .installer import Installer, InstallResult
from .resolver import ArtifactRef, VersionResolver, normalize_token
from .store import Store

logger = logging.getLogger(__name__)

EXTRA_COMPONENTS = ("zls",)


def _decline(question: str) -> bool:
    logger.debug(f"No prompt available, declining: {question}")
    return False


class VersionManager:
    """
    Facade over the version engine.

    Example:
        >>> manager = VersionManager(Settings(), root=Path.home() / ".zvm")
        >>> manager.resolve_and_install("0.11.0")
        >>> manager.activate("0.11.0")
        >>> manager.current()
        '0.11.0'
    """

    def __init__(
        self,
        settings: Settings,
        root: Path,
        platform: Optional[PlatformInfo] = None,
        confirm: Optional[Callable[[str], bool]] = None,
        progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
        lock_timeout: float = 300,
    ):
        """
        Args:
            settings: Read-only settings for this invocation
            root: Installation root
            platform: Target platform (auto-detected if None)
            confirm: Yes/no prompt for install-on-run; declines if None
            progress_callback: Optional download progress callback
            lock_timeout: Seconds to wait for a concurrent install
        """
        self.settings = settings
        self.platform = platform or detect_platform()
        self.store = Store(root, platform=self.platform)
        self.catalog_client = CatalogClient(timeout=settings.network_timeout)
        self.resolver = VersionResolver()
        self.installer = Installer(
            self.store,
            timeout=settings.network_timeout,
            lock_timeout=lock_timeout,
            progress_callback=progress_callback,
        )
        self.activation = ActivationManager(self.store)
        self.executor = Executor(
            self.store,
            self.installer,
            self.fetch_catalog,
            confirm or _decline,
            resolver=self.resolver,
        )

    def fetch_catalog(self, url: Optional[str] = None) -> Catalog:
        """Fetch the catalog (default: the configured version map URL)."""
        return self.catalog_client.fetch(url or self.settings.version_map_url)

    def resolve(self, token: str) -> ArtifactRef:
        """Resolve a token against a freshly fetched catalog."""
        return self.resolver.resolve(
            token, self.fetch_catalog(), self.platform.catalog_key()
        )

    def resolve_and_install(
        self,
        token: str,
        force: Optional[bool] = None,
        extra_components: Iterable[str] = (),
        zls_compatibility: str = "only-runtime",
    ) -> InstallResult:
        """
        Resolve a token and install it, plus optional extra components.

        Args:
            token: Version token
            force: Reinstall even if present (None: settings.always_force_install)
            extra_components: Subset of EXTRA_COMPONENTS to install as well
            zls_compatibility: ZLS compatibility mode ('only-runtime' or 'full')

        Returns:
            InstallResult of the Zig install
        """
        extras = list(extra_components)
        unknown = [c for c in extras if c not in EXTRA_COMPONENTS]
        if unknown:
            raise ValueError(f"Unknown extra components: {', '.join(unknown)}")

        if not normalize_token(token):
            raise NoVersionSpecified()

        if force is None:
            force = self.settings.always_force_install

        ref = self.resolve(token)
        result = self.installer.install(ref, force=force)

        if "zls" in extras:
            self.installer.install_zls(
                ref.version,
                self.settings.zls_version_map_url,
                ref.expected_build,
                compatibility=zls_compatibility,
                force=force,
            )

        return result

    def activate(self, token: str) -> str:
        """
        Make an installed version active.

        Returns:
            The normalized version name

        Raises:
            NoVersionSpecified: If token is empty
            NotInstalled: If the version is not installed
        """
        version = normalize_token(token)
        if not version:
            raise NoVersionSpecified()

        self.activation.activate(version)
        return version

    def sync(self) -> SyncResult:
        """Install and activate the catalog's current master build."""
        return self.activation.sync(self.fetch_catalog, self.installer, self.resolver)

    def run(self, token: str, args: Sequence[str]) -> int:
        """Run zig of the given version, installing it after confirmation."""
        return self.executor.run(token, args)

    def current(self) -> Optional[str]:
        """Active version, or None."""
        return self.activation.current()

    def list_installed(self) -> List[str]:
        return self.store.list_installed()

    def list_remote(self, catalog_url: Optional[str] = None) -> List[str]:
        """Version names offered by the catalog, rolling entries first."""
        return self.fetch_catalog(catalog_url).names()

    def uninstall(self, token: str) -> str:
        """
        Remove an installed version, clearing the active link if it pointed
        there.

        Returns:
            The normalized version name

        Raises:
            NotInstalled: If the version is not installed
            Busy: If an install of the version is in flight
        """
        version = normalize_token(token)
        if not version:
            raise NoVersionSpecified()
        if not self.store.is_installed(version):
            raise NotInstalled(version)

        self.store.remove(version)
        self.activation.deactivate(version)
        return version

    def clean(self) -> List[str]:
        """Remove leftovers of interrupted installs."""
        return self.store.clean()
