"""
zvm/toolchain/installer.py

Toolchain download and installation.

This module downloads a resolved artifact, verifies it, unpacks it into a
private staging directory and publishes it into the store with a single
rename. Observers see a version directory either fully populated or not at
all; every failure path removes the staging directory and leaves the final
path untouched.

Concurrent installs of one version are serialized with a per-version file
lock. A second installer waits for the first (up to lock_timeout) and then
observes its result instead of installing again.
"""

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlencode

from requests.exceptions import JSONDecodeError, RequestException

from ..core.download import DownloadProgress, download_file, fetch_json
from ..core.exceptions import (
    AlreadyInstalling,
    CatalogUnavailable,
    ExtractError,
    NotInstalled,
    PublishError,
    UnsupportedPlatform,
)
from ..core.filesystem import (
    ArchiveExtractionError,
    FilesystemError,
    archive_suffix,
    extract_archive,
    safe_rmtree,
    single_root,
)
from ..core.locking import LockTimeout
from .catalog import parse_artifact_set
from .resolver import ArtifactRef
from .store import Store

logger = logging.getLogger(__name__)

ZLS_COMPATIBILITY_MODES = ("only-runtime", "full")


@dataclass
class InstallResult:
    """Result of an install operation."""

    version: str
    """Store address of the installed version"""

    path: Path
    """Installed directory (or binary, for extra components)"""

    was_cached: bool
    """True if nothing was downloaded because the install already existed"""

    download_time: float = 0.0
    """Time spent downloading in seconds"""

    extraction_time: float = 0.0
    """Time spent extracting in seconds"""


class Installer:
    """
    Installs artifacts into a Store.

    Example:
        >>> installer = Installer(store)
        >>> result = installer.install(ref)
        >>> print(f"Installed at: {result.path}")
    """

    def __init__(
        self,
        store: Store,
        timeout: float = 30,
        lock_timeout: float = 300,
        progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    ):
        """
        Initialize installer.

        Args:
            store: Store to publish into
            timeout: Network connect/read timeout in seconds
            lock_timeout: How long to wait for a concurrent install of the
                same version before giving up with AlreadyInstalling
            progress_callback: Optional download progress callback
        """
        self.store = store
        self.timeout = timeout
        self.lock_timeout = lock_timeout
        self.progress_callback = progress_callback

    def install(self, ref: ArtifactRef, force: bool = False) -> InstallResult:
        """
        Install a resolved artifact.

        Args:
            ref: Resolved artifact
            force: Replace an existing install

        Returns:
            InstallResult; was_cached is True for the no-op case

        Raises:
            DownloadError: If the download fails
            IntegrityError: If size or checksum do not match the catalog
            ExtractError: If the archive is corrupt or has no zig binary
            PublishError: If the staged tree cannot be moved into the store
            AlreadyInstalling: If another process keeps the version locked
        """
        target = self.store.path_for(ref.version)

        if not force and self.store.is_installed(ref.version):
            logger.info(f"Version {ref.version} already installed: {target}")
            return InstallResult(ref.version, target, was_cached=True)

        try:
            with self.store.lock_manager.version_lock(
                ref.version, timeout=self.lock_timeout
            ):
                # Another process may have finished while we waited
                if not force and self.store.is_installed(ref.version):
                    logger.info(f"Version {ref.version} installed by another process")
                    return InstallResult(ref.version, target, was_cached=True)

                return self._install_locked(ref, target)
        except LockTimeout as e:
            raise AlreadyInstalling(ref.version) from e

    def _install_locked(self, ref: ArtifactRef, target: Path) -> InstallResult:
        staging = self._make_staging(ref.version)
        logger.debug(f"Staging {ref.version} in {staging}")

        try:
            archive = staging / f"archive{archive_suffix(ref.url)}"

            download_start = time.time()
            download_file(
                url=ref.url,
                destination=archive,
                label=ref.version,
                expected_sha256=ref.shasum,
                expected_size=ref.size,
                progress_callback=self.progress_callback,
                timeout=self.timeout,
            )
            download_time = time.time() - download_start

            extraction_start = time.time()
            new_root = self._extract(archive, staging / "extract", "zig")
            extraction_time = time.time() - extraction_start
            logger.info(f"Extraction complete in {extraction_time:.2f}s")

            self._publish(new_root, target, ref.version)

            return InstallResult(
                version=ref.version,
                path=target,
                was_cached=False,
                download_time=download_time,
                extraction_time=extraction_time,
            )
        finally:
            self._discard(staging)

    def _extract(self, archive: Path, extract_dir: Path, binary: str) -> Path:
        """Unpack archive and return the root holding the named binary."""
        try:
            extract_archive(archive, extract_dir)
        except ArchiveExtractionError as e:
            raise ExtractError(archive, str(e)) from e

        root = single_root(extract_dir)
        binary_name = self.store.platform.binary_name(binary)
        if not (root / binary_name).is_file():
            raise ExtractError(archive, f"archive does not contain {binary_name}")

        return root

    def _publish(self, new_root: Path, target: Path, version: str) -> None:
        """
        Move a fully staged tree into place.

        An existing install is moved aside into staging first and only
        deleted once the new tree is in place; if the final rename fails the
        old tree is put back, including on KeyboardInterrupt.

        Raises:
            PublishError: If a rename fails
        """
        if not target.exists():
            try:
                new_root.rename(target)
            except OSError as e:
                raise PublishError(version, target, str(e)) from e
            logger.info(f"Installed {version}: {target}")
            return

        aside = self.store.new_staging_path(version, tag="old-")
        try:
            target.rename(aside)
        except OSError as e:
            raise PublishError(version, target, str(e)) from e

        try:
            new_root.rename(target)
        except OSError as e:
            aside.rename(target)
            raise PublishError(version, target, str(e)) from e
        except BaseException:
            aside.rename(target)
            raise

        logger.info(f"Replaced {version}: {target}")
        self._discard(aside)

    def _make_staging(self, version: str, tag: str = "") -> Path:
        staging = self.store.new_staging_path(version, tag=tag)
        try:
            staging.mkdir(parents=True)
        except OSError as e:
            raise PublishError(version, staging, str(e)) from e
        return staging

    def _discard(self, path: Path) -> None:
        if not path.exists():
            return
        try:
            safe_rmtree(path, require_prefix=self.store.staging_dir)
            logger.debug(f"Removed staging directory: {path}")
        except FilesystemError as e:
            logger.warning(f"Failed to remove staging directory {path}: {e}")

    def install_zls(
        self,
        version: str,
        zls_url: str,
        zig_build: str,
        compatibility: str = "only-runtime",
        force: bool = False,
    ) -> InstallResult:
        """
        Install the ZLS language server next to an installed Zig.

        The release worker picks the ZLS build matching zig_build; its
        binary is published into <root>/<version>/ with a single rename.

        Args:
            version: Installed Zig version (store address)
            zls_url: Base URL of the ZLS release worker
            zig_build: Concrete Zig version string the server must support
            compatibility: 'only-runtime' or 'full'
            force: Replace an existing zls binary

        Raises:
            NotInstalled: If the Zig version is not installed
            CatalogUnavailable: If the release worker has no matching build
            UnsupportedPlatform: If there is no ZLS build for this platform
        """
        if compatibility not in ZLS_COMPATIBILITY_MODES:
            raise ValueError(f"Unknown ZLS compatibility mode: {compatibility}")

        if not self.store.is_installed(version):
            raise NotInstalled(version)

        binary_name = self.store.platform.binary_name("zls")
        target = self.store.path_for(version) / binary_name

        if not force and target.is_file():
            logger.info(f"ZLS already installed for {version}: {target}")
            return InstallResult(version, target, was_cached=True)

        descriptor = self._select_zls(zls_url, zig_build, compatibility)

        try:
            with self.store.lock_manager.version_lock(
                version, timeout=self.lock_timeout
            ):
                if not self.store.is_installed(version):
                    raise NotInstalled(version)

                staging = self._make_staging(version, tag="zls-")
                try:
                    archive = staging / f"zls{archive_suffix(descriptor.url)}"
                    download_file(
                        url=descriptor.url,
                        destination=archive,
                        label=f"zls for {zig_build}",
                        expected_sha256=descriptor.shasum,
                        expected_size=descriptor.size,
                        progress_callback=self.progress_callback,
                        timeout=self.timeout,
                    )
                    root = self._extract(archive, staging / "extract", "zls")
                    try:
                        os.replace(root / binary_name, target)
                    except OSError as e:
                        raise PublishError(version, target, str(e)) from e
                    logger.info(f"Installed ZLS for {version}: {target}")
                finally:
                    self._discard(staging)
        except LockTimeout as e:
            raise AlreadyInstalling(version) from e

        return InstallResult(version, target, was_cached=False)

    def _select_zls(self, zls_url: str, zig_build: str, compatibility: str):
        query = urlencode({"zig_version": zig_build, "compatibility": compatibility})
        url = f"{zls_url.rstrip('/')}/v1/zls/select-version?{query}"

        logger.info(f"Selecting ZLS build for Zig {zig_build}")
        try:
            document = fetch_json(url, timeout=self.timeout)
        except JSONDecodeError as e:
            raise CatalogUnavailable(url, f"invalid JSON: {e}") from e
        except RequestException as e:
            raise CatalogUnavailable(url, str(e)) from e

        if isinstance(document, dict) and "message" in document:
            raise CatalogUnavailable(url, str(document["message"]))

        try:
            release = parse_artifact_set(f"zls for {zig_build}", document)
        except ValueError as e:
            raise CatalogUnavailable(url, f"malformed ZLS release: {e}") from e

        platform_key = self.store.platform.catalog_key()
        descriptor = release.platforms.get(platform_key)
        if descriptor is None:
            raise UnsupportedPlatform(f"zls {release.version or zig_build}", platform_key)

        return descriptor
