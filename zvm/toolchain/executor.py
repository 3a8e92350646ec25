"""
zvm/toolchain/executor.py

The `run` flow: run a command with a given Zig version, installing it
first (after confirmation) if needed.
"""

import logging
import subprocess
from typing import Callable, List, Optional, Sequence

from ..core.exceptions import BinaryMissing, NotInstalled, NoVersionSpecified
from .catalog import Catalog
from .installer import Installer
from .resolver import VersionResolver, normalize_token
from .store import Store

logger = logging.getLogger(__name__)


class Executor:
    """
    Runs an installed zig binary, forwarding arguments, standard streams
    and environment.

    Example:
        >>> executor = Executor(store, installer, fetch_catalog, confirm=lambda q: True)
        >>> exit_code = executor.run("0.11.0", ["build", "test"])
    """

    def __init__(
        self,
        store: Store,
        installer: Installer,
        fetch_catalog: Callable[[], Catalog],
        confirm: Callable[[str], bool],
        resolver: Optional[VersionResolver] = None,
    ):
        """
        Args:
            store: Installation store
            installer: Used for install-on-run
            fetch_catalog: Callable returning a fresh catalog
            confirm: Yes/no prompt; receives the question, returns the answer
            resolver: Resolver (default: VersionResolver())
        """
        self.store = store
        self.installer = installer
        self.fetch_catalog = fetch_catalog
        self.confirm = confirm
        self.resolver = resolver or VersionResolver()

    def run(self, token: str, args: Sequence[str]) -> int:
        """
        Run zig of the given version with args.

        Returns:
            Exit code of the zig process

        Raises:
            NoVersionSpecified: If token is empty
            UnknownVersion, UnsupportedPlatform: If a missing version does
                not resolve (carrying the token)
            CatalogUnavailable: If the catalog cannot be fetched
            NotInstalled: If the user declines the install prompt
            InstallError: If the install fails
            BinaryMissing: If the version directory has no zig binary
        """
        version = normalize_token(token)
        if not version:
            raise NoVersionSpecified()

        if version not in self.store.list_installed():
            ref = self.resolver.resolve(
                version, self.fetch_catalog(), self.store.platform.catalog_key()
            )

            question = f"It looks like {version} isn't installed. Would you like to install it?"
            if not self.confirm(question):
                raise NotInstalled(version)

            self.installer.install(ref, force=False)

        return self.exec(version, args)

    def exec(self, version: str, args: Sequence[str]) -> int:
        """
        Run the binary of an installed version and wait for it.

        Raises:
            BinaryMissing: If the entry-point binary is absent
        """
        binary = self.store.binary_path(version)
        if not binary.is_file():
            raise BinaryMissing(binary, version)

        command: List[str] = [str(binary), *args]
        logger.debug(f"Running: {command}")

        # stdin/stdout/stderr and the environment are inherited
        result = subprocess.run(command)
        return result.returncode
