"""
zvm/toolchain/resolver.py

Turns a user-supplied version token into a platform-bound download target.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..core.exceptions import UnknownVersion, UnsupportedPlatform
from .catalog import Catalog

logger = logging.getLogger(__name__)

MASTER = "master"


@dataclass(frozen=True)
class ArtifactRef:
    """
    A resolved download target.

    Attributes:
        version: Store address; the token itself, so rolling aliases keep
            one directory (<root>/master) across nightly updates
        url: Archive URL for the current platform
        shasum: Expected SHA256 of the archive, if published
        size: Expected archive size in bytes, if published
        build: Concrete build id of a rolling entry (what `zig version`
            prints); None for releases
    """

    version: str
    url: str
    shasum: Optional[str] = None
    size: Optional[int] = None
    build: Optional[str] = None

    @property
    def expected_build(self) -> str:
        """Version string the installed binary is expected to report."""
        return self.build or self.version


def normalize_token(token: str) -> str:
    """
    Normalize a version token: trim whitespace, drop one leading 'v'.

    Example:
        >>> normalize_token(" v0.11.0 ")
        '0.11.0'
    """
    token = (token or "").strip()
    if token.startswith("v"):
        token = token[1:]
    return token


class VersionResolver:
    """Resolves tokens against a catalog. Exact, case-sensitive matching only."""

    def resolve(self, token: str, catalog: Catalog, platform_key: str) -> ArtifactRef:
        """
        Resolve a token for one platform.

        Args:
            token: User token ('0.11.0', 'v0.11.0', 'master', 'mach-latest')
            catalog: Freshly fetched catalog
            platform_key: Catalog platform key (e.g. 'x86_64-linux')

        Returns:
            ArtifactRef addressed by the normalized token

        Raises:
            UnknownVersion: If the token is not a catalog entry
            UnsupportedPlatform: If the entry has no artifact for platform_key

        Example:
            >>> ref = VersionResolver().resolve("master", catalog, "x86_64-linux")
            >>> ref.version, ref.build
            ('master', '0.12.0-dev.2059+42389cb9c')
        """
        name = normalize_token(token)

        artifacts = catalog.get(name)
        if artifacts is None:
            raise UnknownVersion(name)

        descriptor = artifacts.platforms.get(platform_key)
        if descriptor is None:
            raise UnsupportedPlatform(name, platform_key)

        if artifacts.is_rolling:
            logger.debug(f"Alias {name} resolves to build {artifacts.version}")

        return ArtifactRef(
            version=name,
            url=descriptor.url,
            shasum=descriptor.shasum,
            size=descriptor.size,
            build=artifacts.version,
        )
