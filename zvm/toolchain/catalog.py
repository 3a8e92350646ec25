"""
zvm/toolchain/catalog.py

Remote version catalog: typed schema and client.

The catalog is the JSON index published at the configured version map URL
(https://ziglang.org/download/index.json by default):

    {
      "master": {
        "version": "0.12.0-dev.2059+42389cb9c",
        "date": "2024-01-07",
        "x86_64-linux": {"tarball": "https://...", "shasum": "...", "size": "44222168"}
      },
      "0.11.0": {
        "date": "2023-08-04",
        "x86_64-linux": {"tarball": "https://...", "shasum": "...", "size": "44961892"}
      }
    }

It is decoded into frozen dataclasses here; anything that does not fit the
schema makes the whole document unavailable instead of leaking raw dicts.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from packaging.version import InvalidVersion, Version
from requests.exceptions import JSONDecodeError, RequestException

from ..core.download import fetch_json
from ..core.exceptions import CatalogUnavailable

logger = logging.getLogger(__name__)

# Source archives published next to the binaries, never platform artifacts
SOURCE_KEYS = frozenset({"src", "bootstrap"})

METADATA_KEYS = frozenset({"version", "date", "docs", "stdDocs", "notes"})

# Leading release number of names like 0.11.0 or 2024.11.0-mach
_RELEASE_PREFIX = re.compile(r"^\d+(?:\.\d+)+")


@dataclass(frozen=True)
class ArtifactDescriptor:
    """One downloadable archive for a version/platform pair."""

    url: str
    shasum: Optional[str] = None
    size: Optional[int] = None


@dataclass(frozen=True)
class ArtifactSet:
    """
    All artifacts of one catalog entry, keyed by platform.

    Attributes:
        platforms: Platform key -> descriptor
        version: Concrete build id the entry points at (master, mach releases)
        date: Release date as published
        name: Catalog key of the entry
    """

    platforms: Dict[str, ArtifactDescriptor] = field(default_factory=dict)
    version: Optional[str] = None
    date: Optional[str] = None
    name: str = ""

    @property
    def is_rolling(self) -> bool:
        """
        True for aliases that move between builds (master, mach-latest).

        Mach nominated releases such as 2024.11.0-mach carry a version too,
        but their name is itself a release number.
        """
        return self.version is not None and not _RELEASE_PREFIX.match(self.name)


@dataclass(frozen=True)
class Catalog:
    """Version name -> artifact set, as fetched at one point in time."""

    entries: Dict[str, ArtifactSet] = field(default_factory=dict)
    source_url: str = ""

    def __contains__(self, name: str) -> bool:
        return name in self.entries

    def get(self, name: str) -> Optional[ArtifactSet]:
        return self.entries.get(name)

    def names(self) -> List[str]:
        """Version names, rolling entries first, then newest release first."""
        rolling = sorted(n for n, a in self.entries.items() if a.is_rolling)
        releases = [n for n, a in self.entries.items() if not a.is_rolling]
        return rolling + sorted(releases, key=_release_key, reverse=True)


def _release_key(name: str):
    # 2024.11.0-mach is not PEP 440; order it by its leading release number
    try:
        return (1, Version(name), name)
    except InvalidVersion:
        pass

    match = _RELEASE_PREFIX.match(name)
    if match:
        return (1, Version(match.group(0)), name)
    return (0, Version("0"), name)


def _parse_size(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"invalid size {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    raise ValueError(f"invalid size {value!r}")


def _parse_descriptor(raw: Dict[str, Any]) -> ArtifactDescriptor:
    url = raw.get("tarball", raw.get("url"))
    if not isinstance(url, str) or not url:
        raise ValueError("artifact without a download URL")

    shasum = raw.get("shasum")
    if shasum is not None and not isinstance(shasum, str):
        raise ValueError(f"invalid shasum {shasum!r}")

    return ArtifactDescriptor(
        url=url, shasum=shasum or None, size=_parse_size(raw.get("size"))
    )


def parse_artifact_set(name: str, raw: Any) -> ArtifactSet:
    """
    Decode one catalog entry (or a ZLS release record of the same shape).

    Raises:
        ValueError: If the entry does not match the schema
    """
    if not isinstance(raw, dict):
        raise ValueError(f"entry {name!r} is not an object")

    version = raw.get("version")
    if version is not None and not isinstance(version, str):
        raise ValueError(f"entry {name!r} has a non-string version")

    date = raw.get("date")
    platforms = {}

    for key, value in raw.items():
        if key in METADATA_KEYS or key in SOURCE_KEYS:
            continue
        if not isinstance(value, dict):
            logger.debug(f"Skipping non-artifact field {name}.{key}")
            continue
        if "tarball" not in value and "url" not in value:
            logger.debug(f"Skipping artifact-less object {name}.{key}")
            continue
        try:
            platforms[key] = _parse_descriptor(value)
        except ValueError as e:
            raise ValueError(f"{name}.{key}: {e}") from e

    if not platforms:
        raise ValueError(f"entry {name!r} lists no platform artifacts")

    return ArtifactSet(
        platforms=platforms,
        version=version,
        date=date if isinstance(date, str) else None,
        name=name,
    )


def parse_catalog(document: Any, source_url: str = "") -> Catalog:
    """
    Decode a catalog document into typed entries.

    Raises:
        CatalogUnavailable: If the document does not match the schema
    """
    if not isinstance(document, dict):
        raise CatalogUnavailable(source_url, "catalog is not a JSON object")

    entries = {}
    for name, raw in document.items():
        try:
            entries[name] = parse_artifact_set(name, raw)
        except ValueError as e:
            raise CatalogUnavailable(source_url, f"malformed catalog: {e}") from e

    logger.debug(f"Parsed {len(entries)} catalog entries from {source_url}")
    return Catalog(entries=entries, source_url=source_url)


class CatalogClient:
    """
    Fetches the version catalog.

    Every call performs a fresh GET; catalogs change with every nightly
    build, so nothing is cached between calls.
    """

    def __init__(self, timeout: float = 30):
        self.timeout = timeout

    def fetch(self, url: str) -> Catalog:
        """
        Fetch and decode the catalog at url.

        Raises:
            CatalogUnavailable: On transport errors, non-2xx status,
                invalid JSON or schema violations
        """
        logger.info(f"Fetching version catalog: {url}")
        try:
            document = fetch_json(url, timeout=self.timeout)
        except JSONDecodeError as e:
            raise CatalogUnavailable(url, f"invalid JSON: {e}") from e
        except RequestException as e:
            raise CatalogUnavailable(url, str(e)) from e

        return parse_catalog(document, source_url=url)
