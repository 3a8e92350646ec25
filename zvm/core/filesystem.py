"""
File system utilities for zvm.

This module provides the platform-aware file operations the installer and
the activation pointer rely on:
- Archive extraction (tar.xz, tar.gz, zip) with traversal checks
- Safe recursive deletion restricted to a known prefix
- Atomic symlink replacement
- Path utilities
"""

import os
import shutil
import sys
import tarfile
import uuid
import zipfile
from pathlib import Path
from typing import Optional, Union

IS_WINDOWS = os.name == "nt"

ARCHIVE_SUFFIXES = (".tar.xz", ".tar.gz", ".tgz", ".zip")


# ============================================================================
# Errors
# ============================================================================


class FilesystemError(Exception):
    """Base exception for filesystem operations."""

    pass


class ArchiveExtractionError(FilesystemError):
    """Failed to extract an archive."""

    pass


class UnsupportedArchiveFormat(ArchiveExtractionError):
    """Archive format is not supported."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check whether path is located under parent.

    Example:
        >>> is_relative_to(Path('/a/b/c'), Path('/a'))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def is_archive(path: Union[str, Path]) -> bool:
    """Check whether a file name carries a supported archive suffix."""
    return Path(path).name.lower().endswith(ARCHIVE_SUFFIXES)


def archive_suffix(url: str) -> str:
    """
    Return the archive suffix of a download URL, defaulting to .tar.xz.

    Example:
        >>> archive_suffix("https://ziglang.org/x/zig-windows-x86_64-0.11.0.zip")
        '.zip'
    """
    name = url.rsplit("/", 1)[-1].lower()
    for suffix in ARCHIVE_SUFFIXES:
        if name.endswith(suffix):
            return suffix
    return ".tar.xz"


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def extract_archive(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
) -> None:
    """
    Extract an archive to a destination directory.

    Supported formats: .zip, .tar.xz, .tar.gz/.tgz

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to

    Raises:
        UnsupportedArchiveFormat: If archive format is not recognized
        ArchiveExtractionError: If extraction fails
        InsecureArchiveError: If archive contains malicious paths
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ArchiveExtractionError(f"Archive not found: {archive_path}")

    destination.mkdir(parents=True, exist_ok=True)

    archive_name = archive_path.name.lower()

    try:
        if archive_name.endswith(".zip"):
            _extract_zip(archive_path, destination)
        elif archive_name.endswith(".tar.xz"):
            _extract_tar(archive_path, destination, "r:xz")
        elif archive_name.endswith((".tar.gz", ".tgz")):
            _extract_tar(archive_path, destination, "r:gz")
        else:
            raise UnsupportedArchiveFormat(
                f"Unsupported archive format: {archive_path.name}. "
                "Supported: .zip, .tar.xz, .tar.gz"
            )
    except ArchiveExtractionError:
        raise
    except Exception as e:
        raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e


def _extract_zip(archive_path: Path, destination: Path) -> None:
    """Extract a ZIP archive, keeping the executable bit of members."""
    with zipfile.ZipFile(archive_path, "r") as zf:
        members = zf.infolist()

        for member in members:
            _validate_archive_path(member.filename, destination)

        for member in members:
            extracted = Path(zf.extract(member, destination))
            mode = (member.external_attr >> 16) & 0o777
            if mode and not IS_WINDOWS:
                extracted.chmod(mode)


def _extract_tar(archive_path: Path, destination: Path, mode: str) -> None:
    """Extract a tar archive with specified compression."""
    with tarfile.open(archive_path, mode) as tar:
        for member in tar.getmembers():
            _validate_archive_path(member.name, destination)

        # Paths were validated above for interpreters without extraction filters
        if sys.version_info >= (3, 12):
            tar.extractall(destination, filter="data")
        else:
            tar.extractall(destination)


def single_root(extract_dir: Path) -> Path:
    """
    Return the real root of an extracted archive.

    Zig archives wrap everything in one top-level folder
    (zig-linux-x86_64-0.11.0/); others extract flat.
    """
    items = list(extract_dir.iterdir())

    if len(items) == 1 and items[0].is_dir():
        return items[0]

    return extract_dir


# ============================================================================
# Safe File Operations
# ============================================================================


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails

    Example:
        >>> safe_rmtree('/home/me/.zvm/.staging/0.11.0-1a2b', require_prefix='/home/me/.zvm')
    """
    path = Path(path).absolute()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not is_relative_to(path.resolve(), require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists() and not path.is_symlink():
        return  # Already gone, nothing to do

    if path.is_symlink() or not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        if IS_WINDOWS:

            def handle_remove_readonly(func, path, exc):
                """Error handler for Windows read-only files."""
                if not os.access(path, os.W_OK):
                    os.chmod(path, 0o777)
                    func(path)
                else:
                    raise

            shutil.rmtree(path, onerror=handle_remove_readonly)
        else:
            shutil.rmtree(path)

    except Exception as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


def replace_symlink(link_path: Path, target_path: Path) -> None:
    """
    Point link_path at target_path without a window where it is missing.

    A new link is created beside the old one under a unique name and then
    renamed over it; rename replaces the directory entry in one step, so
    readers see either the old or the new target.

    Raises:
        OSError: If the link cannot be created or renamed
    """
    link_path = Path(link_path)
    link_path.parent.mkdir(parents=True, exist_ok=True)
    temp_link = link_path.with_name(f".{link_path.name}.{uuid.uuid4().hex}")

    os.symlink(target_path, temp_link, target_is_directory=True)
    try:
        os.replace(temp_link, link_path)
    except OSError:
        temp_link.unlink(missing_ok=True)
        raise


def read_symlink(link_path: Path) -> Optional[Path]:
    """
    Resolve a symlink to its absolute target, or None if it is not a link.

    The target is not required to exist.
    """
    if not link_path.is_symlink():
        return None

    target = Path(os.readlink(link_path))
    if not target.is_absolute():
        target = link_path.parent / target
    return target
