"""
Data directory management for zvm.

Directory Structure (~/.zvm/, $XDG_DATA_HOME/zvm/ or $ZVM_PATH):
    - <version>/       : One unpacked Zig toolchain per version
    - bin              : Symlink to the active version
    - .staging/        : Private download/extraction areas
    - .locks/          : Per-version install locks
    - settings.yaml    : User settings (read-only for zvm)
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

STAGING_DIR = ".staging"
LOCK_DIR = ".locks"
ACTIVE_LINK = "bin"
SETTINGS_FILE = "settings.yaml"
# Written by earlier releases; read when settings.yaml is absent
LEGACY_SETTINGS_FILE = "settings.json"


class DirectoryError(Exception):
    """Raised when the data directory cannot be determined or created."""

    pass


def get_data_dir() -> Path:
    """
    Get the zvm data directory.

    Resolution order: $ZVM_PATH, $XDG_DATA_HOME/zvm, ~/.zvm

    Example:
        >>> get_data_dir()
        PosixPath('/home/user/.zvm')
    """
    zvm_path = os.environ.get("ZVM_PATH")
    if zvm_path:
        return Path(zvm_path).expanduser()

    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data).expanduser() / "zvm"

    return Path.home() / ".zvm"


def ensure_data_dir(root: Path) -> Path:
    """
    Create the data directory if needed.

    Raises:
        DirectoryError: If the directory cannot be created
    """
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryError(f"Could not create data directory {root}: {e}") from e

    logger.debug(f"Using data directory: {root}")
    return root
