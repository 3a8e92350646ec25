"""
Concurrent access control for zvm.

Installs, uninstalls and clean-ups of one version may run from several
terminals at once. This module provides the per-version file locks that
serialize them across processes.

Usage:
    from zvm.core.locking import LockManager

    lock_manager = LockManager(root / ".locks")
    with lock_manager.version_lock("0.11.0", timeout=300):
        # Only this process writes into the 0.11.0 staging area
        pass

    with lock_manager.try_version_lock("0.11.0") as acquired:
        if not acquired:
            print("An install of 0.11.0 is in progress")
"""

import logging
import re
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout as LockTimeout

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._+-]")


def lock_name(version: str) -> str:
    """
    Turn a version string into a safe lock file name.

    Example:
        >>> lock_name("0.12.0-dev.1+abc")
        '0.12.0-dev.1+abc.lock'
    """
    return f"{_UNSAFE_CHARS.sub('-', version)}.lock"


class LockManager:
    """
    Manages per-version locks under one lock directory.

    Uses file-based locking with the `filelock` library, so locks are
    released by the OS when the holding process dies.

    Attributes:
        lock_dir: Directory where lock files are stored
    """

    def __init__(self, lock_dir: Path):
        self.lock_dir = Path(lock_dir)
        self.lock_dir.mkdir(parents=True, exist_ok=True)

    def lock_path(self, version: str) -> Path:
        """Path of the lock file guarding one version."""
        return self.lock_dir / lock_name(version)

    @contextmanager
    def version_lock(self, version: str, timeout: float = 300):
        """
        Acquire the lock for a version (for install/uninstall).

        Args:
            version: Version string used as the store address
            timeout: Maximum wait time in seconds (default: 300 for long downloads)

        Raises:
            LockTimeout: If lock can't be acquired within timeout
        """
        lock_path = self.lock_path(version)
        lock = FileLock(lock_path, timeout=timeout)

        try:
            with lock:
                logger.debug(f"Acquired version lock: {lock_path}")
                yield
                logger.debug(f"Released version lock: {lock_path}")
        except LockTimeout:
            logger.error(
                f"Could not acquire lock for {version} after {timeout}s. "
                "Another zvm process may be installing this version."
            )
            raise

    @contextmanager
    def try_version_lock(self, version: str):
        """
        Try to acquire a version lock without blocking.

        Yields:
            bool: True if lock acquired, False if another process holds it
        """
        with try_lock(self.lock_path(version), timeout=0) as acquired:
            yield acquired


@contextmanager
def try_lock(lock_path: Path, timeout: float = 0):
    """
    Try to acquire lock without blocking (or with short timeout).

    Args:
        lock_path: Path to lock file
        timeout: 0 for immediate (non-blocking), or seconds to wait

    Yields:
        bool: True if lock acquired, False otherwise

    Example:
        >>> with try_lock(Path('/tmp/my.lock'), timeout=0) as acquired:
        ...     if acquired:
        ...         do_work()
    """
    lock = FileLock(lock_path, timeout=timeout)

    acquired = False
    try:
        lock.acquire(timeout=timeout)
        acquired = True
        logger.debug(f"Acquired lock (try_lock): {lock_path}")
    except LockTimeout:
        logger.debug(f"Could not acquire lock (try_lock): {lock_path}")

    try:
        yield acquired
    finally:
        if acquired:
            lock.release()
            logger.debug(f"Released lock (try_lock): {lock_path}")


__all__ = [
    "LockManager",
    "try_lock",
    "lock_name",
    "LockTimeout",
]
