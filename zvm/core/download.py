"""
Network download helpers with progress tracking and checksum verification.

This module provides:
- Streaming HTTP/HTTPS downloads with TLS verification
- Progress reporting (bytes, percentage, speed, ETA)
- SHA256 verification computed while streaming
- JSON document fetching for version catalogs

Nothing here retries. A failed request surfaces immediately so the user
decides whether to re-run the command.
"""

import hashlib
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

import requests
from requests.exceptions import RequestException

from .exceptions import DownloadError, IntegrityError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second
    eta_seconds: float  # estimated time remaining

    def __str__(self) -> str:
        """Format progress for display."""
        return format_progress(self)


class StreamingHasher:
    """Compute a SHA256 digest incrementally while streaming."""

    def __init__(self):
        self.hasher = hashlib.sha256()

    def update(self, data: bytes):
        """Add data to hash computation."""
        self.hasher.update(data)

    def finalize(self) -> str:
        """Get final hash value as hex string."""
        return self.hasher.hexdigest()

    def verify(self, expected_hash: str) -> bool:
        """Check if computed hash matches expected value (case-insensitive)."""
        return self.finalize().lower() == expected_hash.lower()


def fetch_json(url: str, timeout: float = 30) -> Any:
    """
    GET a URL and decode the body as JSON.

    Args:
        url: Document URL
        timeout: Connect/read timeout in seconds

    Returns:
        Decoded JSON value

    Raises:
        requests.RequestException: On transport errors or non-2xx status
        requests.JSONDecodeError: If the body is not valid JSON
    """
    logger.debug(f"Fetching JSON document: {url}")
    response = requests.get(url, timeout=timeout, allow_redirects=True)
    response.raise_for_status()
    return response.json()


def download_file(
    url: str,
    destination: Path,
    label: str,
    expected_sha256: Optional[str] = None,
    expected_size: Optional[int] = None,
    progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    timeout: float = 30,
) -> Path:
    """
    Download a URL to destination, verifying size and checksum.

    The destination is removed again if the transfer or the verification
    fails, so callers never see a truncated or corrupted file.

    Args:
        url: URL to download from
        destination: Local path to save file
        label: Name reported in integrity errors (usually the version)
        expected_sha256: Expected SHA256 hash, verified while streaming
        expected_size: Expected size in bytes
        progress_callback: Optional callback for progress updates
        timeout: Connect/read timeout in seconds

    Returns:
        Path to downloaded file

    Raises:
        DownloadError: On network errors or non-2xx status
        IntegrityError: If size or checksum do not match

    Example:
        >>> download_file(
        ...     "https://ziglang.org/download/0.11.0/zig-linux-x86_64-0.11.0.tar.xz",
        ...     Path("staging/zig.tar.xz"),
        ...     label="0.11.0",
        ...     expected_sha256="2d00e789...",
        ... )
    """
    if not url:
        raise ValueError("URL cannot be empty")

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    logger.info(f"Downloading from {url}")

    try:
        downloaded, actual_hash = _stream_to_file(
            url, destination, progress_callback, timeout
        )
    except RequestException as e:
        destination.unlink(missing_ok=True)
        raise DownloadError(url, str(e)) from e
    except BaseException:
        destination.unlink(missing_ok=True)
        raise

    if expected_size is not None and downloaded != expected_size:
        destination.unlink(missing_ok=True)
        raise IntegrityError(label, f"{expected_size} bytes", f"{downloaded} bytes")

    if expected_sha256 and actual_hash.lower() != expected_sha256.lower():
        destination.unlink(missing_ok=True)
        raise IntegrityError(label, expected_sha256, actual_hash)

    if expected_sha256:
        logger.debug("Checksum verified successfully")

    logger.info(f"Download complete: {destination}")
    return destination


def _stream_to_file(
    url: str,
    destination: Path,
    progress_callback: Optional[Callable[[DownloadProgress], None]],
    timeout: float,
) -> tuple[int, str]:
    """Stream the response body to disk, hashing as it goes."""
    response = requests.get(url, stream=True, timeout=timeout, allow_redirects=True)
    response.raise_for_status()

    content_length = response.headers.get("content-length")
    total_size = int(content_length) if content_length else 0

    hasher = StreamingHasher()
    downloaded = 0
    start_time = time.time()
    last_progress_time = start_time

    with open(destination, "wb") as f:
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if not chunk:
                continue
            f.write(chunk)
            hasher.update(chunk)
            downloaded += len(chunk)

            # Report progress at most twice per second
            current_time = time.time()
            if progress_callback and (
                current_time - last_progress_time >= 0.5 or downloaded == total_size
            ):
                elapsed = current_time - start_time
                speed = downloaded / elapsed if elapsed > 0 else 0
                remaining = total_size - downloaded if total_size > 0 else 0
                progress_callback(
                    DownloadProgress(
                        bytes_downloaded=downloaded,
                        total_bytes=total_size if total_size > 0 else downloaded,
                        percentage=(downloaded / total_size * 100)
                        if total_size > 0
                        else 0,
                        speed_bps=speed,
                        eta_seconds=remaining / speed if speed > 0 else 0,
                    )
                )
                last_progress_time = current_time

    return downloaded, hasher.finalize()


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.total_bytes > 0:
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s "
            f"ETA: {progress.eta_seconds:.0f}s"
        )
    else:
        # Unknown total size
        return f"{mb_downloaded:.1f} MB " f"at {speed_mbps:.1f} MB/s"
