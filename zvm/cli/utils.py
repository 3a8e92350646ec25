"""
Shared utilities for CLI commands.

Provides common functionality used across multiple CLI commands to
eliminate duplication and ensure consistent behavior.
"""

import logging
import sys
from typing import Optional

from zvm.config.settings import find_settings_file, load_settings
from zvm.core.directory import ensure_data_dir, get_data_dir
from zvm.core.download import DownloadProgress
from zvm.toolchain.manager import VersionManager

logger = logging.getLogger(__name__)

RED = "\033[31m"
RESET = "\033[0m"


# ============================================================================
# Engine Construction
# ============================================================================


def build_manager(args, interactive: bool = True) -> VersionManager:
    """
    Load settings and create the version manager for one invocation.

    The loaded settings are stored on args so error reporting can honor
    the color preference.

    Args:
        args: Parsed command-line arguments
        interactive: Whether install-on-run may prompt the user

    Returns:
        VersionManager rooted at the zvm data directory
    """
    root = ensure_data_dir(get_data_dir())
    settings = load_settings(find_settings_file(root))
    args.settings = settings

    logger.debug(f"Version map: {settings.version_map_url}")

    return VersionManager(
        settings,
        root,
        confirm=confirm if interactive else None,
        progress_callback=show_progress if sys.stderr.isatty() else None,
    )


# ============================================================================
# User Interface / Output Formatting
# ============================================================================


def confirm(question: str) -> bool:
    """
    Ask a yes/no question on the terminal.

    Returns:
        True only for an explicit yes; EOF and Ctrl-C count as no
    """
    try:
        response = input(f"{question} [y/n] ").strip().lower()
    except (EOFError, KeyboardInterrupt):
        print()
        return False
    return response in ("y", "yes")


def show_progress(progress: DownloadProgress):
    """Render download progress on one stderr line."""
    end = "\n" if progress.percentage >= 100 else ""
    print(f"\r{progress}", end=end, file=sys.stderr, flush=True)


def print_error(message: str, details: Optional[str] = None, color: bool = False):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
        color: Highlight the prefix (only when stderr is a terminal)
    """
    prefix = "ERROR:"
    if color and sys.stderr.isatty():
        prefix = f"{RED}{prefix}{RESET}"

    print(f"{prefix} {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)
