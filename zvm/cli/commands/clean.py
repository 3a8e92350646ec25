"""
Clean command implementation.

Removes abandoned staging directories and downloaded archives.
"""

import logging

from zvm.cli.utils import build_manager

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the clean command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    manager = build_manager(args)

    removed = manager.clean()
    if not removed:
        print("Nothing to clean")
        return 0

    for name in removed:
        print(f"Removed {name}")
    return 0
