"""
Uninstall command implementation.

Removes an installed version of Zig.
"""

import logging

from zvm.cli.utils import build_manager

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the uninstall command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    manager = build_manager(args)
    version = manager.uninstall(args.version)
    print(f"Removed Zig {version}")
    return 0
