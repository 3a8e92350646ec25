"""
Use command implementation.

Switches the active Zig version, or syncs it with the master build.
"""

import logging

from zvm.cli.utils import build_manager

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the use command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    manager = build_manager(args)

    if args.sync:
        result = manager.sync()
        if not result.changed:
            print(f"master is up to date ({result.build})")
        else:
            print(f"Now using Zig master ({result.build})")
        return 0

    version = manager.activate(args.version)
    print(f"Now using Zig {version}")
    return 0
