"""
Run command implementation.

Runs zig of a given version; the exit code of zig becomes the exit code
of zvm.
"""

import logging

from zvm.cli.utils import build_manager

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the run command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code of the zig process
    """
    manager = build_manager(args)
    return manager.run(args.version, args.args)
