"""
List command implementation.

Lists installed versions, remote versions, or the configured version maps.
"""

import logging

from zvm.cli.utils import build_manager

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the list command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    manager = build_manager(args)

    if args.vmu:
        print(f"Zig VMU: {manager.settings.version_map_url}")
        print(f"ZLS VMU: {manager.settings.zls_version_map_url}")
        return 0

    installed = set(manager.list_installed())

    if args.all:
        for name in manager.list_remote():
            marker = " (installed)" if name in installed else ""
            print(f"{name}{marker}")
        return 0

    if not installed:
        print("No Zig versions installed. Run `zvm install <version>`.")
        return 0

    active = manager.current()
    for name in sorted(installed):
        prefix = "* " if name == active else "  "
        print(f"{prefix}{name}")

    return 0
