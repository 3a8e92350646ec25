"""
Current command implementation.
"""

from zvm.cli.utils import build_manager


def run(args) -> int:
    """Print the active Zig version."""
    manager = build_manager(args)

    active = manager.current()
    if active is None:
        print("No active Zig version. Run `zvm use <version>`.")
        return 1

    print(active)
    return 0
