"""
Install command implementation.

Downloads and installs a version of Zig, optionally with ZLS.
"""

import logging

from zvm.cli.utils import build_manager

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    manager = build_manager(args)

    extras = ["zls"] if args.zls else []
    compatibility = "full" if args.full else "only-runtime"

    # --force overrides the setting; without it always_force_install applies
    result = manager.resolve_and_install(
        args.version,
        force=True if args.force else None,
        extra_components=extras,
        zls_compatibility=compatibility,
    )

    if result.was_cached:
        print(f"Zig {result.version} is already installed")
    else:
        print(f"Installed Zig {result.version} in {result.path}")

    if args.zls:
        print(f"ZLS installed for Zig {result.version}")

    return 0
