"""
zvm CLI argument parser.

This module implements the command-line interface for zvm using argparse.
"""

import argparse
import importlib
import logging
import os
import sys
from typing import List, Optional

from zvm import __version__
from zvm.core.exceptions import BinaryMissing, ZvmError
from zvm.cli.utils import print_error

logger = logging.getLogger(__name__)


class CLI:
    """zvm command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="zvm",
            description="zvm lets you easily install, upgrade, and switch between different versions of Zig.",
            epilog='Use "zvm COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"zvm {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_use_command(subparsers)
        self._add_run_command(subparsers)
        self._add_list_command(subparsers)
        self._add_current_command(subparsers)
        self._add_uninstall_command(subparsers)
        self._add_clean_command(subparsers)

        return parser

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            aliases=["i"],
            help="Download and install a version of Zig",
            description="Download and install a version of Zig. To install the latest build, use `master`.",
        )
        parser.add_argument("version", metavar="VERSION", help="Zig version")
        parser.add_argument(
            "--force",
            "-f",
            action="store_true",
            help="Force installation even if the version is already installed",
        )
        parser.add_argument("--zls", action="store_true", help="Install ZLS as well")
        parser.add_argument(
            "--full",
            action="store_true",
            help="Use the 'full' ZLS compatibility mode",
        )

    def _add_use_command(self, subparsers):
        """Add 'use' subcommand."""
        parser = subparsers.add_parser(
            "use",
            help="Switch between versions of Zig",
            description="Make an installed version the active one",
        )
        parser.add_argument(
            "version", metavar="VERSION", nargs="?", default="", help="Zig version"
        )
        parser.add_argument(
            "--sync",
            action="store_true",
            help="Sync your master install with the repository and use it",
        )

    def _add_run_command(self, subparsers):
        """Add 'run' subcommand."""
        parser = subparsers.add_parser(
            "run",
            help="Run a command with the given Zig version",
            description="Run zig of the given version, installing it first if needed",
        )
        parser.add_argument("version", metavar="VERSION", help="Zig version")
        parser.add_argument(
            "args",
            metavar="ARGS",
            nargs=argparse.REMAINDER,
            help="Arguments passed to zig",
        )

    def _add_list_command(self, subparsers):
        """Add 'list' subcommand."""
        parser = subparsers.add_parser(
            "list",
            aliases=["ls"],
            help="List installed Zig versions",
            description="List installed Zig versions. Use --all to see remote options",
        )
        group = parser.add_mutually_exclusive_group()
        group.add_argument(
            "--all",
            "-a",
            action="store_true",
            help="List remote Zig versions available for download",
        )
        group.add_argument(
            "--vmu", action="store_true", help="List configured version maps"
        )

    def _add_current_command(self, subparsers):
        """Add 'current' subcommand."""
        subparsers.add_parser(
            "current",
            help="Show the active Zig version",
            description="Show the active Zig version",
        )

    def _add_uninstall_command(self, subparsers):
        """Add 'uninstall' subcommand."""
        parser = subparsers.add_parser(
            "uninstall",
            aliases=["rm"],
            help="Remove an installed version of Zig",
            description="Remove an installed version of Zig",
        )
        parser.add_argument("version", metavar="VERSION", help="Zig version")

    def _add_clean_command(self, subparsers):
        """Add 'clean' subcommand."""
        subparsers.add_parser(
            "clean",
            help="Remove leftovers of interrupted installs",
            description="Remove abandoned staging directories and downloaded archives",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except ZvmError as e:
            settings = getattr(parsed_args, "settings", None)
            color = settings.use_color if settings else False
            if isinstance(e, BinaryMissing):
                print_error(
                    str(e),
                    "The install is incomplete. Please report this error as an issue.",
                    color=color,
                )
            else:
                print_error(str(e), color=color)
            return 1
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags and ZVM_DEBUG.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose or os.environ.get("ZVM_DEBUG"):
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.WARNING
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "install": "zvm.cli.commands.install",
            "i": "zvm.cli.commands.install",
            "use": "zvm.cli.commands.use",
            "run": "zvm.cli.commands.run",
            "list": "zvm.cli.commands.list",
            "ls": "zvm.cli.commands.list",
            "current": "zvm.cli.commands.current",
            "uninstall": "zvm.cli.commands.uninstall",
            "rm": "zvm.cli.commands.uninstall",
            "clean": "zvm.cli.commands.clean",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
