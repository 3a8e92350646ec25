"""
Tests for the CLI argument parser and error handling.
"""

import logging
from unittest.mock import patch

import pytest

from zvm import __version__
from zvm.cli.parser import CLI
from zvm.core.exceptions import BinaryMissing, NotInstalled


@pytest.fixture
def cli():
    return CLI()


class TestParseArgs:
    """Test argument parsing for each command."""

    def test_version_flag(self, cli, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.parse_args(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_install(self, cli):
        args = cli.parse_args(["install", "0.11.0", "--force", "--zls", "--full"])

        assert args.command == "install"
        assert args.version == "0.11.0"
        assert args.force and args.zls and args.full

    def test_install_alias(self, cli):
        args = cli.parse_args(["i", "master"])

        assert args.command == "i"
        assert args.force is False

    def test_use_without_version(self, cli):
        args = cli.parse_args(["use", "--sync"])

        assert args.sync is True
        assert args.version == ""

    def test_run_collects_remaining_args(self, cli):
        args = cli.parse_args(["run", "0.11.0", "build", "test"])

        assert args.version == "0.11.0"
        assert args.args == ["build", "test"]

    def test_run_without_args(self, cli):
        assert cli.parse_args(["run", "master"]).args == []

    def test_list_flags_are_exclusive(self, cli):
        with pytest.raises(SystemExit):
            cli.parse_args(["list", "--all", "--vmu"])

    @pytest.mark.parametrize("argv", [["ls", "-a"], ["list", "--all"]])
    def test_list_all(self, cli, argv):
        assert cli.parse_args(argv).all is True

    def test_uninstall_alias(self, cli):
        args = cli.parse_args(["rm", "0.10.1"])

        assert args.command == "rm"
        assert args.version == "0.10.1"


class TestRun:
    """Test CLI.run dispatch and error reporting."""

    def test_no_command_prints_help(self, cli, capsys):
        assert cli.run([]) == 1
        assert "usage: zvm" in capsys.readouterr().out

    def test_zvm_error_is_reported(self, cli, capsys):
        with patch.object(CLI, "_dispatch_command", side_effect=NotInstalled("0.11.0")):
            assert cli.run(["uninstall", "0.11.0"]) == 1

        assert "ERROR: Version 0.11.0 is not installed" in capsys.readouterr().err

    def test_binary_missing_asks_for_report(self, cli, capsys, tmp_path):
        error = BinaryMissing(tmp_path / "0.11.0" / "zig", "0.11.0")
        with patch.object(CLI, "_dispatch_command", side_effect=error):
            assert cli.run(["run", "0.11.0"]) == 1

        assert "report this error" in capsys.readouterr().err

    def test_keyboard_interrupt(self, cli):
        with patch.object(CLI, "_dispatch_command", side_effect=KeyboardInterrupt):
            assert cli.run(["clean"]) == 130

    def test_unexpected_error(self, cli):
        with patch.object(CLI, "_dispatch_command", side_effect=RuntimeError("boom")):
            assert cli.run(["clean"]) == 1


class TestLogging:
    """Test log level selection."""

    @pytest.mark.parametrize(
        "argv,level",
        [
            (["clean"], logging.WARNING),
            (["--verbose", "clean"], logging.DEBUG),
            (["-q", "clean"], logging.ERROR),
        ],
    )
    def test_levels(self, cli, argv, level):
        with patch.object(CLI, "_dispatch_command", return_value=0):
            cli.run(argv)

        assert logging.getLogger().level == level

    def test_zvm_debug_env(self, cli, monkeypatch):
        monkeypatch.setenv("ZVM_DEBUG", "1")

        with patch.object(CLI, "_dispatch_command", return_value=0):
            cli.run(["clean"])

        assert logging.getLogger().level == logging.DEBUG
