"""Unit tests for CLI main entry point."""

import pytest
from click.testing import CliRunner

from timelog.cli import __version__, cli


class TestCLIMain:
    """Test suite for CLI main entry point."""

    @pytest.fixture
    def runner(self):
        """Create a Click CLI test runner."""
        return CliRunner()

    def test_cli_help_text(self, runner):
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "Time Logging Assistant CLI" in result.output
        assert "Commands:" in result.output

    def test_cli_version_flag(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    @pytest.mark.parametrize("command", ["chat", "extract", "test-webhook", "options"])
    def test_commands_are_registered(self, runner, command):
        result = runner.invoke(cli, ["--help"])
        assert command in result.output

    def test_unknown_command_shows_error(self, runner):
        result = runner.invoke(cli, ["unknown-command"])

        assert result.exit_code != 0
        assert "No such command" in result.output or "Error" in result.output
