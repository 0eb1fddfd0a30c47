"""Unit tests for the options command."""

from timelog.cli import cli


class TestOptionsCommand:
    """Test the options command."""

    def test_lists_default_options(self, runner, clean_env):
        result = runner.invoke(cli, ["options"])

        assert result.exit_code == 0, result.output
        for title in ("Matters/Clients", "Cost Centres", "Business Areas", "Subcategories"):
            assert title in result.output
        assert "  1. Client A - Project Alpha" in result.output

    def test_lists_configured_matters(self, runner, clean_env, monkeypatch):
        monkeypatch.setenv("MATTERS", '["Acme - Audit"]')

        result = runner.invoke(cli, ["options"])

        assert result.exit_code == 0, result.output
        assert "  1. Acme - Audit" in result.output
        assert "Client A - Project Alpha" not in result.output
