"""Unit tests for the test-webhook command."""

from timelog.cli import cli
from timelog.cli.error_handlers import EXIT_CONFIGURATION, EXIT_DELIVERY
from timelog.services.delivery_service import TEST_MESSAGE


class TestWebhookCommand:
    """Test the test-webhook command."""

    def test_successful_webhook_check(self, runner, mock_env, http_session):
        result = runner.invoke(cli, ["test-webhook"])

        assert result.exit_code == 0, result.output
        assert "Sending test payload to https://hooks.example.com/timelog" in result.output
        assert "Webhook answered with HTTP 200 after 1 attempt(s)" in result.output

        body = http_session.post.call_args.kwargs["json"]
        assert body["test"] is True
        assert body["message"] == TEST_MESSAGE

    def test_unconfigured_webhook(self, runner, clean_env, http_session):
        result = runner.invoke(cli, ["test-webhook"])

        assert result.exit_code == EXIT_CONFIGURATION
        assert "No webhook endpoint is configured" in result.output
        http_session.post.assert_not_called()

    def test_rejected_webhook_check(self, runner, mock_env, http_session):
        http_session.post.return_value.status_code = 401

        result = runner.invoke(cli, ["test-webhook"])

        assert result.exit_code == EXIT_DELIVERY
        assert "Delivery Error" in result.output

    def test_invalid_settings(self, runner, clean_env, monkeypatch):
        monkeypatch.setenv("WEBHOOK_URL", "ftp://example.com")

        result = runner.invoke(cli, ["test-webhook"])

        assert result.exit_code == EXIT_CONFIGURATION
        assert "Invalid settings" in result.output
