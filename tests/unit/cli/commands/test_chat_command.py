"""Unit tests for the chat command."""

import json
from unittest.mock import Mock, patch

import pytest

from timelog.cli import cli
from timelog.cli.commands.chat import resolve_answer
from timelog.cli.error_handlers import EXIT_CONFIGURATION

# Billable entry answered by option number, then confirmed
FULL_BILLABLE_RUN = "Contract review\n1h30m\n1\n1\n1\n2\n3\n4\n1\n/quit\n"


class TestResolveAnswer:
    """Test numeric option selection."""

    def test_number_selects_option(self):
        assert resolve_answer("2", ["Billable", "Non-billable"]) == "Non-billable"

    def test_out_of_range_number_is_kept(self):
        assert resolve_answer("5", ["Billable", "Non-billable"]) == "5"

    def test_number_without_options_is_kept(self):
        assert resolve_answer("45", []) == "45"

    def test_text_is_kept(self):
        assert resolve_answer("billable", ["Billable"]) == "billable"


class TestChatFixedMode:
    """Test the fixed question sequence."""

    def test_complete_entry_is_delivered(self, runner, mock_env, http_session):
        result = runner.invoke(cli, ["chat", "--user-name", "Jane Doe"], input=FULL_BILLABLE_RUN)

        assert result.exit_code == 0, result.output
        assert "What task did you work on?" in result.output
        assert "• Matter: Client A - Project Alpha" in result.output
        assert "• Future Goal: Keep doing it" in result.output
        assert "Perfect! I've successfully sent" in result.output
        assert "Goodbye!" in result.output

        http_session.post.assert_called_once()
        payload = http_session.post.call_args.kwargs["json"]
        assert payload["time_entry"]["task_description"] == "Contract review"
        assert payload["time_entry"]["duration_minutes"] == 90
        assert payload["user_name"] == "Jane Doe"

    def test_failed_delivery_offers_retry(self, runner, mock_env, http_session):
        http_session.post.return_value.status_code = 500

        result = runner.invoke(cli, ["chat"], input=FULL_BILLABLE_RUN)

        assert result.exit_code == 0, result.output
        assert "there was an issue saving your time entry" in result.output
        assert "/retry" in result.output
        assert http_session.post.call_count == 3

    def test_without_webhook_entries_are_not_sent(self, runner, clean_env, http_session):
        result = runner.invoke(cli, ["chat"], input=FULL_BILLABLE_RUN)

        assert result.exit_code == 0, result.output
        assert "No webhook configured" in result.output
        assert "I've saved your time entry" in result.output
        http_session.post.assert_not_called()

    def test_retry_without_failure(self, runner, mock_env, http_session):
        result = runner.invoke(cli, ["chat"], input="/retry\n/quit\n")

        assert result.exit_code == 0, result.output
        assert "no failed entry" in result.output

    def test_restart_returns_to_greeting(self, runner, mock_env, http_session):
        result = runner.invoke(cli, ["chat"], input="Contract review\n/restart\n/quit\n")

        assert result.exit_code == 0, result.output
        assert result.output.count("What task did you work on?") == 2

    def test_end_of_input_ends_chat(self, runner, mock_env, http_session):
        result = runner.invoke(cli, ["chat"], input="Contract review\n")

        assert result.exit_code == 0, result.output
        assert "Goodbye!" in result.output

    def test_progress_is_saved_and_resumed(self, runner, mock_env, http_session, tmp_path):
        first = runner.invoke(cli, ["chat"], input="Contract review\n/quit\n")
        assert first.exit_code == 0, first.output

        snapshot = json.loads((tmp_path / "session.json").read_text())
        assert snapshot["state"]["step"] == "task"

        resumed = runner.invoke(cli, ["chat", "--resume"], input="/quit\n")

        assert resumed.exit_code == 0, resumed.output
        assert "How long did you spend on this task?" in resumed.output
        assert "Hi! I'm here" not in resumed.output

    def test_new_chat_discards_saved_progress(self, runner, mock_env, http_session):
        runner.invoke(cli, ["chat"], input="Contract review\n/quit\n")

        result = runner.invoke(cli, ["chat"], input="/quit\n")

        assert "Hi! I'm here" in result.output


class TestChatOpenMode:
    """Test the open-ended assistant mode."""

    @pytest.fixture
    def generator(self):
        generator = Mock()
        generator.generate.return_value = "Thanks, I have completed your entry and will log this."
        with patch("timelog.cli.commands.chat.OpenAIChatClient") as client_cls:
            client_cls.from_config.return_value = generator
            yield generator

    def test_requires_api_key(self, runner, mock_env, http_session):
        result = runner.invoke(cli, ["chat", "--mode", "open"], input="/quit\n")

        assert result.exit_code == EXIT_CONFIGURATION
        assert "OPENAI_API_KEY" in result.output

    def test_completed_conversation_is_delivered(
        self, runner, mock_env, monkeypatch, http_session, generator
    ):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

        result = runner.invoke(
            cli,
            ["chat", "--mode", "open"],
            input="I worked on the API docs for 2 hours\n/quit\n",
        )

        assert result.exit_code == 0, result.output
        assert "What task did you work on?" in result.output
        assert "Time entry captured" in result.output
        assert "Perfect! I've successfully sent" in result.output

        payload = http_session.post.call_args.kwargs["json"]
        assert payload["time_entry"]["task_description"] == "the API docs"
        assert payload["time_entry"]["duration_minutes"] == 120
