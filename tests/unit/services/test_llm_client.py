"""
Unit tests for the text-generation client.
"""

from unittest.mock import Mock

import pytest
import requests

from timelog.dialogue.options import StaticOptionSource
from timelog.exceptions import TextGenerationError
from timelog.models import Turn
from timelog.services.llm_client import OpenAIChatClient, build_system_prompt


def _response(status_code=200, body=None):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = body
    return response


@pytest.fixture
def http_session():
    session = Mock(spec=requests.Session)
    session.post.return_value = _response(
        body={"choices": [{"message": {"content": "How long did it take?"}}]}
    )
    return session


@pytest.fixture
def client(http_session):
    return OpenAIChatClient(
        api_key="sk-test", base_url="https://llm.example.com/v1/", session=http_session
    )


MESSAGES = [
    Turn(role="system", content="You are helpful"),
    Turn(role="user", content="I worked on the report"),
]


class TestBuildSystemPrompt:
    """Test system prompt construction."""

    def test_without_options(self):
        prompt = build_system_prompt()

        assert "time tracking" in prompt
        assert "log the time" in prompt
        assert "Available categorization options" not in prompt

    def test_with_options(self):
        options = StaticOptionSource(matters=["Client A"], cost_centres=["Sales"])

        prompt = build_system_prompt(options)

        assert "- Matters/Clients: Client A" in prompt
        assert "- Cost Centres: Sales" in prompt
        assert "- Business Areas: None configured" in prompt


class TestOpenAIChatClient:
    """Test OpenAIChatClient.generate."""

    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            OpenAIChatClient(api_key="")

    def test_generate(self, client, http_session):
        reply = client.generate(MESSAGES)

        assert reply == "How long did it take?"
        call = http_session.post.call_args
        assert call.args[0] == "https://llm.example.com/v1/chat/completions"
        assert call.kwargs["headers"]["Authorization"] == "Bearer sk-test"
        assert call.kwargs["json"]["model"] == "gpt-4o-mini"
        assert call.kwargs["json"]["messages"] == [
            {"role": "system", "content": "You are helpful"},
            {"role": "user", "content": "I worked on the report"},
        ]

    def test_transport_error(self, client, http_session):
        http_session.post.side_effect = requests.exceptions.Timeout("slow")

        with pytest.raises(TextGenerationError, match="request failed"):
            client.generate(MESSAGES)

    def test_http_error(self, client, http_session):
        http_session.post.return_value = _response(status_code=401)

        with pytest.raises(TextGenerationError, match="401"):
            client.generate(MESSAGES)

    @pytest.mark.parametrize("body", [{}, {"choices": []}, {"choices": [{"message": None}]}])
    def test_malformed_body(self, client, http_session, body):
        http_session.post.return_value = _response(body=body)

        with pytest.raises(TextGenerationError, match="Malformed"):
            client.generate(MESSAGES)

    def test_empty_content(self, client, http_session):
        http_session.post.return_value = _response(
            body={"choices": [{"message": {"content": ""}}]}
        )

        with pytest.raises(TextGenerationError, match="empty"):
            client.generate(MESSAGES)

    def test_from_config(self, test_config):
        test_config.llm_api_key = "sk-config"
        test_config.llm_model = "gpt-test"

        client = OpenAIChatClient.from_config(test_config)

        assert client.api_key == "sk-config"
        assert client.model == "gpt-test"
        assert client.temperature == 0.7
        assert client.max_tokens == 1000
