"""Tests for the LLM client (F5)."""

import json
from unittest.mock import MagicMock, patch

import pytest

from preptrack.llm.client import (
    LLMClient,
    LLMConfig,
    LLMConnectionError,
    LLMError,
    LLMResponseError,
    Message,
)


def _completion(content, model="gpt-4o-mini"):
    """Fake chat.completions.create result."""
    response = MagicMock()
    response.model = model
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    response.usage.prompt_tokens = 10
    response.usage.completion_tokens = 20
    response.usage.total_tokens = 30
    return response


@pytest.fixture
def mock_openai():
    """Patch the OpenAI SDK class used by the client."""
    with patch("preptrack.llm.client.OpenAI") as MockOpenAI:
        yield MockOpenAI.return_value


class TestLLMConfig:
    """Tests for LLMConfig."""

    def test_defaults(self):
        config = LLMConfig()
        assert config.provider == "openai"
        assert config.temperature == 0.7
        assert config.max_tokens == 2048

    def test_from_app_config(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        config = LLMConfig.from_app_config()
        assert config.provider == "openai"
        assert config.model == "gpt-4o-mini"
        assert config.api_key == "sk-test"
        assert config.supports_json_object

    def test_local_provider(self):
        config = LLMConfig.from_app_config("lmstudio")
        assert config.base_url == "http://localhost:1234/v1"
        assert not config.supports_json_object

    def test_unknown_provider(self):
        with pytest.raises(LLMError, match="not configured"):
            LLMConfig.from_app_config("nope")


class TestChat:
    """Tests for LLMClient.chat."""

    def test_returns_content_and_usage(self, mock_openai):
        mock_openai.chat.completions.create.return_value = _completion("Hello")
        client = LLMClient(LLMConfig())

        response = client.chat([Message(role="user", content="Hi")])

        assert response.content == "Hello"
        assert response.total_tokens == 30

    def test_json_mode_for_openai(self, mock_openai):
        mock_openai.chat.completions.create.return_value = _completion("{}")
        LLMClient(LLMConfig()).chat([Message(role="user", content="Hi")], json_mode=True)
        kwargs = mock_openai.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}

    def test_no_json_format_for_local(self, mock_openai):
        mock_openai.chat.completions.create.return_value = _completion("{}")
        LLMClient(LLMConfig(provider="lmstudio")).chat(
            [Message(role="user", content="Hi")], json_mode=True
        )
        kwargs = mock_openai.chat.completions.create.call_args.kwargs
        assert "response_format" not in kwargs

    def test_connection_error(self, mock_openai):
        mock_openai.chat.completions.create.side_effect = Exception("Connection refused")
        with pytest.raises(LLMConnectionError):
            LLMClient(LLMConfig()).chat([Message(role="user", content="Hi")])

    def test_is_available(self, mock_openai):
        client = LLMClient(LLMConfig())
        assert client.is_available()
        mock_openai.models.list.side_effect = Exception("Connection refused")
        assert not client.is_available()

    def test_empty_choices(self, mock_openai):
        response = _completion("x")
        response.choices = []
        mock_openai.chat.completions.create.return_value = response
        with pytest.raises(LLMResponseError):
            LLMClient(LLMConfig()).chat([Message(role="user", content="Hi")])


class TestJsonParsing:
    """Tests for tolerant JSON extraction."""

    def test_plain(self):
        assert LLMClient._try_parse_json('{"a": 1}') == {"a": 1}

    def test_fenced(self):
        assert LLMClient._try_parse_json('Here:\n```json\n{"a": 1}\n```') == {"a": 1}

    def test_surrounding_text(self):
        assert LLMClient._try_parse_json('Sure! {"a": {"b": 2}} Done.') == {"a": {"b": 2}}

    def test_think_block_removed(self):
        text = '<think>maybe {"wrong": true}</think>{"a": 1}'
        assert LLMClient._try_parse_json(text) == {"a": 1}

    def test_non_object(self):
        assert LLMClient._try_parse_json("[1, 2]") is None
        assert LLMClient._try_parse_json("no json here") is None

    def test_chat_json_repairs_once(self, mock_openai):
        mock_openai.chat.completions.create.side_effect = [
            _completion("not json"),
            _completion(json.dumps({"timetableHtml": "<table></table>"})),
        ]
        result = LLMClient(LLMConfig()).simple_json("system", "user")
        assert result == {"timetableHtml": "<table></table>"}
        assert mock_openai.chat.completions.create.call_count == 2

    def test_chat_json_gives_up(self, mock_openai):
        mock_openai.chat.completions.create.return_value = _completion("still not json")
        with pytest.raises(LLMResponseError):
            LLMClient(LLMConfig()).simple_json("system", "user")
