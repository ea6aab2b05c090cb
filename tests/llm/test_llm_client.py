"""Tests for the Groq completion client."""

from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from learnplan.config import LLMSettings
from learnplan.errors import UpstreamError, UpstreamTimeoutError
from learnplan.llm.client import (
    LLMClient,
    LLMConfig,
    LLMConnectionError,
    LLMError,
    LLMResponse,
    LLMResponseError,
    LLMTimeoutError,
    Message,
)

GROQ_URL = "https://api.groq.com/openai/v1/chat/completions"


def _completion(content: str) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    response.model = "llama3-8b-8192"
    response.usage.prompt_tokens = 100
    response.usage.completion_tokens = 400
    response.usage.total_tokens = 500
    return response


class TestLLMConfig:
    """Tests for LLMConfig dataclass."""

    def test_default_config(self):
        """Defaults target Groq's OpenAI-compatible endpoint."""
        config = LLMConfig()

        assert config.base_url == "https://api.groq.com/openai/v1"
        assert config.model == "llama3-8b-8192"
        assert config.temperature == 0.7
        assert config.max_tokens == 4000
        assert config.timeout == 60
        assert config.api_key is None

    def test_from_settings(self):
        settings = LLMSettings(model="llama3-70b-8192", timeout=30, api_key="gsk_test")
        config = LLMConfig.from_settings(settings)

        assert config.model == "llama3-70b-8192"
        assert config.timeout == 30
        assert config.api_key == "gsk_test"


class TestMessageAndResponse:
    """Tests for Message and LLMResponse."""

    def test_message_to_dict(self):
        assert Message(role="user", content="Hello").to_dict() == {
            "role": "user",
            "content": "Hello",
        }

    def test_response_empty_usage(self):
        assert LLMResponse(content="Hi", model="m").total_tokens == 0


class TestErrorHierarchy:
    """LLM errors are upstream errors the plan generator absorbs."""

    def test_llm_errors_are_upstream_errors(self):
        assert issubclass(LLMConnectionError, UpstreamError)
        assert issubclass(LLMResponseError, UpstreamError)

    def test_timeout_maps_to_gateway_timeout(self):
        error = LLMTimeoutError("slow")
        assert isinstance(error, UpstreamTimeoutError)
        assert isinstance(error, LLMError)
        assert error.status_code == 504


class TestLLMClientMocked:
    """Tests for LLMClient using mocks (no real API calls)."""

    @pytest.fixture
    def mock_openai(self):
        with patch("learnplan.llm.client.OpenAI") as mock:
            mock.return_value = MagicMock()
            yield mock

    @pytest.fixture
    def mock_openai_client(self, mock_openai):
        return mock_openai.return_value

    @pytest.fixture
    def client(self, mock_openai_client):
        return LLMClient(config=LLMConfig(api_key="gsk_test"))

    def test_sdk_configured_without_retries(self, mock_openai):
        LLMClient(config=LLMConfig(api_key="gsk_test", timeout=45))

        kwargs = mock_openai.call_args.kwargs
        assert kwargs["base_url"] == "https://api.groq.com/openai/v1"
        assert kwargs["api_key"] == "gsk_test"
        assert kwargs["timeout"] == 45
        assert kwargs["max_retries"] == 0

    def test_is_configured(self, mock_openai_client):
        assert LLMClient(config=LLMConfig(api_key="gsk_test")).is_configured
        assert not LLMClient(config=LLMConfig()).is_configured

    def test_model_override(self, mock_openai_client):
        client = LLMClient(config=LLMConfig(), model="mixtral-8x7b-32768")
        assert client.config.model == "mixtral-8x7b-32768"

    def test_chat_success(self, client, mock_openai_client):
        mock_openai_client.chat.completions.create.return_value = _completion("Day 1 ...")

        response = client.chat([Message(role="user", content="Plan please")])

        assert response.content == "Day 1 ..."
        assert response.model == "llama3-8b-8192"
        assert response.total_tokens == 500
        kwargs = mock_openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "llama3-8b-8192"
        assert kwargs["temperature"] == 0.7
        assert kwargs["max_tokens"] == 4000

    def test_reasoning_tags_stripped(self, client, mock_openai_client):
        mock_openai_client.chat.completions.create.return_value = _completion(
            "<think>hmm</think>\n## Student Profile"
        )
        assert client.simple_chat("system", "user") == "## Student Profile"

    def test_simple_chat_sends_system_and_user(self, client, mock_openai_client):
        mock_openai_client.chat.completions.create.return_value = _completion("ok")

        client.simple_chat("Be an educator", "Make a plan", temperature=0.2)

        kwargs = mock_openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["messages"] == [
            {"role": "system", "content": "Be an educator"},
            {"role": "user", "content": "Make a plan"},
        ]
        assert kwargs["temperature"] == 0.2

    def test_empty_choices(self, client, mock_openai_client):
        response = _completion("")
        response.choices = []
        mock_openai_client.chat.completions.create.return_value = response

        with pytest.raises(LLMResponseError, match="Empty response"):
            client.simple_chat("system", "user")

    def test_timeout(self, client, mock_openai_client):
        mock_openai_client.chat.completions.create.side_effect = openai.APITimeoutError(
            request=httpx.Request("POST", GROQ_URL)
        )

        with pytest.raises(LLMTimeoutError, match="timed out after 60s"):
            client.simple_chat("system", "user")

    def test_connection_error(self, client, mock_openai_client):
        mock_openai_client.chat.completions.create.side_effect = openai.APIConnectionError(
            request=httpx.Request("POST", GROQ_URL)
        )

        with pytest.raises(LLMConnectionError, match="Could not connect"):
            client.simple_chat("system", "user")

    def test_error_status(self, client, mock_openai_client):
        request = httpx.Request("POST", GROQ_URL)
        mock_openai_client.chat.completions.create.side_effect = openai.APIStatusError(
            "Rate limit reached",
            response=httpx.Response(429, request=request),
            body=None,
        )

        with pytest.raises(LLMResponseError, match="HTTP 429"):
            client.simple_chat("system", "user")

    def test_unexpected_error(self, client, mock_openai_client):
        mock_openai_client.chat.completions.create.side_effect = RuntimeError("boom")

        with pytest.raises(LLMError, match="boom"):
            client.simple_chat("system", "user")

    def test_is_available(self, client, mock_openai_client):
        assert client.is_available()

        mock_openai_client.models.list.side_effect = openai.APIConnectionError(
            request=httpx.Request("GET", "https://api.groq.com/openai/v1/models")
        )
        assert not client.is_available()

    def test_not_available_without_key(self, mock_openai_client):
        assert not LLMClient(config=LLMConfig()).is_available()
        mock_openai_client.models.list.assert_not_called()

    def test_close_closes_sdk_client(self, client, mock_openai_client):
        client.close()
        mock_openai_client.close.assert_called_once()
