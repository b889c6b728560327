"""
Tests for the Ollama client and the suggestion service fallback contract.
"""

from unittest.mock import Mock, patch

import pytest
import requests

from feedback_portal.exceptions import SuggestionServiceError
from feedback_portal.suggestions.llm import LLMResponse, OllamaLLM
from feedback_portal.suggestions.prompts import build_reply_prompt, fallback_reply
from feedback_portal.suggestions.service import SuggestionService


def ok_response(payload):
    response = Mock()
    response.raise_for_status = Mock()
    response.json.return_value = payload
    return response


class TestOllamaLLM:
    """Test the HTTP client."""

    @pytest.fixture
    def llm(self):
        return OllamaLLM(host="http://ollama.test/", model="llama3.1", timeout=3)

    def test_strips_trailing_slash(self, llm):
        assert llm.host == "http://ollama.test"

    @patch("requests.post")
    def test_generate_payload(self, mock_post, llm):
        """Sampling options and timeout are sent with the request."""
        mock_post.return_value = ok_response({"response": "Xin chào", "model": "llama3.1"})

        result = llm.generate("prompt", system_prompt="system", temperature=0.7, top_p=0.8)

        assert result.content == "Xin chào"
        args, kwargs = mock_post.call_args
        assert args[0] == "http://ollama.test/api/generate"
        assert kwargs["timeout"] == 3
        payload = kwargs["json"]
        assert payload["system"] == "system"
        assert payload["stream"] is False
        assert payload["options"] == {"temperature": 0.7, "top_p": 0.8}

    @patch("requests.post")
    def test_network_error(self, mock_post, llm):
        mock_post.side_effect = requests.ConnectionError("refused")
        with pytest.raises(SuggestionServiceError):
            llm.generate("prompt")

    @patch("requests.post")
    def test_timeout(self, mock_post, llm):
        mock_post.side_effect = requests.Timeout("slow")
        with pytest.raises(SuggestionServiceError):
            llm.generate("prompt")

    @patch("requests.post")
    def test_invalid_json(self, mock_post, llm):
        response = ok_response(None)
        response.json.side_effect = ValueError("no json")
        mock_post.return_value = response
        with pytest.raises(SuggestionServiceError):
            llm.generate("prompt")

    @patch("requests.post")
    def test_missing_configuration(self, mock_post):
        """No request is made without a host and model."""
        llm = OllamaLLM(host="", model="")
        assert not llm.is_configured
        with pytest.raises(SuggestionServiceError):
            llm.generate("prompt")
        mock_post.assert_not_called()

    @patch("requests.get")
    def test_is_available(self, mock_get, llm):
        mock_get.return_value = Mock(status_code=200)
        assert llm.is_available()

        mock_get.side_effect = requests.ConnectionError("down")
        assert not llm.is_available()


class TestPrompts:
    """Test prompt and fallback text."""

    def test_prompt_mentions_department_and_content(self):
        prompt = build_reply_prompt("  Chờ quá lâu ", "Khoa Nội")
        assert "Khoa Nội" in prompt
        assert '"Chờ quá lâu"' in prompt

    def test_fallback_is_deterministic(self):
        assert fallback_reply("Khoa Nội") == fallback_reply("Khoa Nội")
        assert "Khoa Nội" in fallback_reply("Khoa Nội")


class TestSuggestionService:
    """Test that suggest never raises and never returns empty text."""

    def test_returns_generated_text(self, suggestion_service):
        assert suggestion_service.suggest("Chờ quá lâu", "Khoa Nội") == "Bệnh viện xin cảm ơn quý khách."

    def test_strips_generated_text(self, suggestion_service, mock_llm):
        mock_llm.generate.return_value = LLMResponse(content="  Cảm ơn  \n", model="m")
        assert suggestion_service.suggest("x", "Khoa Nội") == "Cảm ơn"

    def test_fallback_on_network_failure(self, suggestion_service, mock_llm):
        mock_llm.generate.side_effect = SuggestionServiceError("refused")
        text = suggestion_service.suggest("Chờ quá lâu", "Khoa Cấp cứu")
        assert text == fallback_reply("Khoa Cấp cứu")
        assert "Khoa Cấp cứu" in text

    def test_fallback_on_empty_response(self, suggestion_service, mock_llm):
        mock_llm.generate.return_value = LLMResponse(content="   ", model="m")
        assert suggestion_service.suggest("x", "Khoa Nhi") == fallback_reply("Khoa Nhi")

    def test_fallback_on_unexpected_error(self, suggestion_service, mock_llm):
        mock_llm.generate.side_effect = KeyError("boom")
        assert suggestion_service.suggest("x", "Khoa Sản") == fallback_reply("Khoa Sản")

    @patch("requests.post")
    def test_fallback_with_real_client_on_timeout(self, mock_post):
        """End to end through OllamaLLM: a timeout yields the fallback."""
        mock_post.side_effect = requests.Timeout("slow")
        service = SuggestionService(llm=OllamaLLM(host="http://ollama.test", model="m", timeout=1))
        assert service.suggest("x", "Khoa Nội") == fallback_reply("Khoa Nội")

    def test_fallback_without_configuration(self):
        service = SuggestionService(llm=OllamaLLM(host="", model=""))
        assert service.suggest("x", "Khoa Ngoại") == fallback_reply("Khoa Ngoại")
