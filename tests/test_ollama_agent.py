"""
Test cases for the Ollama answer generator with ollama.chat patched out.
"""

import ollama
import pytest
from unittest.mock import MagicMock, patch

from notes_rag.agents.agent import ChatMessage
from notes_rag.agents.ollama_agent import OllamaAnswerGenerator, check_ollama_health
from notes_rag.core.errors import GenerationError


@pytest.fixture
def messages():
    return [
        ChatMessage(role="system", content="Answer from the document"),
        ChatMessage(role="user", content="DOCUMENT:. The sky is blue"),
        ChatMessage(role="user", content="QUESTION:What colour is the sky?"),
    ]


class TestOllamaAnswerGenerator:

    @patch("notes_rag.agents.ollama_agent.ollama.chat")
    def test_generate_sends_conversation_in_order(self, mock_chat, messages):
        mock_chat.return_value = {"message": {"role": "assistant", "content": "Blue"}}

        answer = OllamaAnswerGenerator("llama3.1:8b").generate(messages)

        assert answer == "Blue"
        kwargs = mock_chat.call_args.kwargs
        assert kwargs["model"] == "llama3.1:8b"
        assert kwargs["messages"] == [m.to_dict() for m in messages]
        assert kwargs["options"] == {"temperature": 0.2, "top_p": 0.9}

    @patch("notes_rag.agents.ollama_agent.ollama.chat")
    def test_generate_returns_sentinel_verbatim(self, mock_chat, messages):
        mock_chat.return_value = {"message": {"role": "assistant", "content": "{NONE}"}}

        assert OllamaAnswerGenerator("llama3.1:8b").generate(messages) == "{NONE}"

    def test_generate_uses_supplied_client(self, messages):
        client = MagicMock()
        client.chat.return_value = {"message": {"content": "Blue"}}

        generator = OllamaAnswerGenerator("llama3.1:8b", options={"temperature": 0}, client=client)

        assert generator.generate(messages) == "Blue"
        assert client.chat.call_args.kwargs["options"] == {"temperature": 0}

    @patch("notes_rag.agents.ollama_agent.ollama.chat")
    def test_model_error_becomes_generation_error(self, mock_chat, messages):
        mock_chat.side_effect = ollama.ResponseError("model not found")

        with pytest.raises(GenerationError):
            OllamaAnswerGenerator("missing-model").generate(messages)

    @patch("notes_rag.agents.ollama_agent.ollama.chat")
    def test_connection_error_becomes_generation_error(self, mock_chat, messages):
        mock_chat.side_effect = ConnectionError("connection refused")

        with pytest.raises(GenerationError):
            OllamaAnswerGenerator("llama3.1:8b").generate(messages)

    @patch("notes_rag.agents.ollama_agent.ollama.chat")
    def test_missing_content_becomes_generation_error(self, mock_chat, messages):
        mock_chat.return_value = {"message": {"content": None}}

        with pytest.raises(GenerationError):
            OllamaAnswerGenerator("llama3.1:8b").generate(messages)


@patch("notes_rag.agents.ollama_agent.ollama.list")
def test_health_check(mock_list):
    mock_list.return_value = {"models": []}
    assert check_ollama_health() is True

    mock_list.side_effect = ConnectionError("connection refused")
    assert check_ollama_health() is False


@patch("notes_rag.agents.ollama_agent.check_ollama_health", return_value=False)
def test_get_status_reports_availability(mock_health):
    status = OllamaAnswerGenerator("llama3.1:8b").get_status()

    assert status["model_name"] == "llama3.1:8b"
    assert status["ollama_available"] is False
