"""
Tests for the Ollama answer generator.
"""

import pytest
from unittest.mock import Mock, patch

from news_rag.errors import GenerationError
from news_rag.query.generator import OllamaGenerator


@pytest.fixture
def chat_model():
    with patch('news_rag.query.generator.ChatOllama') as chat_cls:
        yield chat_cls


class TestOllamaGenerator:
    """Test generation through ChatOllama."""

    def test_model_settings(self, chat_model):
        """Model, sampling settings and extra options reach ChatOllama."""
        OllamaGenerator(
            model="llama3.1:latest",
            base_url="http://ollama:11434",
            temperature=0.2,
            max_tokens=500,
            model_options={'num_ctx': 4096}
        )

        kwargs = chat_model.call_args[1]
        assert kwargs['model'] == "llama3.1:latest"
        assert kwargs['base_url'] == "http://ollama:11434"
        assert kwargs['temperature'] == 0.2
        assert kwargs['num_predict'] == 500
        assert kwargs['num_ctx'] == 4096

    def test_returns_message_content(self, chat_model):
        """The message content is returned verbatim."""
        chat_model.return_value.invoke.return_value = Mock(content="Gold rose 2%.")

        generator = OllamaGenerator()

        assert generator.generate("prompt") == "Gold rose 2%."
        chat_model.return_value.invoke.assert_called_once_with("prompt")

    def test_plain_string_response(self, chat_model):
        """Responses without a content attribute are stringified."""
        chat_model.return_value.invoke.return_value = "raw text"

        assert OllamaGenerator().generate("prompt") == "raw text"

    def test_failure_wrapped(self, chat_model):
        """Model failures raise GenerationError with the cause attached."""
        chat_model.return_value.invoke.side_effect = ConnectionError("refused")

        with pytest.raises(GenerationError) as exc_info:
            OllamaGenerator().generate("prompt")

        assert isinstance(exc_info.value.cause, ConnectionError)
