"""
Answer Generator

Generative model client backed by an Ollama chat model through LangChain.
"""

import logging
from typing import Dict, Any, Optional

from langchain_ollama import ChatOllama

from ..errors import GenerationError

logger = logging.getLogger(__name__)


class OllamaGenerator:
    """Produces text completions for a prompt with ``ChatOllama``."""

    def __init__(
        self,
        model: str = "llama3.1:latest",
        base_url: str = "http://localhost:11434",
        temperature: float = 0.3,
        max_tokens: int = 1000,
        timeout: Optional[int] = 60,
        model_options: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize the generator.

        Args:
            model: Ollama chat model name
            base_url: Ollama base URL
            temperature: Sampling temperature
            max_tokens: Maximum tokens in the generated answer
            timeout: Request timeout in seconds
            model_options: Extra ChatOllama settings passed through unchanged
                (safety/content settings, context window, ...)
        """
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

        self.llm = ChatOllama(
            model=model,
            base_url=base_url,
            temperature=temperature,
            num_predict=max_tokens,
            client_kwargs={'timeout': timeout},
            **(model_options or {})
        )

    def generate(self, prompt: str) -> str:
        """
        Generate a completion for ``prompt``.

        Args:
            prompt: Complete prompt

        Returns:
            Generated text

        Raises:
            GenerationError: If the model call fails
        """
        try:
            response = self.llm.invoke(prompt)
        except Exception as e:
            logger.error(f"Generation with {self.model} failed: {e}")
            raise GenerationError(f"Error generating answer with LLM: {e}", cause=e) from e

        # Extract content from response
        if hasattr(response, 'content'):
            return response.content
        return str(response)
