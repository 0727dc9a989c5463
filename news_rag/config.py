"""
Centralized Configuration Module

Provides a single source of truth for all system configuration parameters.
Loads settings from environment variables with sensible defaults and validation.
"""

import os
from dataclasses import dataclass, field, asdict
from typing import Dict, Any, Optional
from urllib.parse import urlparse
from dotenv import load_dotenv

from .errors import ConfigValidationError

# Load environment variables
load_dotenv()

__all__ = ['Config', 'ConfigValidationError', 'get_config', 'reset_config']


@dataclass
class Config:
    """
    Configuration for the news RAG system.

    All configuration parameters are loaded from environment variables
    with sensible defaults. Validation is performed on initialization.
    """

    # Ollama Settings
    ollama_base_url: str = field(default="http://localhost:11434")
    ollama_embed_model: str = field(default="nomic-embed-text")
    ollama_llm_model: str = field(default="llama3.1:latest")
    ollama_timeout: int = field(default=30)

    # Embedding Parameters
    embedding_dimensions: int = field(default=768)
    embedding_batch_size: int = field(default=32)

    # Generation Parameters
    llm_temperature: float = field(default=0.3)
    llm_max_tokens: int = field(default=1000)

    # Chunking Parameters
    chunk_size: int = field(default=800)
    chunk_overlap: int = field(default=100)
    min_content_length: int = field(default=200)

    # Retrieval Parameters
    match_threshold: float = field(default=0.75)
    match_count: int = field(default=5)

    # News Source Settings
    news_api_url: str = field(default="https://cafef-api-2hna.onrender.com/api/news")
    news_link_base: str = field(default="https://cafef.vn")
    news_limit: int = field(default=20)

    # Scraper Settings
    scrape_timeout: int = field(default=15)
    scrape_max_retries: int = field(default=2)

    # Storage Paths
    faiss_index_path: str = field(default="data/embeddings/news.index")

    def __post_init__(self):
        """Load configuration from environment and validate."""
        self._load_from_environment()
        self._validate()

    def _load_from_environment(self):
        """Load configuration from environment variables."""
        # Ollama Settings
        self.ollama_base_url = self._get_env_str('OLLAMA_BASE_URL', self.ollama_base_url)
        self.ollama_embed_model = self._get_env_str('OLLAMA_EMBED_MODEL', self.ollama_embed_model)
        self.ollama_llm_model = self._get_env_str('OLLAMA_LLM_MODEL', self.ollama_llm_model)
        self.ollama_timeout = self._get_env_int('OLLAMA_TIMEOUT', self.ollama_timeout)

        # Embedding Parameters
        self.embedding_dimensions = self._get_env_int('EMBEDDING_DIMENSIONS', self.embedding_dimensions)
        self.embedding_batch_size = self._get_env_int('EMBEDDING_BATCH_SIZE', self.embedding_batch_size)

        # Generation Parameters
        self.llm_temperature = self._get_env_float('LLM_TEMPERATURE', self.llm_temperature)
        self.llm_max_tokens = self._get_env_int('LLM_MAX_TOKENS', self.llm_max_tokens)

        # Chunking Parameters
        self.chunk_size = self._get_env_int('CHUNK_SIZE', self.chunk_size)
        self.chunk_overlap = self._get_env_int('CHUNK_OVERLAP', self.chunk_overlap)
        self.min_content_length = self._get_env_int('MIN_CONTENT_LENGTH', self.min_content_length)

        # Retrieval Parameters
        self.match_threshold = self._get_env_float('MATCH_THRESHOLD', self.match_threshold)
        self.match_count = self._get_env_int('MATCH_COUNT', self.match_count)

        # News Source Settings
        self.news_api_url = self._get_env_str('NEWS_API_URL', self.news_api_url)
        self.news_link_base = self._get_env_str('NEWS_LINK_BASE', self.news_link_base)
        self.news_limit = self._get_env_int('NEWS_LIMIT', self.news_limit)

        # Scraper Settings
        self.scrape_timeout = self._get_env_int('SCRAPE_TIMEOUT', self.scrape_timeout)
        self.scrape_max_retries = self._get_env_int('SCRAPE_MAX_RETRIES', self.scrape_max_retries)

        # Storage Paths
        self.faiss_index_path = self._get_env_path('FAISS_INDEX_PATH', self.faiss_index_path)

    def _get_env_str(self, key: str, default: str) -> str:
        """Get string value from environment."""
        value = os.getenv(key, default)
        if isinstance(value, str):
            value = value.strip()
        return value

    def _get_env_int(self, key: str, default: int) -> int:
        """Get integer value from environment."""
        value = os.getenv(key)
        if value is None:
            return default

        try:
            return int(value)
        except ValueError:
            raise ConfigValidationError(
                f"Invalid integer value for {key}: '{value}'"
            )

    def _get_env_float(self, key: str, default: float) -> float:
        """Get float value from environment."""
        value = os.getenv(key)
        if value is None:
            return default

        try:
            return float(value)
        except ValueError:
            raise ConfigValidationError(
                f"Invalid float value for {key}: '{value}'"
            )

    def _get_env_path(self, key: str, default: str) -> str:
        """Get path value from environment with expansion."""
        value = os.getenv(key, default)
        if isinstance(value, str):
            value = os.path.expanduser(value.strip())
        return value

    def _validate(self):
        """Validate configuration parameters."""
        for field_name in ('ollama_embed_model', 'ollama_llm_model'):
            if not getattr(self, field_name):
                raise ConfigValidationError(f"{field_name} cannot be empty")

        positive_int_fields = [
            ('ollama_timeout', self.ollama_timeout),
            ('embedding_dimensions', self.embedding_dimensions),
            ('embedding_batch_size', self.embedding_batch_size),
            ('llm_max_tokens', self.llm_max_tokens),
            ('chunk_size', self.chunk_size),
            ('min_content_length', self.min_content_length),
            ('match_count', self.match_count),
            ('news_limit', self.news_limit),
            ('scrape_timeout', self.scrape_timeout),
            ('scrape_max_retries', self.scrape_max_retries),
        ]

        for field_name, value in positive_int_fields:
            if value <= 0:
                raise ConfigValidationError(
                    f"{field_name} must be positive, got {value}"
                )

        if self.chunk_overlap < 0:
            raise ConfigValidationError(
                f"chunk_overlap cannot be negative, got {self.chunk_overlap}"
            )

        if self.chunk_overlap >= self.chunk_size:
            raise ConfigValidationError(
                f"chunk_overlap ({self.chunk_overlap}) must be less than "
                f"chunk_size ({self.chunk_size})"
            )

        if not 0.0 <= self.match_threshold <= 1.0:
            raise ConfigValidationError(
                f"match_threshold must be between 0 and 1, got {self.match_threshold}"
            )

        if not 0.0 <= self.llm_temperature <= 2.0:
            raise ConfigValidationError(
                f"llm_temperature must be between 0 and 2, got {self.llm_temperature}"
            )

        for field_name in ('ollama_base_url', 'news_api_url', 'news_link_base'):
            url = getattr(self, field_name)
            parsed = urlparse(url)
            if not (parsed.scheme and parsed.netloc):
                raise ConfigValidationError(
                    f"Invalid URL for {field_name}: {url}"
                )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    def update(self, **kwargs):
        """
        Update configuration values with validation.

        Args:
            **kwargs: Configuration parameters to update

        Raises:
            ConfigValidationError: If validation fails
            TypeError: If a value has the wrong type to be validated
        """
        original_values = {}

        try:
            for key, value in kwargs.items():
                if not hasattr(self, key):
                    raise ConfigValidationError(f"Unknown configuration parameter: {key}")
                original_values[key] = getattr(self, key)
                setattr(self, key, value)

            self._validate()

        except Exception:
            # Rollback on any failure
            for key, value in original_values.items():
                setattr(self, key, value)
            raise

    def get_chunking_config(self) -> Dict[str, Any]:
        """Get chunking-related configuration."""
        return {
            'chunk_size': self.chunk_size,
            'chunk_overlap': self.chunk_overlap,
            'min_content_length': self.min_content_length,
        }

    def get_retrieval_config(self) -> Dict[str, Any]:
        """Get retrieval-related configuration."""
        return {
            'match_threshold': self.match_threshold,
            'match_count': self.match_count,
        }


# Singleton instance
_config_instance: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance (singleton pattern).

    Returns:
        Config: Global configuration instance
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
    return _config_instance


def reset_config():
    """Reset the global configuration instance."""
    global _config_instance
    _config_instance = None
