"""
Ollama Embedding Service

Generates text embeddings with a local Ollama model over its HTTP API.
Provides:
- Connection and model verification
- Single and batched embedding requests (``/api/embed``)
- In-memory caching keyed by a hash of the text
- Dimension verification
"""

import hashlib
import logging
import time
from typing import List, Dict, Optional
from dataclasses import dataclass, asdict

import numpy as np
import requests

logger = logging.getLogger(__name__)


@dataclass
class CacheStats:
    """Statistics for cache performance tracking."""
    hits: int = 0
    misses: int = 0
    total_requests: int = 0
    cache_size: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        return self.hits / self.total_requests if self.total_requests > 0 else 0.0

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            **asdict(self),
            'hit_rate': self.hit_rate
        }


class OllamaConnectionError(Exception):
    """Raised when unable to connect to Ollama service."""
    pass


class OllamaModelError(Exception):
    """Raised when specified model is not available."""
    pass


class EmbeddingDimensionError(Exception):
    """Raised when embedding dimensions don't match expected value."""
    pass


class OllamaEmbeddingService:
    """
    Embedding model client for Ollama.

    Texts already embedded in this process are served from the cache, so
    repeated chunks and queries cost nothing.
    """

    def __init__(
        self,
        model: str = "nomic-embed-text",
        base_url: str = "http://localhost:11434",
        dimensions: Optional[int] = 768,
        batch_size: int = 32,
        timeout: int = 30,
        enable_cache: bool = True
    ):
        """
        Initialize the Ollama embedding service.

        Args:
            model: Ollama embedding model name
            base_url: Ollama base URL
            dimensions: Expected embedding size (None disables the check)
            batch_size: Number of texts sent per request
            timeout: Request timeout in seconds
            enable_cache: Cache embeddings in memory
        """
        self.model = model
        self.base_url = base_url.rstrip('/')
        self.dimensions = dimensions
        self.batch_size = batch_size
        self.timeout = timeout
        self.enable_cache = enable_cache

        self._memory_cache: Dict[str, np.ndarray] = {}
        self._cache_stats = CacheStats()

        logger.info(f"Initialized OllamaEmbeddingService with model: {self.model}")

    def _compute_hash(self, text: str) -> str:
        """Compute SHA-256 hash of text for caching."""
        return hashlib.sha256(f"{self.model}\0{text}".encode('utf-8')).hexdigest()

    def verify_connection(self) -> bool:
        """
        Verify connection to Ollama service.

        Returns:
            True if connection successful

        Raises:
            OllamaConnectionError: If unable to connect
        """
        try:
            response = requests.get(f"{self.base_url}/api/tags", timeout=self.timeout)
            response.raise_for_status()
            logger.info("Successfully connected to Ollama service")
            return True

        except requests.exceptions.ConnectionError:
            raise OllamaConnectionError(
                f"Unable to connect to Ollama at {self.base_url}. "
                "Please ensure Ollama is running (try: ollama serve)"
            )
        except requests.exceptions.Timeout:
            raise OllamaConnectionError(
                f"Connection to Ollama timed out after {self.timeout}s"
            )
        except requests.exceptions.RequestException as e:
            raise OllamaConnectionError(f"Error connecting to Ollama: {str(e)}")

    def verify_model_available(self) -> bool:
        """
        Verify that the specified model is available.

        Returns:
            True if model is available

        Raises:
            OllamaModelError: If model is not available
        """
        try:
            response = requests.get(f"{self.base_url}/api/tags", timeout=self.timeout)
            response.raise_for_status()
            models = response.json().get('models', [])
        except requests.exceptions.RequestException as e:
            raise OllamaConnectionError(f"Error checking model availability: {str(e)}")

        available_models = [m['name'] for m in models]

        # Check for exact match or match with :latest suffix
        if self.model not in available_models and f"{self.model}:latest" not in available_models:
            raise OllamaModelError(
                f"Model '{self.model}' not found. Available models: {available_models}. "
                f"Try: ollama pull {self.model}"
            )

        logger.info(f"Model '{self.model}' is available")
        return True

    def _verify_embedding_dimensions(self, embedding: np.ndarray) -> None:
        if self.dimensions is None:
            return

        if len(embedding) != self.dimensions:
            raise EmbeddingDimensionError(
                f"Expected {self.dimensions} dimensions, got {len(embedding)}. "
                f"This may indicate an issue with the model or API."
            )

    def _request_embeddings(self, texts: List[str]) -> List[np.ndarray]:
        """
        Call ``/api/embed`` for a list of texts.

        Raises:
            OllamaConnectionError: On connection failures and timeouts
            RuntimeError: On HTTP errors or malformed responses
        """
        try:
            response = requests.post(
                f"{self.base_url}/api/embed",
                json={"model": self.model, "input": texts},
                timeout=self.timeout
            )
            response.raise_for_status()
            vectors = response.json()['embeddings']

        except requests.exceptions.ConnectionError:
            raise OllamaConnectionError(
                f"Unable to connect to Ollama at {self.base_url}. "
                "Please ensure Ollama is running."
            )
        except requests.exceptions.Timeout:
            raise OllamaConnectionError(f"Request timed out after {self.timeout}s")
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status == 500:
                raise RuntimeError(
                    "Ollama server error (500). The text may be too long or the model may be overloaded."
                )
            raise RuntimeError(f"HTTP error from Ollama: {str(e)}")
        except (KeyError, ValueError) as e:
            raise RuntimeError(f"Unexpected API response format: {e}")

        if len(vectors) != len(texts):
            raise RuntimeError(
                f"Ollama returned {len(vectors)} embeddings for {len(texts)} inputs"
            )

        embeddings = [np.array(vector, dtype=np.float32) for vector in vectors]
        for embedding in embeddings:
            self._verify_embedding_dimensions(embedding)
        return embeddings

    def embed(self, text: str) -> np.ndarray:
        """
        Generate embedding for a single text.

        Args:
            text: Input text

        Returns:
            Embedding vector as numpy array
        """
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: List[str]) -> List[np.ndarray]:
        """
        Generate embeddings for multiple texts.

        Uncached texts are sent in requests of ``batch_size``. Nothing is
        cached or returned unless every request succeeds.

        Args:
            texts: List of input texts

        Returns:
            One embedding per input text, in input order
        """
        if not texts:
            return []

        self._cache_stats.total_requests += len(texts)
        hashes = [self._compute_hash(text) for text in texts]

        pending: Dict[str, str] = {}
        for text_hash, text in zip(hashes, texts):
            # Repeats within the batch reuse the first occurrence's request
            if (self.enable_cache and text_hash in self._memory_cache) or text_hash in pending:
                self._cache_stats.hits += 1
            else:
                self._cache_stats.misses += 1
                pending[text_hash] = text

        fresh: Dict[str, np.ndarray] = {}
        if pending:
            start_time = time.time()
            pending_items = list(pending.items())

            for i in range(0, len(pending_items), self.batch_size):
                batch = pending_items[i:i + self.batch_size]
                vectors = self._request_embeddings([text for _, text in batch])
                fresh.update(zip([text_hash for text_hash, _ in batch], vectors))

            elapsed = time.time() - start_time
            logger.debug(f"Embedded {len(pending)} texts in {elapsed:.2f}s")

        if self.enable_cache:
            self._memory_cache.update(fresh)
            self._cache_stats.cache_size = len(self._memory_cache)

        return [
            fresh[text_hash] if text_hash in fresh else self._memory_cache[text_hash]
            for text_hash in hashes
        ]

    def get_cache_stats(self) -> Dict:
        """Get cache performance statistics."""
        return self._cache_stats.to_dict()

    def clear_cache(self) -> None:
        """Clear the embedding cache."""
        self._memory_cache.clear()
        self._cache_stats = CacheStats()
        logger.info("Cleared memory cache")
