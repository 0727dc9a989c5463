"""
Embedding Adapter

Turns text into fixed-dimension vectors through an embedding model client and
translates every client failure into an EmbeddingError.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np

from ..errors import EmbeddingError

logger = logging.getLogger(__name__)


class EmbeddingAdapter:
    """
    Wraps an embedding client exposing ``embed(text)`` and ``embed_batch(texts)``.

    Batches are all-or-nothing: either one vector per input text comes back,
    in input order, or EmbeddingError is raised and no vectors are returned.
    """

    def __init__(self, client, dimensions: Optional[int] = None):
        """
        Args:
            client: Embedding model client (e.g. OllamaEmbeddingService)
            dimensions: Expected vector size; learned from the first
                response when not given
        """
        self.client = client
        self.dimensions = dimensions

    def _check_vector(self, vector) -> np.ndarray:
        embedding = np.asarray(vector, dtype=np.float32)
        if embedding.ndim != 1 or embedding.size == 0:
            raise EmbeddingError(f"Embedding model returned a malformed vector of shape {embedding.shape}")

        if self.dimensions is None:
            self.dimensions = int(embedding.size)
        elif embedding.size != self.dimensions:
            raise EmbeddingError(
                f"Embedding model returned {embedding.size} dimensions, expected {self.dimensions}"
            )
        return embedding

    def embed_batch(self, texts: Sequence[str]) -> List[np.ndarray]:
        """
        Embed several texts in one collaborator call.

        Args:
            texts: Texts to embed

        Returns:
            One vector per text, order preserved

        Raises:
            EmbeddingError: If the client fails or returns a mismatched batch
        """
        texts = list(texts)
        if not texts:
            return []

        try:
            vectors = self.client.embed_batch(texts)
        except Exception as e:
            logger.error(f"Embedding batch of {len(texts)} texts failed: {e}")
            raise EmbeddingError(f"Failed to embed {len(texts)} texts: {e}", cause=e) from e

        if vectors is None or len(vectors) != len(texts):
            got = 0 if vectors is None else len(vectors)
            raise EmbeddingError(f"Embedding model returned {got} vectors for {len(texts)} texts")

        return [self._check_vector(vector) for vector in vectors]

    def embed_one(self, text: str) -> np.ndarray:
        """
        Embed a single text.

        Raises:
            EmbeddingError: If the client fails
        """
        try:
            vector = self.client.embed(text)
        except Exception as e:
            logger.error(f"Embedding query failed: {e}")
            raise EmbeddingError(f"Failed to embed text: {e}", cause=e) from e

        return self._check_vector(vector)
