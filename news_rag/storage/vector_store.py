"""
Vector Store with FAISS HNSW Indexing

Stores document chunks with their embeddings in a FAISS HNSW index using the
inner-product metric over L2-normalised vectors, so search scores are cosine
similarities (higher = more similar).
"""

import os
import pickle
import logging
from typing import List, Dict, Optional, Any, Sequence

import faiss
import numpy as np

from ..errors import VectorStoreError
from ..models import DocumentChunk, QueryResult

logger = logging.getLogger(__name__)


class VectorStore:
    """
    Chunk store with cosine-similarity search.

    Features:
    - HNSW graph-based approximate nearest neighbor search
    - Threshold + top-k search returning results in descending similarity
    - All-or-nothing inserts: a batch is validated before the index is touched
    - Optional on-disk persistence (index + pickled records, atomic rename)
    """

    def __init__(
        self,
        index_path: Optional[str] = None,
        dimension: int = 768,
        M: int = 32,
        efConstruction: int = 200,
        efSearch: int = 128
    ):
        """
        Initialize the HNSW vector store.

        Args:
            index_path: Path to save/load the FAISS index (None keeps it in memory)
            dimension: Dimension of embedding vectors
            M: Number of connections per node in HNSW graph
            efConstruction: Search depth during index construction
            efSearch: Search depth during queries
        """
        self.index_path = index_path
        self.dimension = dimension
        self.M = M
        self.efConstruction = efConstruction
        self.efSearch = efSearch

        # Chunk records, position-aligned with index ids
        self.records: List[Dict[str, Any]] = []

        self.index = None
        self._initialize_index()

        if self.index_path and os.path.exists(self.index_path):
            self.load_index()

    def _initialize_index(self) -> None:
        """Initialize a new HNSW index."""
        self.index = faiss.IndexHNSWFlat(self.dimension, self.M, faiss.METRIC_INNER_PRODUCT)
        self.index.hnsw.efConstruction = self.efConstruction
        self.index.hnsw.efSearch = self.efSearch

    def _as_matrix(self, vectors: Sequence) -> np.ndarray:
        try:
            matrix = np.ascontiguousarray(np.array(vectors, dtype=np.float32))
        except ValueError as e:
            raise VectorStoreError(f"Embeddings must be equal-length numeric vectors: {e}", cause=e) from e

        if matrix.ndim != 2 or matrix.shape[1] != self.dimension:
            raise VectorStoreError(
                f"Embedding dimension {matrix.shape[-1] if matrix.ndim else 0} must match "
                f"index dimension ({self.dimension})"
            )
        faiss.normalize_L2(matrix)
        return matrix

    def _validate_chunk(self, chunk: DocumentChunk) -> None:
        if chunk.embedding is None:
            raise VectorStoreError("Cannot store a chunk without an embedding")

        metadata = chunk.metadata or {}
        if not metadata.get('url') or not metadata.get('title'):
            raise VectorStoreError("Chunk metadata must carry both url and title")

    def insert(self, chunks: Sequence[DocumentChunk]) -> None:
        """
        Add chunks to the store in a single write.

        Args:
            chunks: Chunks carrying embeddings and url/title metadata

        Raises:
            VectorStoreError: If any chunk is invalid or the write fails; the
                store is left as it was before the call
        """
        chunks = list(chunks)
        if not chunks:
            return

        for chunk in chunks:
            self._validate_chunk(chunk)

        vectors = self._as_matrix([chunk.embedding for chunk in chunks])
        records = [
            {
                'content': chunk.content,
                'source_offset': chunk.source_offset,
                'metadata': dict(chunk.metadata)
            }
            for chunk in chunks
        ]

        try:
            self.index.add(vectors)
        except RuntimeError as e:
            raise VectorStoreError(f"FAISS rejected {len(chunks)} vectors: {e}", cause=e) from e

        self.records.extend(records)

        if self.index_path:
            try:
                self.save_index()
            except (OSError, RuntimeError) as e:
                logger.error(f"Failed to persist vector store, rolling back: {e}")
                self._rollback()
                raise VectorStoreError(f"Failed to persist vector store: {e}", cause=e) from e

        logger.debug(f"Inserted {len(chunks)} chunks (total {self.count()})")

    def _rollback(self) -> None:
        """Return to the last persisted state (or empty when nothing was saved)."""
        if not self.load_index():
            self.clear()

    def search(
        self,
        query_embedding: Sequence[float],
        threshold: float = 0.75,
        top_k: int = 5
    ) -> List[QueryResult]:
        """
        Find the chunks most similar to a query embedding.

        Args:
            query_embedding: Query embedding vector
            threshold: Minimum cosine similarity a result must reach
            top_k: Maximum number of results

        Returns:
            Up to top_k results with similarity >= threshold, ordered by
            descending similarity (possibly empty)

        Raises:
            ValueError: If top_k is negative
            VectorStoreError: If the query dimension is wrong or FAISS fails
        """
        if top_k < 0:
            raise ValueError(f"top_k must be non-negative, got {top_k}")

        if top_k == 0 or self.index.ntotal == 0:
            return []

        query_vector = self._as_matrix([query_embedding])

        try:
            similarities, indices = self.index.search(query_vector, min(top_k, self.index.ntotal))
        except RuntimeError as e:
            raise VectorStoreError(f"FAISS search failed: {e}", cause=e) from e

        results = []
        for similarity, idx in zip(similarities[0], indices[0]):
            if idx < 0 or idx >= len(self.records) or similarity < threshold:
                continue
            record = self.records[idx]
            results.append(QueryResult(
                content=record['content'],
                similarity=float(similarity),
                metadata=dict(record['metadata'])
            ))

        results.sort(key=lambda result: result.similarity, reverse=True)
        return results

    def save_index(self, path: Optional[str] = None) -> None:
        """
        Save FAISS index and chunk records to disk with atomic writes.

        Args:
            path: Path to save index (default: self.index_path)
        """
        save_path = path or self.index_path
        if not save_path:
            raise VectorStoreError("No index path configured")

        directory = os.path.dirname(save_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        temp_index_path = save_path + '.tmp'
        records_path = save_path + '.records'
        temp_records_path = records_path + '.tmp'

        try:
            faiss.write_index(self.index, temp_index_path)
            with open(temp_records_path, 'wb') as f:
                pickle.dump(self.records, f, protocol=pickle.HIGHEST_PROTOCOL)

            os.replace(temp_index_path, save_path)
            os.replace(temp_records_path, records_path)

        finally:
            for leftover in (temp_index_path, temp_records_path):
                if os.path.exists(leftover):
                    os.remove(leftover)

    def load_index(self, path: Optional[str] = None) -> bool:
        """
        Load FAISS index and chunk records from disk.

        Args:
            path: Path to load index from (default: self.index_path)

        Returns:
            True if successful, False otherwise
        """
        load_path = path or self.index_path
        if not load_path or not os.path.exists(load_path):
            return False

        try:
            loaded_index = faiss.read_index(load_path)
            if not isinstance(loaded_index, faiss.IndexHNSW):
                raise ValueError(f"Expected an HNSW index, got {type(loaded_index).__name__}")

            records_path = load_path + '.records'
            if os.path.exists(records_path):
                with open(records_path, 'rb') as f:
                    loaded_records = pickle.load(f)
            else:
                loaded_records = []

            if loaded_index.ntotal != len(loaded_records):
                raise ValueError(
                    f"Index has {loaded_index.ntotal} vectors but "
                    f"{len(loaded_records)} records"
                )

        except (RuntimeError, OSError, ValueError, pickle.UnpicklingError) as e:
            logger.warning(f"Could not load vector store from {load_path}: {e}")
            return False

        self.index = loaded_index
        self.records = loaded_records
        self.dimension = self.index.d
        self.index.hnsw.efSearch = self.efSearch

        logger.info(f"Loaded {self.count()} chunks from {load_path}")
        return True

    def clear(self) -> None:
        """Clear all vectors and records, resetting to empty state."""
        self._initialize_index()
        self.records = []

    def count(self) -> int:
        """Get the total number of vectors in the index."""
        return self.index.ntotal

    def get_stats(self) -> Dict:
        """Get statistics about the vector store."""
        return {
            'total_vectors': self.index.ntotal,
            'total_articles': len({record['metadata']['url'] for record in self.records}),
            'dimension': self.dimension,
            'M': self.M,
            'efSearch': self.index.hnsw.efSearch,
            'index_type': 'IndexHNSWFlat',
            'metric': 'cosine'
        }

    def __repr__(self) -> str:
        return (
            f"VectorStore(vectors={self.count()}, "
            f"dimension={self.dimension}, "
            f"M={self.M}, "
            f"efSearch={self.index.hnsw.efSearch})"
        )
