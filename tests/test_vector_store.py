"""
Test Suite for FAISS HNSW Vector Store

Uses small embeddings so the index behaves exactly on tiny data sets.
"""

import os
import tempfile
import pytest
import numpy as np
from unittest.mock import patch

from news_rag.errors import VectorStoreError
from news_rag.models import DocumentChunk
from news_rag.storage.vector_store import VectorStore

DIM = 4


def make_chunk(vector, url='https://example.com/a', title='Article A', content='text', offset=0):
    """Build an embedded chunk."""
    return DocumentChunk(
        content=content,
        source_offset=offset,
        metadata={'url': url, 'title': title},
        embedding=np.array(vector, dtype=np.float32)
    )


@pytest.fixture
def store():
    """In-memory 4-dimensional store."""
    return VectorStore(dimension=DIM)


@pytest.fixture
def populated_store(store):
    """Store holding three orthogonal chunks."""
    store.insert([
        make_chunk([1, 0, 0, 0], url='https://example.com/gold', title='Gold', content='gold'),
        make_chunk([0, 1, 0, 0], url='https://example.com/oil', title='Oil', content='oil'),
        make_chunk([0, 0, 1, 0], url='https://example.com/rates', title='Rates', content='rates'),
    ])
    return store


class TestVectorStoreInitialization:
    """Test vector store initialization."""

    def test_uses_hnsw_index(self, store):
        """Index is an HNSW graph."""
        assert 'HNSW' in type(store.index).__name__

    def test_default_dimension_is_768(self):
        """Default dimension matches nomic-embed-text."""
        assert VectorStore().dimension == 768

    def test_starts_empty(self, store):
        """New store holds nothing."""
        assert store.count() == 0
        assert store.records == []


class TestInsert:
    """Test adding chunks."""

    def test_insert_chunks(self, populated_store):
        """Inserted chunks are counted and recorded."""
        assert populated_store.count() == 3
        assert populated_store.records[0]['metadata'] == {'url': 'https://example.com/gold', 'title': 'Gold'}

    def test_insert_empty_is_noop(self, store):
        """Empty inserts change nothing."""
        store.insert([])

        assert store.count() == 0

    def test_rejects_chunk_without_embedding(self, store):
        """Chunks must be embedded before storage."""
        chunk = DocumentChunk(content='x', source_offset=0, metadata={'url': 'u', 'title': 't'})

        with pytest.raises(VectorStoreError):
            store.insert([chunk])

    def test_rejects_missing_metadata(self, store):
        """Chunks need both url and title."""
        chunk = make_chunk([1, 0, 0, 0], url='')

        with pytest.raises(VectorStoreError):
            store.insert([chunk])

    def test_invalid_chunk_rejects_whole_batch(self, store):
        """One bad chunk means nothing from the batch is stored."""
        good = make_chunk([1, 0, 0, 0])
        bad = make_chunk([1, 0, 0])

        with pytest.raises(VectorStoreError):
            store.insert([good, bad])

        assert store.count() == 0
        assert store.records == []

    def test_rejects_wrong_dimension(self, store):
        """Embedding dimension must match the index."""
        with pytest.raises(VectorStoreError):
            store.insert([make_chunk([1, 0])])


class TestSearch:
    """Test similarity search."""

    def test_exact_match(self, populated_store):
        """Identical direction gives similarity ~1."""
        results = populated_store.search([1, 0, 0, 0], threshold=0.75, top_k=5)

        assert len(results) == 1
        assert results[0].content == 'gold'
        assert results[0].url == 'https://example.com/gold'
        assert results[0].similarity == pytest.approx(1.0, abs=1e-5)

    def test_similarity_is_scale_invariant(self, populated_store):
        """Vectors are normalised, so magnitude does not matter."""
        results = populated_store.search([10, 0, 0, 0], threshold=0.75, top_k=5)

        assert results[0].similarity == pytest.approx(1.0, abs=1e-5)

    def test_threshold_filters_results(self, populated_store):
        """Nothing below the threshold is returned."""
        # cos = 0.707 against gold and oil
        results = populated_store.search([1, 1, 0, 0], threshold=0.75, top_k=5)

        assert results == []

    def test_results_in_descending_similarity(self, populated_store):
        """Results are ordered best first."""
        results = populated_store.search([3, 2, 1, 0], threshold=0.0, top_k=5)

        similarities = [r.similarity for r in results]
        assert similarities == sorted(similarities, reverse=True)
        assert [r.content for r in results] == ['gold', 'oil', 'rates']

    def test_top_k_limits_results(self, populated_store):
        """At most top_k results come back."""
        results = populated_store.search([3, 2, 1, 0], threshold=0.0, top_k=2)

        assert len(results) == 2

    def test_empty_store(self, store):
        """Searching an empty store returns nothing."""
        assert store.search([1, 0, 0, 0]) == []

    def test_zero_top_k(self, populated_store):
        """top_k of zero returns nothing."""
        assert populated_store.search([1, 0, 0, 0], top_k=0) == []

    def test_negative_top_k(self, populated_store):
        """Negative top_k is rejected."""
        with pytest.raises(ValueError):
            populated_store.search([1, 0, 0, 0], top_k=-1)

    def test_wrong_query_dimension(self, populated_store):
        """Query dimension must match the index."""
        with pytest.raises(VectorStoreError):
            populated_store.search([1, 0], threshold=0.0)


class TestPersistence:
    """Test save/load round trips."""

    def test_insert_persists_when_path_set(self):
        """A new store on the same path sees earlier inserts."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'index', 'news.index')

            store = VectorStore(index_path=path, dimension=DIM)
            store.insert([make_chunk([1, 0, 0, 0], content='persisted')])

            reloaded = VectorStore(index_path=path, dimension=DIM)

            assert reloaded.count() == 1
            results = reloaded.search([1, 0, 0, 0], threshold=0.5)
            assert results[0].content == 'persisted'

    def test_failed_persist_rolls_back(self):
        """If the write to disk fails the insert is undone."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'news.index')
            store = VectorStore(index_path=path, dimension=DIM)
            store.insert([make_chunk([1, 0, 0, 0], content='first')])

            with patch.object(store, 'save_index', side_effect=OSError("disk full")):
                with pytest.raises(VectorStoreError):
                    store.insert([make_chunk([0, 1, 0, 0], content='second')])

            assert store.count() == 1
            assert [r['content'] for r in store.records] == ['first']

    def test_load_missing_file(self, store):
        """Loading a missing index returns False."""
        assert store.load_index('/nonexistent/path/news.index') is False

    def test_clear(self, populated_store):
        """Clear empties the store."""
        populated_store.clear()

        assert populated_store.count() == 0
        assert populated_store.records == []


class TestStats:
    """Test statistics."""

    def test_get_stats(self, populated_store):
        """Stats report vectors, articles and metric."""
        stats = populated_store.get_stats()

        assert stats['total_vectors'] == 3
        assert stats['total_articles'] == 3
        assert stats['dimension'] == DIM
        assert stats['metric'] == 'cosine'
