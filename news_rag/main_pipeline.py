"""
Main Pipeline System

Wires the collaborators into the ingestion and retrieval pipelines and exposes
the operations the transport layer consumes:
- list_news(): recent articles from the news source
- ingest(articles): scrape, chunk, embed and index articles
- answer(query): retrieval-augmented answer with deduplicated sources

Every operation returns plain dictionaries and lists.
"""

import logging
from typing import List, Dict, Optional, Any

from .config import Config, get_config
from .embeddings.adapter import EmbeddingAdapter
from .embeddings.ollama_service import OllamaEmbeddingService
from .ingestion.news_source import NewsSource
from .ingestion.pipeline import IngestionPipeline
from .ingestion.scraper import ArticleScraper
from .query.generator import OllamaGenerator
from .query.rag_service import RAGService
from .storage.vector_store import VectorStore

logger = logging.getLogger(__name__)


class NewsQuerySystem:
    """
    Main system that integrates all components.

    Any collaborator left as None is built from the configuration.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        news_source: Optional[NewsSource] = None,
        scraper: Optional[ArticleScraper] = None,
        embedding_service: Optional[OllamaEmbeddingService] = None,
        vector_store: Optional[VectorStore] = None,
        generator: Optional[OllamaGenerator] = None,
        show_progress: bool = False
    ):
        """
        Initialize the news query system.

        Args:
            config: Configuration (default: global configuration)
            news_source: News listing client
            scraper: Article text fetcher
            embedding_service: Embedding model client
            vector_store: Vector store
            generator: Generative model client
            show_progress: Show a progress bar during ingestion
        """
        self.config = config or get_config()
        cfg = self.config

        self.news_source = news_source or NewsSource(
            api_url=cfg.news_api_url,
            link_base=cfg.news_link_base,
            timeout=cfg.scrape_timeout
        )
        self.scraper = scraper or ArticleScraper(
            timeout=cfg.scrape_timeout,
            max_retries=cfg.scrape_max_retries
        )
        self.embedding_service = embedding_service or OllamaEmbeddingService(
            model=cfg.ollama_embed_model,
            base_url=cfg.ollama_base_url,
            dimensions=cfg.embedding_dimensions,
            batch_size=cfg.embedding_batch_size,
            timeout=cfg.ollama_timeout
        )
        self.vector_store = vector_store or VectorStore(
            index_path=cfg.faiss_index_path,
            dimension=cfg.embedding_dimensions
        )
        self.generator = generator or OllamaGenerator(
            model=cfg.ollama_llm_model,
            base_url=cfg.ollama_base_url,
            temperature=cfg.llm_temperature,
            max_tokens=cfg.llm_max_tokens,
            timeout=cfg.ollama_timeout
        )

        self.embedder = EmbeddingAdapter(self.embedding_service, dimensions=cfg.embedding_dimensions)

        self.ingestion = IngestionPipeline(
            scraper=self.scraper,
            embedder=self.embedder,
            vector_store=self.vector_store,
            chunk_size=cfg.chunk_size,
            chunk_overlap=cfg.chunk_overlap,
            min_content_length=cfg.min_content_length,
            show_progress=show_progress
        )
        self.rag_service = RAGService(
            embedder=self.embedder,
            vector_store=self.vector_store,
            generator=self.generator,
            match_threshold=cfg.match_threshold,
            match_count=cfg.match_count
        )

        logger.debug("NewsQuerySystem initialized")

    def list_news(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        List recent articles.

        Args:
            limit: Maximum number of articles (default: configured news_limit)

        Returns:
            List of article dictionaries (title, link, description, pubDate)

        Raises:
            NewsSourceError: If the feed cannot be fetched
        """
        articles = self.news_source.list_recent(limit or self.config.news_limit)
        return [article.to_dict() for article in articles]

    def ingest(self, articles) -> Dict[str, Any]:
        """
        Ingest articles into the vector store.

        Args:
            articles: List of Article objects or article dictionaries

        Returns:
            Ingestion report dictionary (processed, skipped, chunks, skipped_articles)

        Raises:
            ValidationError: If the article list is malformed
            VectorStoreError: If a write fails
        """
        return self.ingestion.ingest(articles).to_dict()

    def ingest_recent(self, limit: Optional[int] = None) -> Dict[str, Any]:
        """List recent articles and ingest them."""
        return self.ingest(self.list_news(limit))

    def answer(self, query: str) -> Dict[str, Any]:
        """
        Answer a question from the indexed news.

        Args:
            query: User's question

        Returns:
            Dictionary with ``answer`` and deduplicated ``sources``

        Raises:
            ValidationError: If query is empty
            CollaboratorError: If embedding, search or generation fails
        """
        return self.rag_service.answer(query).to_dict()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get system statistics.

        Returns:
            Dictionary with vector store and embedding cache statistics
        """
        stats = {'vector_store_stats': self.vector_store.get_stats()}
        if hasattr(self.embedding_service, 'get_cache_stats'):
            stats['cache_stats'] = self.embedding_service.get_cache_stats()
        return stats
