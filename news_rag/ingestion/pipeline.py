"""
Ingestion Pipeline

Turns articles into indexed chunks:
scrape text -> chunk -> embed (one batch per article) -> attach metadata -> store.

Scrape failures and short pages skip the article and the run continues.
Embedding and storage failures abort the run.
"""

import logging
from functools import reduce
from typing import Iterable, List, Mapping, Sequence, Union

from tqdm import tqdm

from ..errors import ValidationError, ScrapeError, VectorStoreError
from ..embeddings.adapter import EmbeddingAdapter
from ..models import Article, ArticleOutcome, IngestionReport
from .chunker import build_chunks, validate_chunking, DEFAULT_CHUNK_SIZE, DEFAULT_CHUNK_OVERLAP

logger = logging.getLogger(__name__)

ArticleLike = Union[Article, Mapping]


def coerce_articles(articles) -> List[Article]:
    """
    Validate a caller-supplied article list.

    Args:
        articles: List or tuple of Article objects or mappings with title/link

    Returns:
        List of Article objects

    Raises:
        ValidationError: If articles is not a list/tuple or an item lacks title or link
    """
    if not isinstance(articles, (list, tuple)):
        raise ValidationError("Invalid articles data: expected a list of articles")

    coerced = []
    for position, item in enumerate(articles):
        if isinstance(item, Article):
            article = item
        elif isinstance(item, Mapping):
            article = Article.from_dict(item)
        else:
            raise ValidationError(f"Invalid article at position {position}: {type(item).__name__}")

        if not article.title or not article.link:
            raise ValidationError(f"Article at position {position} needs both title and link")
        coerced.append(article)

    return coerced


class IngestionPipeline:
    """
    Ingests articles one at a time, in order.

    Collaborators are injected: a scraper exposing ``fetch_text(url)``, an
    EmbeddingAdapter, and a store exposing ``insert(chunks)``.
    """

    def __init__(
        self,
        scraper,
        embedder: EmbeddingAdapter,
        vector_store,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
        min_content_length: int = 200,
        show_progress: bool = False
    ):
        """
        Initialize the ingestion pipeline.

        Args:
            scraper: Article text fetcher
            embedder: Adapter used to embed chunks
            vector_store: Destination store
            chunk_size: Characters per chunk
            chunk_overlap: Characters shared by consecutive chunks
            min_content_length: Articles with less scraped text are skipped
            show_progress: Show a progress bar over articles

        Raises:
            ConfigValidationError: If chunk_overlap >= chunk_size
        """
        validate_chunking(chunk_size, chunk_overlap)

        self.scraper = scraper
        self.embedder = embedder
        self.vector_store = vector_store
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.min_content_length = min_content_length
        self.show_progress = show_progress

    def _fetch_content(self, article: Article):
        try:
            return self.scraper.fetch_text(article.link)
        except ScrapeError:
            raise
        except Exception as e:
            raise ScrapeError(f"Scraper failed for {article.link}: {e}", cause=e) from e

    def _ingest_article(self, article: Article) -> ArticleOutcome:
        """
        Run one article through the pipeline.

        Raises:
            EmbeddingError: If the embedding model fails
            VectorStoreError: If the store rejects the write
        """
        logger.info(f"Scraping and chunking: {article.title}")

        try:
            content = self._fetch_content(article)
        except ScrapeError as e:
            logger.warning(f"Skipping {article.link}: {e}")
            return ArticleOutcome.skipped(article, "scrape failed")

        if not content:
            logger.warning(f"Skipping {article.link}: no content scraped")
            return ArticleOutcome.skipped(article, "scrape failed")

        if len(content) < self.min_content_length:
            logger.warning(
                f"Skipping {article.link}: content too short "
                f"({len(content)} < {self.min_content_length} chars)"
            )
            return ArticleOutcome.skipped(article, "content too short")

        chunks = build_chunks(
            content,
            {'url': article.link, 'title': article.title},
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap
        )
        logger.info(f"Generated {len(chunks)} chunks. Creating embeddings...")

        embeddings = self.embedder.embed_batch([chunk.content for chunk in chunks])

        embedded = [chunk.with_embedding(vector) for chunk, vector in zip(chunks, embeddings)]
        try:
            self.vector_store.insert(embedded)
        except VectorStoreError:
            raise
        except Exception as e:
            raise VectorStoreError(f"Failed to store chunks for {article.link}: {e}", cause=e) from e

        return ArticleOutcome.processed(article, len(embedded))

    def ingest(self, articles: Sequence[ArticleLike]) -> IngestionReport:
        """
        Ingest a batch of articles.

        Args:
            articles: Articles (or mappings with title/link) to ingest

        Returns:
            IngestionReport with processed/skipped counts and skip reasons

        Raises:
            ValidationError: If the article list is malformed
            EmbeddingError: If embedding fails; articles after it are not ingested
            VectorStoreError: If a write fails; articles after it are not ingested
        """
        batch = coerce_articles(articles)
        logger.info(f"Processing {len(batch)} articles...")

        iterator: Iterable[Article] = batch
        if self.show_progress:
            iterator = tqdm(batch, desc="Ingesting articles")

        report = reduce(
            lambda summary, outcome: summary.record(outcome),
            map(self._ingest_article, iterator),
            IngestionReport()
        )

        logger.info(
            f"Ingestion complete: {report.processed} processed, "
            f"{report.skipped} skipped, {report.chunks} chunks stored"
        )
        return report
