"""
Data Models

Plain data carriers passed between collaborators and pipelines. Every model
can render itself as a dictionary of builtin types for the transport layer.
"""

from dataclasses import dataclass, field, replace
from typing import List, Dict, Optional, Any, Mapping

import numpy as np


@dataclass(frozen=True)
class Article:
    """News article metadata as returned by the news source."""
    title: str
    link: str
    description: str = ""
    pub_date: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Article":
        """
        Build an article from a mapping.

        Accepts both ``pubDate`` (news feed spelling) and ``pub_date``.
        """
        return cls(
            title=data.get('title') or "",
            link=data.get('link') or "",
            description=data.get('description') or "",
            pub_date=data.get('pubDate', data.get('pub_date'))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'link': self.link,
            'description': self.description,
            'pubDate': self.pub_date
        }


@dataclass
class DocumentChunk:
    """
    A window of article text ready for the vector store.

    ``embedding`` stays ``None`` until the embedding model has run; the
    vector store refuses chunks without one.
    """
    content: str
    source_offset: int
    metadata: Dict[str, str]
    embedding: Optional[np.ndarray] = None

    def with_embedding(self, embedding: np.ndarray) -> "DocumentChunk":
        """Return a copy of this chunk carrying ``embedding``."""
        return replace(self, embedding=embedding)


@dataclass(frozen=True)
class QueryResult:
    """A chunk returned by similarity search."""
    content: str
    similarity: float
    metadata: Dict[str, str]

    @property
    def url(self) -> str:
        return self.metadata.get('url', '')

    @property
    def title(self) -> str:
        return self.metadata.get('title', '')

    def to_dict(self) -> Dict[str, Any]:
        return {
            'content': self.content,
            'similarity': self.similarity,
            'metadata': dict(self.metadata)
        }


PROCESSED = "processed"
SKIPPED = "skipped"


@dataclass(frozen=True)
class ArticleOutcome:
    """Result of ingesting one article: processed, or skipped with a reason."""
    url: str
    title: str
    status: str
    chunks: int = 0
    reason: Optional[str] = None

    @classmethod
    def processed(cls, article: Article, chunks: int) -> "ArticleOutcome":
        return cls(url=article.link, title=article.title, status=PROCESSED, chunks=chunks)

    @classmethod
    def skipped(cls, article: Article, reason: str) -> "ArticleOutcome":
        return cls(url=article.link, title=article.title, status=SKIPPED, reason=reason)


@dataclass(frozen=True)
class IngestionReport:
    """Summary of an ingestion run."""
    processed: int = 0
    skipped: int = 0
    chunks: int = 0
    skipped_articles: List[Dict[str, str]] = field(default_factory=list)

    def record(self, outcome: ArticleOutcome) -> "IngestionReport":
        """Return a new report that also accounts for ``outcome``."""
        if outcome.status == PROCESSED:
            return replace(
                self,
                processed=self.processed + 1,
                chunks=self.chunks + outcome.chunks
            )
        return replace(
            self,
            skipped=self.skipped + 1,
            skipped_articles=self.skipped_articles + [{
                'url': outcome.url,
                'title': outcome.title,
                'reason': outcome.reason or 'unknown'
            }]
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'processed': self.processed,
            'skipped': self.skipped,
            'chunks': self.chunks,
            'skipped_articles': [dict(item) for item in self.skipped_articles]
        }


@dataclass(frozen=True)
class RAGAnswer:
    """Answer to a question together with the deduplicated sources used."""
    answer: str
    sources: List[QueryResult] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'answer': self.answer,
            'sources': [source.to_dict() for source in self.sources]
        }
