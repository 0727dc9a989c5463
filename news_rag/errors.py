"""
Error Taxonomy

Exceptions shared by the ingestion and retrieval pipelines, plus a helper that
turns any of them into a caller-facing message.
"""

from typing import Optional


class NewsRAGError(Exception):
    """Base class for all errors raised by the system."""
    pass


class ConfigValidationError(NewsRAGError, ValueError):
    """Raised when configuration (including chunking parameters) is invalid."""
    pass


class ValidationError(NewsRAGError, ValueError):
    """Raised when caller input is malformed (empty query, bad article list)."""
    pass


class CollaboratorError(NewsRAGError):
    """
    Raised when an external collaborator fails.
    
    The underlying transport failure is available both as ``cause`` and as
    the chained ``__cause__``.
    """
    
    component = "collaborator"
    
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class NewsSourceError(CollaboratorError):
    """Raised when the news listing cannot be fetched or parsed."""
    component = "news source"


class ScrapeError(CollaboratorError):
    """Raised when an article page cannot be fetched."""
    component = "scraper"


class EmbeddingError(CollaboratorError):
    """Raised when the embedding model fails; no partial vectors are returned."""
    component = "embedding model"


class GenerationError(CollaboratorError):
    """Raised when the generative model fails to produce an answer."""
    component = "generative model"


class VectorStoreError(CollaboratorError):
    """Raised when the vector store rejects a write or a search."""
    component = "vector store"


def describe_error(exc: BaseException) -> str:
    """
    Build a caller-facing message for an exception.
    
    Validation problems are reported as-is; collaborator failures are
    reported as server-side failures naming the component. A "no relevant
    information" result is not an exception and never reaches this function.
    
    Args:
        exc: Exception raised by the core
        
    Returns:
        Human-readable message
    """
    if isinstance(exc, (ValidationError, ConfigValidationError)):
        return f"Invalid request: {exc}"
    if isinstance(exc, CollaboratorError):
        return f"Server error: the {exc.component} failed ({exc})"
    return f"Server error: {exc}"
