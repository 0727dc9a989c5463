"""
Text Chunker

Splits raw article text into fixed-size, overlapping character windows.
Windows are not aligned to word or sentence boundaries.
"""

from typing import List, Dict

from ..errors import ConfigValidationError
from ..models import DocumentChunk

DEFAULT_CHUNK_SIZE = 800
DEFAULT_CHUNK_OVERLAP = 100


def validate_chunking(chunk_size: int, chunk_overlap: int) -> None:
    """
    Check that a chunk size / overlap pair makes forward progress.

    Raises:
        ConfigValidationError: If chunk_size <= 0, overlap < 0 or overlap >= chunk_size
    """
    if chunk_size <= 0:
        raise ConfigValidationError(f"chunk_size must be positive, got {chunk_size}")
    if chunk_overlap < 0:
        raise ConfigValidationError(f"chunk_overlap cannot be negative, got {chunk_overlap}")
    if chunk_overlap >= chunk_size:
        raise ConfigValidationError(
            f"chunk_overlap ({chunk_overlap}) must be less than chunk_size ({chunk_size})"
        )


def chunk_offsets(length: int, chunk_size: int, chunk_overlap: int) -> List[int]:
    """Start offsets of every window over a text of ``length`` characters."""
    validate_chunking(chunk_size, chunk_overlap)
    return list(range(0, length, chunk_size - chunk_overlap))


def chunk_text(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP
) -> List[str]:
    """
    Split text into overlapping windows.

    Window ``i`` starts at ``i * (chunk_size - chunk_overlap)``; a new window
    is opened while its start is still inside the text, so the tail of the
    text may appear as a short final window.

    >>> chunk_text("abcdefghij", chunk_size=4, chunk_overlap=1)
    ['abcd', 'defg', 'ghij', 'j']

    Args:
        text: Text to chunk
        chunk_size: Maximum characters per window
        chunk_overlap: Characters shared by consecutive windows

    Returns:
        List of text windows (empty for empty text)

    Raises:
        ConfigValidationError: If chunk_overlap >= chunk_size
    """
    offsets = chunk_offsets(len(text or ""), chunk_size, chunk_overlap)
    return [text[start:start + chunk_size] for start in offsets]


def build_chunks(
    text: str,
    metadata: Dict[str, str],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP
) -> List[DocumentChunk]:
    """
    Chunk text into DocumentChunks that share a copy of ``metadata``.

    Embeddings are left unset.
    """
    offsets = chunk_offsets(len(text or ""), chunk_size, chunk_overlap)
    return [
        DocumentChunk(
            content=text[start:start + chunk_size],
            source_offset=start,
            metadata=dict(metadata)
        )
        for start in offsets
    ]
