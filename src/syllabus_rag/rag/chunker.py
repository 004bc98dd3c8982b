"""
Text Chunker

Splits extracted syllabus text into overlapping, word-bounded windows that
are small enough to embed individually.

Windows advance by ``chunk_size - overlap`` words, so consecutive chunks
share ``overlap`` words of context. The function is pure and deterministic.
"""

from __future__ import annotations

from typing import List

DEFAULT_CHUNK_SIZE = 500
DEFAULT_OVERLAP = 50


def validate_chunking(chunk_size: int, overlap: int) -> None:
    """
    Raise ValueError unless the window is guaranteed to advance.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")
    if overlap < 0:
        raise ValueError(f"overlap must be non-negative, got {overlap}")
    if overlap >= chunk_size:
        raise ValueError(
            f"overlap ({overlap}) must be smaller than chunk_size ({chunk_size})"
        )


def chunk_text(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_OVERLAP,
) -> List[str]:
    """
    Split ``text`` into overlapping word windows.

    Parameters
    ----------
    text : str
        Raw extracted document text.
    chunk_size : int
        Maximum number of words per chunk.
    overlap : int
        Number of words shared by consecutive chunks.

    Returns
    -------
    List[str]
        Chunks in document order, each rejoined with single spaces.
        Empty or whitespace-only input yields an empty list.

    Raises
    ------
    ValueError
        If ``overlap >= chunk_size`` or either value is out of range.
    """
    validate_chunking(chunk_size, overlap)

    words = text.split()
    if not words:
        return []

    if len(words) <= chunk_size:
        return [" ".join(words)]

    step = chunk_size - overlap
    chunks: List[str] = []

    for start in range(0, len(words), step):
        window = " ".join(words[start : start + chunk_size])
        if window.strip():
            chunks.append(window)

        # The last window reached the end; further windows would only
        # repeat its tail.
        if start + chunk_size >= len(words):
            break

    return chunks
