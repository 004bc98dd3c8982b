"""
Similarity Ranker

Exhaustive cosine-similarity ranking of an owner's chunks against a query
vector. Every candidate is scored; there is no approximate index.

Key Properties
--------------
- Zero-norm vectors score 0.0 against everything
- Mismatched dimensionality fails closed (DimensionMismatchError)
- Ties keep input order (stable sort), so results are reproducible
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from ..core.errors import DimensionMismatchError
from .models import ChunkRecord


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors, 0.0 if either has zero norm.
    """
    va = np.asarray(a, dtype="float64")
    vb = np.asarray(b, dtype="float64")

    if va.shape != vb.shape:
        raise DimensionMismatchError(
            f"Cannot compare vectors of length {va.size} and {vb.size}."
        )

    magnitude = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if magnitude == 0.0:
        return 0.0

    return float(np.dot(va, vb) / magnitude)


def rank(
    query_vector: Sequence[float],
    candidates: Sequence[ChunkRecord],
    top_k: int,
) -> List[Tuple[ChunkRecord, float]]:
    """
    Score every candidate against ``query_vector`` and keep the best ``top_k``.

    Parameters
    ----------
    query_vector : Sequence[float]
        Embedding of the question.
    candidates : Sequence[ChunkRecord]
        All chunks visible to the requesting owner.
    top_k : int
        Maximum number of results.

    Returns
    -------
    List[Tuple[ChunkRecord, float]]
        (chunk, score) pairs, highest score first.

    Raises
    ------
    DimensionMismatchError
        If any candidate vector length differs from the query's.
    """
    if not candidates or top_k <= 0:
        return []

    q = np.asarray(query_vector, dtype="float64")
    dim = q.size

    for record in candidates:
        if len(record.vector) != dim:
            raise DimensionMismatchError(
                f"Query vector has {dim} dimensions but chunk "
                f"{record.document_id}#{record.chunk_index} has {len(record.vector)}."
            )

    matrix = np.asarray([record.vector for record in candidates], dtype="float64")

    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(q)
    dots = matrix @ q
    scores = np.divide(dots, norms, out=np.zeros_like(dots), where=norms != 0)

    # Stable sort on the negated scores keeps input order among ties.
    order = np.argsort(-scores, kind="stable")[:top_k]

    return [(candidates[int(i)], float(scores[int(i)])) for i in order]
