# core/similarity.py
from typing import List, Sequence
import numpy as np
from core.entities import ReferenceCorpus, SearchMatch
from util.errors import DimensionMismatchError
import logging

logger = logging.getLogger(__name__)


def cosine_similarities(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """
    Row-wise dot(row, query) / (|row| * |query|) for `matrix` (n, d) against
    `query` (d,). Zero-norm rows (or a zero query) score 0.0.
    """
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    dots = matrix @ query
    sims = np.zeros(matrix.shape[0], dtype=np.float64)
    nonzero = norms > 0
    sims[nonzero] = dots[nonzero] / norms[nonzero]
    return np.clip(sims, -1.0, 1.0)


def rank_matches(
    corpus: ReferenceCorpus, query: Sequence[float], top_k: int
) -> List[SearchMatch]:
    """
    Top-k corpus chunks by cosine similarity to `query`.

    - Returns min(top_k, len(corpus)) matches, ranks 1..k.
    - Equal similarities keep corpus order (stable sort).
    - A query whose dimension differs from the corpus raises DimensionMismatchError.
    """
    k = min(top_k, len(corpus))
    if k <= 0:
        return []

    q = np.asarray(query, dtype=np.float64)
    if q.ndim != 1 or q.shape[0] != corpus.dimension:
        raise DimensionMismatchError(corpus.version, int(q.size), corpus.dimension)

    sims = cosine_similarities(corpus.matrix, q)
    order = np.argsort(-sims, kind="stable")[:k]
    out = [
        SearchMatch(chunk=corpus.chunks[int(i)], similarity=float(sims[int(i)]), rank=r)
        for r, i in enumerate(order, start=1)
    ]
    logger.debug(
        "search.rank version=%s n=%d k=%d top=%.4f",
        corpus.version,
        len(corpus),
        k,
        out[0].similarity,
    )
    return out
