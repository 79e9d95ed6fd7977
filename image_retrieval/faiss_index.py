"""
Exact FAISS indexes for the SSD and cosine metrics.

FAISS flat indexes compute the same quantities as two of the Python
metrics, in bulk:
    - IndexFlatL2 returns squared L2 distances, which is exactly SSD
    - IndexFlatIP over L2-normalized rows returns cosine similarity;
      cosine distance is 1 - similarity

Zero rows are left at zero when normalizing, so their similarity to
anything is 0 and their distance is 1.0, matching distance_cosine().
"""

import logging
from typing import Tuple

import faiss
import numpy as np

from .distances import COSINE_EPSILON
from .errors import ConfigurationError
from .methods import Cosine, MetricKind, SumSquaredDifference

logger = logging.getLogger(__name__)


def supports_metric(metric: MetricKind) -> bool:
    return isinstance(metric, (SumSquaredDifference, Cosine))


def _normalize_rows(vectors: np.ndarray) -> np.ndarray:
    norms = np.linalg.norm(vectors, axis=1, keepdims=True)
    norms[norms < COSINE_EPSILON] = np.inf
    return (vectors / norms).astype(np.float32)


def build_faiss_index(vectors: np.ndarray, metric: MetricKind) -> faiss.Index:
    """
    Build an exact index over ``vectors`` for ``metric``.

    Args:
        vectors: Array of shape (n, d).
        metric: SumSquaredDifference or Cosine.

    Raises:
        ConfigurationError: For any other metric.
    """
    vectors = np.ascontiguousarray(vectors, dtype=np.float32)
    if vectors.ndim != 2 or vectors.shape[0] == 0:
        raise ValueError(f"Expected a non-empty (n, d) array, got {vectors.shape}")
    dim = vectors.shape[1]

    if isinstance(metric, SumSquaredDifference):
        index = faiss.IndexFlatL2(dim)
        index.add(vectors)
    elif isinstance(metric, Cosine):
        index = faiss.IndexFlatIP(dim)
        index.add(_normalize_rows(vectors))
    else:
        raise ConfigurationError(f"No FAISS index for metric {metric!r}")

    logger.info(f"Built {type(index).__name__}: {index.ntotal} vectors, {dim}d")
    return index


def search_faiss_index(index: faiss.Index,
                       query: np.ndarray,
                       k: int,
                       metric: MetricKind) -> Tuple[np.ndarray, np.ndarray]:
    """
    Search an index built by build_faiss_index().

    Returns:
        Tuple of (distances, indices), each of shape (k',) with
        k' = min(k, index.ntotal), ascending by distance. Both are empty
        when ``k`` is zero or negative.

    Raises:
        ValueError: If the query dimension doesn't match the index.
    """
    query = np.asarray(query, dtype=np.float32).reshape(1, -1)
    if query.shape[1] != index.d:
        raise ValueError(
            f"Query dimension {query.shape[1]} doesn't match "
            f"index dimension {index.d}"
        )

    if isinstance(metric, Cosine):
        query = _normalize_rows(query)

    k = min(k, index.ntotal)
    if k <= 0:
        return np.empty(0, dtype=np.float64), np.empty(0, dtype=np.int64)
    scores, indices = index.search(query, k)
    scores, indices = scores[0], indices[0]

    if isinstance(metric, Cosine):
        distances = 1.0 - np.clip(scores, -1.0, 1.0)
    else:
        distances = scores

    return distances.astype(np.float64), indices
