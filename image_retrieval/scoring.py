"""
Ranking of database entries against a query feature.

A query is scored against every entry of a feature table with the metric
of the chosen method. Entries whose distance can't be computed (wrong
length, missing embedding) are logged and left out; one bad entry never
aborts the query. Results are sorted ascending by distance with a stable
sort, so equal distances keep table order.
"""

import logging
from typing import Dict, Iterable, List, NamedTuple, Optional

import numpy as np

from .errors import DistanceError
from .methods import BlueSceneComposite, MetricKind, distance

logger = logging.getLogger(__name__)


class MatchResult(NamedTuple):
    filename: str
    distance: float


def rank(query: np.ndarray,
         database: Iterable,
         metric: MetricKind,
         top_n: Optional[int] = None,
         query_embedding: Optional[np.ndarray] = None,
         embeddings: Optional[Dict[str, np.ndarray]] = None,
         exclude: Optional[str] = None) -> List[MatchResult]:
    """
    Rank database entries by distance to ``query``.

    Args:
        query: Query feature vector.
        database: (filename, feature) pairs, e.g. FeatureRecords.
        metric: Metric kind to compare with.
        top_n: Keep only the best ``top_n`` results (all if None, none if
            zero or negative).
        query_embedding: Query DNN embedding, for BlueSceneComposite.
        embeddings: Filename -> DNN embedding, for BlueSceneComposite.
            Entries without an embedding are skipped.
        exclude: Filename to leave out, typically the query itself.

    Returns:
        MatchResults sorted by ascending distance.
    """
    if top_n is not None and top_n <= 0:
        return []

    needs_embeddings = isinstance(metric, BlueSceneComposite)
    if needs_embeddings and (query_embedding is None or embeddings is None):
        raise DistanceError(
            "Blue-scene ranking needs a query embedding and an embedding table"
        )

    results = []
    skipped = 0

    for filename, feature in database:
        if exclude is not None and filename == exclude:
            continue

        dnn = None
        if needs_embeddings:
            dnn = embeddings.get(filename)
            if dnn is None:
                skipped += 1
                continue

        try:
            dist = distance(query, feature, metric, query_embedding, dnn)
        except DistanceError as e:
            logger.warning(f"Error computing distance for {filename}: {e}")
            skipped += 1
            continue

        results.append(MatchResult(filename, dist))

    if skipped:
        logger.info(f"Skipped {skipped} entries while ranking")

    results = rank_results(results)
    if top_n is not None:
        results = results[:top_n]
    return results


def rank_results(results: List[MatchResult]) -> List[MatchResult]:
    """
    Sort results by ascending distance.

    ``sorted`` is stable, so ties keep their input order.
    """
    return sorted(results, key=lambda x: x.distance)


def format_matches(results: List[MatchResult], top_n: int) -> str:
    """
    Render the best ``top_n`` results as a numbered listing.

    Example:
        ======================================
        Top 2 matches:
        ======================================
         1. pic.1016.jpg         (distance: 0.000000)
         2. pic.0986.jpg         (distance: 1234.567890)
        ======================================
    """
    shown = results[:max(top_n, 0)]
    rule = "=" * 38
    lines = [rule, f"Top {len(shown)} matches:", rule]
    for i, match in enumerate(shown, start=1):
        lines.append(
            f"{i:2d}. {match.filename:<20} (distance: {match.distance:.6f})"
        )
    lines.append(rule)
    return "\n".join(lines)
