"""
Image retrieval search engine.

Loads a feature table for one method and answers queries against it:
    1. Get the query feature (extract it from an image, or look it up
       in the table by filename)
    2. Score every table entry with the method's metric
    3. Return the best matches, ascending by distance

The custom blue-scene method also needs DNN embeddings for the query and
every entry; those come from a second table. SSD and cosine queries can
run through an exact FAISS index instead of the Python scan.
"""

import logging
from typing import List, Optional, Union

import numpy as np

from .config import RetrievalConfig
from .errors import ConfigurationError, ExtractionError
from .faiss_index import build_faiss_index, search_faiss_index, supports_metric
from .feature_store import features_by_name, lookup, read_features_csv
from .methods import Method, extract, get_method
from .scoring import MatchResult, rank

logger = logging.getLogger(__name__)


class SearchEngine:
    """
    Ranks a feature table against query images.
    """

    def __init__(self,
                 method: Union[str, Method],
                 feature_csv: str,
                 dnn_csv: Optional[str] = None,
                 config: Optional[RetrievalConfig] = None,
                 use_faiss: bool = False):
        """
        Load the feature table (and embedding table) from disk.

        Args:
            method: Method name (e.g. "histogram") or a Method.
            feature_csv: Feature table produced for this method.
            dnn_csv: Embedding table; required by the custom method.
            config: Bin counts and weights. Read from the environment when
                    omitted.
            use_faiss: Rank SSD and cosine queries with a FAISS index.

        Raises:
            ConfigurationError: If the method needs embeddings and
                ``dnn_csv`` is missing.
        """
        if isinstance(method, str):
            method = get_method(method, config or RetrievalConfig.from_env())
        self.method = method

        self.records = read_features_csv(feature_csv)
        logger.info(
            f"Loaded {len(self.records)} '{method.name}' vectors from {feature_csv}"
        )

        self.embeddings = None
        if method.needs_embeddings:
            if dnn_csv is None:
                raise ConfigurationError(
                    f"Method '{method.name}' needs a DNN embedding table"
                )
            self.embeddings = features_by_name(read_features_csv(dnn_csv))
            logger.info(f"Loaded {len(self.embeddings)} embeddings from {dnn_csv}")

        self.faiss_index = None
        if use_faiss and supports_metric(method.metric) and self.records:
            self.faiss_index = self._build_index()

    def _build_index(self):
        dims = {len(feature) for _, feature in self.records}
        if len(dims) != 1:
            logger.warning(
                f"Feature table has mixed dimensions {sorted(dims)}, "
                f"falling back to linear scan"
            )
            return None
        vectors = np.vstack([feature for _, feature in self.records])
        return build_faiss_index(vectors, self.method.metric)

    def search(self,
               query_image: np.ndarray,
               top_n: int = 3,
               query_name: Optional[str] = None) -> List[MatchResult]:
        """
        Find the table entries closest to an image.

        Args:
            query_image: BGR uint8 query image.
            top_n: Number of matches to return.
            query_name: Filename of the query in the embedding table; the
                custom method takes the query embedding from there.

        Returns:
            MatchResults, ascending by distance.

        Raises:
            ExtractionError: If the query feature can't be produced.
        """
        if self.method.precomputed:
            raise ExtractionError(
                f"Method '{self.method.name}' uses precomputed vectors; "
                f"use search_by_name()"
            )
        query = extract(query_image, self.method.extractor)
        return self._rank(query, top_n, query_name)

    def search_by_name(self,
                       filename: str,
                       top_n: int = 3,
                       exclude_self: bool = False) -> List[MatchResult]:
        """
        Use the table's own vector for ``filename`` as the query.

        Raises:
            KeyError: If ``filename`` isn't in the table.
        """
        query = lookup(self.records, filename)
        if query is None:
            raise KeyError(f"{filename} not found in feature table")
        return self._rank(query, top_n, filename,
                          exclude=filename if exclude_self else None)

    def _rank(self, query, top_n, query_name, exclude=None):
        query_embedding = None
        if self.method.needs_embeddings:
            query_embedding = self.embeddings.get(query_name) if query_name else None
            if query_embedding is None:
                logger.warning(f"No DNN embedding for query {query_name}")
                return []

        if self.faiss_index is not None and len(query) == self.faiss_index.d:
            results = self._rank_faiss(query, top_n, exclude)
        else:
            results = rank(
                query, self.records, self.method.metric, top_n,
                query_embedding=query_embedding,
                embeddings=self.embeddings,
                exclude=exclude,
            )

        logger.info(f"Search complete: {len(self.records)} entries -> {len(results)} results")
        return results

    def _rank_faiss(self, query, top_n, exclude):
        if top_n <= 0:
            return []
        k = top_n + (1 if exclude is not None else 0)
        distances, indices = search_faiss_index(
            self.faiss_index, query, k, self.method.metric
        )
        results = []
        for dist, idx in zip(distances, indices):
            if idx < 0:
                continue
            filename = self.records[idx].filename
            if filename == exclude:
                continue
            results.append(MatchResult(filename, float(dist)))
        return results[:top_n]
