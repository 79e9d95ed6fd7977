"""
CSV feature tables.

One record per line: the image filename, then the feature values, all
comma-separated:

    pic.0001.jpg,120.000000,130.000000,125.000000,...
    pic.0002.jpg,115.000000,128.000000,130.000000,...

The same format holds every feature type, including DNN embeddings
produced elsewhere. Reading is lenient: a malformed number is skipped
with a warning instead of failing the whole table.
"""

import csv
import logging
from typing import Dict, Iterable, List, NamedTuple, Optional

import numpy as np

from .vectors import as_vector

logger = logging.getLogger(__name__)


class FeatureRecord(NamedTuple):
    filename: str
    feature: np.ndarray


def write_features_csv(path: str, records: Iterable[FeatureRecord]) -> int:
    """
    Write feature records to a CSV file, six decimals per value.

    Returns:
        Number of records written.
    """
    count = 0
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        for filename, feature in records:
            writer.writerow([filename] + [f"{float(v):.6f}" for v in feature])
            count += 1

    logger.info(f"Wrote {count} feature vectors to {path}")
    return count


def read_features_csv(path: str) -> List[FeatureRecord]:
    """
    Read a feature table written by write_features_csv().

    Empty lines are ignored. Values that don't parse as finite floats
    (including nan and inf) are skipped with a warning; lines left with no
    values are dropped.

    Raises:
        FileNotFoundError: If ``path`` doesn't exist.
    """
    records = []
    expected_dim = None

    with open(path, "r", newline="", encoding="utf-8") as f:
        for line_no, row in enumerate(csv.reader(f), start=1):
            if not row or not any(field.strip() for field in row):
                continue

            filename = row[0].strip()
            values = []
            for token in row[1:]:
                try:
                    value = float(token)
                except ValueError:
                    value = None
                if value is None or not np.isfinite(value):
                    logger.warning(
                        f"Invalid float value on line {line_no}: {token!r}"
                    )
                    continue
                values.append(value)

            if not values:
                logger.warning(f"No features found on line {line_no}")
                continue

            if expected_dim is None:
                expected_dim = len(values)
            elif len(values) != expected_dim:
                logger.warning(
                    f"Line {line_no} ({filename}) has {len(values)} values, "
                    f"expected {expected_dim}"
                )

            records.append(FeatureRecord(filename, as_vector(values)))

    logger.info(f"Read {len(records)} feature vectors from {path}")
    return records


def features_by_name(records: Iterable[FeatureRecord]) -> Dict[str, np.ndarray]:
    """Map filename -> feature. Later duplicates win."""
    return {filename: feature for filename, feature in records}


def lookup(records: Iterable[FeatureRecord], filename: str) -> Optional[np.ndarray]:
    """Return the first feature stored under ``filename``, or None."""
    for name, feature in records:
        if name == filename:
            return feature
    return None
