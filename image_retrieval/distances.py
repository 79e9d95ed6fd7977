"""
Distance metrics between feature vectors.

Every metric takes two vectors of the same extractor, validates that they
are non-empty and equally long, and returns a dissimilarity as a Python
float (0 = identical). All metrics are symmetric in their two operands.

Failures raise DistanceError subclasses rather than returning a sentinel,
so a ranking loop can skip the offending entry and carry on. Degenerate but
well-formed inputs (zero vectors) return documented values instead.

Composite metrics (multi-histogram, texture + color, blue-scene) combine
histogram-intersection distances over named slices of the vector with
caller-supplied weights. Weights that don't sum to 1 are logged as a
warning and used as given.
"""

import logging
from typing import Sequence

import numpy as np

from .errors import ConfigurationError
from .vectors import (
    BLUE_SPATIAL_BANDS, blue_dominance_part, blue_spatial_part,
    blue_texture_part, check_blue_scene, check_pair, color_part, segments,
    texture_part, weights_sum_close,
)

logger = logging.getLogger(__name__)

# Norms below this are treated as zero by the cosine distance.
COSINE_EPSILON = 1e-10

SPATIAL_WEIGHTS = (0.33, 0.34, 0.33)
BLUE_SCENE_WEIGHTS = (0.4, 0.2, 0.2, 0.2)


def _as_array(vector) -> np.ndarray:
    return np.asarray(vector, dtype=np.float64).reshape(-1)


def _warn_weights(weights: Sequence[float], what: str) -> None:
    if not weights_sum_close(weights):
        logger.warning(
            f"{what} weights sum to {sum(weights):.4f}, not 1.0; "
            f"using them as given"
        )


def distance_ssd(feature1, feature2) -> float:
    """
    Sum of squared differences.

    Used with the 147-value center-patch feature, where typical values
    run from 0 (identical) to several hundred thousand.
    """
    a, b = _as_array(feature1), _as_array(feature2)
    check_pair(a, b)
    diff = a - b
    return float(np.dot(diff, diff))


def distance_histogram_intersection(hist1, hist2) -> float:
    """
    Histogram intersection distance: 1 - sum(min(h1, h2)).

    Lies in [0, 1] when both inputs are normalized histograms; 0 means the
    distributions overlap completely.
    """
    a, b = _as_array(hist1), _as_array(hist2)
    check_pair(a, b)
    return float(1.0 - np.minimum(a, b).sum())


def distance_multi_histogram(hist1, hist2,
                             num_histograms: int,
                             weights: Sequence[float],
                             check_weights: bool = True) -> float:
    """
    Weighted sum of histogram-intersection distances over equal segments.

    Args:
        hist1: Concatenation of ``num_histograms`` equal-sized histograms.
        hist2: Same layout as hist1.
        num_histograms: Number of segments the vectors are split into.
        weights: One weight per segment, expected to sum to 1.
        check_weights: Warn if ``weights`` don't sum to 1. Metric records
            check once when built and pass False.

    Returns:
        Weighted distance, in [0, 1] for normalized inputs and weights.

    Raises:
        ShapeError: If the vectors are empty or differ in length.
        ConfigurationError: If the weight count doesn't match
            ``num_histograms`` or the length isn't divisible by it.
    """
    a, b = _as_array(hist1), _as_array(hist2)
    check_pair(a, b)

    if len(weights) != num_histograms:
        raise ConfigurationError(
            f"Got {len(weights)} weights for {num_histograms} histograms"
        )
    if check_weights:
        _warn_weights(weights, "Multi-histogram")

    total = 0.0
    for weight, seg_a, seg_b in zip(weights, segments(a, num_histograms),
                                    segments(b, num_histograms)):
        total += weight * distance_histogram_intersection(seg_a, seg_b)
    return float(total)


def distance_texture_color(feature1, feature2,
                           color_size: int,
                           texture_size: int,
                           color_weight: float = 0.5,
                           texture_weight: float = 0.5,
                           check_weights: bool = True) -> float:
    """
    Weighted histogram intersection over the color and texture parts.

    Slice bounds come from ``color_size`` and ``texture_size``; they are
    never inferred from the vector.
    """
    a, b = _as_array(feature1), _as_array(feature2)
    check_pair(a, b)
    if check_weights:
        _warn_weights((color_weight, texture_weight), "Texture/color")

    color_dist = distance_histogram_intersection(
        color_part(a, color_size, texture_size),
        color_part(b, color_size, texture_size),
    )
    texture_dist = distance_histogram_intersection(
        texture_part(a, color_size, texture_size),
        texture_part(b, color_size, texture_size),
    )
    return float(color_weight * color_dist + texture_weight * texture_dist)


def distance_cosine(feature1, feature2) -> float:
    """
    Cosine distance: 1 - cos(angle between the vectors).

    The cosine is clipped to [-1, 1] before subtracting, so the result lies
    in [0, 2]. If either vector has a norm below 1e-10 the angle is
    undefined and the maximum "unrelated" distance 1.0 is returned.
    """
    a, b = _as_array(feature1), _as_array(feature2)
    check_pair(a, b)

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a < COSINE_EPSILON or norm_b < COSINE_EPSILON:
        return 1.0

    cosine = np.dot(a, b) / (norm_a * norm_b)
    return float(1.0 - np.clip(cosine, -1.0, 1.0))


def distance_blue_scene(feature1, feature2, dnn1, dnn2,
                        weights: Sequence[float] = BLUE_SCENE_WEIGHTS,
                        check_weights: bool = True) -> float:
    """
    Weighted blend of the blue-scene parts and a DNN embedding distance.

    Weighting (defaults):
        - 40% absolute difference in blue dominance
        - 20% texture histogram intersection
        - 20% spatial multi-histogram (three bands, 0.33/0.34/0.33)
        - 20% cosine distance between the DNN embeddings

    Args:
        feature1: 209-value blue-scene feature.
        feature2: 209-value blue-scene feature.
        dnn1: Embedding of the first image.
        dnn2: Embedding of the second image.
        weights: (blue, texture, spatial, dnn) weights.
        check_weights: Warn if ``weights`` don't sum to 1.

    Raises:
        ShapeError: If a feature isn't 209 long or the embeddings mismatch.
        ConfigurationError: If ``weights`` doesn't have four entries.
    """
    a, b = _as_array(feature1), _as_array(feature2)
    check_pair(a, b)
    check_blue_scene(a)

    if len(weights) != 4:
        raise ConfigurationError(
            f"Blue-scene distance takes 4 weights, got {len(weights)}"
        )
    if check_weights:
        _warn_weights(weights, "Blue-scene")
    w_blue, w_texture, w_spatial, w_dnn = weights

    blue_dist = abs(blue_dominance_part(a) - blue_dominance_part(b))
    texture_dist = distance_histogram_intersection(
        blue_texture_part(a), blue_texture_part(b)
    )
    spatial_dist = distance_multi_histogram(
        blue_spatial_part(a), blue_spatial_part(b),
        BLUE_SPATIAL_BANDS, SPATIAL_WEIGHTS,
    )
    dnn_dist = distance_cosine(dnn1, dnn2)

    return float(
        w_blue * blue_dist
        + w_texture * texture_dist
        + w_spatial * spatial_dist
        + w_dnn * dnn_dist
    )
