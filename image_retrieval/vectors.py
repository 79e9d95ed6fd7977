"""
Feature vector views and named slice accessors.

Composite features pack several sub-features into one flat vector. The
offsets of each part are defined here once, and every metric reads its
operands through these accessors instead of slicing by hand.

Blue-scene layout (209 values):
    [0:1]     blue dominance fraction
    [1:17]    16-bin gradient texture histogram
    [17:209]  three 64-bin chromaticity histograms (top, middle, bottom)
"""

from typing import List, Sequence

import numpy as np

from .errors import ConfigurationError, ShapeError

BASELINE_DIM = 147

BLUE_TEXTURE_BINS = 16
BLUE_SPATIAL_BINS = 8
BLUE_SPATIAL_BANDS = 3
BLUE_SCENE_DIM = 1 + BLUE_TEXTURE_BINS + BLUE_SPATIAL_BANDS * BLUE_SPATIAL_BINS ** 2

_BLUE_DOMINANCE = slice(0, 1)
_BLUE_TEXTURE = slice(1, 1 + BLUE_TEXTURE_BINS)
_BLUE_SPATIAL = slice(1 + BLUE_TEXTURE_BINS, BLUE_SCENE_DIM)


def as_vector(values) -> np.ndarray:
    """Return a read-only 1-D float32 view of ``values``."""
    vector = np.array(values, dtype=np.float32).reshape(-1)
    vector.flags.writeable = False
    return vector


def check_pair(a: np.ndarray, b: np.ndarray) -> None:
    """Raise ShapeError unless both vectors are non-empty and equally long."""
    if len(a) != len(b):
        raise ShapeError(
            f"Feature vectors have different sizes: {len(a)} vs {len(b)}"
        )
    if len(a) == 0:
        raise ShapeError("Feature vectors are empty")


def segments(vector: np.ndarray, count: int) -> List[np.ndarray]:
    """Split a vector into ``count`` equal contiguous slices."""
    if count < 1:
        raise ConfigurationError(f"Segment count must be positive, got {count}")
    if len(vector) % count != 0:
        raise ConfigurationError(
            f"Vector length {len(vector)} is not divisible by {count} segments"
        )
    size = len(vector) // count
    return [vector[i * size:(i + 1) * size] for i in range(count)]


def color_part(vector: np.ndarray, color_size: int, texture_size: int) -> np.ndarray:
    _check_color_texture(vector, color_size, texture_size)
    return vector[:color_size]


def texture_part(vector: np.ndarray, color_size: int, texture_size: int) -> np.ndarray:
    _check_color_texture(vector, color_size, texture_size)
    return vector[color_size:color_size + texture_size]


def _check_color_texture(vector, color_size, texture_size):
    if color_size < 1 or texture_size < 1:
        raise ConfigurationError(
            f"Color and texture sizes must be positive, got "
            f"{color_size} and {texture_size}"
        )
    if color_size + texture_size != len(vector):
        raise ConfigurationError(
            f"Color size {color_size} + texture size {texture_size} "
            f"doesn't match vector length {len(vector)}"
        )


def check_blue_scene(vector: np.ndarray) -> None:
    if len(vector) != BLUE_SCENE_DIM:
        raise ShapeError(
            f"Blue-scene feature must have {BLUE_SCENE_DIM} values, "
            f"got {len(vector)}"
        )


def blue_dominance_part(vector: np.ndarray) -> float:
    check_blue_scene(vector)
    return float(vector[_BLUE_DOMINANCE][0])


def blue_texture_part(vector: np.ndarray) -> np.ndarray:
    check_blue_scene(vector)
    return vector[_BLUE_TEXTURE]


def blue_spatial_part(vector: np.ndarray) -> np.ndarray:
    check_blue_scene(vector)
    return vector[_BLUE_SPATIAL]


def weights_sum_close(weights: Sequence[float], tolerance: float = 1e-3) -> bool:
    return abs(sum(weights) - 1.0) <= tolerance
