"""Tests for vector helpers and slice accessors."""

import numpy as np
import pytest

from image_retrieval.errors import ConfigurationError, ShapeError
from image_retrieval.vectors import (
    BLUE_SCENE_DIM, as_vector, check_pair, color_part, segments, texture_part,
    weights_sum_close,
)


class TestAsVector:

    def test_flat_read_only_float32(self):
        vector = as_vector([[1, 2], [3, 4]])
        assert vector.shape == (4,)
        assert vector.dtype == np.float32
        with pytest.raises(ValueError):
            vector[0] = 5.0

    def test_copies_input(self):
        source = np.zeros(3, dtype=np.float32)
        vector = as_vector(source)
        source[0] = 1.0
        assert vector[0] == 0.0


class TestCheckPair:

    def test_ok(self):
        check_pair(np.zeros(3), np.ones(3))

    def test_length_mismatch(self):
        with pytest.raises(ShapeError, match="different sizes"):
            check_pair(np.zeros(3), np.zeros(4))

    def test_empty(self):
        with pytest.raises(ShapeError, match="empty"):
            check_pair(np.zeros(0), np.zeros(0))


class TestSegments:

    def test_equal_slices(self):
        parts = segments(np.arange(6), 3)
        assert [list(p) for p in parts] == [[0, 1], [2, 3], [4, 5]]

    def test_not_divisible(self):
        with pytest.raises(ConfigurationError, match="not divisible"):
            segments(np.arange(7), 2)

    def test_non_positive(self):
        with pytest.raises(ConfigurationError):
            segments(np.arange(6), 0)


class TestColorTextureParts:

    def test_slices(self):
        vector = np.arange(5)
        assert list(color_part(vector, 3, 2)) == [0, 1, 2]
        assert list(texture_part(vector, 3, 2)) == [3, 4]

    def test_sizes_must_cover_vector(self):
        with pytest.raises(ConfigurationError):
            color_part(np.arange(5), 3, 3)


class TestWeights:

    def test_blue_scene_dim(self):
        assert BLUE_SCENE_DIM == 209

    @pytest.mark.parametrize("weights,expected", [
        ((0.5, 0.5), True),
        ((0.33, 0.34, 0.33), True),
        ((0.4, 0.2, 0.2, 0.2), True),
        ((0.3, 0.3), False),
        ((0.9, 0.9), False),
    ])
    def test_weights_sum_close(self, weights, expected):
        assert weights_sum_close(weights) == expected
