"""Tests for image validation, center patch and row bands."""

import numpy as np
import pytest

from image_retrieval.errors import ExtractionError, ImageError
from image_retrieval.preprocessing import (
    extract_baseline_feature, extract_center_patch, normalize_image,
    split_rows, validate_color_image,
)


class TestValidateColorImage:
    """Tests for input validation."""

    def test_accepts_color_image(self, blue_image):
        assert validate_color_image(blue_image).shape == (30, 30, 3)

    def test_rejects_none(self):
        with pytest.raises(ImageError, match="empty"):
            validate_color_image(None)

    def test_rejects_empty(self):
        with pytest.raises(ImageError, match="empty"):
            validate_color_image(np.zeros((0, 0, 3), dtype=np.uint8))

    def test_rejects_grayscale(self):
        with pytest.raises(ImageError, match="3-channel"):
            validate_color_image(np.zeros((10, 10), dtype=np.uint8))

    def test_rejects_four_channels(self):
        with pytest.raises(ImageError, match="3-channel"):
            validate_color_image(np.zeros((10, 10, 4), dtype=np.uint8))

    def test_rejects_too_small(self):
        with pytest.raises(ImageError, match="too small"):
            validate_color_image(np.zeros((5, 9, 3), dtype=np.uint8), 7, 7)

    def test_image_error_is_extraction_error(self):
        assert issubclass(ImageError, ExtractionError)
        assert issubclass(ImageError, ValueError)


class TestNormalizeImage:

    def test_unit_float_rescaled(self):
        img = np.full((2, 2, 3), 0.5, dtype=np.float32)
        out = normalize_image(img)
        assert out.dtype == np.uint8
        assert out[0, 0, 0] == 127

    def test_uint8_unchanged(self, blue_image):
        assert normalize_image(blue_image) is blue_image


class TestBaselineFeature:
    """Tests for the 7x7 center patch feature."""

    def test_zero_image_gives_zero_vector(self):
        feature = extract_baseline_feature(np.zeros((7, 7, 3), dtype=np.uint8))
        assert feature.shape == (147,)
        assert np.all(feature == 0)

    def test_too_small_image_fails(self):
        with pytest.raises(ImageError):
            extract_baseline_feature(np.zeros((3, 3, 3), dtype=np.uint8))

    def test_one_dimension_too_small_fails(self):
        with pytest.raises(ImageError):
            extract_baseline_feature(np.zeros((100, 6, 3), dtype=np.uint8))

    def test_grayscale_fails(self):
        with pytest.raises(ImageError):
            extract_baseline_feature(np.zeros((20, 20), dtype=np.uint8))

    def test_raster_order_and_channel_order(self):
        img = np.zeros((7, 7, 3), dtype=np.uint8)
        for row in range(7):
            for col in range(7):
                img[row, col] = [row, col, 7]
        feature = extract_baseline_feature(img)
        assert list(feature[0:3]) == [0, 0, 7]
        assert list(feature[3:6]) == [0, 1, 7]
        assert list(feature[21:24]) == [1, 0, 7]
        assert list(feature[-3:]) == [6, 6, 7]

    def test_centered_on_integer_midpoint(self):
        # 10x12 image: center (5, 6), patch rows 2..8, cols 3..9
        img = np.zeros((10, 12, 3), dtype=np.uint8)
        img[:, :, 0] = np.arange(10)[:, None]
        img[:, :, 1] = np.arange(12)[None, :]
        feature = extract_baseline_feature(img)
        assert feature[0] == 2 and feature[1] == 3
        assert feature[-3] == 8 and feature[-2] == 9

    def test_read_only(self, noise_image):
        feature = extract_baseline_feature(noise_image)
        assert feature.dtype == np.float32
        with pytest.raises(ValueError):
            feature[0] = 1.0

    def test_center_patch_shape(self, noise_image):
        assert extract_center_patch(noise_image).shape == (7, 7, 3)


class TestSplitRows:

    def test_two_halves(self):
        top, bottom = split_rows(np.zeros((9, 4, 3), dtype=np.uint8), 2)
        assert top.shape[0] == 4
        assert bottom.shape[0] == 5

    def test_last_band_absorbs_remainder(self):
        bands = split_rows(np.zeros((31, 4, 3), dtype=np.uint8), 3)
        assert [b.shape[0] for b in bands] == [10, 10, 11]

    def test_short_image_gives_empty_bands(self):
        bands = split_rows(np.zeros((2, 4, 3), dtype=np.uint8), 3)
        assert [b.shape[0] for b in bands] == [0, 0, 2]
