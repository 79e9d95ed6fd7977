"""Tests for rg-chromaticity histogram extraction."""

import numpy as np
import pytest

from image_retrieval.errors import ExtractionError, ImageError
from image_retrieval.histograms import (
    chromaticity_histogram, extract_chromaticity_histogram,
    extract_multi_histogram,
)


class TestExtractChromaticityHistogram:
    """Tests for the whole-image histogram."""

    def test_output_shape(self, red_square_image):
        hist = extract_chromaticity_histogram(red_square_image)
        assert hist.shape == (256,)

    def test_custom_bins(self, red_square_image):
        hist = extract_chromaticity_histogram(red_square_image, bins=8)
        assert hist.shape == (64,)

    def test_output_dtype(self, red_square_image):
        hist = extract_chromaticity_histogram(red_square_image)
        assert hist.dtype == np.float32

    def test_sums_to_one(self, noise_image):
        hist = extract_chromaticity_histogram(noise_image)
        assert hist.sum() == pytest.approx(1.0, abs=1e-5)
        assert np.all(hist >= 0)

    def test_uniform_color_single_bin(self):
        # B=30, G=60, R=90: r = 0.5 -> bin 8, g = 1/3 -> bin 5
        img = np.zeros((20, 20, 3), dtype=np.uint8)
        img[:, :] = [30, 60, 90]
        hist = extract_chromaticity_histogram(img)
        assert hist[8 * 16 + 5] == pytest.approx(1.0)
        assert np.count_nonzero(hist) == 1

    def test_brightness_invariant(self):
        dim = np.zeros((10, 10, 3), dtype=np.uint8)
        dim[:, :] = [20, 40, 60]
        bright = np.zeros((10, 10, 3), dtype=np.uint8)
        bright[:, :] = [60, 120, 180]
        np.testing.assert_array_equal(
            extract_chromaticity_histogram(dim),
            extract_chromaticity_histogram(bright),
        )

    def test_pure_red_clamped_into_last_bin(self):
        img = np.zeros((5, 5, 3), dtype=np.uint8)
        img[:, :] = [0, 0, 255]
        hist = extract_chromaticity_histogram(img)
        # r == 1.0 -> last r bin, g == 0 -> first g bin
        assert hist[15 * 16 + 0] == pytest.approx(1.0)

    def test_black_pixels_excluded_from_denominator(self):
        img = np.zeros((10, 10, 3), dtype=np.uint8)
        img[:5] = [0, 0, 255]  # top half red, bottom half black
        hist = extract_chromaticity_histogram(img)
        assert hist[15 * 16] == pytest.approx(1.0)
        assert hist.sum() == pytest.approx(1.0)

    def test_all_black_gives_zeros(self):
        hist = extract_chromaticity_histogram(np.zeros((10, 10, 3), dtype=np.uint8))
        assert hist.shape == (256,)
        assert np.all(hist == 0)

    def test_no_nan_or_inf(self, noise_image):
        hist = extract_chromaticity_histogram(noise_image)
        assert not np.any(np.isnan(hist))
        assert not np.any(np.isinf(hist))

    def test_empty_image_fails(self):
        with pytest.raises(ImageError):
            extract_chromaticity_histogram(np.zeros((0, 5, 3), dtype=np.uint8))

    def test_invalid_bins_fails(self, red_square_image):
        with pytest.raises(ExtractionError):
            extract_chromaticity_histogram(red_square_image, bins=0)

    def test_region_helper_tolerates_empty_region(self):
        region = np.zeros((0, 10, 3), dtype=np.uint8)
        assert np.all(chromaticity_histogram(region, 8) == 0)


class TestExtractMultiHistogram:
    """Tests for the top/bottom split histogram."""

    @pytest.mark.parametrize("bins", [4, 8, 16])
    def test_length(self, noise_image, bins):
        hist = extract_multi_histogram(noise_image, bins)
        assert hist.shape == (2 * bins * bins,)

    def test_each_half_normalized(self, noise_image):
        hist = extract_multi_histogram(noise_image)
        assert hist[:64].sum() == pytest.approx(1.0, abs=1e-5)
        assert hist[64:].sum() == pytest.approx(1.0, abs=1e-5)

    def test_top_then_bottom(self):
        img = np.zeros((10, 10, 3), dtype=np.uint8)
        img[:5] = [0, 0, 255]  # red top
        img[5:] = [255, 0, 0]  # blue bottom
        hist = extract_multi_histogram(img)
        assert hist[7 * 8 + 0] == pytest.approx(1.0)
        assert hist[64 + 0] == pytest.approx(1.0)

    def test_layout_distinguishes_flipped_image(self, sky_over_grass_image):
        flipped = sky_over_grass_image[::-1].copy()
        a = extract_multi_histogram(sky_over_grass_image)
        b = extract_multi_histogram(flipped)
        assert not np.allclose(a, b)
        np.testing.assert_allclose(a[:64], b[64:])

    def test_single_row_image(self):
        img = np.full((1, 10, 3), 100, dtype=np.uint8)
        hist = extract_multi_histogram(img)
        assert np.all(hist[:64] == 0)
        assert hist[64:].sum() == pytest.approx(1.0)
