"""
Gradient-magnitude texture features.

Texture is summarized as the distribution of edge strength over the image:
smooth scenes (sky, still water) pile up in the low bins, busy scenes
(foliage, crowds) spread toward the high ones. Combined with an
rg-chromaticity histogram this gives the color + texture feature.
"""

import logging
from typing import Tuple

import cv2
import numpy as np

from .errors import ExtractionError
from .histograms import DEFAULT_HIST_BINS, chromaticity_histogram
from .preprocessing import validate_color_image
from .vectors import as_vector

logger = logging.getLogger(__name__)

DEFAULT_TEXTURE_BINS = 16

# Separable 3x3 Sobel: smoothing normalized by its sum, plain central difference.
SMOOTH_KERNEL = np.array([1, 2, 1], dtype=np.float32) / 4.0
DIFF_KERNEL = np.array([-1, 0, 1], dtype=np.float32)

# Smallest image with an interior pixel to take a derivative at.
MIN_TEXTURE_SIZE = 3


def sobel_gradients(image_np: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Compute per-channel horizontal and vertical Sobel derivatives.

    Derivatives are only computed for interior pixels. The outermost rows
    and columns copy the nearest interior value.

    Args:
        image_np: BGR uint8 image, at least 3x3.

    Returns:
        Tuple of (gx, gy), float32 arrays with the image's shape and
        values in [-255, 255].
    """
    src = image_np.astype(np.float32)

    gx = cv2.sepFilter2D(src, cv2.CV_32F, DIFF_KERNEL, SMOOTH_KERNEL)
    gy = cv2.sepFilter2D(src, cv2.CV_32F, SMOOTH_KERNEL, DIFF_KERNEL)

    return _replicate_border(gx), _replicate_border(gy)


def _replicate_border(gradient: np.ndarray) -> np.ndarray:
    interior = np.ascontiguousarray(gradient[1:-1, 1:-1])
    return cv2.copyMakeBorder(interior, 1, 1, 1, 1, cv2.BORDER_REPLICATE)


def gradient_magnitude(image_np: np.ndarray) -> np.ndarray:
    """
    Combine Sobel derivatives into a single-channel edge-strength image.

    Per channel, magnitude = sqrt(gx^2 + gy^2) saturated to [0, 255]; the
    three channels are then merged with the standard luma weights.

    Returns:
        uint8 array of shape (rows, cols).
    """
    gx, gy = sobel_gradients(image_np)
    magnitude = np.sqrt(gx * gx + gy * gy)
    magnitude_u8 = cv2.convertScaleAbs(magnitude)
    return cv2.cvtColor(magnitude_u8, cv2.COLOR_BGR2GRAY)


def texture_histogram(image_np: np.ndarray,
                      bins: int = DEFAULT_TEXTURE_BINS) -> np.ndarray:
    """
    Histogram of gradient magnitude, normalized by total pixel count.

    Args:
        image_np: BGR uint8 image, at least 3x3.
        bins: Number of equal-width buckets over 0-255.

    Returns:
        Float32 array of ``bins`` values summing to 1.0.
    """
    if bins < 1:
        raise ExtractionError(f"Bin count must be positive, got {bins}")
    image_np = validate_color_image(image_np, MIN_TEXTURE_SIZE, MIN_TEXTURE_SIZE)

    magnitude = gradient_magnitude(image_np).reshape(-1).astype(np.int64)
    bin_index = magnitude * bins // 256

    hist = np.bincount(bin_index, minlength=bins).astype(np.float64)
    hist /= magnitude.size

    return hist.astype(np.float32)


def extract_texture_color_feature(image_np: np.ndarray,
                                  color_bins: int = DEFAULT_HIST_BINS,
                                  texture_bins: int = DEFAULT_TEXTURE_BINS
                                  ) -> np.ndarray:
    """
    Extract a chromaticity histogram followed by a texture histogram.

    The two parts are kept separate so the distance stage can weight them;
    see distance_texture_color().

    Args:
        image_np: BGR uint8 image, at least 3x3.
        color_bins: Buckets per chromaticity axis (default 16).
        texture_bins: Gradient-magnitude buckets (default 16).

    Returns:
        Read-only float32 vector of color_bins**2 + texture_bins values.

    Raises:
        ImageError: If the image is empty, smaller than 3x3, or not 3-channel.
    """
    image_np = validate_color_image(image_np, MIN_TEXTURE_SIZE, MIN_TEXTURE_SIZE)

    feature = np.concatenate([
        chromaticity_histogram(image_np, color_bins),
        texture_histogram(image_np, texture_bins),
    ])
    return as_vector(feature)
