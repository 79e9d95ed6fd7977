"""
Hand-designed composite feature for blue water and sky scenes.

Fills the gap between single-signal features: a chromaticity histogram
sees "lots of blue" but not where it is, a texture histogram sees
"smooth" but not what color. The blue-scene descriptor is a 209-value
vector combining three cheap cues:
    [0:1]     blue dominance (fraction of clearly blue pixels)
    [1:17]    16-bin gradient-magnitude texture histogram
    [17:209]  8x8 chromaticity histograms of the top, middle and
              bottom thirds of the image
"""

import logging

import cv2
import numpy as np

from .histograms import chromaticity_histogram
from .preprocessing import split_rows, validate_color_image
from .texture import MIN_TEXTURE_SIZE, texture_histogram
from .vectors import (
    BLUE_SPATIAL_BANDS, BLUE_SPATIAL_BINS, BLUE_TEXTURE_BINS, as_vector,
)

logger = logging.getLogger(__name__)

# OpenCV hue runs 0-179 (degrees / 2); 90-130 covers cyan-blue through blue.
BLUE_HUE_MIN = 90
BLUE_HUE_MAX = 130
# Low floors that reject gray and near-black pixels.
BLUE_SAT_MIN = 50
BLUE_VAL_MIN = 50


def blue_dominance(image_np: np.ndarray) -> float:
    """
    Fraction of pixels that are clearly blue in HSV space.

    Args:
        image_np: BGR uint8 image.

    Returns:
        Value in [0, 1].
    """
    hsv = cv2.cvtColor(image_np, cv2.COLOR_BGR2HSV)
    lower = np.array([BLUE_HUE_MIN, BLUE_SAT_MIN, BLUE_VAL_MIN], dtype=np.uint8)
    upper = np.array([BLUE_HUE_MAX, 255, 255], dtype=np.uint8)
    mask = cv2.inRange(hsv, lower, upper)
    return float(np.count_nonzero(mask)) / mask.size


def extract_blue_scene_feature(image_np: np.ndarray) -> np.ndarray:
    """
    Extract the 209-value blue-scene descriptor.

    Process:
        1. Blue dominance from an HSV threshold
        2. Gradient-magnitude texture histogram (16 bins)
        3. Split into three horizontal bands (the last band takes the
           remainder rows) and compute an 8x8 chromaticity histogram per band

    Args:
        image_np: BGR uint8 image, at least 3x3.

    Returns:
        Read-only float32 vector of 209 values.

    Raises:
        ImageError: If the image is empty, smaller than 3x3, or not 3-channel.
    """
    image_np = validate_color_image(image_np, MIN_TEXTURE_SIZE, MIN_TEXTURE_SIZE)

    dominance = blue_dominance(image_np)
    texture = texture_histogram(image_np, BLUE_TEXTURE_BINS)
    bands = [
        chromaticity_histogram(band, BLUE_SPATIAL_BINS)
        for band in split_rows(image_np, BLUE_SPATIAL_BANDS)
    ]

    feature = np.concatenate([[dominance], texture] + bands)
    logger.debug(f"Blue-scene feature: dominance={dominance:.3f}")

    return as_vector(feature)
