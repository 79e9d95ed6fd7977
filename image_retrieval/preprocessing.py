"""
Image validation and region helpers shared by the feature extractors.

Images are OpenCV-style uint8 arrays of shape (rows, cols, 3) in B, G, R
channel order. Nothing here modifies its input; region helpers return
views into the original array.
"""

import logging
from typing import List

import numpy as np

from .errors import ImageError
from .vectors import BASELINE_DIM, as_vector

logger = logging.getLogger(__name__)

PATCH_SIZE = 7
PATCH_RADIUS = PATCH_SIZE // 2


def normalize_image(image_np: np.ndarray) -> np.ndarray:
    """Ensure image is uint8, rescaling [0, 1] float images."""
    if image_np.dtype != np.uint8:
        if image_np.size and image_np.max() <= 1.0:
            image_np = (image_np * 255).astype(np.uint8)
        else:
            image_np = np.clip(image_np, 0, 255).astype(np.uint8)
    return image_np


def validate_color_image(image_np: np.ndarray,
                         min_rows: int = 1,
                         min_cols: int = 1) -> np.ndarray:
    """
    Check that an image is a non-empty 3-channel array of a minimum size.

    Args:
        image_np: Candidate image, B, G, R channel order.
        min_rows: Smallest accepted height.
        min_cols: Smallest accepted width.

    Returns:
        The image as uint8.

    Raises:
        ImageError: If the image is None, empty, too small, or not 3-channel.
    """
    if image_np is None or getattr(image_np, "size", 0) == 0:
        raise ImageError("Source image is empty")
    if image_np.ndim != 3 or image_np.shape[2] != 3:
        raise ImageError(
            f"Image must be 3-channel color (BGR), got shape {image_np.shape}"
        )
    rows, cols = image_np.shape[:2]
    if rows < min_rows or cols < min_cols:
        raise ImageError(
            f"Image too small: {cols}x{rows}, need at least "
            f"{min_cols}x{min_rows}"
        )
    return normalize_image(image_np)


def extract_center_patch(image_np: np.ndarray,
                         patch_size: int = PATCH_SIZE) -> np.ndarray:
    """
    Return the ``patch_size`` square centered on (rows // 2, cols // 2).

    The patch reaches ``patch_size // 2`` pixels in every direction from the
    center, inclusive, so odd sizes are centered exactly.
    """
    image_np = validate_color_image(image_np, patch_size, patch_size)
    h, w = image_np.shape[:2]
    half = patch_size // 2

    y1 = h // 2 - half
    x1 = w // 2 - half

    return image_np[y1:y1 + patch_size, x1:x1 + patch_size]


def extract_baseline_feature(image_np: np.ndarray) -> np.ndarray:
    """
    Extract the center 7x7 block as a 147-value feature vector.

    Pixels are emitted in raster order (row by row, left to right), each
    contributing its B, G, R values in that order.

    Args:
        image_np: BGR uint8 image, at least 7x7.

    Returns:
        Read-only float32 vector of 147 values.

    Raises:
        ImageError: If the image is empty, smaller than 7x7, or not 3-channel.
    """
    patch = extract_center_patch(image_np, PATCH_SIZE)
    feature = as_vector(patch.reshape(-1))
    if len(feature) != BASELINE_DIM:
        raise ImageError(f"Expected {BASELINE_DIM} features, got {len(feature)}")
    return feature


def split_rows(image_np: np.ndarray, parts: int) -> List[np.ndarray]:
    """
    Split an image into ``parts`` horizontal bands of rows // parts rows.

    The last band absorbs any remainder rows. Bands may be empty when the
    image has fewer rows than ``parts``.
    """
    rows = image_np.shape[0]
    band = rows // parts
    bounds = [i * band for i in range(parts)] + [rows]
    return [image_np[bounds[i]:bounds[i + 1]] for i in range(parts)]
