"""
rg-chromaticity histogram extraction.

Each pixel is reduced to its chromaticity r = R / (R + G + B) and
g = G / (R + G + B), which removes overall brightness so the same surface
under brighter or dimmer light lands in the same bin. Both coordinates are
binned over [0, 1] into a 2-D histogram, flattened r-major.

The histogram is normalized by the number of pixels that were actually
counted. Near-black pixels (channel sum < 1) carry no chromaticity and are
skipped, so a region that is mostly dark still yields a full probability
distribution over its remaining pixels. A region with no counted pixels
yields all zeros.
"""

import logging

import numpy as np

from .errors import ExtractionError
from .preprocessing import split_rows, validate_color_image
from .vectors import as_vector

logger = logging.getLogger(__name__)

DEFAULT_HIST_BINS = 16
DEFAULT_MULTI_HIST_BINS = 8

# Pixels whose B + G + R falls below this are treated as black and skipped.
MIN_CHANNEL_SUM = 1.0


def chromaticity_histogram(region: np.ndarray, bins: int) -> np.ndarray:
    """
    Compute a normalized rg-chromaticity histogram over an image region.

    Unlike extract_chromaticity_histogram(), this accepts an empty region
    and returns zeros for it, which is what the band-splitting extractors
    need for very short images.

    Args:
        region: BGR uint8 array of shape (rows, cols, 3). May have zero rows.
        bins: Buckets per chromaticity axis.

    Returns:
        Float32 array of bins * bins values, summing to 1.0 or all zero.
    """
    if bins < 1:
        raise ExtractionError(f"Bin count must be positive, got {bins}")

    pixels = region.reshape(-1, 3).astype(np.float64)
    blue, green, red = pixels[:, 0], pixels[:, 1], pixels[:, 2]
    total = blue + green + red

    counted = total >= MIN_CHANNEL_SUM
    n_counted = int(np.count_nonzero(counted))

    hist = np.zeros(bins * bins, dtype=np.float64)
    if n_counted == 0:
        return hist.astype(np.float32)

    r = red[counted] / total[counted]
    g = green[counted] / total[counted]

    # r == 1.0 (or g == 1.0) would index one past the end; clamp into last bin
    r_bin = np.minimum((r * bins).astype(np.int64), bins - 1)
    g_bin = np.minimum((g * bins).astype(np.int64), bins - 1)

    hist += np.bincount(r_bin * bins + g_bin, minlength=bins * bins)
    hist /= n_counted

    return hist.astype(np.float32)


def extract_chromaticity_histogram(image_np: np.ndarray,
                                   bins: int = DEFAULT_HIST_BINS) -> np.ndarray:
    """
    Extract a whole-image rg-chromaticity histogram.

    Args:
        image_np: BGR uint8 image.
        bins: Buckets per chromaticity axis (default 16).

    Returns:
        Read-only float32 vector with bins * bins values, r_bin outer and
        g_bin inner.

    Raises:
        ImageError: If the image is empty or not 3-channel.
    """
    image_np = validate_color_image(image_np)
    return as_vector(chromaticity_histogram(image_np, bins))


def extract_multi_histogram(image_np: np.ndarray,
                            bins: int = DEFAULT_MULTI_HIST_BINS) -> np.ndarray:
    """
    Extract top-half and bottom-half chromaticity histograms.

    The split row is rows // 2; the top half covers rows [0, split) and the
    bottom half rows [split, rows). Keeping the halves separate preserves
    coarse layout (sky above, ground below) that a single histogram loses.

    Args:
        image_np: BGR uint8 image.
        bins: Buckets per chromaticity axis (default 8).

    Returns:
        Read-only float32 vector of 2 * bins * bins values, top first.
    """
    image_np = validate_color_image(image_np)
    top, bottom = split_rows(image_np, 2)

    feature = np.concatenate([
        chromaticity_histogram(top, bins),
        chromaticity_histogram(bottom, bins),
    ])
    logger.debug(f"Multi-histogram: {len(feature)} values from {image_np.shape[:2]}")
    return as_vector(feature)
