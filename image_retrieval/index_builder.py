"""
Batch feature extraction for a directory of images.

Processes every image in a directory with one extractor (or an embedding
network) and writes the resulting feature table as CSV:
    - images that can't be read are skipped with a warning
    - images that fail extraction (too small, wrong channels) are skipped
    - the summary dict reports processed and failed counts

The table is built once per feature type and reused for every query.
"""

import os
import logging
from typing import Callable, List

import cv2
import numpy as np

from .embeddings import OnnxEmbedder
from .errors import ExtractionError
from .feature_store import FeatureRecord, write_features_csv
from .methods import ExtractorKind, extract

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.bmp'}
PROGRESS_EVERY = 50


def list_image_files(image_dir: str) -> List[str]:
    """
    List image basenames in a directory, sorted alphabetically.

    Raises:
        FileNotFoundError: If ``image_dir`` is not a directory.
    """
    if not os.path.isdir(image_dir):
        raise FileNotFoundError(f"Directory does not exist: {image_dir}")

    filenames = sorted(
        f for f in os.listdir(image_dir)
        if os.path.splitext(f)[1].lower() in IMAGE_EXTENSIONS
        and os.path.isfile(os.path.join(image_dir, f))
    )
    logger.info(f"Found {len(filenames)} images in {image_dir}")
    return filenames


def extract_directory(image_dir: str,
                      compute: Callable[[np.ndarray], np.ndarray]) -> dict:
    """
    Apply ``compute`` to every image in ``image_dir``.

    Returns:
        Dict with 'records' (list of FeatureRecord), 'processed', 'errors'
        and 'total' counts.
    """
    filenames = list_image_files(image_dir)
    records = []
    errors = 0

    for i, filename in enumerate(filenames):
        filepath = os.path.join(image_dir, filename)

        image = cv2.imread(filepath)
        if image is None:
            logger.warning(f"Could not read: {filename}")
            errors += 1
            continue

        try:
            feature = compute(image)
        except ExtractionError as e:
            logger.warning(f"Failed to extract features from {filename}: {e}")
            errors += 1
            continue

        records.append(FeatureRecord(filename, feature))

        if (i + 1) % PROGRESS_EVERY == 0 or (i + 1) == len(filenames):
            logger.info(f"Processed {i + 1}/{len(filenames)} images")

    return {
        "records": records,
        "processed": len(records),
        "errors": errors,
        "total": len(filenames),
    }


def _write_summary(result: dict, output_csv: str) -> dict:
    records = result.pop("records")
    if not records:
        logger.error("No features extracted successfully")
        return {"success": False, "error": "No valid images processed", **result}

    write_features_csv(output_csv, records)
    dim = len(records[0].feature)

    logger.info(
        f"Feature table built: {result['processed']} images, {dim}d vectors, "
        f"{result['errors']} errors"
    )
    return {
        "success": True,
        "dimensions": dim,
        "output_path": output_csv,
        **result,
    }


def build_feature_database(image_dir: str,
                           output_csv: str,
                           extractor: ExtractorKind) -> dict:
    """
    Extract one feature type for every image in a directory and save it.

    Args:
        image_dir: Directory containing images.
        output_csv: Path of the CSV table to write.
        extractor: Extractor kind to apply.

    Returns:
        Dict with 'success', 'processed', 'errors', 'total', and on success
        'dimensions' and 'output_path'.
    """
    logger.info(f"Building {type(extractor).__name__} features from {image_dir}")
    result = extract_directory(image_dir, lambda image: extract(image, extractor))
    return _write_summary(result, output_csv)


def build_embedding_database(image_dir: str,
                             output_csv: str,
                             embedder: OnnxEmbedder) -> dict:
    """Like build_feature_database(), with an embedding network."""
    logger.info(f"Building embeddings from {image_dir} with {embedder.model_path}")
    result = extract_directory(image_dir, embedder.embed)
    return _write_summary(result, output_csv)
