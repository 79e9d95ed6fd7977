"""
DNN embeddings through OpenCV's DNN module.

The network is an external ONNX model (ResNet18 by default); this module
only prepares the input blob, runs a forward pass to the flatten layer, and
returns the resulting vector. Embeddings are usually precomputed into a
feature table and loaded with read_features_csv() instead.
"""

import logging

import cv2
import numpy as np

from .errors import ExtractionError
from .preprocessing import validate_color_image
from .vectors import as_vector

logger = logging.getLogger(__name__)

NET_SIZE = 224
# ImageNet normalization as a single scale: (x - mean) / 255 / 0.226
BLOB_SCALE = (1.0 / 255.0) * (1.0 / 0.226)
BLOB_MEAN = (124, 116, 104)
DEFAULT_OUTPUT_LAYER = "onnx_node!resnetv22_flatten0_reshape0"


def embedding_blob(image_np: np.ndarray) -> np.ndarray:
    """
    Turn a BGR image into a 1x3x224x224 float32 network input.

    Resizes without cropping, subtracts the per-channel mean, scales, and
    swaps B and R.
    """
    image_np = validate_color_image(image_np)
    return cv2.dnn.blobFromImage(
        image_np,
        scalefactor=BLOB_SCALE,
        size=(NET_SIZE, NET_SIZE),
        mean=BLOB_MEAN,
        swapRB=True,
        crop=False,
        ddepth=cv2.CV_32F,
    )


class OnnxEmbedder:
    """Compute image embeddings with an ONNX network."""

    def __init__(self, model_path: str, output_layer: str = DEFAULT_OUTPUT_LAYER):
        self.model_path = model_path
        self.output_layer = output_layer
        try:
            self.net = cv2.dnn.readNetFromONNX(model_path)
        except cv2.error as e:
            raise ExtractionError(f"Could not load network from {model_path}: {e}") from e
        if self.net.empty():
            raise ExtractionError(f"Could not load network from {model_path}")
        logger.info(f"Loaded embedding network: {model_path}")

    def embed(self, image_np: np.ndarray) -> np.ndarray:
        """
        Return the flattened embedding for one image (512 values for ResNet18).

        Raises:
            ImageError: If the image is empty or not 3-channel.
            ExtractionError: If the forward pass fails.
        """
        blob = embedding_blob(image_np)
        try:
            self.net.setInput(blob)
            output = self.net.forward(self.output_layer)
        except cv2.error as e:
            raise ExtractionError(f"Forward pass failed: {e}") from e
        return as_vector(output)
