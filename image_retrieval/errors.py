"""
Exception hierarchy for feature extraction and distance computation.

Extraction and distance failures are fatal to a single call only. Batch
callers (index building, ranking) catch them per entry, log, and move on.
"""


class RetrievalError(ValueError):
    """Base class for all retrieval errors."""


class ExtractionError(RetrievalError):
    """A feature vector could not be produced for an image."""


class ImageError(ExtractionError):
    """Image is missing, empty, too small, or has the wrong channel count."""


class DistanceError(RetrievalError):
    """A distance could not be computed for a pair of vectors."""


class ShapeError(DistanceError):
    """Vectors are empty, differ in length, or don't fit a fixed layout."""


class ConfigurationError(DistanceError):
    """Metric parameters are inconsistent with each other or the vectors."""


class UnknownMethodError(RetrievalError, KeyError):
    """No retrieval method is registered under the requested name."""

    def __str__(self):
        return RetrievalError.__str__(self)
