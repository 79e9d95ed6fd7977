"""
Extractor and metric parameter records, and type-based dispatch.

Each extractor kind and each metric kind is a small frozen dataclass
carrying its own parameters. extract() and distance() dispatch on the
record's type, so there is no string matching inside the library; names
like "histogram" are resolved once, at the boundary, by get_method().

Named methods pair an extractor with the metric its vectors are meant to
be compared with:

    baseline        CenterPatch           + SumSquaredDifference
    histogram       ChromaticityHistogram + HistogramIntersection
    multihistogram  SplitHistogram        + MultiHistogram
    texture         ColorTexture          + TextureColor
    dnn             DnnEmbedding          + Cosine
    custom          BlueScene             + BlueSceneComposite
"""

import logging
from dataclasses import dataclass
from functools import singledispatch
from typing import Callable, Dict, Optional, Tuple, Union

import numpy as np

from .blue_scene import extract_blue_scene_feature
from .config import RetrievalConfig
from .distances import (
    BLUE_SCENE_WEIGHTS, distance_blue_scene, distance_cosine,
    distance_histogram_intersection, distance_multi_histogram, distance_ssd,
    distance_texture_color,
)
from .errors import (
    ConfigurationError, DistanceError, ExtractionError, UnknownMethodError,
)
from .histograms import extract_chromaticity_histogram, extract_multi_histogram
from .preprocessing import extract_baseline_feature
from .texture import extract_texture_color_feature
from .vectors import weights_sum_close

logger = logging.getLogger(__name__)


# --- Extractor kinds ---

@dataclass(frozen=True)
class CenterPatch:
    pass


@dataclass(frozen=True)
class ChromaticityHistogram:
    bins: int = 16


@dataclass(frozen=True)
class SplitHistogram:
    bins: int = 8


@dataclass(frozen=True)
class ColorTexture:
    color_bins: int = 16
    texture_bins: int = 16


@dataclass(frozen=True)
class DnnEmbedding:
    """Embeddings come from a table or OnnxEmbedder, never from extract()."""
    dim: int = 512


@dataclass(frozen=True)
class BlueScene:
    pass


ExtractorKind = Union[CenterPatch, ChromaticityHistogram, SplitHistogram,
                      ColorTexture, DnnEmbedding, BlueScene]


# --- Metric kinds ---

@dataclass(frozen=True)
class SumSquaredDifference:
    pass


@dataclass(frozen=True)
class HistogramIntersection:
    pass


@dataclass(frozen=True)
class MultiHistogram:
    segments: int = 2
    weights: Tuple[float, ...] = (0.5, 0.5)

    def __post_init__(self):
        object.__setattr__(self, "weights", tuple(self.weights))
        if self.segments < 1:
            raise ConfigurationError(
                f"Segment count must be positive, got {self.segments}"
            )
        if len(self.weights) != self.segments:
            raise ConfigurationError(
                f"Got {len(self.weights)} weights for {self.segments} segments"
            )
        _check_weight_sum(self.weights, "Multi-histogram")


@dataclass(frozen=True)
class TextureColor:
    color_size: int = 256
    texture_size: int = 16
    color_weight: float = 0.5
    texture_weight: float = 0.5

    def __post_init__(self):
        _check_weight_sum((self.color_weight, self.texture_weight), "Texture/color")


@dataclass(frozen=True)
class Cosine:
    pass


@dataclass(frozen=True)
class BlueSceneComposite:
    """Compares blue-scene features and needs both images' embeddings."""
    weights: Tuple[float, ...] = BLUE_SCENE_WEIGHTS

    def __post_init__(self):
        object.__setattr__(self, "weights", tuple(self.weights))
        if len(self.weights) != 4:
            raise ConfigurationError(
                f"Blue-scene metric takes 4 weights, got {len(self.weights)}"
            )
        _check_weight_sum(self.weights, "Blue-scene")


MetricKind = Union[SumSquaredDifference, HistogramIntersection,
                   MultiHistogram, TextureColor, Cosine, BlueSceneComposite]


def _check_weight_sum(weights, what):
    if not weights_sum_close(weights):
        logger.warning(f"{what} weights {weights} don't sum to 1.0")


# --- Dispatch ---

def extract(image_np: np.ndarray, kind: ExtractorKind) -> np.ndarray:
    """
    Extract the feature vector described by ``kind`` from a BGR image.

    Raises:
        ExtractionError: If the image is unusable, or ``kind`` is
            DnnEmbedding (embeddings are supplied, not computed here).
    """
    return _extract(kind, image_np)


@singledispatch
def _extract(kind, image_np):
    raise ExtractionError(f"Not an extractor kind: {kind!r}")


@_extract.register
def _(kind: CenterPatch, image_np):
    return extract_baseline_feature(image_np)


@_extract.register
def _(kind: ChromaticityHistogram, image_np):
    return extract_chromaticity_histogram(image_np, kind.bins)


@_extract.register
def _(kind: SplitHistogram, image_np):
    return extract_multi_histogram(image_np, kind.bins)


@_extract.register
def _(kind: ColorTexture, image_np):
    return extract_texture_color_feature(image_np, kind.color_bins, kind.texture_bins)


@_extract.register
def _(kind: DnnEmbedding, image_np):
    raise ExtractionError(
        "DNN embeddings are not computed by extract(); load them from a "
        "feature table or compute them with OnnxEmbedder"
    )


@_extract.register
def _(kind: BlueScene, image_np):
    return extract_blue_scene_feature(image_np)


def distance(feature1, feature2, metric: MetricKind,
             dnn1=None, dnn2=None) -> float:
    """
    Compute the distance described by ``metric``.

    ``dnn1`` and ``dnn2`` are only used (and required) by
    BlueSceneComposite.

    Raises:
        DistanceError: On shape or configuration errors.
    """
    return _distance(metric, feature1, feature2, dnn1, dnn2)


@singledispatch
def _distance(metric, feature1, feature2, dnn1, dnn2):
    raise DistanceError(f"Not a metric kind: {metric!r}")


@_distance.register
def _(metric: SumSquaredDifference, feature1, feature2, dnn1, dnn2):
    return distance_ssd(feature1, feature2)


@_distance.register
def _(metric: HistogramIntersection, feature1, feature2, dnn1, dnn2):
    return distance_histogram_intersection(feature1, feature2)


@_distance.register
def _(metric: MultiHistogram, feature1, feature2, dnn1, dnn2):
    return distance_multi_histogram(feature1, feature2,
                                    metric.segments, metric.weights,
                                    check_weights=False)


@_distance.register
def _(metric: TextureColor, feature1, feature2, dnn1, dnn2):
    return distance_texture_color(feature1, feature2,
                                  metric.color_size, metric.texture_size,
                                  metric.color_weight, metric.texture_weight,
                                  check_weights=False)


@_distance.register
def _(metric: Cosine, feature1, feature2, dnn1, dnn2):
    return distance_cosine(feature1, feature2)


@_distance.register
def _(metric: BlueSceneComposite, feature1, feature2, dnn1, dnn2):
    if dnn1 is None or dnn2 is None:
        raise DistanceError("Blue-scene distance needs both DNN embeddings")
    return distance_blue_scene(feature1, feature2, dnn1, dnn2, metric.weights,
                               check_weights=False)


# --- Named methods ---

@dataclass(frozen=True)
class Method:
    name: str
    extractor: ExtractorKind
    metric: MetricKind

    @property
    def precomputed(self) -> bool:
        """True when query vectors come from a table instead of extract()."""
        return isinstance(self.extractor, DnnEmbedding)

    @property
    def needs_embeddings(self) -> bool:
        return isinstance(self.metric, BlueSceneComposite)


METHOD_NAMES = ("baseline", "histogram", "multihistogram", "texture", "dnn", "custom")


def get_method(name: str, config: Optional[RetrievalConfig] = None) -> Method:
    """
    Resolve a method name to its extractor and metric records.

    Bin counts and weights come from ``config`` (defaults if omitted).

    Raises:
        UnknownMethodError: If ``name`` isn't one of METHOD_NAMES.
    """
    try:
        build = _METHOD_BUILDERS[name]
    except KeyError:
        raise UnknownMethodError(
            f"Unknown method '{name}', expected one of: {', '.join(METHOD_NAMES)}"
        ) from None
    return build(config or RetrievalConfig())


def _texture_method(config: RetrievalConfig) -> Method:
    color_weight, texture_weight = config.texture_color_weights
    return Method(
        "texture",
        ColorTexture(config.color_bins, config.texture_bins),
        TextureColor(config.color_bins ** 2, config.texture_bins,
                     color_weight, texture_weight),
    )


_METHOD_BUILDERS: Dict[str, Callable[[RetrievalConfig], Method]] = {
    "baseline": lambda config: Method(
        "baseline", CenterPatch(), SumSquaredDifference()),
    "histogram": lambda config: Method(
        "histogram", ChromaticityHistogram(config.histogram_bins),
        HistogramIntersection()),
    "multihistogram": lambda config: Method(
        "multihistogram", SplitHistogram(config.multi_histogram_bins),
        MultiHistogram(len(config.multi_histogram_weights),
                       config.multi_histogram_weights)),
    "texture": _texture_method,
    "dnn": lambda config: Method(
        "dnn", DnnEmbedding(config.embedding_dim), Cosine()),
    "custom": lambda config: Method(
        "custom", BlueScene(), BlueSceneComposite(config.blue_scene_weights)),
}
