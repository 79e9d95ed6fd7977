"""
Retrieval configuration.

Defaults live on RetrievalConfig. Environment overrides are read only by
from_env(), which the CLI and SearchEngine call at the boundary; library
functions always take their parameters explicitly.
"""

import os
import logging
from dataclasses import dataclass, fields
from typing import Mapping, Optional, Tuple

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "CBIR_"


@dataclass(frozen=True)
class RetrievalConfig:
    histogram_bins: int = 16
    multi_histogram_bins: int = 8
    color_bins: int = 16
    texture_bins: int = 16
    multi_histogram_weights: Tuple[float, ...] = (0.5, 0.5)
    texture_color_weights: Tuple[float, float] = (0.5, 0.5)
    blue_scene_weights: Tuple[float, ...] = (0.4, 0.2, 0.2, 0.2)
    embedding_dim: int = 512

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RetrievalConfig":
        """
        Build a config from CBIR_* environment variables.

        Integer fields map to e.g. CBIR_HIST_BINS; weight fields take
        comma-separated floats, e.g. CBIR_MULTI_HIST_WEIGHTS="0.3,0.7".
        Unset variables keep the defaults.
        """
        environ = os.environ if environ is None else environ
        values = {}
        for field in fields(cls):
            name = ENV_PREFIX + _ENV_NAMES[field.name]
            raw = environ.get(name)
            if raw is None or raw.strip() == "":
                continue
            try:
                if field.name.endswith("_weights"):
                    values[field.name] = parse_weights(raw)
                else:
                    values[field.name] = int(raw)
            except ValueError:
                raise ConfigurationError(f"Invalid value for {name}: {raw!r}") from None
        if values:
            logger.info(f"Config overrides from environment: {sorted(values)}")
        return cls(**values)


_ENV_NAMES = {
    "histogram_bins": "HIST_BINS",
    "multi_histogram_bins": "MULTI_HIST_BINS",
    "color_bins": "COLOR_BINS",
    "texture_bins": "TEXTURE_BINS",
    "multi_histogram_weights": "MULTI_HIST_WEIGHTS",
    "texture_color_weights": "TEXTURE_COLOR_WEIGHTS",
    "blue_scene_weights": "BLUE_SCENE_WEIGHTS",
    "embedding_dim": "EMBEDDING_DIM",
}


def parse_weights(raw: str) -> Tuple[float, ...]:
    """Parse "0.5, 0.5" into (0.5, 0.5)."""
    return tuple(float(token) for token in raw.split(",") if token.strip())
