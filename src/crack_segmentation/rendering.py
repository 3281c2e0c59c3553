"""Convert numeric maps into displayable 8-bit grayscale rasters."""

from __future__ import annotations

from typing import Tuple

import numpy as np

from .decoder import DecodedScores


def float_to_raster(values: np.ndarray) -> np.ndarray:
    """Scale a [0, 1] float grid to uint8, clamping out-of-range values."""

    return (np.clip(values, 0.0, 1.0) * 255.0).astype(np.uint8)


def byte_to_raster(values: np.ndarray) -> np.ndarray:
    return np.asarray(values, dtype=np.uint8)


def invert_probability(probability: np.ndarray) -> np.ndarray:
    return 1.0 - probability


def invert_mask(mask: np.ndarray) -> np.ndarray:
    return 255 - byte_to_raster(mask)


def render_result(decoded: DecodedScores, skeleton: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Probability, mask and skeleton rasters, inverted so cracks are dark on white."""

    probability = float_to_raster(invert_probability(decoded.probability))
    mask = byte_to_raster(invert_mask(decoded.mask))
    centerline = byte_to_raster(invert_mask(skeleton))
    return probability, mask, centerline
