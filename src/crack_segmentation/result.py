"""Output produced for one segmented image."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

from .morphology import skeleton_length


@dataclass(frozen=True, slots=True)
class SegmentationResult:
    """Display rasters and timing for one pipeline run.

    All rasters are uint8 grayscale at the original resolution and inverted,
    so crack pixels are dark.
    """

    probability: np.ndarray
    mask: np.ndarray
    skeleton: np.ndarray
    original_size: Tuple[int, int]  # (width, height)
    padded_size: Tuple[int, int]  # (width, height)
    inference_time_ms: float

    def rasters(self) -> Dict[str, np.ndarray]:
        return {"probability": self.probability, "mask": self.mask, "skeleton": self.skeleton}

    @property
    def summary(self) -> Dict[str, float]:
        total = float(self.mask.size)
        crack_pixels = float(np.count_nonzero(self.mask == 0))
        return {
            "crack_coverage": crack_pixels / total,
            "crack_pixels": crack_pixels,
            "centerline_length": float(skeleton_length(255 - self.skeleton)),
            "total_pixels": total,
            "inference_ms": self.inference_time_ms,
        }
