"""Decode raw two-class logits into probabilities and a binary crack mask."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .errors import InferenceFailureError

BACKGROUND = 0
CRACK = 1
FOREGROUND_VALUE = 255


@dataclass(slots=True)
class DecodedScores:
    """Crack probability and mask cropped back to the original image size."""

    probability: np.ndarray  # float32, (H0, W0), class-1 probability
    mask: np.ndarray  # uint8, (H0, W0), {0, 255}

    @property
    def crack_pixels(self) -> int:
        return int(np.count_nonzero(self.mask))


def softmax(logits: np.ndarray) -> np.ndarray:
    """Two-class softmax over axis 0 using max subtraction.

    ``logits`` has shape [2, H, W]; the result has the same shape and sums to
    one along the class axis. The crack plane is computed as ``1 - p0`` so
    the pair is complementary by construction.
    """

    if logits.shape[0] != 2:
        raise ValueError(f"expected two class planes, got {logits.shape[0]}")
    l0 = logits[BACKGROUND].astype(np.float64)
    l1 = logits[CRACK].astype(np.float64)
    peak = np.maximum(l0, l1)
    e0 = np.exp(l0 - peak)
    e1 = np.exp(l1 - peak)
    p0 = e0 / (e0 + e1)
    return np.stack([p0, 1.0 - p0]).astype(np.float32)


def argmax_mask(probabilities: np.ndarray) -> np.ndarray:
    """255 where the crack class is strictly more likely, 0 otherwise (ties are background)."""

    foreground = probabilities[CRACK] > probabilities[BACKGROUND]
    return np.where(foreground, FOREGROUND_VALUE, 0).astype(np.uint8)


def crop(plane: np.ndarray, original_size: Tuple[int, int]) -> np.ndarray:
    """Keep the top-left original region, dropping the right/bottom padding."""

    height, width = original_size
    if height > plane.shape[0] or width > plane.shape[1]:
        raise ValueError(f"cannot crop {plane.shape} to {original_size}")
    return np.ascontiguousarray(plane[:height, :width])


def decode(logits: np.ndarray, padded_size: Tuple[int, int], original_size: Tuple[int, int]) -> DecodedScores:
    """Softmax, argmax and crop a [2, H, W] logit map."""

    if logits.shape != (2, *padded_size):
        raise InferenceFailureError(
            "decoding", f"logits of shape {logits.shape} do not match padded size {padded_size}"
        )
    probabilities = softmax(logits)
    mask = argmax_mask(probabilities)
    return DecodedScores(
        probability=crop(probabilities[CRACK], original_size),
        mask=crop(mask, original_size),
    )
