"""Zhang-Suen thinning and helpers for measuring crack skeletons."""

from __future__ import annotations

import logging
from typing import List, Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)

FOREGROUND_VALUE = 255
BINARY_THRESHOLD = 127


def binarize(mask: np.ndarray) -> np.ndarray:
    """Map a {0, 255} mask to {0, 1}."""

    return (mask > BINARY_THRESHOLD).astype(np.uint8)


def neighbor_planes(binary: np.ndarray) -> List[np.ndarray]:
    """Neighbors of every interior pixel, clockwise from north.

    Returns eight (H-2, W-2) views in the order N, NE, E, SE, S, SW, W, NW.
    Border pixels only ever appear as neighbors, never as centres.
    """

    return [
        binary[:-2, 1:-1],  # N
        binary[:-2, 2:],  # NE
        binary[1:-1, 2:],  # E
        binary[2:, 2:],  # SE
        binary[2:, 1:-1],  # S
        binary[2:, :-2],  # SW
        binary[1:-1, :-2],  # W
        binary[:-2, :-2],  # NW
    ]


def transition_count(neighbors: List[np.ndarray]) -> np.ndarray:
    """Number of 0 -> 1 transitions walking the neighbors clockwise, wrapping around."""

    count = np.zeros(neighbors[0].shape, dtype=np.uint8)
    for current, following in zip(neighbors, neighbors[1:] + neighbors[:1]):
        count += (current == 0) & (following == 1)
    return count


def _removable(binary: np.ndarray, first_subpass: bool) -> np.ndarray:
    """Interior pixels that one sub-pass would delete, judged on ``binary`` as given."""

    neighbors = neighbor_planes(binary)
    n, _, e, _, s, _, w, _ = neighbors
    total = np.sum(neighbors, axis=0, dtype=np.uint8)
    candidates = binary[1:-1, 1:-1] == 1
    candidates &= (total >= 2) & (total <= 6)
    candidates &= transition_count(neighbors) == 1
    if first_subpass:
        candidates &= (n & e & s) == 0
        candidates &= (e & s & w) == 0
    else:
        candidates &= (n & e & w) == 0
        candidates &= (n & s & w) == 0
    return candidates


def _subpass(binary: np.ndarray, first_subpass: bool) -> int:
    # All tests read the same snapshot; deletions are applied together afterwards.
    marked = _removable(binary, first_subpass)
    removed = int(np.count_nonzero(marked))
    if removed:
        binary[1:-1, 1:-1][marked] = 0
    return removed


def zhang_suen(binary: np.ndarray, max_iterations: Optional[int] = None) -> np.ndarray:
    """Thin a {0, 1} image in place until a full pass removes nothing."""

    if binary.ndim != 2:
        raise ValueError("thinning expects a single-channel image")
    if binary.shape[0] < 3 or binary.shape[1] < 3:
        return binary

    iterations = 0
    while max_iterations is None or iterations < max_iterations:
        removed = _subpass(binary, first_subpass=True)
        removed += _subpass(binary, first_subpass=False)
        iterations += 1
        if removed == 0:
            break
    logger.debug("Zhang-Suen thinning finished after %d passes", iterations)
    return binary


def thin(mask: np.ndarray, max_iterations: Optional[int] = None) -> np.ndarray:
    """Reduce a {0, 255} mask to a one-pixel-wide {0, 255} skeleton."""

    binary = zhang_suen(binarize(mask), max_iterations=max_iterations)
    return (binary * FOREGROUND_VALUE).astype(np.uint8)


def count_components(mask: np.ndarray) -> int:
    """Number of 8-connected foreground components."""

    num_labels, _ = cv2.connectedComponents(binarize(mask), connectivity=8)
    return int(num_labels) - 1


def skeleton_length(skeleton: np.ndarray) -> int:
    """Centerline length in pixels."""

    return int(np.count_nonzero(skeleton > BINARY_THRESHOLD))
