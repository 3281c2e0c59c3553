"""Persistence and visualization helpers for segmentation results."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import cv2
import numpy as np

from .result import SegmentationResult


def save_rasters(result: SegmentationResult, directory: Path, stem: str) -> Dict[str, Path]:
    """Write the three result rasters as lossless PNG files."""

    directory.mkdir(parents=True, exist_ok=True)
    written: Dict[str, Path] = {}
    for name, raster in result.rasters().items():
        destination = directory / f"{stem}_{name}.png"
        if not cv2.imwrite(str(destination), raster):
            raise OSError(f"failed to write {destination}")
        written[name] = destination
    return written


def save_visualization(
    original: np.ndarray,
    result: SegmentationResult,
    destination: Path,
    title: Optional[str] = None,
) -> None:
    """Persist a four-panel figure: input, probability, mask and centerlines."""

    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt  # Imported lazily to avoid hard dependency during tests.

    destination.parent.mkdir(parents=True, exist_ok=True)
    fig, axes = plt.subplots(1, 4, figsize=(16, 4))

    axes[0].imshow(original)
    axes[0].set_title("Original")

    panels = [("Crack probability", result.probability), ("Mask", result.mask), ("Centerlines", result.skeleton)]
    for axis, (label, raster) in zip(axes[1:], panels):
        axis.imshow(raster, cmap="gray", vmin=0, vmax=255)
        axis.set_title(label)

    for axis in axes:
        axis.axis("off")

    if title:
        fig.suptitle(f"{title} ({result.inference_time_ms:.0f} ms)")

    fig.tight_layout()
    fig.savefig(destination, dpi=200)
    plt.close(fig)
