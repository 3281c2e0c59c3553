"""Exceptions raised by the crack segmentation pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class SegmentationError(RuntimeError):
    """Base class for every error surfaced by the pipeline."""


class MissingModelError(SegmentationError):
    """The segmentation model is not available."""

    def __init__(self, model_path: Optional[Path], reason: str = "model file not found") -> None:
        self.model_path = model_path
        location = str(model_path) if model_path is not None else "<not configured>"
        super().__init__(
            f"ONNX segmentation model unavailable ({reason}): {location}. "
            "Export the trained network to ONNX and pass its location with --model-path."
        )


class InferenceFailureError(SegmentationError):
    """The model, or decoding its output, failed while processing an image."""

    def __init__(self, stage: str, message: str) -> None:
        self.stage = stage
        super().__init__(f"segmentation failed during {stage}: {message}")


class DegenerateInputError(SegmentationError, ValueError):
    """The input image cannot be segmented (empty, wrong shape or dtype)."""
