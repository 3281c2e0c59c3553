"""Top-level package for crack segmentation utilities."""

from .errors import DegenerateInputError, InferenceFailureError, MissingModelError, SegmentationError
from .pipeline import CrackSegmentationPipeline
from .result import SegmentationResult

__all__ = [
    "CrackSegmentationPipeline",
    "DegenerateInputError",
    "InferenceFailureError",
    "MissingModelError",
    "SegmentationError",
    "SegmentationResult",
]
