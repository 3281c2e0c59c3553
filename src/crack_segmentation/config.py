"""Configuration objects used across the crack segmentation package."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Sequence


@dataclass(slots=True)
class PreprocessingConfig:
    """Configuration for turning an RGB image into a model input tensor."""

    pad_multiple: int = 64
    std_floor: float = 1e-6
    seed: Optional[int] = None

    def validate(self) -> None:
        if self.pad_multiple <= 0:
            raise ValueError("pad_multiple must be a positive integer")
        if self.std_floor < 0:
            raise ValueError("std_floor must be non-negative")


@dataclass(slots=True)
class ModelConfig:
    """Location and runtime options of the ONNX segmentation model."""

    model_path: Optional[Path] = None
    intra_op_threads: Optional[int] = None


@dataclass(slots=True)
class ThinningConfig:
    """Controls the Zhang-Suen skeletonization."""

    max_iterations: Optional[int] = None


@dataclass(slots=True)
class DatasetConfig:
    """Configuration for loading datasets from disk."""

    image_root: Path
    extensions: Sequence[str] = field(default_factory=lambda: (".jpg", ".jpeg", ".png", ".bmp"))

    def validate(self) -> None:
        """Ensure the dataset configuration points to a valid directory."""

        if not self.image_root.exists():
            msg = f"image_root {self.image_root} does not exist"
            raise FileNotFoundError(msg)
        if not self.image_root.is_dir():
            msg = f"image_root {self.image_root} is not a directory"
            raise NotADirectoryError(msg)


@dataclass(slots=True)
class PipelineConfig:
    """Top-level configuration passed to `CrackSegmentationPipeline`."""

    dataset: Optional[DatasetConfig] = None
    preprocessing: PreprocessingConfig = field(default_factory=PreprocessingConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    thinning: ThinningConfig = field(default_factory=ThinningConfig)
    output_dir: Optional[Path] = None
    sample_limit: Optional[int] = None
    visualize: bool = False

    def iter_image_paths(self) -> Iterable[Path]:
        """Yield all image paths that match the configured extensions."""

        if self.dataset is None:
            raise ValueError("no dataset configured")
        self.dataset.validate()
        count = 0
        for path in sorted(self.dataset.image_root.rglob("*")):
            if self.sample_limit is not None and count >= self.sample_limit:
                break
            if path.suffix.lower() not in self.dataset.extensions:
                continue
            yield path
            count += 1
