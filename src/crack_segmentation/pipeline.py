"""Pipeline orchestration for crack segmentation workflows."""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, Optional

import numpy as np

from .config import PipelineConfig
from .data import ImageDataset, ImageSample
from .decoder import decode
from .errors import InferenceFailureError, MissingModelError
from .inference import OnnxSegmentationModel, SegmentationModel, as_logit_map
from .morphology import thin
from .preprocessing import preprocess, validate_image
from .rendering import render_result
from .result import SegmentationResult
from .visualization import save_rasters, save_visualization

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PipelineArtifact:
    """Artifacts produced for each processed image."""

    sample: ImageSample
    result: SegmentationResult
    raster_paths: Dict[str, Path]
    visualization_path: Optional[Path]


class CrackSegmentationPipeline:
    """Coordinate preprocessing, inference, decoding, thinning and reporting."""

    def __init__(self, config: Optional[PipelineConfig] = None, model: Optional[SegmentationModel] = None) -> None:
        self._config = config or PipelineConfig()
        self._model = model or OnnxSegmentationModel(self._config.model)
        self._executor: Optional[ThreadPoolExecutor] = None

    def segment(self, image: np.ndarray, rng: Optional[np.random.Generator] = None) -> SegmentationResult:
        """Run the whole pipeline on one RGB image.

        Blocks for as long as the model takes; use `submit` from interactive code.
        """

        validate_image(image)
        started = time.perf_counter()

        prepared = preprocess(image, self._config.preprocessing, rng)
        try:
            output = self._model.predict(prepared.batched())
        except (MissingModelError, InferenceFailureError):
            raise
        except Exception as exc:
            raise InferenceFailureError("inference", str(exc)) from exc
        logits = as_logit_map(output, prepared.padded_size)

        decoded = decode(logits, prepared.padded_size, prepared.original_size)
        skeleton = thin(decoded.mask, self._config.thinning.max_iterations)
        probability, mask, centerline = render_result(decoded, skeleton)

        elapsed_ms = (time.perf_counter() - started) * 1000.0
        height, width = prepared.original_size
        padded_height, padded_width = prepared.padded_size
        logger.debug("Segmented %dx%d image in %.1f ms", width, height, elapsed_ms)
        return SegmentationResult(
            probability=probability,
            mask=mask,
            skeleton=centerline,
            original_size=(width, height),
            padded_size=(padded_width, padded_height),
            inference_time_ms=elapsed_ms,
        )

    def submit(self, image: np.ndarray, rng: Optional[np.random.Generator] = None) -> "Future[SegmentationResult]":
        """Schedule `segment` on a background worker and return its future."""

        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="crack-segmentation")
        return self._executor.submit(self.segment, image, rng)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "CrackSegmentationPipeline":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __iter__(self) -> Iterator[PipelineArtifact]:
        dataset = ImageDataset(self._config)
        for sample in dataset.take(self._config.sample_limit):
            result = self.segment(sample.image)
            raster_paths = self._maybe_save_rasters(sample, result)
            viz_path = self._maybe_save_visualization(sample, result)
            yield PipelineArtifact(
                sample=sample, result=result, raster_paths=raster_paths, visualization_path=viz_path
            )

    def run(self) -> None:
        """Execute the pipeline and print a human-readable summary."""

        for artifact in self:
            message = format_summary(artifact.sample.path, artifact.result.summary)
            print(message)

    def _output_stem(self, sample: ImageSample) -> Path:
        assert self._config.output_dir is not None and self._config.dataset is not None
        relative = sample.path.relative_to(self._config.dataset.image_root)
        return self._config.output_dir / relative.with_suffix("")

    def _maybe_save_rasters(self, sample: ImageSample, result: SegmentationResult) -> Dict[str, Path]:
        if self._config.output_dir is None:
            return {}
        stem = self._output_stem(sample)
        return save_rasters(result, stem.parent, stem.name)

    def _maybe_save_visualization(self, sample: ImageSample, result: SegmentationResult) -> Optional[Path]:
        if not self._config.visualize or self._config.output_dir is None:
            return None
        stem = self._output_stem(sample)
        destination = stem.with_name(f"{stem.name}_summary.png")
        save_visualization(sample.image, result, destination, title=sample.path.name)
        return destination


def format_summary(path: Path, summary: dict[str, float]) -> str:
    parts = ", ".join(f"{key}={value:.4f}" for key, value in summary.items())
    return f"{path.name}: {parts}"
