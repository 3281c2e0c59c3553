"""Data loading helpers for the crack segmentation pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional

import cv2
import numpy as np

from .config import PipelineConfig
from .errors import DegenerateInputError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ImageSample:
    """In-memory RGB image and the file it came from."""

    path: Path
    image: np.ndarray


def load_image(path: Path) -> np.ndarray:
    """Read an image from disk as an (H, W, 3) uint8 RGB array."""

    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None:
        raise DegenerateInputError(f"could not decode image {path}")
    return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)


class ImageDataset:
    """Iterable dataset that streams image samples from disk."""

    def __init__(self, config: PipelineConfig) -> None:
        self._config = config

    def __iter__(self) -> Iterator[ImageSample]:
        for image_path in self._config.iter_image_paths():
            try:
                image = load_image(image_path)
            except DegenerateInputError:
                logger.warning("Skipping unreadable image %s", image_path)
                continue
            yield ImageSample(path=image_path, image=image)

    def take(self, limit: Optional[int]) -> Iterable[ImageSample]:
        if limit is None:
            yield from iter(self)
            return
        for idx, sample in enumerate(self):
            if idx >= limit:
                break
            yield sample
