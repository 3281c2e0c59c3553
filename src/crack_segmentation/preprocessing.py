"""Turn RGB images into normalized tensors for the segmentation network."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .config import PreprocessingConfig
from .errors import DegenerateInputError

logger = logging.getLogger(__name__)

NUM_CHANNELS = 3


@dataclass(slots=True)
class PreparedTensor:
    """Channel-planar model input together with the geometry needed to undo padding."""

    data: np.ndarray  # float32, [3, H, W]
    padded_size: Tuple[int, int]  # (H, W)
    original_size: Tuple[int, int]  # (H0, W0)
    means: np.ndarray
    stds: np.ndarray

    def batched(self) -> np.ndarray:
        """Return the tensor with a leading batch axis, as ONNX models expect."""

        return self.data[np.newaxis, ...]


def ceil_to_multiple(value: int, multiple: int) -> int:
    """Round ``value`` up to the nearest multiple of ``multiple``."""

    return ((value + multiple - 1) // multiple) * multiple


def validate_image(image: np.ndarray) -> None:
    """Reject images that cannot enter the preprocessor."""

    if not isinstance(image, np.ndarray):
        raise DegenerateInputError(f"expected a numpy array, got {type(image).__name__}")
    if image.ndim != 3 or image.shape[2] != NUM_CHANNELS:
        raise DegenerateInputError(f"expected an (H, W, 3) RGB image, got shape {image.shape}")
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise DegenerateInputError(f"image has zero size: {image.shape[1]}x{image.shape[0]}")
    if image.dtype != np.uint8:
        raise DegenerateInputError(f"expected 8-bit channels, got dtype {image.dtype}")


def pad_to_tensor(image: np.ndarray, height: int, width: int) -> np.ndarray:
    """Copy an (H0, W0, 3) image into the top-left corner of a zeroed [3, H, W] buffer."""

    orig_height, orig_width = image.shape[:2]
    if height < orig_height or width < orig_width:
        raise ValueError("padded size must not be smaller than the image")
    tensor = np.zeros((NUM_CHANNELS, height, width), dtype=np.float32)
    # (H0, W0, C) -> (C, H0, W0); channel order stays R, G, B.
    tensor[:, :orig_height, :orig_width] = np.transpose(image, (2, 0, 1))
    return tensor


def replace_zero_pixels(tensor: np.ndarray, rng: np.random.Generator) -> int:
    """Fill every pixel whose channels are all exactly zero with uniform noise in [0, 1).

    Operates in place and returns the number of replaced pixels. Padding is
    included, so an unpadded black border gets the same treatment as the
    padded one.
    """

    zero_pixels = np.all(tensor == 0, axis=0)
    count = int(np.count_nonzero(zero_pixels))
    if count:
        noise = rng.random((tensor.shape[0], count), dtype=np.float32)
        tensor[:, zero_pixels] = noise
    return count


def channel_statistics(tensor: np.ndarray, std_floor: float = 1e-6) -> Tuple[np.ndarray, np.ndarray]:
    """Per-channel mean and population standard deviation.

    Standard deviations below ``std_floor`` are replaced by 1.0 so flat
    channels are centred but never amplified.
    """

    flat = tensor.reshape(tensor.shape[0], -1).astype(np.float64)
    means = flat.mean(axis=1)
    stds = flat.std(axis=1)
    stds = np.where(stds < std_floor, 1.0, stds)
    return means.astype(np.float32), stds.astype(np.float32)


def normalize_channels(tensor: np.ndarray, means: np.ndarray, stds: np.ndarray) -> np.ndarray:
    """Apply ``(value - mean) / std`` per channel, in place."""

    tensor -= means[:, None, None]
    tensor /= stds[:, None, None]
    return tensor


def preprocess(
    image: np.ndarray,
    config: Optional[PreprocessingConfig] = None,
    rng: Optional[np.random.Generator] = None,
) -> PreparedTensor:
    """Full preprocessing routine prior to inference."""

    config = config or PreprocessingConfig()
    config.validate()
    validate_image(image)
    if rng is None:
        rng = np.random.default_rng(config.seed)

    orig_height, orig_width = image.shape[:2]
    height = ceil_to_multiple(orig_height, config.pad_multiple)
    width = ceil_to_multiple(orig_width, config.pad_multiple)

    tensor = pad_to_tensor(image, height, width)
    replaced = replace_zero_pixels(tensor, rng)
    means, stds = channel_statistics(tensor, config.std_floor)
    normalize_channels(tensor, means, stds)
    logger.debug(
        "Prepared %dx%d tensor from %dx%d image (%d zero pixels replaced)",
        width,
        height,
        orig_width,
        orig_height,
        replaced,
    )
    return PreparedTensor(
        data=tensor,
        padded_size=(height, width),
        original_size=(orig_height, orig_width),
        means=means,
        stds=stds,
    )
