"""Tests for tensor preparation."""

import numpy as np
import pytest

from crack_segmentation.config import PreprocessingConfig
from crack_segmentation.decoder import crop
from crack_segmentation.errors import DegenerateInputError
from crack_segmentation.preprocessing import (
    ceil_to_multiple,
    channel_statistics,
    pad_to_tensor,
    preprocess,
    replace_zero_pixels,
    validate_image,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [(1, 64), (63, 64), (64, 64), (65, 128), (128, 128), (481, 512)],
)
def test_ceil_to_multiple(value: int, expected: int) -> None:
    assert ceil_to_multiple(value, 64) == expected


@pytest.mark.parametrize(("height", "width"), [(1, 1), (37, 100), (64, 65), (130, 64)])
def test_padded_dims_are_smallest_multiples_and_crop_recovers_original(height: int, width: int) -> None:
    rng = np.random.default_rng(0)
    image = rng.integers(1, 256, size=(height, width, 3), dtype=np.uint8)

    prepared = preprocess(image, rng=rng)

    padded_height, padded_width = prepared.padded_size
    assert padded_height % 64 == 0 and padded_width % 64 == 0
    assert padded_height >= height and padded_height - 64 < height
    assert padded_width >= width and padded_width - 64 < width
    assert prepared.data.shape == (3, padded_height, padded_width)
    assert prepared.original_size == (height, width)
    assert crop(prepared.data[0], prepared.original_size).shape == (height, width)


def test_pad_to_tensor_is_channel_planar_and_top_left_aligned() -> None:
    image = np.zeros((2, 3, 3), dtype=np.uint8)
    image[..., 0] = 10
    image[..., 1] = 20
    image[..., 2] = 30
    image[1, 2] = (1, 2, 3)

    tensor = pad_to_tensor(image, 4, 5)

    assert tensor.shape == (3, 4, 5)
    assert tensor.dtype == np.float32
    assert np.all(tensor[0, :2, :3][:, :2] == 10)
    assert tensor[:, 1, 2].tolist() == [1.0, 2.0, 3.0]
    assert np.all(tensor[:, 2:, :] == 0)
    assert np.all(tensor[:, :, 3:] == 0)


def test_replace_zero_pixels_only_touches_all_zero_locations() -> None:
    tensor = np.zeros((3, 2, 2), dtype=np.float32)
    tensor[:, 0, 0] = (5, 0, 0)
    tensor[:, 0, 1] = (0, 0, 7)

    replaced = replace_zero_pixels(tensor, np.random.default_rng(1))

    assert replaced == 2
    assert tensor[:, 0, 0].tolist() == [5.0, 0.0, 0.0]
    assert tensor[:, 0, 1].tolist() == [0.0, 0.0, 7.0]
    noise = tensor[:, 1, :]
    assert np.all(noise >= 0.0) and np.all(noise < 1.0)
    assert not np.any(np.all(tensor == 0, axis=0))


def test_replace_zero_pixels_is_reproducible_with_seeded_generator() -> None:
    first = np.zeros((3, 8, 8), dtype=np.float32)
    second = np.zeros((3, 8, 8), dtype=np.float32)

    replace_zero_pixels(first, np.random.default_rng(42))
    replace_zero_pixels(second, np.random.default_rng(42))

    np.testing.assert_array_equal(first, second)


def test_channel_statistics_clamps_flat_channels() -> None:
    tensor = np.stack(
        [
            np.full((4, 4), 3.0, dtype=np.float32),
            np.arange(16, dtype=np.float32).reshape(4, 4),
            np.full((4, 4), 200.0, dtype=np.float32),
        ]
    )

    means, stds = channel_statistics(tensor)

    np.testing.assert_allclose(means, [3.0, 7.5, 200.0])
    assert stds[0] == 1.0
    assert stds[1] == pytest.approx(np.arange(16).std(), rel=1e-6)
    assert stds[2] == 1.0


def test_solid_black_image_gives_finite_tensor_and_sane_statistics() -> None:
    image = np.zeros((128, 128, 3), dtype=np.uint8)

    prepared = preprocess(image, rng=np.random.default_rng(7))

    assert prepared.padded_size == (128, 128)
    assert np.all(np.isfinite(prepared.data))
    assert np.all((prepared.means > 0.0) & (prepared.means < 1.0))
    assert np.all(prepared.stds > 0.0)


def test_normalized_channels_have_zero_mean_and_unit_std() -> None:
    rng = np.random.default_rng(3)
    image = rng.integers(0, 256, size=(50, 70, 3), dtype=np.uint8)

    prepared = preprocess(image, rng=rng)

    flat = prepared.data.reshape(3, -1)
    np.testing.assert_allclose(flat.mean(axis=1), 0.0, atol=1e-4)
    np.testing.assert_allclose(flat.std(axis=1), 1.0, atol=1e-4)


def test_uniform_image_without_zero_pixels_stays_finite() -> None:
    image = np.full((64, 64, 3), 128, dtype=np.uint8)

    prepared = preprocess(image, rng=np.random.default_rng(0))

    np.testing.assert_array_equal(prepared.stds, [1.0, 1.0, 1.0])
    assert np.all(prepared.data == 0.0)


def test_config_seed_makes_runs_repeatable() -> None:
    image = np.zeros((10, 10, 3), dtype=np.uint8)
    config = PreprocessingConfig(seed=123)

    first = preprocess(image, config)
    second = preprocess(image, config)

    np.testing.assert_array_equal(first.data, second.data)


def test_batched_adds_leading_axis() -> None:
    prepared = preprocess(np.ones((5, 5, 3), dtype=np.uint8), rng=np.random.default_rng(0))

    assert prepared.batched().shape == (1, 3, 64, 64)


@pytest.mark.parametrize(
    "image",
    [
        np.zeros((0, 10, 3), dtype=np.uint8),
        np.zeros((10, 0, 3), dtype=np.uint8),
        np.zeros((10, 10), dtype=np.uint8),
        np.zeros((10, 10, 4), dtype=np.uint8),
        np.zeros((10, 10, 3), dtype=np.float32),
    ],
)
def test_validate_image_rejects_degenerate_inputs(image: np.ndarray) -> None:
    with pytest.raises(DegenerateInputError):
        validate_image(image)


def test_validate_image_rejects_non_arrays() -> None:
    with pytest.raises(DegenerateInputError):
        validate_image([[1, 2, 3]])  # type: ignore[arg-type]
