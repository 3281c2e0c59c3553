"""Tests for raster rendering."""

import numpy as np

from crack_segmentation.decoder import DecodedScores
from crack_segmentation.rendering import byte_to_raster, float_to_raster, invert_mask, render_result


def test_float_to_raster_scales_and_clamps() -> None:
    values = np.array([[-0.5, 0.0, 0.5, 1.0, 2.0]], dtype=np.float32)

    raster = float_to_raster(values)

    assert raster.dtype == np.uint8
    assert raster.tolist() == [[0, 0, 127, 255, 255]]


def test_byte_to_raster_is_identity() -> None:
    mask = np.array([[0, 255]], dtype=np.uint8)

    np.testing.assert_array_equal(byte_to_raster(mask), mask)


def test_render_result_inverts_all_three_rasters() -> None:
    decoded = DecodedScores(
        probability=np.array([[0.0, 1.0]], dtype=np.float32),
        mask=np.array([[0, 255]], dtype=np.uint8),
    )
    skeleton = np.array([[0, 255]], dtype=np.uint8)

    probability, mask, centerline = render_result(decoded, skeleton)

    assert probability.tolist() == [[255, 0]]
    assert mask.tolist() == [[255, 0]]
    assert centerline.tolist() == [[255, 0]]
    assert invert_mask(mask).tolist() == [[0, 255]]
