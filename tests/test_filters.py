"""Tests for grayscale, median denoise, contrast and sharpen stages."""

import numpy as np
import pytest

from scoreprep.errors import DimensionError
from scoreprep.preprocessing.filters import (
    enhance_contrast,
    median_filter,
    sharpen,
    to_grayscale,
    unsharp_mask,
)


@pytest.fixture
def noisy_gray():
    rng = np.random.default_rng(7)
    return rng.integers(0, 256, size=(17, 13), dtype=np.uint8)


class TestGrayscale:
    def test_single_channel_is_identity(self, noisy_gray):
        assert to_grayscale(noisy_gray) is noisy_gray

    def test_luma_weights(self):
        # BGR order: blue, green, red, white, black
        bgr = np.array(
            [[[255, 0, 0], [0, 255, 0], [0, 0, 255], [255, 255, 255], [0, 0, 0]]],
            dtype=np.uint8,
        )
        gray = to_grayscale(bgr)
        assert gray.shape == (1, 5)
        np.testing.assert_array_equal(gray[0], [29, 150, 76, 255, 0])

    def test_bgra_input(self):
        bgra = np.zeros((4, 6, 4), dtype=np.uint8)
        bgra[..., :3] = 200
        bgra[..., 3] = 17
        gray = to_grayscale(bgra)
        assert gray.shape == (4, 6)
        assert (gray == 200).all()

    def test_trailing_single_channel_axis(self, noisy_gray):
        gray = to_grayscale(noisy_gray[:, :, np.newaxis])
        np.testing.assert_array_equal(gray, noisy_gray)


class TestMedianFilter:
    def test_border_preserved(self, noisy_gray):
        result = median_filter(noisy_gray)
        np.testing.assert_array_equal(result[0, :], noisy_gray[0, :])
        np.testing.assert_array_equal(result[-1, :], noisy_gray[-1, :])
        np.testing.assert_array_equal(result[:, 0], noisy_gray[:, 0])
        np.testing.assert_array_equal(result[:, -1], noisy_gray[:, -1])

    def test_interior_is_3x3_median(self, noisy_gray):
        result = median_filter(noisy_gray)
        h, w = noisy_gray.shape
        for y in range(1, h - 1):
            for x in range(1, w - 1):
                window = np.sort(noisy_gray[y - 1 : y + 2, x - 1 : x + 2].ravel())
                assert result[y, x] == window[4]

    def test_removes_salt_noise(self):
        gray = np.full((5, 5), 40, dtype=np.uint8)
        gray[2, 2] = 255
        gray[0, 0] = 255  # border noise stays
        result = median_filter(gray)
        assert result[2, 2] == 40
        assert result[0, 0] == 255

    def test_does_not_modify_input(self, noisy_gray):
        before = noisy_gray.copy()
        median_filter(noisy_gray)
        np.testing.assert_array_equal(noisy_gray, before)

    @pytest.mark.parametrize("shape", [(1, 1), (2, 9), (9, 2)])
    def test_tiny_images_unchanged(self, shape):
        gray = np.arange(np.prod(shape), dtype=np.uint8).reshape(shape)
        np.testing.assert_array_equal(median_filter(gray), gray)

    def test_rejects_color(self):
        with pytest.raises(DimensionError):
            median_filter(np.zeros((5, 5, 3), dtype=np.uint8))


class TestContrast:
    def test_linear_transform_with_clamp(self):
        gray = np.array([[0, 100, 200, 255]], dtype=np.uint8)
        np.testing.assert_array_equal(
            enhance_contrast(gray, 1.4, 10), [[10, 150, 255, 255]]
        )

    def test_negative_values_clamp_to_zero(self):
        gray = np.array([[0, 10, 40, 100, 255]], dtype=np.uint8)
        np.testing.assert_array_equal(sharpen(gray), [[0, 0, 20, 110, 255]])

    def test_channel_uniform(self):
        bgr = np.full((3, 3, 3), 120, dtype=np.uint8)
        result = enhance_contrast(bgr, 1.2, -5)
        assert (result == result[..., :1]).all()

    def test_alpha_untouched(self):
        bgra = np.full((2, 2, 4), 100, dtype=np.uint8)
        result = enhance_contrast(bgra, 2.0, 0)
        assert (result[..., :3] == 200).all()
        assert (result[..., 3] == 100).all()

    def test_binary_stays_binary(self):
        binary = np.array([[0, 255], [255, 0]], dtype=np.uint8)
        result = sharpen(enhance_contrast(binary))
        np.testing.assert_array_equal(result, binary)


class TestUnsharpMask:
    def test_uniform_image_unchanged(self):
        gray = np.full((10, 10), 90, dtype=np.uint8)
        np.testing.assert_array_equal(unsharp_mask(gray), gray)

    def test_increases_edge_contrast(self):
        gray = np.full((10, 10), 100, dtype=np.uint8)
        gray[:, 5:] = 150
        result = unsharp_mask(gray)
        assert result[:, 4].max() < 100
        assert result[:, 5].min() > 150
