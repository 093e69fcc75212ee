"""Tests for the canvas filter factories."""

from __future__ import annotations

import numpy as np
import pytest

from effect_preview.services import filters


@pytest.fixture
def layer(make_image) -> np.ndarray:
    return np.asarray(make_image(12, 9, seed=7))


class TestColorFilters:
    """Per-pixel color filters keep the layer geometry."""

    @pytest.mark.parametrize(
        "layer_filter",
        [
            filters.brightness(1.0),
            filters.contrast(100),
            filters.saturate(100),
            filters.hue_rotate(0),
            filters.grayscale(0),
            filters.invert(0),
            filters.opacity(100),
        ],
        ids=["brightness", "contrast", "saturate", "hue-rotate", "grayscale", "invert", "opacity"],
    )
    def test_neutral_amount_is_identity(self, layer: np.ndarray, layer_filter) -> None:
        out, offset = layer_filter(layer)
        assert offset == (0, 0)
        assert np.array_equal(out, layer)

    def test_brightness_zero_is_black(self, layer: np.ndarray) -> None:
        out, _ = filters.brightness(0)(layer)
        assert not out[..., :3].any()
        assert np.array_equal(out[..., 3], layer[..., 3])

    def test_contrast_zero_is_mid_gray(self, layer: np.ndarray) -> None:
        out, _ = filters.contrast(0)(layer)
        assert (out[..., :3] == 128).all()

    def test_invert_full(self, layer: np.ndarray) -> None:
        out, _ = filters.invert(100)(layer)
        assert np.array_equal(out[..., :3], 255 - layer[..., :3])

    def test_invert_is_clamped_at_full(self, layer: np.ndarray) -> None:
        assert np.array_equal(filters.invert(250)(layer)[0], filters.invert(100)(layer)[0])

    def test_grayscale_full_equalizes_channels(self, layer: np.ndarray) -> None:
        out, _ = filters.grayscale(100)(layer)
        assert (np.abs(out[..., 0].astype(int) - out[..., 1]) <= 1).all()
        assert (np.abs(out[..., 1].astype(int) - out[..., 2]) <= 1).all()

    def test_opacity_halves_alpha(self, layer: np.ndarray) -> None:
        out, _ = filters.opacity(50)(layer)
        assert (out[..., 3] == 128).all()
        assert np.array_equal(out[..., :3], layer[..., :3])

    def test_filters_do_not_mutate_input(self, layer: np.ndarray) -> None:
        before = layer.copy()
        filters.saturate(300)(layer)
        filters.hue_rotate(45)(layer)
        assert np.array_equal(layer, before)


class TestBlur:
    def test_zero_radius_is_identity(self, layer: np.ndarray) -> None:
        out, offset = filters.blur(0)(layer)
        assert offset == (0, 0)
        assert np.array_equal(out, layer)

    def test_layer_grows_by_three_sigma(self, layer: np.ndarray) -> None:
        out, offset = filters.blur(2)(layer)
        assert offset == (-6, -6)
        assert out.shape == (9 + 12, 12 + 12, 4)

    def test_blur_bleeds_into_margin(self, layer: np.ndarray) -> None:
        out, _ = filters.blur(2)(layer)
        assert out[5, 10, 3] > 0
        assert out[0, 0, 3] < out[10, 10, 3]


class TestDropShadow:
    def test_hard_shadow_is_offset(self, make_image) -> None:
        layer = np.asarray(make_image(4, 4, color=(0, 0, 255, 255)))
        out, offset = filters.drop_shadow(3, 2, 0, "#ff0000")(layer)
        assert offset == (0, 0)
        assert out.shape == (6, 7, 4)
        assert tuple(out[5, 6]) == (255, 0, 0, 255)
        assert tuple(out[0, 0]) == (0, 0, 255, 255)
        assert out[0, 6, 3] == 0

    def test_negative_offset_moves_image(self, make_image) -> None:
        layer = np.asarray(make_image(4, 4, color=(0, 0, 255, 255)))
        out, offset = filters.drop_shadow(-3, 0, 0, "black")(layer)
        assert offset == (-3, 0)
        assert out.shape == (4, 7, 4)
        assert tuple(out[0, 0]) == (0, 0, 0, 255)
        assert tuple(out[0, 6]) == (0, 0, 255, 255)

    def test_shadow_alpha_follows_color_alpha(self, make_image) -> None:
        layer = np.asarray(make_image(2, 2, color=(0, 0, 0, 255)))
        out, _ = filters.drop_shadow(2, 0, 0, "#ff000080")(layer)
        assert out[0, 3, 3] == 128

    def test_unknown_color_rejected(self) -> None:
        with pytest.raises(ValueError):
            filters.parse_color("not-a-color")
