"""Tests for the synchronous effects and their buffer geometry."""

from __future__ import annotations

import math

import numpy as np
import pytest

from effect_preview.models.surface import Surface
from effect_preview.services.effects import (
    BlurEffect,
    BrightnessEffect,
    ContrastEffect,
    DropShadowEffect,
    GrayscaleEffect,
    HueRotateEffect,
    InvertEffect,
    OpacityEffect,
    SaturateEffect,
    is_valid_number,
)


class TestIsValidNumber:
    @pytest.mark.parametrize("value", [0, 1, 2.5, 1e9])
    def test_accepts_non_negative(self, value) -> None:
        assert is_valid_number(value)

    @pytest.mark.parametrize("value", [-1, math.nan, math.inf, "5", None, True])
    def test_rejects(self, value) -> None:
        assert not is_valid_number(value)

    def test_negative_allowed_when_requested(self) -> None:
        assert is_valid_number(-3.5, allow_negative=True)
        assert not is_valid_number(math.nan, allow_negative=True)


class TestValidation:
    """An invalid parameter skips drawing and leaves the buffer untouched."""

    @pytest.mark.parametrize(
        "effect_cls, attribute",
        [
            (BrightnessEffect, "brightness"),
            (ContrastEffect, "contrast_rate"),
            (GrayscaleEffect, "grayscale_rate"),
            (HueRotateEffect, "degree_angle"),
            (InvertEffect, "invert_rate"),
            (OpacityEffect, "opacity_rate"),
            (SaturateEffect, "saturate_rate"),
            (BlurEffect, "size"),
            (DropShadowEffect, "blur_radius"),
        ],
    )
    @pytest.mark.parametrize("bad", [math.nan, -1])
    def test_invalid_parameter_is_noop(self, surface: Surface, effect_cls, attribute, bad) -> None:
        BrightnessEffect(surface).draw()
        before = surface.pixels.copy()
        revision = surface.revision

        effect = effect_cls(surface)
        setattr(effect, attribute, bad)
        effect.draw()

        assert surface.revision == revision
        assert np.array_equal(surface.pixels, before)

    @pytest.mark.parametrize("attribute", ["offset_x", "offset_y"])
    def test_nan_shadow_offset_is_noop(self, surface: Surface, attribute: str) -> None:
        revision = surface.revision
        effect = DropShadowEffect(surface)
        setattr(effect, attribute, math.nan)
        effect.draw()
        assert surface.revision == revision

    def test_bad_shadow_color_is_noop(self, surface: Surface) -> None:
        revision = surface.revision
        effect = DropShadowEffect(surface)
        effect.color = "definitely not a color"
        effect.draw()
        assert surface.revision == revision

    def test_nothing_drawn_without_image(self) -> None:
        surface = Surface()
        BrightnessEffect(surface).draw()
        BlurEffect(surface).draw()
        assert surface.size == (0, 0)
        assert surface.revision == 0


class TestFilterEffects:
    def test_neutral_brightness_reproduces_source(self, surface: Surface) -> None:
        BrightnessEffect(surface).draw()
        assert np.array_equal(surface.pixels, np.asarray(surface.source_image))

    def test_redraw_without_overlap_does_not_accumulate(self, surface: Surface) -> None:
        effect = OpacityEffect(surface)
        effect.draw()
        effect.draw()
        assert (surface.pixels[..., 3] == 128).all()

    def test_overlap_draws_over_existing_pixels(self, surface: Surface) -> None:
        effect = OpacityEffect(surface)
        effect.draw()
        effect.draw(overlap=True)
        assert (surface.pixels[..., 3] == 192).all()

    def test_resets_geometry_left_by_blur(self, surface: Surface) -> None:
        BlurEffect(surface).draw()
        assert surface.size != surface.image_size
        BrightnessEffect(surface).draw()
        assert surface.size == surface.image_size
        assert np.array_equal(surface.pixels, np.asarray(surface.source_image))

    def test_hue_angle_is_not_wrapped(self, surface: Surface) -> None:
        effect = HueRotateEffect(surface)

        def render(angle: float) -> np.ndarray:
            effect.degree_angle = angle
            effect.draw()
            return surface.pixels.astype(int)

        quarter, beyond_full_turn = render(90), render(450)
        # 450° rotates like 90°; capping at 360° would leave the image unchanged
        assert (np.abs(beyond_full_turn - quarter) <= 1).all()
        assert not np.array_equal(beyond_full_turn, np.asarray(surface.source_image, dtype=int))
        assert (np.abs(render(720) - render(0)) <= 1).all()

    def test_grayscale_default_removes_color(self, surface: Surface) -> None:
        GrayscaleEffect(surface).draw()
        rgb = surface.pixels[..., :3].astype(int)
        assert (np.abs(rgb[..., 0] - rgb[..., 2]) <= 1).all()


class TestBlurEffect:
    def test_canvas_grows_by_spread(self, surface: Surface) -> None:
        effect = BlurEffect(surface)
        effect.size = 4
        effect.draw()
        assert surface.size == (60, 50)

    def test_spread_is_divided_by_scale(self, surface: Surface) -> None:
        surface.scale = 2.0
        surface.fit_to_image()
        effect = BlurEffect(surface)
        effect.size = 4
        assert effect.spread(2.0) == 5.0
        effect.draw()
        assert surface.size == (100, 80)

    def test_no_growth_without_scaling(self, surface: Surface) -> None:
        effect = BlurEffect(surface)
        effect.is_scaling = False
        effect.draw()
        assert surface.size == surface.image_size

    def test_zero_size_draws_plain_image(self, surface: Surface) -> None:
        effect = BlurEffect(surface)
        effect.size = 0
        effect.draw()
        assert np.array_equal(surface.pixels, np.asarray(surface.source_image))

    def test_halo_reaches_margin(self, surface: Surface) -> None:
        effect = BlurEffect(surface)
        effect.size = 2
        effect.draw()
        # image starts at 5 px; blur spills into the margin
        assert surface.pixels[4, 20, 3] > 0


class TestDropShadowEffect:
    def test_canvas_size_includes_offset_overhang(self, surface: Surface) -> None:
        effect = DropShadowEffect(surface)
        effect.blur_radius = 2
        effect.offset_x = 12
        effect.offset_y = -3
        assert effect.canvas_size(1.0) == (57.0, 40.0)
        effect.draw()
        assert surface.size == (57, 40)

    def test_redraw_is_stable(self, surface: Surface) -> None:
        effect = DropShadowEffect(surface)
        effect.draw()
        first = surface.pixels.copy()
        effect.draw(overlap=True)
        assert np.array_equal(surface.pixels, first)

    def test_hard_shadow_color(self, make_image) -> None:
        surface = Surface()
        surface.set_source_image(make_image(10, 10, color=(0, 0, 255, 255)))
        effect = DropShadowEffect(surface)
        effect.blur_radius = 0
        effect.offset_x = 4
        effect.offset_y = 4
        effect.color = "#00ff00"
        effect.draw()
        assert surface.size == (14, 14)
        assert tuple(surface.pixels[13, 13]) == (0, 255, 0, 255)
        assert tuple(surface.pixels[0, 0]) == (0, 0, 255, 255)
        assert surface.pixels[0, 13, 3] == 0
