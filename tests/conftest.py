"""Pytest configuration and shared fixtures for the effect engine."""

from __future__ import annotations

from typing import Callable, Tuple

import numpy as np
import pytest
from PIL import Image

from effect_preview.config import RenderConfig
from effect_preview.models.surface import Surface


@pytest.fixture
def fast_config() -> RenderConfig:
    """Engine config that never sleeps and yields after every mosaic block."""
    return RenderConfig(mosaic_pixel_threshold=1, poll_interval=0.0, frame_interval=0.0)


@pytest.fixture
def make_image() -> Callable[..., Image.Image]:
    """Factory for RGBA images: solid color or seeded random noise."""

    def factory(
        width: int,
        height: int,
        color: Tuple[int, int, int, int] | None = None,
        seed: int = 0,
        opaque: bool = True,
    ) -> Image.Image:
        if color is not None:
            return Image.new("RGBA", (width, height), color)
        rng = np.random.default_rng(seed)
        pixels = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
        if opaque:
            pixels[..., 3] = 255
        return Image.fromarray(pixels)

    return factory


@pytest.fixture
def surface(make_image: Callable[..., Image.Image]) -> Surface:
    """Displayable 1:1 surface holding a 40x30 opaque noise image."""
    result = Surface()
    result.set_source_image(make_image(40, 30, seed=1))
    return result
