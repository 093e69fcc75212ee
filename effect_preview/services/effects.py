"""Эффекты предпросмотра, рисующие исходное изображение в `Surface`.

Принципы:
- OCP: новый эффект добавляется подклассом `EffectBase` без изменения остальных.
- Параметры выставляет UI напрямую в поля экземпляра; перед отрисовкой они
  проверяются повторно. Некорректное значение (NaN, отрицательное) пропускает
  отрисовку с предупреждением в логе, буфер при этом не меняется.

Режим `overlap`: `False` очищает буфер перед рисованием, `True` рисует поверх
(используется только при перерисовке после смены масштаба, когда буфер уже чист).
"""
from __future__ import annotations

import logging
import math
import numbers
from abc import ABC, abstractmethod
from typing import Tuple

from PIL import Image

from effect_preview.config import DEFAULT_RENDER_CONFIG, RenderConfig
from effect_preview.models.canvas import Canvas, LayerFilter
from effect_preview.models.surface import Surface
from effect_preview.services import filters

logger = logging.getLogger(__name__)


def is_valid_number(value: object, allow_negative: bool = False) -> bool:
    """Проверяет параметр эффекта: число, не NaN/inf и, если нужно, не меньше нуля."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    if not math.isfinite(value):
        return False
    return allow_negative or value >= 0


def draw_plane(canvas: Canvas, image: Image.Image, dx: float = 0.0, dy: float = 0.0) -> None:
    """Рисует изображение без фильтра."""
    canvas.draw_image(image, dx, dy)


class EffectBase(ABC):
    """Общий контракт эффекта: проверить параметры и нарисовать в `Surface`."""

    def __init__(self, surface: Surface, config: RenderConfig = DEFAULT_RENDER_CONFIG) -> None:
        self._surface = surface
        self._config = config

    def draw(self, overlap: bool = False) -> None:
        """Рисует эффект. Без загруженного изображения ничего не делает."""
        surface = self._surface
        if not surface.is_displayable or surface.source_image is None:
            return
        if not self.validate():
            return
        self.draw_effect(surface, overlap)

    @abstractmethod
    def validate(self) -> bool:
        """Возвращает `False` (и пишет предупреждение), если параметры некорректны."""

    @abstractmethod
    def draw_effect(self, surface: Surface, overlap: bool) -> None:
        """Отрисовка с уже проверенными параметрами."""


class FilterEffect(EffectBase):
    """Один цветовой фильтр на всё изображение в точке (0, 0), без полей.

    Подкласс задаёт имя поля параметра в `parameter` и фабрику фильтра.
    """

    parameter: str = ""

    def validate(self) -> bool:
        value = getattr(self, self.parameter, None)
        if not is_valid_number(value):
            logger.warning("Invalid %s: %r", self.parameter.replace("_", " "), value)
            return False
        return True

    @abstractmethod
    def make_filter(self) -> LayerFilter:
        ...

    def draw_effect(self, surface: Surface, overlap: bool) -> None:
        # геометрия могла остаться от blur/drop-shadow; пересоздание буфера заодно очищает его
        if not surface.matches_image_geometry():
            surface.fit_to_image()
        elif not overlap:
            surface.clear()
        surface.draw_image(surface.source_image, 0, 0, self.make_filter())


class BrightnessEffect(FilterEffect):
    parameter = "brightness"

    def __init__(self, surface: Surface, config: RenderConfig = DEFAULT_RENDER_CONFIG) -> None:
        super().__init__(surface, config)
        self.brightness: float = 1.0  # множитель, 1.0 не меняет изображение

    def make_filter(self) -> LayerFilter:
        return filters.brightness(self.brightness)


class ContrastEffect(FilterEffect):
    parameter = "contrast_rate"

    def __init__(self, surface: Surface, config: RenderConfig = DEFAULT_RENDER_CONFIG) -> None:
        super().__init__(surface, config)
        self.contrast_rate: float = 100.0  # %

    def make_filter(self) -> LayerFilter:
        return filters.contrast(self.contrast_rate)


class GrayscaleEffect(FilterEffect):
    parameter = "grayscale_rate"

    def __init__(self, surface: Surface, config: RenderConfig = DEFAULT_RENDER_CONFIG) -> None:
        super().__init__(surface, config)
        self.grayscale_rate: float = 100.0  # %

    def make_filter(self) -> LayerFilter:
        return filters.grayscale(self.grayscale_rate)


class HueRotateEffect(FilterEffect):
    parameter = "degree_angle"

    def __init__(self, surface: Surface, config: RenderConfig = DEFAULT_RENDER_CONFIG) -> None:
        super().__init__(surface, config)
        self.degree_angle: float = 90.0  # градусы, не приводятся к 360

    def make_filter(self) -> LayerFilter:
        return filters.hue_rotate(self.degree_angle)


class InvertEffect(FilterEffect):
    parameter = "invert_rate"

    def __init__(self, surface: Surface, config: RenderConfig = DEFAULT_RENDER_CONFIG) -> None:
        super().__init__(surface, config)
        self.invert_rate: float = 100.0  # %

    def make_filter(self) -> LayerFilter:
        return filters.invert(self.invert_rate)


class OpacityEffect(FilterEffect):
    parameter = "opacity_rate"

    def __init__(self, surface: Surface, config: RenderConfig = DEFAULT_RENDER_CONFIG) -> None:
        super().__init__(surface, config)
        self.opacity_rate: float = 50.0  # %

    def make_filter(self) -> LayerFilter:
        return filters.opacity(self.opacity_rate)


class SaturateEffect(FilterEffect):
    parameter = "saturate_rate"

    def __init__(self, surface: Surface, config: RenderConfig = DEFAULT_RENDER_CONFIG) -> None:
        super().__init__(surface, config)
        self.saturate_rate: float = 200.0  # %

    def make_filter(self) -> LayerFilter:
        return filters.saturate(self.saturate_rate)


class BlurEffect(EffectBase):
    """Размытие; при `is_scaling` буфер расширяется, чтобы края размытия не обрезались."""

    def __init__(self, surface: Surface, config: RenderConfig = DEFAULT_RENDER_CONFIG) -> None:
        super().__init__(surface, config)
        self.size: float = 5.0
        self.is_scaling: bool = True

    def validate(self) -> bool:
        if not is_valid_number(self.size):
            logger.warning("Invalid blur size: %r", self.size)
            return False
        return True

    def spread(self, scale: float) -> float:
        """Логическое поле вокруг изображения."""
        if not self.is_scaling:
            return 0.0
        return self.size * self._config.spread_factor / scale

    def draw_effect(self, surface: Surface, overlap: bool) -> None:
        spread = self.spread(surface.scale)
        image_w, image_h = surface.image_size
        width, height = image_w + spread * 2, image_h + spread * 2

        if spread > 0 or surface.size != surface.device_size(width, height):
            # положение изображения зависит от поля, поэтому рисовать поверх нельзя
            surface.resize(width, height)
        elif not overlap:
            surface.clear()

        surface.draw_image(surface.source_image, spread, spread, filters.blur(self.size))


class DropShadowEffect(EffectBase):
    """Тень со смещением; буфер растёт на поле размытия и на выступ смещения."""

    def __init__(self, surface: Surface, config: RenderConfig = DEFAULT_RENDER_CONFIG) -> None:
        super().__init__(surface, config)
        self.offset_x: float = 5.0
        self.offset_y: float = 5.0
        self.blur_radius: float = 5.0
        self.color: str = "#000000"

    def validate(self) -> bool:
        if not is_valid_number(self.offset_x, allow_negative=True) or not is_valid_number(self.offset_y, allow_negative=True):
            logger.warning("Invalid offset: (%r, %r)", self.offset_x, self.offset_y)
            return False
        if not is_valid_number(self.blur_radius):
            logger.warning("Invalid blur radius: %r", self.blur_radius)
            return False
        try:
            filters.parse_color(self.color)
        except (ValueError, AttributeError, TypeError):
            logger.warning("Invalid shadow color: %r", self.color)
            return False
        return True

    def spread(self, scale: float) -> float:
        return self.blur_radius * self._config.spread_factor / scale

    def canvas_size(self, scale: float) -> Tuple[float, float]:
        """Логический размер буфера с учётом поля размытия и смещения тени."""
        spread = self.spread(scale)
        image_w, image_h = self._surface.image_size
        width, height = image_w + spread * 2, image_h + spread * 2
        if abs(self.offset_x) > spread:
            width += abs(self.offset_x) - spread
        if abs(self.offset_y) > spread:
            height += abs(self.offset_y) - spread
        return width, height

    def draw_effect(self, surface: Surface, overlap: bool) -> None:
        scale = surface.scale
        spread = self.spread(scale)
        # смещение изображения зависит от геометрии тени, поэтому всегда с чистого буфера
        surface.resize(*self.canvas_size(scale))
        shadow = filters.drop_shadow(self.offset_x * scale, self.offset_y * scale, self.blur_radius, self.color)
        surface.draw_image(
            surface.source_image,
            max(spread - self.offset_x, 0),
            max(spread - self.offset_y, 0),
            shadow,
        )

