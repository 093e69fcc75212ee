"""Фильтры канвы: brightness, contrast, grayscale, hue-rotate, invert, opacity,
saturate, blur и drop-shadow.

Каждая фабрика возвращает `LayerFilter`: функцию над RGBA uint8 массивом,
которая отдаёт новый слой и смещение его левого верхнего угла. Цветовые
фильтры слой не расширяют, пространственные (blur, drop-shadow) добавляют поля,
чтобы размытие и тень не обрезались.

Коэффициенты матриц взяты из определений Filter Effects. Фильтры, чьё
определение ограничивает величину (grayscale, invert, opacity), ограничивают её
сверху 100%; остальные не ограничены.
"""
from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np
from PIL import Image, ImageColor, ImageFilter

from effect_preview.models.canvas import LayerFilter, source_over

_NO_OFFSET = (0, 0)


# ---------- Вспомогательные функции ----------
def _to_uint8(arr: np.ndarray) -> np.ndarray:
    return np.clip(np.floor(arr + 0.5), 0, 255).astype(np.uint8)


def _apply_color_matrix(layer: np.ndarray, matrix: Sequence[Sequence[float]]) -> np.ndarray:
    """Умножает RGB каждого пикселя на матрицу 3×3, альфа не меняется."""
    rgb = layer[..., :3].astype(np.float64)
    out = layer.copy()
    out[..., :3] = _to_uint8(rgb @ np.asarray(matrix, dtype=np.float64).T)
    return out


def _apply_linear(layer: np.ndarray, slope: float, intercept: float) -> np.ndarray:
    """Линейная передаточная функция `v' = slope * v + intercept` для RGB в [0, 1]."""
    rgb = layer[..., :3].astype(np.float64)
    out = layer.copy()
    out[..., :3] = _to_uint8(rgb * slope + intercept * 255.0)
    return out


def _gaussian_blur(pixels: np.ndarray, sigma: float) -> np.ndarray:
    """Гауссово размытие по предумноженной альфе (без тёмных ореолов на краях)."""
    premultiplied = Image.fromarray(pixels).convert("RGBa")
    blurred = premultiplied.filter(ImageFilter.GaussianBlur(radius=sigma))
    return np.asarray(blurred.convert("RGBA"), dtype=np.uint8)


def parse_color(color: str) -> Tuple[int, int, int, int]:
    """Разбирает CSS-подобный цвет (`#rrggbb`, `#rrggbbaa`, имя) в RGBA.

    Raises:
        ValueError: если строка не распознана как цвет.
    """
    return ImageColor.getcolor(color, "RGBA")


# ---------- Цветовые фильтры ----------
def brightness(amount: float) -> LayerFilter:
    def apply(layer: np.ndarray):
        return _apply_linear(layer, amount, 0.0), _NO_OFFSET
    return apply


def contrast(percent: float) -> LayerFilter:
    c = percent / 100.0

    def apply(layer: np.ndarray):
        return _apply_linear(layer, c, 0.5 - 0.5 * c), _NO_OFFSET
    return apply


def grayscale(percent: float) -> LayerFilter:
    k = 1.0 - min(percent / 100.0, 1.0)
    matrix = (
        (0.2126 + 0.7874 * k, 0.7152 - 0.7152 * k, 0.0722 - 0.0722 * k),
        (0.2126 - 0.2126 * k, 0.7152 + 0.2848 * k, 0.0722 - 0.0722 * k),
        (0.2126 - 0.2126 * k, 0.7152 - 0.7152 * k, 0.0722 + 0.9278 * k),
    )

    def apply(layer: np.ndarray):
        return _apply_color_matrix(layer, matrix), _NO_OFFSET
    return apply


def hue_rotate(degrees: float) -> LayerFilter:
    rad = math.radians(degrees)
    cos, sin = math.cos(rad), math.sin(rad)
    matrix = (
        (0.213 + cos * 0.787 - sin * 0.213, 0.715 - cos * 0.715 - sin * 0.715, 0.072 - cos * 0.072 + sin * 0.928),
        (0.213 - cos * 0.213 + sin * 0.143, 0.715 + cos * 0.285 + sin * 0.140, 0.072 - cos * 0.072 - sin * 0.283),
        (0.213 - cos * 0.213 - sin * 0.787, 0.715 - cos * 0.715 + sin * 0.715, 0.072 + cos * 0.928 + sin * 0.072),
    )

    def apply(layer: np.ndarray):
        return _apply_color_matrix(layer, matrix), _NO_OFFSET
    return apply


def invert(percent: float) -> LayerFilter:
    a = min(percent / 100.0, 1.0)

    def apply(layer: np.ndarray):
        return _apply_linear(layer, 1.0 - 2.0 * a, a), _NO_OFFSET
    return apply


def opacity(percent: float) -> LayerFilter:
    a = min(percent / 100.0, 1.0)

    def apply(layer: np.ndarray):
        out = layer.copy()
        out[..., 3] = _to_uint8(layer[..., 3].astype(np.float64) * a)
        return out, _NO_OFFSET
    return apply


def saturate(percent: float) -> LayerFilter:
    s = percent / 100.0
    matrix = (
        (0.213 + 0.787 * s, 0.715 - 0.715 * s, 0.072 - 0.072 * s),
        (0.213 - 0.213 * s, 0.715 + 0.285 * s, 0.072 - 0.072 * s),
        (0.213 - 0.213 * s, 0.715 - 0.715 * s, 0.072 + 0.928 * s),
    )

    def apply(layer: np.ndarray):
        return _apply_color_matrix(layer, matrix), _NO_OFFSET
    return apply


# ---------- Пространственные фильтры ----------
def blur(radius: float) -> LayerFilter:
    """Гауссово размытие со стандартным отклонением `radius` (в пикселях буфера)."""
    def apply(layer: np.ndarray):
        if radius <= 0:
            return layer, _NO_OFFSET
        margin = int(math.ceil(radius * 3))
        h, w = layer.shape[:2]
        padded = np.zeros((h + 2 * margin, w + 2 * margin, 4), dtype=np.uint8)
        padded[margin:margin + h, margin:margin + w] = layer
        return _gaussian_blur(padded, radius), (-margin, -margin)
    return apply


def drop_shadow(offset_x: float, offset_y: float, radius: float, color: str) -> LayerFilter:
    """Тень по альфа-маске изображения, смещённая на `(offset_x, offset_y)` пикселей буфера.

    Радиус размытия тени задаётся как у box-shadow: σ = radius / 2.
    """
    r, g, b, a = parse_color(color)
    sigma = radius / 2.0

    def apply(layer: np.ndarray):
        h, w = layer.shape[:2]
        dx, dy = int(round(offset_x)), int(round(offset_y))
        margin = int(math.ceil(sigma * 3))
        left, top = margin + max(0, -dx), margin + max(0, -dy)
        right, bottom = margin + max(0, dx), margin + max(0, dy)
        out_w, out_h = w + left + right, h + top + bottom

        shadow = np.zeros((out_h, out_w, 4), dtype=np.uint8)
        shadow[..., :3] = (r, g, b)
        mask = layer[..., 3].astype(np.float64) * (a / 255.0)
        shadow[top + dy:top + dy + h, left + dx:left + dx + w, 3] = _to_uint8(mask)
        if sigma > 0:
            shadow = _gaussian_blur(shadow, sigma)

        image = np.zeros_like(shadow)
        image[top:top + h, left:left + w] = layer
        return source_over(image, shadow), (-left, -top)
    return apply
