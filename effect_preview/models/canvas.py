"""Растровая поверхность рисования с равномерным масштабом.

Принципы:
- SRP: только хранение пикселей и примитивы рисования, без логики эффектов.
- Координаты рисования логические (до масштаба); `get_image_data`/`put_image_data`
  работают в пикселях буфера, как и их аналоги у 2D-контекста.
"""
from __future__ import annotations

import math
from typing import Callable, Optional, Tuple

import numpy as np
from PIL import Image

# RGB 0..255 и альфа 0..1
Color = Tuple[int, int, int, float]
# Фильтр получает RGBA uint8 (H, W, 4) и возвращает новый слой и смещение его
# левого верхнего угла относительно исходного изображения (в пикселях буфера).
LayerFilter = Callable[[np.ndarray], Tuple[np.ndarray, Tuple[int, int]]]


def source_over(src: np.ndarray, dst: np.ndarray) -> np.ndarray:
    """Композиция `source-over` для неумноженных RGBA uint8 массивов одинаковой формы."""
    s = src.astype(np.float64) / 255.0
    d = dst.astype(np.float64) / 255.0
    sa = s[..., 3:4]
    da = d[..., 3:4]
    out_a = sa + da * (1.0 - sa)
    with np.errstate(divide="ignore", invalid="ignore"):
        out_rgb = np.where(out_a > 0, (s[..., :3] * sa + d[..., :3] * da * (1.0 - sa)) / out_a, 0.0)
    out = np.concatenate([out_rgb, out_a], axis=-1)
    return np.clip(np.floor(out * 255.0 + 0.5), 0, 255).astype(np.uint8)


class Canvas:
    """RGBA-буфер и минимальный 2D-контекст над ним."""

    def __init__(self, scale: float = 1.0) -> None:
        self._pixels: np.ndarray = np.zeros((0, 0, 4), dtype=np.uint8)
        self._scale: float = 1.0
        self.scale = scale
        # растёт при каждом изменении пикселей; UI перерисовывается по изменению
        self.revision: int = 0

    # ---- Geometry ----
    @property
    def scale(self) -> float:
        return self._scale

    @scale.setter
    def scale(self, value: float) -> None:
        value = float(value)
        if not math.isfinite(value) or value <= 0:
            raise ValueError(f"Scale must be a positive number, got {value!r}")
        self._scale = value

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def pixels(self) -> np.ndarray:
        """Текущий буфер (H, W, 4). Только для чтения."""
        view = self._pixels.view()
        view.flags.writeable = False
        return view

    def device_size(self, width: float, height: float) -> Tuple[int, int]:
        """Размер буфера для логической области: усечение, как у ширины/высоты канвы."""
        return max(0, int(width * self._scale)), max(0, int(height * self._scale))

    def resize(self, width: float, height: float) -> None:
        """Пересоздаёт буфер под логический размер `width × height`.

        Буфер всегда выделяется заново, поэтому старые пиксели пропадают, а
        преобразование сбрасывается к единичному с повторно применённым `scale`.
        """
        w, h = self.device_size(width, height)
        self._pixels = np.zeros((h, w, 4), dtype=np.uint8)
        self.revision += 1

    # ---- Drawing ----
    def clear(self) -> None:
        self._pixels[...] = 0
        self.revision += 1

    def clear_rect(self, x: float, y: float, width: float, height: float) -> None:
        box = self._device_box(x, y, width, height)
        if box is None:
            return
        x0, y0, x1, y1 = box
        self._pixels[y0:y1, x0:x1] = 0
        self.revision += 1

    def fill_rect(self, x: float, y: float, width: float, height: float, color: Color) -> None:
        box = self._device_box(x, y, width, height)
        if box is None:
            return
        x0, y0, x1, y1 = box
        r, g, b, a = color
        layer = np.empty((y1 - y0, x1 - x0, 4), dtype=np.uint8)
        layer[...] = (int(r), int(g), int(b), int(math.floor(a * 255.0 + 0.5)))
        self._composite(layer, x0, y0)

    def draw_image(
        self,
        image: Image.Image,
        dx: float = 0.0,
        dy: float = 0.0,
        image_filter: Optional[LayerFilter] = None,
    ) -> None:
        """Рисует изображение в логической точке `(dx, dy)` с текущим масштабом.

        Фильтр применяется к уже масштабированному изображению, результат
        накладывается поверх буфера; всё, что выходит за границы, отсекается.
        """
        rgba = image if image.mode == "RGBA" else image.convert("RGBA")
        target = (max(1, self._to_device(rgba.width)), max(1, self._to_device(rgba.height)))
        if target != rgba.size:
            rgba = rgba.resize(target, Image.Resampling.LANCZOS)
        layer = np.asarray(rgba, dtype=np.uint8)
        ox, oy = 0, 0
        if image_filter is not None:
            layer, (ox, oy) = image_filter(layer)
        self._composite(layer, self._to_device(dx) + ox, self._to_device(dy) + oy)

    # ---- Pixel access (device units) ----
    def get_image_data(self, x: int, y: int, width: int, height: int) -> np.ndarray:
        x0, y0 = max(0, x), max(0, y)
        x1, y1 = min(self.width, x + width), min(self.height, y + height)
        if x0 >= x1 or y0 >= y1:
            return np.zeros((0, 0, 4), dtype=np.uint8)
        return self._pixels[y0:y1, x0:x1].copy()

    def put_image_data(self, data: np.ndarray, x: int = 0, y: int = 0) -> None:
        """Записывает пиксели без композиции (замена), с отсечением по буферу."""
        h, w = data.shape[:2]
        x0, y0 = max(0, x), max(0, y)
        x1, y1 = min(self.width, x + w), min(self.height, y + h)
        if x0 >= x1 or y0 >= y1:
            return
        self._pixels[y0:y1, x0:x1] = data[y0 - y:y1 - y, x0 - x:x1 - x]
        self.revision += 1

    def to_image(self) -> Image.Image:
        """Копия буфера как `PIL.Image` в режиме RGBA."""
        if self._pixels.size == 0:
            return Image.new("RGBA", (self.width, self.height))
        return Image.fromarray(self._pixels.copy())

    # ---- Internals ----
    def _to_device(self, value: float) -> int:
        return int(math.floor(value * self._scale + 0.5))

    def _device_box(self, x: float, y: float, width: float, height: float) -> Optional[Tuple[int, int, int, int]]:
        x0 = max(0, self._to_device(x))
        y0 = max(0, self._to_device(y))
        x1 = min(self.width, self._to_device(x + width))
        y1 = min(self.height, self._to_device(y + height))
        if x0 >= x1 or y0 >= y1:
            return None
        return x0, y0, x1, y1

    def _composite(self, layer: np.ndarray, x: int, y: int) -> None:
        h, w = layer.shape[:2]
        x0, y0 = max(0, x), max(0, y)
        x1, y1 = min(self.width, x + w), min(self.height, y + h)
        if x0 >= x1 or y0 >= y1:
            return
        src = layer[y0 - y:y1 - y, x0 - x:x1 - x]
        dst = self._pixels[y0:y1, x0:x1]
        self._pixels[y0:y1, x0:x1] = source_over(src, dst)
        self.revision += 1
