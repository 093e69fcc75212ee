"""Мозаика с кооперативной отменой.

Расчёт средних цветов занимает O(пикселей), поэтому проход периодически
уступает управление циклу событий (раз в `mosaic_pixel_threshold` пикселей) и
между блоками проверяет запрос отмены. Новый запрос отменяет текущий проход и
ждёт, пока тот остановится: в рабочий буфер одновременно пишет только один проход.

Состояния: Idle -> Cancelling -> Running -> Idle.
"""
from __future__ import annotations

import asyncio
import logging
import math
import numbers
from typing import Awaitable, Callable, Optional

import numpy as np
from PIL import Image

from effect_preview.config import DEFAULT_RENDER_CONFIG, RenderConfig
from effect_preview.models.canvas import Canvas, Color
from effect_preview.models.surface import Surface
from effect_preview.services.effects import EffectBase, draw_plane

logger = logging.getLogger(__name__)

FrameWaiter = Callable[[], Awaitable[None]]

ERROR_MESSAGE = "Во время построения мозаики произошла ошибка. Перезагрузите изображение или попробуйте другое."


def calculate_average_color(pixels: np.ndarray) -> Color:
    """Средний цвет блока по пикселям с альфой > 0.

    Полностью прозрачные пиксели не учитываются, чтобы краевые блоки не темнели.
    Если видимых пикселей нет, возвращается полностью прозрачный цвет.

    Returns:
        `(r, g, b, a)`: каналы RGB 0..255 и альфа как доля 0..1.
    """
    flat = pixels.reshape(-1, 4)
    visible = flat[flat[:, 3] > 0].astype(np.int64)
    count = len(visible)
    if count == 0:
        return 0, 0, 0, 0.0
    r, g, b, a = (int(math.floor(total / count + 0.5)) for total in visible.sum(axis=0))
    return r, g, b, a / 255.0


class MosaicEffect(EffectBase):
    """Мозаика из блоков `block_size × block_size` пикселей буфера."""

    def __init__(
        self,
        surface: Surface,
        config: RenderConfig = DEFAULT_RENDER_CONFIG,
        frame_waiter: Optional[FrameWaiter] = None,
    ) -> None:
        super().__init__(surface, config)
        self.block_size: int = 10
        self.on_error: Optional[Callable[[str], None]] = None

        self._canvas = Canvas(surface.scale)  # рабочий буфер, на экран не выводится
        self._is_running: bool = False
        self._is_cancel_requested: bool = False
        self._request_id: int = 0
        self._frame_waiter: FrameWaiter = frame_waiter or self._wait_for_next_frame

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def is_cancel_requested(self) -> bool:
        return self._is_cancel_requested

    def validate(self) -> bool:
        value = self.block_size
        valid = (
            not isinstance(value, bool)
            and isinstance(value, numbers.Real)
            and math.isfinite(value)
            and value > 0
            and value == int(value)
        )
        if not valid:
            logger.warning("Invalid mosaic block size: %r", value)
        return valid

    def draw(self, overlap: bool = False) -> "asyncio.Task[None]":
        """Планирует `draw_async` в текущем цикле событий и возвращает задачу.

        Raises:
            RuntimeError: если цикл событий не запущен.
        """
        return asyncio.get_running_loop().create_task(self.draw_async(overlap))

    def cancel(self) -> None:
        """Останавливает текущий проход без переноса результата; ожидающие запросы снимаются."""
        self._request_id += 1
        self._is_cancel_requested = True

    async def draw_async(self, overlap: bool = False) -> None:
        """Отменяет текущий проход, дожидается его остановки и запускает новый."""
        if not self._surface.is_displayable:
            self.cancel()
            return
        if not self.validate():
            return

        self.cancel()
        request_id = self._request_id
        await self._wait_until_stopped()
        if request_id != self._request_id:
            # пока ждали, пришёл более новый запрос или отмена
            logger.debug("Mosaic request %d superseded by %d", request_id, self._request_id)
            return

        self._is_running = True
        self._is_cancel_requested = False
        await self.draw_effect(self._surface, overlap)

    async def draw_effect(self, surface: Surface, overlap: bool) -> None:
        """Один проход мозаики. `overlap` не поддерживается: мозаика рисует только свои цвета."""
        try:
            if not surface.is_displayable or surface.source_image is None:
                return
            if not self.validate():
                return
            block_size = int(self.block_size)
            if block_size == 1:
                self._draw_plain(surface)
                return
            await self._draw_blocks(surface, block_size)
        except Exception:
            logger.exception("Error drawing mosaic")
            if self.on_error:
                self.on_error(ERROR_MESSAGE)
        finally:
            self._is_running = False

    # ---- Internals ----
    async def _wait_for_next_frame(self) -> None:
        await asyncio.sleep(self._config.frame_interval)

    async def _wait_until_stopped(self) -> None:
        while self._is_running:
            await asyncio.sleep(self._config.poll_interval)

    def _draw_plain(self, surface: Surface) -> None:
        if surface.matches_image_geometry():
            surface.clear()
        else:
            surface.fit_to_image()
        draw_plane(surface, surface.source_image)

    async def _draw_blocks(self, surface: Surface, block_size: int) -> bool:
        """Считает мозаику в рабочем буфере и переносит её на `surface`.

        Returns:
            `True`, если проход завершён и результат перенесён; `False` при отмене.
        """
        image: Image.Image = surface.source_image
        scale = surface.scale
        canvas = self._canvas
        canvas.scale = scale
        canvas.resize(*image.size)
        # исходник для выборки цветов
        draw_plane(canvas, image)

        block_unit = block_size * block_size
        threshold = self._config.mosaic_pixel_threshold
        pixel_count = 0
        for y in range(0, canvas.height, block_size):
            if self._is_cancel_requested:
                break
            for x in range(0, canvas.width, block_size):
                if self._is_cancel_requested:
                    break
                color = calculate_average_color(canvas.get_image_data(x, y, block_size, block_size))
                lx, ly, size = x / scale, y / scale, block_size / scale
                # очистка перед заливкой нужна для полупрозрачных цветов
                canvas.clear_rect(lx, ly, size, size)
                canvas.fill_rect(lx, ly, size, size, color)

                pixel_count += block_unit
                if pixel_count > threshold:
                    pixel_count -= threshold
                    await self._frame_waiter()

        if self._is_cancel_requested:
            logger.debug("Mosaic pass cancelled")
            return False
        if not surface.is_displayable or surface.source_image is not image or surface.scale != scale:
            logger.debug("Mosaic pass discarded: surface changed during the pass")
            return False

        if not surface.matches_image_geometry():
            surface.fit_to_image()
        surface.put_image_data(canvas.get_image_data(0, 0, canvas.width, canvas.height))
        return True
