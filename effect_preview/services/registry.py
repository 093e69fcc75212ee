"""Реестр эффектов: выбор по идентификатору, запоминание последнего эффекта
и перерисовка после смены масштаба.

Все ошибки эффектов остаются внутри реестра: они пишутся в лог и передаются
в `on_error` как сообщение для пользователя.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, FrozenSet, Optional, Set, Union

from effect_preview.config import DEFAULT_RENDER_CONFIG, RenderConfig
from effect_preview.exceptions import UnknownEffectError
from effect_preview.models.surface import Surface
from effect_preview.services.effects import (
    BlurEffect,
    BrightnessEffect,
    ContrastEffect,
    DropShadowEffect,
    EffectBase,
    GrayscaleEffect,
    HueRotateEffect,
    InvertEffect,
    OpacityEffect,
    SaturateEffect,
    is_valid_number,
)
from effect_preview.services.mosaic import FrameWaiter, MosaicEffect

logger = logging.getLogger(__name__)

UNKNOWN_EFFECT_MESSAGE = "Выбран неизвестный эффект. Выберите эффект из списка."
EFFECT_ERROR_MESSAGE = "При применении эффекта произошла ошибка. Попробуйте выбрать другой эффект."

DrawResult = Optional["asyncio.Task[None]"]


class EffectId(str, Enum):
    MOSAIC = "mosaic"
    BLUR = "blur"
    BRIGHTNESS = "brightness"
    CONTRAST = "contrast"
    DROP_SHADOW = "dropShadow"
    GRAYSCALE = "grayscale"
    HUE_ROTATE = "hueRotate"
    INVERT = "invert"
    OPACITY = "opacity"
    SATURATE = "saturate"


@dataclass
class EngineState:
    """Состояние движка между запросами.

    Fields:
        last_effect: Последний применённый эффект; повторяется при смене масштаба.
        image_name: Имя загруженного файла (для имени при экспорте).
    """
    last_effect: EffectId = EffectId.MOSAIC
    image_name: str = ""


class EffectRegistry:
    """Владеет экземплярами всех эффектов над одной `Surface`."""

    def __init__(
        self,
        surface: Surface,
        config: RenderConfig = DEFAULT_RENDER_CONFIG,
        frame_waiter: Optional[FrameWaiter] = None,
    ) -> None:
        self.surface = surface
        self.state = EngineState()
        self.on_error: Optional[Callable[[str], None]] = None
        self._pending: Set["asyncio.Task[None]"] = set()

        self.mosaic = MosaicEffect(surface, config, frame_waiter=frame_waiter)
        self.mosaic.on_error = self._report_error
        self._effects: Dict[EffectId, EffectBase] = {
            EffectId.MOSAIC: self.mosaic,
            EffectId.BLUR: BlurEffect(surface, config),
            EffectId.BRIGHTNESS: BrightnessEffect(surface, config),
            EffectId.CONTRAST: ContrastEffect(surface, config),
            EffectId.DROP_SHADOW: DropShadowEffect(surface, config),
            EffectId.GRAYSCALE: GrayscaleEffect(surface, config),
            EffectId.HUE_ROTATE: HueRotateEffect(surface, config),
            EffectId.INVERT: InvertEffect(surface, config),
            EffectId.OPACITY: OpacityEffect(surface, config),
            EffectId.SATURATE: SaturateEffect(surface, config),
        }

    def effect(self, effect_id: Union[EffectId, str]) -> EffectBase:
        """Экземпляр эффекта по идентификатору.

        Raises:
            UnknownEffectError: если идентификатор не входит в `EffectId`.
        """
        try:
            return self._effects[EffectId(effect_id)]
        except ValueError as exc:
            raise UnknownEffectError(effect_id) from exc

    def draw(self, effect_id: Union[EffectId, str], overlap: bool = False) -> DrawResult:
        """Рисует эффект и запоминает его как последний.

        Для мозаики возвращает запланированную задачу, для остальных `None`.
        Любой другой эффект отменяет незавершённый проход мозаики, чтобы тот
        не перезаписал его результат. Неизвестный идентификатор и исключения
        эффекта не пробрасываются.
        """
        effect = self._resolve(effect_id)
        if effect is None:
            return None

        try:
            self.state.last_effect = EffectId(effect_id)
            if effect is not self.mosaic:
                self.mosaic.cancel()
            result = effect.draw(overlap)
        except Exception:
            logger.exception("Error applying effect %s", effect_id)
            self._report_error(EFFECT_ERROR_MESSAGE)
            return None

        if isinstance(result, asyncio.Task):
            # цикл событий хранит задачи только по слабой ссылке
            self._pending.add(result)
            result.add_done_callback(self._pending.discard)
        return result

    def select(self, effect_id: Union[EffectId, str]) -> DrawResult:
        """Переключение эффекта: базовая геометрия и отрисовка с очисткой.

        Неизвестный эффект или некорректные параметры оставляют буфер как есть.
        """
        effect = self._resolve(effect_id)
        if effect is None or not effect.validate():
            return None
        self.surface.fit_to_image()
        return self.draw(effect_id, overlap=False)

    def redraw_last(self) -> DrawResult:
        """Повторяет последний эффект на свежем буфере (после смены масштаба)."""
        self.surface.fit_to_image()
        return self.draw(self.state.last_effect, overlap=True)

    def set_scale(self, scale: float) -> DrawResult:
        """Применяет новый масштаб и перерисовывает; некорректный масштаб игнорируется."""
        if not is_valid_number(scale) or scale <= 0:
            logger.warning("Invalid scale: %r", scale)
            return None
        self.surface.scale = scale
        return self.redraw_last()

    @property
    def pending_tasks(self) -> FrozenSet["asyncio.Task[None]"]:
        """Незавершённые задачи мозаики."""
        return frozenset(self._pending)

    def _resolve(self, effect_id: Union[EffectId, str]) -> Optional[EffectBase]:
        try:
            return self.effect(effect_id)
        except UnknownEffectError:
            logger.warning("Unknown effect: %r", effect_id)
            self._report_error(UNKNOWN_EFFECT_MESSAGE)
            return None

    def _report_error(self, message: str) -> None:
        if self.on_error:
            self.on_error(message)
