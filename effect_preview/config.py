"""Настройки движка эффектов и оболочки приложения.

Принципы:
- Неизменяемость (`frozen=True`): значения читаются, но не мутируются во время работы.
- Константы движка отделены от настроек окна, чтобы ядро тестировалось без UI.
"""
from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class RenderConfig:
    """Константы отрисовки эффектов.

    Fields:
        spread_factor: Во сколько раз поле вокруг изображения больше радиуса размытия.
        mosaic_pixel_threshold: Сколько пикселей мозаики обрабатывается до уступки кадра.
        poll_interval: Период опроса (сек) при ожидании остановки предыдущего прохода мозаики.
        frame_interval: Длительность ожидания следующего кадра (сек).
    """
    spread_factor: float = 2.5
    mosaic_pixel_threshold: int = 5000
    poll_interval: float = 0.010
    frame_interval: float = 1.0 / 60.0


@dataclass(frozen=True)
class AppConfig:
    title: str = "Effect Preview"
    min_width: int = 960
    min_height: int = 640
    scale_min: float = 0.1
    scale_max: float = 4.0
    scale_step: float = 0.1
    default_export_name: str = "image.png"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Читает переопределения из окружения (сейчас только уровень логирования)."""
        level = os.environ.get("EFFECT_PREVIEW_LOG_LEVEL", cls.log_level).strip().upper()
        return cls(log_level=level or cls.log_level)


DEFAULT_RENDER_CONFIG = RenderConfig()
