"""Поверхность предпросмотра: буфер канвы плюс исходное изображение."""
from __future__ import annotations

from typing import Optional, Tuple

from PIL import Image

from effect_preview.models.canvas import Canvas


class Surface(Canvas):
    """Цель отрисовки всех эффектов.

    Fields:
        source_image: Загруженное изображение (RGBA), не изменяется после загрузки.
        is_displayable: `True`, только пока последнее изображение загружено успешно.
    """

    def __init__(self, scale: float = 1.0) -> None:
        super().__init__(scale)
        self.source_image: Optional[Image.Image] = None
        self.is_displayable: bool = False

    def set_source_image(self, image: Image.Image) -> None:
        """Принимает новое исходное изображение и подгоняет буфер под его размер."""
        self.source_image = image if image.mode == "RGBA" else image.convert("RGBA")
        self.is_displayable = True
        self.fit_to_image()

    def mark_load_failed(self) -> None:
        self.is_displayable = False

    @property
    def image_size(self) -> Tuple[int, int]:
        if self.source_image is None:
            return 0, 0
        return self.source_image.size

    def fit_to_image(self) -> None:
        """Пересоздаёт буфер размером с исходное изображение (с учётом масштаба)."""
        if self.source_image is None:
            return
        self.resize(*self.source_image.size)

    def matches_image_geometry(self) -> bool:
        """Совпадает ли буфер с `image_size × scale` (без полей эффектов)."""
        if self.source_image is None:
            return False
        return self.size == self.device_size(*self.source_image.size)
