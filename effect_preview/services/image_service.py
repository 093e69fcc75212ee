"""Загрузка изображений с диска и экспорт результата в PNG.

Принципы:
- SRP: класс отвечает только за ввод-вывод растров и базовые метаданные.
- Экспорт читает буфер `Surface` как есть: там всегда результат последней
  завершённой (не отменённой) отрисовки.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from effect_preview.exceptions import ExportError
from effect_preview.models.image_model import ImageData
from effect_preview.models.surface import Surface

logger = logging.getLogger(__name__)


class ImageService:
    def load_image(self, file_path: str | Path) -> ImageData:
        """Загружает изображение с диска и возвращает его вместе с метаданными.

        Args:
            file_path: Путь до файла изображения.

        Returns:
            `ImageData` c `PIL.Image.Image` (в режиме RGBA), размерами, исходным режимом и размером файла.

        Raises:
            FileNotFoundError: если путь не существует или не указывает на файл.
            ValueError: если файл не распознан как изображение.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Файл не найден: {path}")

        try:
            with Image.open(path) as opened:
                source_mode = opened.mode
                pil_image = opened.convert("RGBA")
        except UnidentifiedImageError as exc:
            raise ValueError(f"Файл не является изображением: {path}") from exc

        width, height = pil_image.size
        try:
            size_bytes: Optional[int] = path.stat().st_size
        except OSError:
            size_bytes = None

        logger.info("Loaded %s (%dx%d, %s)", path.name, width, height, source_mode)
        return ImageData(
            path=path,
            pil_image=pil_image,
            width=width,
            height=height,
            source_mode=source_mode,
            size_bytes=size_bytes,
        )

    def export_png(self, surface: Surface, file_path: str | Path) -> Path:
        """Сохраняет буфер поверхности в PNG.

        Raises:
            ExportError: если изображение не загружено или запись не удалась.
        """
        if not surface.is_displayable or surface.width == 0 or surface.height == 0:
            raise ExportError("Нечего сохранять: изображение не загружено")
        path = Path(file_path)
        try:
            surface.to_image().save(path, format="PNG")
        except OSError as exc:
            raise ExportError(f"Не удалось записать {path}: {exc}") from exc
        logger.info("Exported %dx%d image to %s", surface.width, surface.height, path)
        return path

    @staticmethod
    def export_file_name(image_name: str, default: str = "image.png") -> str:
        """Имя файла для сохранения: имя загруженного изображения с расширением .png или `default`."""
        if not image_name:
            return default
        return Path(image_name).with_suffix(".png").name
