"""Исходное изображение, загруженное с диска.

Принципы:
- Только данные: загрузка в `ImageService`, отрисовка в `Surface`.
- Экземпляр не меняется после создания (`frozen=True`).
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image


@dataclass(frozen=True)
class ImageData:
    """Загруженное исходное изображение и его метаданные.

    Fields:
        path: Путь к исходному файлу.
        pil_image: Изображение PIL, всегда в режиме RGBA.
        width: Ширина, px.
        height: Высота, px.
        source_mode: Режим PIL до преобразования в RGBA, например "P" или "RGB".
        size_bytes: Размер файла, если доступен.
    """
    path: Path
    pil_image: Image.Image
    width: int
    height: int
    source_mode: str
    size_bytes: Optional[int]

    @property
    def name(self) -> str:
        """Имя файла; используется как имя по умолчанию при экспорте."""
        return self.path.name
