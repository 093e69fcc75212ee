"""Исключения движка эффектов."""
from __future__ import annotations


class EffectError(Exception):
    """Базовая ошибка отрисовки эффектов."""

    pass


class UnknownEffectError(EffectError):
    """Запрошен эффект, которого нет в реестре."""

    def __init__(self, effect_id: object) -> None:
        self.effect_id = effect_id
        super().__init__(f"Unknown effect: {effect_id!r}")


class ExportError(EffectError):
    """Нечего экспортировать или не удалось записать файл."""

    pass
