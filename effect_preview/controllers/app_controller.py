"""Контроллер приложения: оркестрация UI, реестра эффектов и сервиса изображений.

SOLID:
- SRP: класс управляет связями между UI и сервисами (без логики отрисовки).
- DIP: зависит от реестра и сервисов как от ролей; эффекты инкапсулированы в реестре.
Clean Code:
- Обработчики компактны; вся отрисовка делегирована `EffectRegistry`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from tkinter import TclError, filedialog, messagebox
from typing import Dict

import customtkinter as ctk

from effect_preview.config import AppConfig
from effect_preview.exceptions import ExportError, UnknownEffectError
from effect_preview.services.image_service import ImageService
from effect_preview.services.registry import EffectRegistry
from effect_preview.ui.bottom_bar import BottomBar
from effect_preview.ui.image_viewer import ImageViewer
from effect_preview.ui.sidebar import Sidebar

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Не удалось загрузить изображение. Попробуйте другой файл."
EXPORT_ERROR_MESSAGE = "Не удалось сохранить изображение. Попробуйте другой путь."


@dataclass
class AppController:
    """Связывает элементы UI с движком эффектов.

    Ответственности:
    - Бинд событий (UI -> контроллер) и передача параметров в поля эффектов.
    - Загрузка и экспорт изображений через `ImageService`.
    - Обновление виджета просмотра при изменении буфера поверхности.
    """
    viewer: ImageViewer
    sidebar: Sidebar
    bottom: BottomBar
    window: ctk.CTk
    registry: EffectRegistry
    config: AppConfig

    _image_service: ImageService = field(default_factory=ImageService)
    _shown_revision: int = -1
    _recenter: bool = False

    def bind_events(self) -> None:
        """Регистрирует обработчики событий между UI-компонентами и движком."""
        self.sidebar.on_open_file = self._handle_open_file
        self.sidebar.on_export = self._handle_export
        self.sidebar.on_effect_change = self._handle_effect_change
        self.sidebar.on_parameter_change = self._handle_parameter_change

        self.bottom.on_scale_change = self._handle_scale_change
        self.bottom.on_scale_reset = self._handle_scale_reset

        self.registry.on_error = self._show_error
        # значения слайдеров считаются исходными для всех эффектов
        self._push_parameters(self.sidebar.get_parameter_values())

    def load_image(self, file_path: str | Path) -> bool:
        """Загружает файл в поверхность и перерисовывает последний эффект."""
        surface = self.registry.surface
        try:
            image_data = self._image_service.load_image(file_path)
        except (FileNotFoundError, ValueError, OSError):
            logger.exception("Error loading image %s", file_path)
            surface.mark_load_failed()
            self.sidebar.set_export_enabled(False)
            self._show_error(LOAD_ERROR_MESSAGE)
            return False

        surface.set_source_image(image_data.pil_image)
        self.registry.state.image_name = image_data.name
        self.sidebar.set_image_info(image_data)
        self.sidebar.set_export_enabled(True)
        self._recenter = True
        self.registry.select(self.registry.state.last_effect)
        return True

    def refresh_view(self) -> None:
        """Передаёт буфер в виджет, если он изменился с прошлого кадра."""
        surface = self.registry.surface
        if surface.revision == self._shown_revision:
            return
        self._shown_revision = surface.revision
        self.viewer.set_image(surface.to_image(), recenter=self._recenter)
        self._recenter = False

    # ---- Handlers ----
    def _handle_open_file(self) -> None:
        try:
            file_path = filedialog.askopenfilename(
                title="Выберите изображение",
                filetypes=(
                    ("Images", "*.png *.jpg *.jpeg *.bmp *.gif *.tiff *.webp"),
                    ("All files", "*.*"),
                ),
            )
        except TclError:
            logger.warning("Open file dialog is not available")
            return

        if not file_path:
            return
        self.load_image(file_path)

    def _handle_export(self) -> None:
        name = ImageService.export_file_name(self.registry.state.image_name, self.config.default_export_name)
        try:
            file_path = filedialog.asksaveasfilename(
                title="Сохранить изображение",
                initialfile=name,
                defaultextension=".png",
                filetypes=(("PNG", "*.png"),),
            )
        except TclError:
            logger.warning("Save file dialog is not available")
            return

        if not file_path:
            return
        try:
            self._image_service.export_png(self.registry.surface, file_path)
        except ExportError:
            logger.exception("Error exporting image")
            self._show_error(EXPORT_ERROR_MESSAGE)

    def _handle_effect_change(self, effect_id: str) -> None:
        self.registry.select(effect_id)

    def _handle_parameter_change(self, effect_id: str, name: str, value: object) -> None:
        try:
            effect = self.registry.effect(effect_id)
        except UnknownEffectError:
            logger.warning("Parameter %s for unknown effect %r", name, effect_id)
            return
        setattr(effect, name, value)
        self.registry.draw(effect_id)

    def _handle_scale_change(self, scale: float) -> None:
        self.registry.set_scale(scale)

    def _handle_scale_reset(self) -> None:
        self.registry.set_scale(1.0)

    # ---- Helpers ----
    def _push_parameters(self, values: Dict[str, Dict[str, object]]) -> None:
        for effect_id, params in values.items():
            effect = self.registry.effect(effect_id)
            for name, value in params.items():
                setattr(effect, name, value)

    def _show_error(self, message: str) -> None:
        try:
            messagebox.showerror(self.config.title, message, parent=self.window)
        except TclError:
            logger.error("Could not show error dialog: %s", message)
