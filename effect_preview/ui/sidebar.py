"""Боковая панель: открытие и экспорт файла, информация, выбор эффекта и его параметры.

Принципы:
- SRP: управляет только UI параметров, не содержит алгоритмов.
- ISP: выдаёт параметры через `get_parameter_values`, события через `on_*`.
"""
from __future__ import annotations

from tkinter import colorchooser
from typing import Callable, Dict, NamedTuple, Optional, Tuple

import customtkinter as ctk

from effect_preview.models.image_model import ImageData
from effect_preview.services.registry import EffectId


class _SliderSpec(NamedTuple):
    name: str
    label: str
    from_: float
    to: float
    steps: int
    default: float
    is_int: bool = True


# Поля эффектов и диапазоны их слайдеров
_SLIDERS: Dict[EffectId, Tuple[_SliderSpec, ...]] = {
    EffectId.MOSAIC: (_SliderSpec("block_size", "Размер блока, px", 1, 100, 99, 10),),
    EffectId.BLUR: (_SliderSpec("size", "Радиус, px", 0, 50, 50, 5),),
    EffectId.BRIGHTNESS: (_SliderSpec("brightness", "Яркость", 0, 3, 300, 1.0, is_int=False),),
    EffectId.CONTRAST: (_SliderSpec("contrast_rate", "Контраст, %", 0, 300, 300, 100),),
    EffectId.DROP_SHADOW: (
        _SliderSpec("offset_x", "Смещение X, px", -50, 50, 100, 5),
        _SliderSpec("offset_y", "Смещение Y, px", -50, 50, 100, 5),
        _SliderSpec("blur_radius", "Размытие, px", 0, 50, 50, 5),
    ),
    EffectId.GRAYSCALE: (_SliderSpec("grayscale_rate", "Оттенки серого, %", 0, 100, 100, 100),),
    EffectId.HUE_ROTATE: (_SliderSpec("degree_angle", "Поворот тона, °", 0, 360, 360, 90),),
    EffectId.INVERT: (_SliderSpec("invert_rate", "Инверсия, %", 0, 100, 100, 100),),
    EffectId.OPACITY: (_SliderSpec("opacity_rate", "Непрозрачность, %", 0, 100, 100, 50),),
    EffectId.SATURATE: (_SliderSpec("saturate_rate", "Насыщенность, %", 0, 500, 500, 200),),
}

_EFFECT_TITLES: Dict[EffectId, str] = {
    EffectId.MOSAIC: "Мозаика",
    EffectId.BLUR: "Размытие",
    EffectId.BRIGHTNESS: "Яркость",
    EffectId.CONTRAST: "Контраст",
    EffectId.DROP_SHADOW: "Тень",
    EffectId.GRAYSCALE: "Оттенки серого",
    EffectId.HUE_ROTATE: "Поворот тона",
    EffectId.INVERT: "Инверсия",
    EffectId.OPACITY: "Прозрачность",
    EffectId.SATURATE: "Насыщенность",
}


def _format_value(spec: _SliderSpec, value: float) -> str:
    return str(int(round(value))) if spec.is_int else f"{value:.2f}"


class Sidebar(ctk.CTkFrame):
    """Панель инструментов с блоками: файл, информация, эффект, параметры."""
    def __init__(self, master: ctk.CTk, **kwargs) -> None:
        super().__init__(master, width=300, **kwargs)

        self.grid_columnconfigure(0, weight=1)

        # Callbacks
        self.on_open_file: Optional[Callable[[], None]] = None
        self.on_export: Optional[Callable[[], None]] = None
        self.on_effect_change: Optional[Callable[[str], None]] = None
        self.on_parameter_change: Optional[Callable[[str, str, object], None]] = None

        # File
        self._title = ctk.CTkLabel(self, text="Инструменты", font=ctk.CTkFont(size=16, weight="bold"))
        self._title.grid(row=0, column=0, padx=8, pady=(8, 4), sticky="w")

        self._open_btn = ctk.CTkButton(self, text="Открыть изображение…", command=self._emit_open_file)
        self._open_btn.grid(row=1, column=0, padx=8, pady=(0, 6), sticky="ew")
        self._export_btn = ctk.CTkButton(self, text="Сохранить PNG…", command=self._emit_export, state="disabled")
        self._export_btn.grid(row=2, column=0, padx=8, pady=(0, 12), sticky="ew")

        # Info section
        self._info_title = ctk.CTkLabel(self, text="Информация", font=ctk.CTkFont(size=16, weight="bold"))
        self._info_title.grid(row=3, column=0, padx=8, pady=(8, 4), sticky="w")

        self._path_val = ctk.StringVar(value="—")
        self._size_val = ctk.StringVar(value="—")
        self._dims_val = ctk.StringVar(value="—")
        self._info_path = ctk.CTkLabel(self, textvariable=self._path_val, wraplength=270, anchor="w", justify="left")
        self._info_size = ctk.CTkLabel(self, textvariable=self._size_val, anchor="w", justify="left")
        self._info_dims = ctk.CTkLabel(self, textvariable=self._dims_val, anchor="w", justify="left")
        self._info_path.grid(row=4, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._info_size.grid(row=5, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._info_dims.grid(row=6, column=0, padx=8, pady=(0, 10), sticky="ew")

        # Effect selector
        self._effect_title = ctk.CTkLabel(self, text="Эффект", font=ctk.CTkFont(size=16, weight="bold"))
        self._effect_title.grid(row=7, column=0, padx=8, pady=(8, 4), sticky="w")
        self._effect_menu = ctk.CTkOptionMenu(
            self,
            values=[_EFFECT_TITLES[effect_id] for effect_id in EffectId],
            command=self._emit_effect_change,
        )
        self._effect_menu.set(_EFFECT_TITLES[EffectId.MOSAIC])
        self._effect_menu.grid(row=8, column=0, padx=8, pady=(0, 8), sticky="ew")

        # Parameters: один фрейм на эффект, виден только выбранный
        self._params_title = ctk.CTkLabel(self, text="Параметры", font=ctk.CTkFont(size=16, weight="bold"))
        self._params_title.grid(row=9, column=0, padx=8, pady=(8, 4), sticky="w")
        self._sliders: Dict[Tuple[EffectId, str], ctk.CTkSlider] = {}
        self._slider_values: Dict[Tuple[EffectId, str], ctk.StringVar] = {}
        self._param_frames: Dict[EffectId, ctk.CTkFrame] = {}
        for effect_id in EffectId:
            frame = ctk.CTkFrame(self, fg_color="transparent")
            frame.grid_columnconfigure(0, weight=1)
            row = 0
            for spec in _SLIDERS[effect_id]:
                row = self._add_slider(frame, effect_id, spec, row)
            self._param_frames[effect_id] = frame

        blur_frame = self._param_frames[EffectId.BLUR]
        self._blur_scaling = ctk.BooleanVar(value=True)
        self._blur_checkbox = ctk.CTkCheckBox(
            blur_frame, text="Расширять холст", variable=self._blur_scaling, command=self._on_blur_scaling
        )
        self._blur_checkbox.grid(row=10, column=0, padx=6, pady=(4, 6), sticky="w")

        shadow_frame = self._param_frames[EffectId.DROP_SHADOW]
        self._shadow_color = "#000000"
        self._shadow_color_btn = ctk.CTkButton(
            shadow_frame, text=f"Цвет: {self._shadow_color}", command=self._on_pick_shadow_color
        )
        self._shadow_color_btn.grid(row=10, column=0, padx=6, pady=(4, 6), sticky="ew")

        # filler
        self.grid_rowconfigure(99, weight=1)
        self._show_effect_parameters(EffectId.MOSAIC)

    # ---- Public API ----
    def set_image_info(self, image_data: ImageData) -> None:
        """Отображает метаданные загруженного изображения."""
        self._path_val.set(image_data.name)
        self._size_val.set(self._format_size(image_data.size_bytes))
        self._dims_val.set(f"{image_data.width} × {image_data.height} px ({image_data.source_mode})")

    def set_export_enabled(self, enabled: bool) -> None:
        self._export_btn.configure(state="normal" if enabled else "disabled")

    def get_parameter_values(self) -> Dict[str, Dict[str, object]]:
        """Текущие значения всех параметров: `{effect_id: {field: value}}`."""
        values: Dict[str, Dict[str, object]] = {effect_id.value: {} for effect_id in EffectId}
        for (effect_id, name), slider in self._sliders.items():
            spec = next(s for s in _SLIDERS[effect_id] if s.name == name)
            raw = float(slider.get())
            values[effect_id.value][name] = int(round(raw)) if spec.is_int else raw
        values[EffectId.BLUR.value]["is_scaling"] = bool(self._blur_scaling.get())
        values[EffectId.DROP_SHADOW.value]["color"] = self._shadow_color
        return values

    # ---- Events ----
    def _emit_open_file(self) -> None:
        if self.on_open_file:
            self.on_open_file()

    def _emit_export(self) -> None:
        if self.on_export:
            self.on_export()

    def _emit_effect_change(self, title: str) -> None:
        effect_id = next(e for e, t in _EFFECT_TITLES.items() if t == title)
        self._show_effect_parameters(effect_id)
        if self.on_effect_change:
            self.on_effect_change(effect_id.value)

    def _emit_parameter_change(self, effect_id: EffectId, name: str, value: object) -> None:
        if self.on_parameter_change:
            self.on_parameter_change(effect_id.value, name, value)

    def _on_slider(self, effect_id: EffectId, spec: _SliderSpec, value: float) -> None:
        self._slider_values[(effect_id, spec.name)].set(_format_value(spec, value))
        self._emit_parameter_change(effect_id, spec.name, int(round(value)) if spec.is_int else float(value))

    def _on_blur_scaling(self) -> None:
        self._emit_parameter_change(EffectId.BLUR, "is_scaling", bool(self._blur_scaling.get()))

    def _on_pick_shadow_color(self) -> None:
        _rgb, hex_color = colorchooser.askcolor(color=self._shadow_color, title="Цвет тени")
        if not hex_color:
            return
        self._shadow_color = hex_color
        self._shadow_color_btn.configure(text=f"Цвет: {hex_color}")
        self._emit_parameter_change(EffectId.DROP_SHADOW, "color", hex_color)

    # ---- Helpers ----
    def _add_slider(self, frame: ctk.CTkFrame, effect_id: EffectId, spec: _SliderSpec, row: int) -> int:
        value = ctk.StringVar(value=_format_value(spec, spec.default))
        label = ctk.CTkLabel(frame, text=spec.label)
        slider = ctk.CTkSlider(
            frame,
            from_=spec.from_,
            to=spec.to,
            number_of_steps=spec.steps,
            command=lambda v, e=effect_id, s=spec: self._on_slider(e, s, v),
        )
        slider.set(spec.default)
        value_label = ctk.CTkLabel(frame, textvariable=value, width=48, anchor="w")
        label.grid(row=row, column=0, padx=6, pady=(4, 0), sticky="w")
        value_label.grid(row=row, column=1, padx=6, pady=(4, 0), sticky="e")
        slider.grid(row=row + 1, column=0, columnspan=2, padx=6, pady=(0, 4), sticky="ew")
        self._sliders[(effect_id, spec.name)] = slider
        self._slider_values[(effect_id, spec.name)] = value
        return row + 2

    def _show_effect_parameters(self, shown: EffectId) -> None:
        for effect_id, frame in self._param_frames.items():
            if effect_id == shown:
                frame.grid(row=10, column=0, padx=4, pady=(0, 8), sticky="ew")
            else:
                frame.grid_remove()

    def _format_size(self, size_bytes: Optional[int]) -> str:
        if size_bytes is None:
            return "—"
        thresholds = [("Б", 1024), ("КБ", 1024**2), ("МБ", 1024**3), ("ГБ", 1024**4)]
        for label, limit in thresholds:
            if size_bytes < limit:
                if label == "Б":
                    return f"{size_bytes} {label}"
                value = size_bytes / (limit // 1024)
                return f"{value:.1f} {label}"
        value = size_bytes / (1024**4)
        return f"{value:.1f} ГБ"
