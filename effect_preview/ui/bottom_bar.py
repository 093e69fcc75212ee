from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from effect_preview.config import AppConfig


class BottomBar(ctk.CTkFrame):
    def __init__(self, master: ctk.CTk, config: AppConfig, **kwargs) -> None:
        super().__init__(master, height=64, **kwargs)

        # callbacks
        self.on_scale_change: Optional[Callable[[float], None]] = None
        self.on_scale_reset: Optional[Callable[[], None]] = None

        # layout
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(1, weight=1)  # slider stretches

        self._scale_label = ctk.CTkLabel(self, text="Масштаб")
        self._scale_label.grid(row=0, column=0, padx=(10, 6), pady=8, sticky="w")

        steps = int(round((config.scale_max - config.scale_min) / config.scale_step))
        self._scale_value = ctk.StringVar(value="1.0×")
        self._scale_slider = ctk.CTkSlider(
            self,
            from_=config.scale_min,
            to=config.scale_max,
            number_of_steps=steps,
            command=self._on_slider_change,
        )
        self._scale_slider.set(1.0)
        self._scale_slider.grid(row=0, column=1, padx=6, pady=8, sticky="ew")
        self._scale_value_label = ctk.CTkLabel(self, textvariable=self._scale_value, width=48, anchor="w")
        self._scale_value_label.grid(row=0, column=2, padx=(6, 12), pady=8, sticky="w")

        self._reset_btn = ctk.CTkButton(self, text="Сбросить", width=96, command=self._on_reset_click)
        self._reset_btn.grid(row=0, column=3, padx=(6, 10), pady=8, sticky="e")

    # public API (sync from controller)
    def set_scale(self, scale: float) -> None:
        self._scale_slider.set(scale)
        self._scale_value.set(f"{scale:.1f}×")

    # events
    def _on_slider_change(self, value: float) -> None:
        scale = round(float(value), 2)
        self._scale_value.set(f"{scale:.1f}×")
        if self.on_scale_change:
            self.on_scale_change(scale)

    def _on_reset_click(self) -> None:
        self.set_scale(1.0)
        if self.on_scale_reset:
            self.on_scale_reset()
