"""Виджет просмотра буфера поверхности.

Принципы:
- SRP: только показ готового растра; масштабом управляет `Surface`, здесь
  изображение выводится 1:1.
- Прозрачные области видны на шахматной подложке, положение можно сдвигать мышью.
"""
from __future__ import annotations

from typing import Optional, Tuple

import customtkinter as ctk
import tkinter as tk
from PIL import Image, ImageTk

_CHECKER_SIZE = 8
_CHECKER_COLORS = {
    "light": ((255, 255, 255, 255), (224, 224, 224, 255)),
    "dark": ((64, 64, 64, 255), (48, 48, 48, 255)),
}


def _clamp_offset(content: int, view: int, offset: Optional[int]) -> int:
    """Положение по одной оси: меньшее окна центрируется, большее не отрывается от краёв."""
    if content <= view:
        return (view - content) // 2
    if offset is None:
        return 0
    return max(view - content, min(0, offset))


class ImageViewer(ctk.CTkFrame):
    """Канва с результатом эффекта."""
    def __init__(self, master: ctk.CTk | tk.Misc, **kwargs) -> None:
        super().__init__(master, **kwargs)
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(0, weight=1)

        self._view = tk.Canvas(self, highlightthickness=0, bg=self._background())
        self._view.grid(row=0, column=0, sticky="nsew")

        self._image: Optional[Image.Image] = None
        self._photo: Optional[ImageTk.PhotoImage] = None
        self._offset: Optional[Tuple[int, int]] = None
        # (x мыши, y мыши, x изображения, y изображения) в момент нажатия
        self._drag: Optional[Tuple[int, int, int, int]] = None

        self._view.bind("<Configure>", lambda _e: self._redraw())
        self._view.bind("<ButtonPress-1>", self._on_press)
        self._view.bind("<B1-Motion>", self._on_drag)
        self._view.bind("<ButtonRelease-1>", self._on_release)

    # ---- Public API ----
    def set_image(self, image: Optional[Image.Image], recenter: bool = False) -> None:
        """Показывает растр (или очищает виджет при `None`)."""
        self._image = image
        if recenter:
            self._offset = None
        self._redraw()

    # ---- Rendering ----
    def _redraw(self) -> None:
        self._view.delete("all")
        image = self._image
        if image is None or image.width == 0 or image.height == 0:
            self._photo = None
            return

        ox, oy = self._offset if self._offset is not None else (None, None)
        x = _clamp_offset(image.width, self._view.winfo_width(), ox)
        y = _clamp_offset(image.height, self._view.winfo_height(), oy)
        self._offset = (x, y)

        composed = self._checkerboard(image.size)
        composed.alpha_composite(image)
        self._photo = ImageTk.PhotoImage(composed)
        self._view.create_image(x, y, image=self._photo, anchor="nw")

    def _checkerboard(self, size: Tuple[int, int]) -> Image.Image:
        light, dark = _CHECKER_COLORS[ctk.get_appearance_mode().lower()]
        cell = _CHECKER_SIZE
        tile = Image.new("RGBA", (cell * 2, cell * 2), light)
        tile.paste(dark, (0, 0, cell, cell))
        tile.paste(dark, (cell, cell, cell * 2, cell * 2))
        board = Image.new("RGBA", size)
        for top in range(0, size[1], tile.height):
            for left in range(0, size[0], tile.width):
                board.paste(tile, (left, top))
        return board

    def _background(self) -> str:
        # CTk не отдаёт цвет темы для tk.Canvas
        return "#1f1f1f" if ctk.get_appearance_mode().lower() == "dark" else "#f2f2f2"

    # ---- Dragging ----
    def _on_press(self, event: tk.Event) -> None:
        if self._offset is None:
            return
        self._view.focus_set()
        self._drag = (event.x, event.y, *self._offset)

    def _on_drag(self, event: tk.Event) -> None:
        if self._drag is None:
            return
        start_x, start_y, left, top = self._drag
        self._offset = (left + event.x - start_x, top + event.y - start_y)
        self._redraw()

    def _on_release(self, _event: tk.Event) -> None:
        self._drag = None
