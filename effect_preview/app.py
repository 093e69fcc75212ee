import asyncio

import customtkinter as ctk

from effect_preview.config import AppConfig, RenderConfig
from effect_preview.controllers.app_controller import AppController
from effect_preview.models.surface import Surface
from effect_preview.services.registry import EffectRegistry
from effect_preview.ui.bottom_bar import BottomBar
from effect_preview.ui.image_viewer import ImageViewer
from effect_preview.ui.sidebar import Sidebar


class EffectPreviewApp(ctk.CTk):
    def __init__(self, config: AppConfig, render_config: RenderConfig = RenderConfig()) -> None:
        super().__init__()
        ctk.set_appearance_mode("system")
        ctk.set_default_color_theme("blue")

        self.title(config.title)
        self.minsize(config.min_width, config.min_height)
        self._frame_interval = render_config.frame_interval
        self._closed = False
        self.protocol("WM_DELETE_WINDOW", self._on_close)

        # root layout: left viewer, right sidebar
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=0)

        self._viewer = ImageViewer(self)
        self._viewer.grid(row=0, column=0, sticky="nsew", padx=(12, 6), pady=(12, 6))

        self._sidebar = Sidebar(self)
        self._sidebar.grid(row=0, column=1, sticky="ns", padx=(6, 12), pady=(12, 6))

        self._bottom = BottomBar(self, config)
        self._bottom.grid(row=1, column=0, columnspan=2, sticky="ew", padx=12, pady=(0, 12))

        self._surface = Surface()
        self._registry = EffectRegistry(self._surface, render_config)
        self._controller = AppController(
            viewer=self._viewer,
            sidebar=self._sidebar,
            bottom=self._bottom,
            window=self,
            registry=self._registry,
            config=config,
        )
        self._controller.bind_events()

    async def run(self) -> None:
        """Крутит Tk внутри asyncio: мозаика и UI делят один поток."""
        while not self._closed:
            self.update()
            if self._closed:
                break
            self._controller.refresh_view()
            await asyncio.sleep(self._frame_interval)

    def _on_close(self) -> None:
        self._closed = True
        self.destroy()
