"""Tests for image loading and PNG export."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from effect_preview.exceptions import ExportError
from effect_preview.models.surface import Surface
from effect_preview.services.effects import OpacityEffect
from effect_preview.services.image_service import ImageService


@pytest.fixture
def service() -> ImageService:
    return ImageService()


class TestLoadImage:
    def test_loads_rgb_as_rgba(self, service: ImageService, tmp_path: Path) -> None:
        path = tmp_path / "photo.jpg"
        Image.new("RGB", (16, 8), (10, 20, 30)).save(path)
        data = service.load_image(path)
        assert data.pil_image.mode == "RGBA"
        assert (data.width, data.height) == (16, 8)
        assert data.source_mode == "RGB"
        assert data.name == "photo.jpg"
        assert data.size_bytes == path.stat().st_size

    def test_loads_palette_image(self, service: ImageService, tmp_path: Path) -> None:
        path = tmp_path / "icon.png"
        Image.new("P", (4, 4)).save(path)
        data = service.load_image(str(path))
        assert data.source_mode == "P"
        assert data.pil_image.mode == "RGBA"

    def test_missing_file(self, service: ImageService, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            service.load_image(tmp_path / "missing.png")

    def test_directory_is_not_a_file(self, service: ImageService, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            service.load_image(tmp_path)

    def test_not_an_image(self, service: ImageService, tmp_path: Path) -> None:
        path = tmp_path / "notes.png"
        path.write_text("hello")
        with pytest.raises(ValueError):
            service.load_image(path)


class TestExport:
    def test_writes_surface_pixels(self, service: ImageService, surface: Surface, tmp_path: Path) -> None:
        OpacityEffect(surface).draw()
        path = service.export_png(surface, tmp_path / "out.png")
        with Image.open(path) as saved:
            assert saved.format == "PNG"
            assert saved.size == surface.size
            assert np.array_equal(np.asarray(saved.convert("RGBA")), surface.pixels)

    def test_nothing_loaded(self, service: ImageService, tmp_path: Path) -> None:
        with pytest.raises(ExportError):
            service.export_png(Surface(), tmp_path / "out.png")

    def test_failed_load_blocks_export(self, service: ImageService, surface: Surface, tmp_path: Path) -> None:
        surface.mark_load_failed()
        with pytest.raises(ExportError):
            service.export_png(surface, tmp_path / "out.png")

    def test_unwritable_path(self, service: ImageService, surface: Surface, tmp_path: Path) -> None:
        with pytest.raises(ExportError):
            service.export_png(surface, tmp_path / "missing-dir" / "out.png")

    @pytest.mark.parametrize(
        "image_name, expected",
        [("", "image.png"), ("photo.jpg", "photo.png"), ("scan", "scan.png"), ("a.b.webp", "a.b.png")],
    )
    def test_export_file_name(self, image_name: str, expected: str) -> None:
        assert ImageService.export_file_name(image_name) == expected
