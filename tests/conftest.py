"""Shared pytest fixtures."""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from collections.abc import Callable  # noqa: E402
from pathlib import Path  # noqa: E402

import pytest  # noqa: E402
from PyQt6.QtCore import Qt  # noqa: E402
from PyQt6.QtGui import QColor, QImage  # noqa: E402
from PyQt6.QtWidgets import QApplication  # noqa: E402

from layermint.core.layer import Layer  # noqa: E402
from layermint.core.layer_manager import LayerManager  # noqa: E402
from layermint.core.variant import Variant  # noqa: E402

CANVAS = 16


@pytest.fixture()
def make_png(qapp: QApplication, tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a CANVAS x CANVAS PNG filled with *color*.

    With ``left_half=True`` only the left half is painted; the rest stays
    transparent.
    """

    def _make(name: str, color: str, left_half: bool = False, size: int = CANVAS) -> Path:
        image = QImage(size, size, QImage.Format.Format_ARGB32)
        image.fill(Qt.GlobalColor.transparent)
        fill = QColor(color)
        for x in range(size // 2 if left_half else size):
            for y in range(size):
                image.setPixelColor(x, y, fill)
        path = tmp_path / f"{name}.png"
        assert image.save(str(path), "PNG")
        return path

    return _make


@pytest.fixture()
def manager() -> LayerManager:
    return LayerManager()


@pytest.fixture()
def add_layer(manager: LayerManager) -> Callable[..., Layer]:
    """Factory adding a layer with one variant per source path."""

    def _add(
        name: str,
        sources: list[Path],
        weights: list[int] | None = None,
        layer_rarity: int = 100,
    ) -> Layer:
        layer = manager.add_layer(name)
        manager.add_variants(layer.layer_id, [Variant(source=p) for p in sources])
        for i, weight in enumerate(weights or []):
            manager.set_variant_rarity(layer.layer_id, i, weight)
        manager.set_layer_rarity(layer.layer_id, layer_rarity)
        return layer

    return _add
