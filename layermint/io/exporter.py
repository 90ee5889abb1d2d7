"""Exporter — save single composited previews as PNG files."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from PyQt6.QtGui import QImage

from layermint.core.compositor import Compositor
from layermint.core.layer import Layer
from layermint.core.selection import GeneratedItem


def export_png(image: QImage, path: Path) -> bool:
    """Write *image* to *path* as PNG. Returns False if Qt could not save it."""
    return image.save(str(path), "PNG")


def preview_filename(item: GeneratedItem, prefix: str = "") -> str:
    prefix = prefix.strip()
    return f"{prefix}-{item.item_id}.png" if prefix else f"{item.item_id}.png"


def export_preview(
    compositor: Compositor,
    item: GeneratedItem,
    layers: Sequence[Layer],
    directory: Path,
    prefix: str = "",
) -> Path | None:
    """Render *item* and save it into *directory*; returns the file path or None."""
    if not compositor.draw_queue(item, layers):
        return None
    path = Path(directory) / preview_filename(item, prefix)
    image = item.image if item.image is not None else compositor.render(item, layers)
    if not export_png(image, path):
        return None
    return path
