"""Compositor — flattens a generated item's layers into one raster."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from PyQt6.QtCore import QRectF, Qt
from PyQt6.QtGui import QColor, QFont, QImage, QImageReader, QPainter

from layermint.config.constants import (
    EMPTY_PREVIEW_BG_COLOR,
    EMPTY_PREVIEW_FONT_SIZE,
    EMPTY_PREVIEW_TEXT,
    EMPTY_PREVIEW_TEXT_COLOR,
)
from layermint.core.layer import Layer
from layermint.core.selection import GeneratedItem
from layermint.core.variant import Variant

log = logging.getLogger(__name__)

# Worker threads used to decode one item's layer images
_LOAD_WORKERS = 4


def load_image(path: Path) -> QImage | None:
    """Decode *path*, returning None (and logging) if it cannot be read."""
    reader = QImageReader(str(path))
    image = reader.read()
    if image.isNull():
        log.warning("Failed to load image %s: %s", path, reader.errorString())
        return None
    return image


class ImageCache:
    """Decoded variant images keyed by source path.

    Failed loads are not cached, so a file fixed on disk is picked up on the
    next render.
    """

    def __init__(self, max_workers: int = _LOAD_WORKERS) -> None:
        self._images: dict[Path, QImage] = {}
        self._max_workers = max_workers

    def __len__(self) -> int:
        return len(self._images)

    def get(self, path: Path) -> QImage | None:
        path = Path(path)
        image = self._images.get(path)
        if image is None:
            image = load_image(path)
            if image is not None:
                self._images[path] = image
        return image

    def load_many(self, paths: Iterable[Path]) -> dict[Path, QImage | None]:
        """Load every path, decoding uncached ones concurrently."""
        wanted = list(dict.fromkeys(Path(p) for p in paths))
        missing = [p for p in wanted if p not in self._images]
        if len(missing) > 1:
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                for path, image in zip(missing, pool.map(load_image, missing)):
                    if image is not None:
                        self._images[path] = image
        else:
            for path in missing:
                self.get(path)
        return {p: self._images.get(p) for p in wanted}

    def clear(self) -> None:
        self._images.clear()


class Compositor:
    """Draws selected variant images in ascending z-order onto a fixed-size canvas.

    A single canvas is reused for every render and cleared before each
    draw sequence. :meth:`render_to_canvas` hands out that shared canvas;
    :meth:`render` returns an independent copy.
    """

    def __init__(self, width: int, height: int, cache: ImageCache | None = None) -> None:
        self._cache = cache if cache is not None else ImageCache()
        self._canvas = self._new_canvas(width, height)

    @property
    def width(self) -> int:
        return self._canvas.width()

    @property
    def height(self) -> int:
        return self._canvas.height()

    @property
    def cache(self) -> ImageCache:
        return self._cache

    def resize(self, width: int, height: int) -> None:
        if (width, height) != (self.width, self.height):
            self._canvas = self._new_canvas(width, height)

    # --- item rendering ---

    def draw_queue(
        self, item: GeneratedItem, layers: Sequence[Layer]
    ) -> list[tuple[Layer, Variant]]:
        """Enabled, used layers with a resolvable variant, sorted by z-order."""
        queue: list[tuple[Layer, Variant]] = []
        for layer in layers:
            if not layer.enabled:
                continue
            index = item.variant_index_for(layer.layer_id)
            if index is None:
                continue
            variant = layer.variant_at(index)
            if variant is None:
                continue
            queue.append((layer, variant))
        queue.sort(key=lambda entry: entry[0].z_order)
        return queue

    def render_to_canvas(self, item: GeneratedItem, layers: Sequence[Layer]) -> QImage:
        """Composite *item* into the shared canvas and return it."""
        queue = self.draw_queue(item, layers)
        images = self._cache.load_many(variant.source for _, variant in queue)
        self._draw(
            [(layer, variant, images.get(variant.source)) for layer, variant in queue]
        )
        return self._canvas

    def render(self, item: GeneratedItem, layers: Sequence[Layer]) -> QImage:
        return self.render_to_canvas(item, layers).copy()

    # --- layer overview ---

    def render_overview(
        self, layers: Sequence[Layer], active_index: int = 0, show_all: bool = True
    ) -> QImage:
        """Preview the stack using each layer's first variant.

        With *show_all* every enabled, non-empty layer is drawn in z-order;
        otherwise only the layer at *active_index*. An empty stack renders a
        placeholder message, which needs a running QGuiApplication.
        """
        if not layers:
            return self._render_placeholder()
        if show_all:
            chosen = sorted(
                (lyr for lyr in layers if lyr.participates), key=lambda lyr: lyr.z_order
            )
        elif 0 <= active_index < len(layers) and layers[active_index].variants:
            chosen = [layers[active_index]]
        else:
            chosen = []
        entries = [(layer, layer.variants[0]) for layer in chosen]
        images = self._cache.load_many(variant.source for _, variant in entries)
        self._draw([(layer, variant, images.get(variant.source)) for layer, variant in entries])
        return self._canvas.copy()

    # --- internal ---

    @staticmethod
    def _new_canvas(width: int, height: int) -> QImage:
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas size must be positive, got {width}x{height}")
        image = QImage(width, height, QImage.Format.Format_ARGB32_Premultiplied)
        image.fill(Qt.GlobalColor.transparent)
        return image

    def _draw(self, entries: list[tuple[Layer, Variant, QImage | None]]) -> None:
        self._canvas.fill(Qt.GlobalColor.transparent)
        target = QRectF(0, 0, self.width, self.height)
        painter = QPainter(self._canvas)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        for layer, variant, image in entries:
            if image is None:
                log.warning("Skipping layer %r: image %r did not load", layer.name, variant.name)
                continue
            painter.drawImage(target, image)
        painter.end()

    def _render_placeholder(self) -> QImage:
        self._canvas.fill(QColor(EMPTY_PREVIEW_BG_COLOR))
        painter = QPainter(self._canvas)
        font = QFont()
        font.setPixelSize(EMPTY_PREVIEW_FONT_SIZE)
        painter.setFont(font)
        painter.setPen(QColor(EMPTY_PREVIEW_TEXT_COLOR))
        painter.drawText(
            QRectF(0, 0, self.width, self.height),
            Qt.AlignmentFlag.AlignCenter,
            EMPTY_PREVIEW_TEXT,
        )
        painter.end()
        return self._canvas.copy()
