"""GeneratorController — owns a collection and drives preview and archive generation."""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Any

from PyQt6.QtCore import QObject, pyqtSignal
from PyQt6.QtGui import QImage

from layermint.core.collection import CollectionConfig
from layermint.core.combinatorics import (
    GenerationError,
    Sampler,
    UniquenessExhaustedError,
    total_combinations,
)
from layermint.core.compositor import Compositor
from layermint.core.download_gate import DownloadGate
from layermint.core.layer_manager import LayerManager
from layermint.core.selection import GeneratedItem
from layermint.io.archiver import ArchiveCancelled, ArchiveError, BatchArchiver
from layermint.io.exporter import export_preview

log = logging.getLogger(__name__)


class GeneratorController(QObject):
    """Single owner of the mutable collection state.

    Signals
    -------
    combinations_changed(int)
        Emitted when the total combination count changes.
    warning_raised(str)
        User-facing message; generation or export did not happen.
    previews_changed()
    progress_changed(str, float)
        Forwarded from the archiver.
    archive_written(Path)
    """

    combinations_changed = pyqtSignal(int)
    warning_raised = pyqtSignal(str)
    previews_changed = pyqtSignal()
    progress_changed = pyqtSignal(str, float)
    archive_written = pyqtSignal(object)

    def __init__(
        self,
        config: CollectionConfig | None = None,
        rng: random.Random | None = None,
        gate: DownloadGate | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._config = config if config is not None else CollectionConfig()
        self._layer_manager = LayerManager(self)
        self._compositor = Compositor(self._config.width, self._config.height)
        self._sampler = Sampler(rng)
        self._gate = gate if gate is not None else DownloadGate(parent=self)
        self._archiver = BatchArchiver(self._compositor, self)
        self._previews: list[GeneratedItem] = []
        self._total = total_combinations(self._layer_manager.layers)

        self._layer_manager.stack_changed.connect(self._on_stack_changed)
        self._archiver.progress_changed.connect(self.progress_changed)

    # --- accessors ---

    @property
    def layer_manager(self) -> LayerManager:
        return self._layer_manager

    @property
    def config(self) -> CollectionConfig:
        return self._config

    @property
    def compositor(self) -> Compositor:
        return self._compositor

    @property
    def gate(self) -> DownloadGate:
        return self._gate

    @property
    def archiver(self) -> BatchArchiver:
        return self._archiver

    @property
    def previews(self) -> list[GeneratedItem]:
        return list(self._previews)

    @property
    def total_combinations(self) -> int:
        return self._total

    # --- configuration ---

    def set_batch_size(self, size: int) -> int:
        """Store the requested batch size, clamped to [1, total combinations]."""
        if size > self._total:
            self.warning_raised.emit(
                f"You've requested {size} items but there are only "
                f"{self._total} possible unique combinations"
            )
            size = self._total
        self._config.batch_size = max(1, size)
        return self._config.batch_size

    def set_output_size(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Output size must be positive, got {width}x{height}")
        self._config.width = width
        self._config.height = height
        self._compositor.resize(width, height)
        self._invalidate_preview_images()

    # --- generation ---

    def generate_previews(self) -> bool:
        """Sample a new batch. Returns False (after a warning) if it could not start."""
        layers = self._layer_manager.layers
        try:
            items = self._sampler.sample_batch(layers, self._config.batch_size)
        except (GenerationError, UniquenessExhaustedError) as exc:
            self.warning_raised.emit(str(exc))
            return False
        self._previews = items
        self.previews_changed.emit()
        return True

    def preview_image(self, item: GeneratedItem) -> QImage:
        """Rendered raster for *item*, produced on first request."""
        if item.image is None:
            item.image = self._compositor.render(item, self._layer_manager.layers)
        return item.image

    def layer_overview(self, show_all: bool = True) -> QImage:
        return self._compositor.render_overview(
            self._layer_manager.layers, self._layer_manager.active_index, show_all
        )

    def export_preview(self, item: GeneratedItem, directory: Path) -> Path | None:
        self.preview_image(item)
        return export_preview(
            self._compositor,
            item,
            self._layer_manager.layers,
            directory,
            self._config.item_prefix,
        )

    # --- download ---

    def request_download(self, directory: Path) -> bool:
        """Build the archive into *directory* once the gate allows it.

        Returns True if the archive was written right away.
        """
        if not self._previews:
            self.warning_raised.emit("Generate previews before downloading")
            return False
        return self._gate.request(lambda: self._write_archive(directory))

    def cancel_download(self) -> None:
        self._archiver.cancel()

    def snapshot(self) -> dict[str, Any]:
        """Plain-data view of the collection (config plus layers)."""
        return {
            "config": self._config.to_dict(),
            "layers": [layer.to_dict() for layer in self._layer_manager.layers],
            "total_combinations": self._total,
        }

    # --- internal ---

    def _write_archive(self, directory: Path) -> Path | None:
        try:
            path = self._archiver.build(
                self._previews, self._layer_manager.layers, self._config, directory
            )
        except ArchiveCancelled:
            log.info("Archive build cancelled")
            return None
        except ArchiveError as exc:
            self.warning_raised.emit(f"Download failed, please try again: {exc}")
            return None
        self.archive_written.emit(path)
        return path

    def _invalidate_preview_images(self) -> None:
        for item in self._previews:
            item.image = None

    def _on_stack_changed(self) -> None:
        self._invalidate_preview_images()
        total = total_combinations(self._layer_manager.layers)
        if total != self._total:
            self._total = total
            self.combinations_changed.emit(total)
