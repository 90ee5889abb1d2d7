"""BatchArchiver — render a batch and pack images plus metadata into one ZIP."""

from __future__ import annotations

import logging
import zipfile
from collections.abc import Sequence
from pathlib import Path

from PyQt6.QtCore import QBuffer, QIODevice, QObject, pyqtSignal
from PyQt6.QtGui import QImage

from layermint.config.constants import IMAGE_FOLDER, METADATA_FILENAME
from layermint.core.collection import CollectionConfig
from layermint.core.compositor import Compositor
from layermint.core.layer import Layer
from layermint.core.selection import GeneratedItem
from layermint.io.metadata import MetadataTable

log = logging.getLogger(__name__)

PHASE_RENDER = "render"
PHASE_COMPRESS = "compress"


class ArchiveError(RuntimeError):
    """Writing the archive failed; the export attempt is abandoned."""


class ArchiveCancelled(ArchiveError):
    """The build was cancelled between two items."""


def encode_png(image: QImage) -> bytes | None:
    """Encode *image* as PNG bytes, or None if Qt refuses to encode it."""
    buf = QBuffer()
    buf.open(QIODevice.OpenModeFlag.WriteOnly)
    if not image.save(buf, "PNG"):
        return None
    data: bytes = buf.data().data()
    return data


class BatchArchiver(QObject):
    """Drives the compositor over a batch and streams the results into a ZIP.

    Items are rendered one at a time on the compositor's shared canvas, in
    batch order. Progress is reported twice from 0 to 100: once while
    rendering and once while compressing.

    Signals
    -------
    progress_changed(str, float)
        Emitted with the phase name and a percentage.
    """

    progress_changed = pyqtSignal(str, float)

    def __init__(self, compositor: Compositor, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._compositor = compositor
        self._cancel_requested = False

    def cancel(self) -> None:
        """Stop the running build at the next item boundary."""
        self._cancel_requested = True

    def build(
        self,
        items: Sequence[GeneratedItem],
        layers: Sequence[Layer],
        config: CollectionConfig,
        destination: Path,
    ) -> Path:
        """Write the archive and return its path.

        If *destination* is a directory the archive is named after the
        collection. A failed or cancelled build leaves no file behind.
        """
        self._cancel_requested = False
        destination = Path(destination)
        path = destination / config.archive_filename() if destination.is_dir() else destination

        self._compositor.resize(config.width, config.height)
        entries, table = self._render_entries(items, layers, config)
        entries.append((METADATA_FILENAME, table.to_text().encode("utf-8")))
        self._write_zip(path, entries)
        log.info("Wrote %s (%d items)", path, len(items))
        return path

    # --- internal ---

    def _render_entries(
        self,
        items: Sequence[GeneratedItem],
        layers: Sequence[Layer],
        config: CollectionConfig,
    ) -> tuple[list[tuple[str, bytes]], MetadataTable]:
        table = MetadataTable(layers, config)
        entries: list[tuple[str, bytes]] = []
        total = len(items)
        if total == 0:
            self.progress_changed.emit(PHASE_RENDER, 100.0)
        for number, item in enumerate(items, start=1):
            self._check_cancelled()
            filename = config.item_filename(number)
            canvas = self._compositor.render_to_canvas(item, layers)
            png = encode_png(canvas)
            if png is None:
                log.warning("Could not encode %s; leaving it out of the archive", filename)
            else:
                entries.append((f"{IMAGE_FOLDER}/{filename}", png))
            table.add_item(item, number)
            self.progress_changed.emit(PHASE_RENDER, number / total * 100.0)
        return entries, table

    def _write_zip(self, path: Path, entries: list[tuple[str, bytes]]) -> None:
        partial = path.with_name(path.name + ".part")
        try:
            with zipfile.ZipFile(partial, "w", zipfile.ZIP_DEFLATED) as zf:
                zf.writestr(f"{IMAGE_FOLDER}/", b"")
                for i, (name, data) in enumerate(entries, start=1):
                    self._check_cancelled()
                    zf.writestr(name, data)
                    self.progress_changed.emit(PHASE_COMPRESS, i / len(entries) * 100.0)
            partial.replace(path)
        except ArchiveCancelled:
            partial.unlink(missing_ok=True)
            raise
        except (OSError, zipfile.BadZipFile) as exc:
            partial.unlink(missing_ok=True)
            raise ArchiveError(f"Could not write {path}: {exc}") from exc

    def _check_cancelled(self) -> None:
        if self._cancel_requested:
            self._cancel_requested = False
            raise ArchiveCancelled("Archive build cancelled")
