"""Persistent application preferences backed by QSettings.

Only user preferences live here; collections are never persisted.
"""

from PyQt6.QtCore import QSettings

from layermint.config.constants import (
    APP_NAME,
    DEFAULT_BATCH_SIZE,
    DEFAULT_CANVAS_HEIGHT,
    DEFAULT_CANVAS_WIDTH,
    ORG_NAME,
)


class AppSettings:
    """Thin wrapper around QSettings for typed access to application preferences."""

    def __init__(self, qsettings: QSettings | None = None) -> None:
        self._qs = qsettings if qsettings is not None else QSettings(ORG_NAME, APP_NAME)

    # --- output size ---

    def output_width(self) -> int:
        val = self._qs.value("output/width", DEFAULT_CANVAS_WIDTH)
        return int(val)

    def output_height(self) -> int:
        val = self._qs.value("output/height", DEFAULT_CANVAS_HEIGHT)
        return int(val)

    def set_output_size(self, width: int, height: int) -> None:
        self._qs.setValue("output/width", width)
        self._qs.setValue("output/height", height)

    # --- generation ---

    def batch_size(self) -> int:
        val = self._qs.value("generation/batchSize", DEFAULT_BATCH_SIZE)
        return int(val)

    def set_batch_size(self, size: int) -> None:
        self._qs.setValue("generation/batchSize", size)

    # --- export ---

    def export_directory(self) -> str:
        val = self._qs.value("export/directory", "")
        return str(val) if val else ""

    def set_export_directory(self, path: str) -> None:
        self._qs.setValue("export/directory", path)

    def sync(self) -> None:
        self._qs.sync()
