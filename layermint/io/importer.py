"""Importer — turn PNG files on disk into layer variants."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from PyQt6.QtGui import QImageReader

from layermint.config.constants import ACCEPTED_IMAGE_SUFFIXES, UPLOAD_SIZE_GUIDANCE
from layermint.core.layer import Layer
from layermint.core.layer_manager import LayerManager
from layermint.core.variant import Variant

log = logging.getLogger(__name__)


def is_accepted_image(path: Path) -> bool:
    """True for readable files with an accepted suffix."""
    if path.suffix.lower() not in ACCEPTED_IMAGE_SUFFIXES or not path.is_file():
        return False
    return QImageReader(str(path)).canRead()


def import_variants(manager: LayerManager, layer_id: str, paths: Iterable[Path]) -> list[Variant]:
    """Add one variant per accepted file to the layer with *layer_id*.

    Rejected files are logged and skipped. Files above the upload size
    guidance are accepted with a warning.
    """
    variants: list[Variant] = []
    for path in map(Path, paths):
        if not is_accepted_image(path):
            log.warning("Skipping %s: not a readable PNG image", path)
            continue
        size = path.stat().st_size
        if size > UPLOAD_SIZE_GUIDANCE:
            log.warning(
                "%s is %d bytes, above the %d byte guidance", path, size, UPLOAD_SIZE_GUIDANCE
            )
        variants.append(Variant.from_file(path))
    return manager.add_variants(layer_id, variants)


def import_layer_directory(manager: LayerManager, root: Path) -> list[Layer]:
    """Create one layer per sub-directory of *root*, sorted by name.

    Each sub-directory's images become that layer's variants, so the first
    directory ends up at the bottom of the stack.
    """
    layers: list[Layer] = []
    for folder in sorted(p for p in Path(root).iterdir() if p.is_dir()):
        layer = manager.add_layer(folder.name)
        import_variants(manager, layer.layer_id, sorted(folder.iterdir()))
        layers.append(layer)
    return layers
