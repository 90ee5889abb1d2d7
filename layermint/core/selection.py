"""Per-layer selections and the generated items built from them."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from PyQt6.QtGui import QImage

from layermint.config.constants import SKIP_MARKER, USED_SEPARATOR


@dataclass(frozen=True)
class Used:
    """The layer contributes the variant at ``variant_index``."""

    layer_id: str
    variant_index: int

    @property
    def key_fragment(self) -> str:
        return f"{self.variant_index}{USED_SEPARATOR}"


@dataclass(frozen=True)
class Skipped:
    """The layer is absent from the item (disabled, empty, or rolled out)."""

    layer_id: str

    @property
    def key_fragment(self) -> str:
        return SKIP_MARKER


LayerSelection = Used | Skipped


def combination_key(selections: tuple[LayerSelection, ...] | list[LayerSelection]) -> str:
    """Fingerprint of a full set of per-layer selections."""
    return "".join(s.key_fragment for s in selections)


@dataclass(eq=False)
class GeneratedItem:
    """One sampled trait assignment, one selection per layer in stack order.

    ``image`` is filled in lazily the first time the item is rendered.
    """

    selections: tuple[LayerSelection, ...]
    item_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    image: QImage | None = field(default=None, repr=False)

    @property
    def key(self) -> str:
        return combination_key(self.selections)

    def selection_for(self, layer_id: str) -> LayerSelection | None:
        for selection in self.selections:
            if selection.layer_id == layer_id:
                return selection
        return None

    def variant_index_for(self, layer_id: str) -> int | None:
        """Return the selected variant index, or None if the layer is not used."""
        selection = self.selection_for(layer_id)
        if isinstance(selection, Used):
            return selection.variant_index
        return None
