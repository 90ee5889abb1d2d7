"""Semicolon-delimited metadata table written next to the item images."""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence

from layermint.config.constants import (
    COPIES_PER_ITEM,
    METADATA_DELIMITER,
    METADATA_FIXED_COLUMNS,
    NONE_TOKEN,
)
from layermint.core.collection import CollectionConfig
from layermint.core.layer import Layer
from layermint.core.selection import GeneratedItem


def trait_label(item: GeneratedItem, layer: Layer) -> str:
    """Display name of the variant *item* uses on *layer*, or ``None``."""
    if not layer.enabled:
        return NONE_TOKEN
    index = item.variant_index_for(layer.layer_id)
    variant = layer.variant_at(index) if index is not None else None
    if variant is None or not variant.name:
        return NONE_TOKEN
    return variant.name


class MetadataTable:
    """One header row plus one row per item, columns in layer stack order."""

    def __init__(self, layers: Sequence[Layer], config: CollectionConfig) -> None:
        self._layers = list(layers)
        self._config = config
        self._rows: list[list[str]] = []

    @property
    def header(self) -> list[str]:
        return [*METADATA_FIXED_COLUMNS, *(layer.name for layer in self._layers)]

    @property
    def rows(self) -> list[list[str]]:
        return [list(r) for r in self._rows]

    def add_item(self, item: GeneratedItem, number: int) -> list[str]:
        """Append the row for the 1-based item *number* and return it."""
        row = [
            self._config.item_filename(number),
            self._config.item_title(number),
            self._config.effective_description,
            str(COPIES_PER_ITEM),
        ]
        row.extend(trait_label(item, layer) for layer in self._layers)
        self._rows.append(row)
        return row

    def to_text(self) -> str:
        buf = io.StringIO()
        writer = csv.writer(buf, delimiter=METADATA_DELIMITER, lineterminator="\n")
        writer.writerow(self.header)
        writer.writerows(self._rows)
        return buf.getvalue()
