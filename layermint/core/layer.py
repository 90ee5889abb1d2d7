"""Layer data model."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from layermint.config.constants import MAX_RARITY
from layermint.core.variant import Variant


@dataclass
class Layer:
    """A trait category: a pool of weighted variants drawn at one z-order.

    ``z_order`` is kept equal to the layer's position in the
    :class:`~layermint.core.layer_manager.LayerManager` stack; lower values
    are drawn first and end up visually at the bottom.
    """

    name: str
    layer_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    variants: list[Variant] = field(default_factory=list)
    z_order: int = 0
    enabled: bool = True
    layer_rarity: int = MAX_RARITY

    @property
    def variant_count(self) -> int:
        return len(self.variants)

    @property
    def participates(self) -> bool:
        """True if the layer takes part in counting and rendering."""
        return self.enabled and bool(self.variants)

    @property
    def always_used(self) -> bool:
        return self.layer_rarity >= MAX_RARITY

    @property
    def total_weight(self) -> int:
        return sum(v.rarity for v in self.variants)

    def variant_at(self, index: int) -> Variant | None:
        """Return the variant at *index*, or None if the index is out of range."""
        if 0 <= index < len(self.variants):
            return self.variants[index]
        return None

    def equalize_rarity(self) -> None:
        """Reset every variant to an equal share of 100, rounded down."""
        if not self.variants:
            return
        share = MAX_RARITY // len(self.variants)
        for variant in self.variants:
            variant.rarity = share

    def to_dict(self) -> dict[str, Any]:
        return {
            "layer_id": self.layer_id,
            "name": self.name,
            "z_order": self.z_order,
            "enabled": self.enabled,
            "layer_rarity": self.layer_rarity,
            "variants": [v.to_dict() for v in self.variants],
        }
