"""Variant data model."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from layermint.config.constants import MAX_RARITY


@dataclass
class Variant:
    """One selectable image option inside a layer.

    ``source`` is an opaque reference to the image data; the compositor is
    the only consumer that resolves it to pixels. ``rarity`` is a relative
    weight within the owning layer and does not have to sum to 100 across
    siblings.
    """

    source: Path
    name: str = ""
    rarity: int = MAX_RARITY
    variant_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        self.source = Path(self.source)
        if not self.name:
            self.name = self.source.stem

    @classmethod
    def from_file(cls, path: Path) -> Variant:
        """Create a variant named after *path* without its extension."""
        return cls(source=Path(path))

    def to_dict(self) -> dict[str, Any]:
        return {
            "variant_id": self.variant_id,
            "source": str(self.source),
            "name": self.name,
            "rarity": self.rarity,
        }
