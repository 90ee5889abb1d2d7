"""CollectionConfig — collection-level metadata and derived file names."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Any

from layermint.config.constants import (
    ARCHIVE_EXTENSION,
    DEFAULT_ARCHIVE_STEM,
    DEFAULT_BATCH_SIZE,
    DEFAULT_CANVAS_HEIGHT,
    DEFAULT_CANVAS_WIDTH,
    DEFAULT_COLLECTION_NAME,
    DEFAULT_DESCRIPTION,
    GENERIC_ITEM_STEM,
)

_UNSAFE_CHARS = re.compile(r"[^a-z0-9]", re.IGNORECASE)


@dataclass
class CollectionConfig:
    """Everything about a collection except its layers."""

    name: str = DEFAULT_COLLECTION_NAME
    description: str = ""
    item_prefix: str = ""
    width: int = DEFAULT_CANVAS_WIDTH
    height: int = DEFAULT_CANVAS_HEIGHT
    batch_size: int = DEFAULT_BATCH_SIZE

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Output size must be positive, got {self.width}x{self.height}")

    # --- derived names ---

    def item_filename(self, number: int) -> str:
        """Return the archive file name for the 1-based item *number*."""
        prefix = self.item_prefix.strip()
        stem = prefix if prefix else GENERIC_ITEM_STEM
        return f"{stem}-{number}.png"

    def item_title(self, number: int) -> str:
        prefix = self.item_prefix.strip()
        return f"{prefix} #{number}" if prefix else f"#{number}"

    @property
    def effective_description(self) -> str:
        return self.description or DEFAULT_DESCRIPTION

    def archive_filename(self) -> str:
        """Lower-cased collection name with every non-alphanumeric replaced by ``_``."""
        stem = _UNSAFE_CHARS.sub("_", self.name.strip()).lower()
        return f"{stem or DEFAULT_ARCHIVE_STEM}{ARCHIVE_EXTENSION}"

    # --- serialization ---

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CollectionConfig:
        return cls(
            name=str(data.get("name", DEFAULT_COLLECTION_NAME)),
            description=str(data.get("description", "")),
            item_prefix=str(data.get("item_prefix", "")),
            width=int(data.get("width", DEFAULT_CANVAS_WIDTH)),
            height=int(data.get("height", DEFAULT_CANVAS_HEIGHT)),
            batch_size=int(data.get("batch_size", DEFAULT_BATCH_SIZE)),
        )
