"""LayerManager — owns the ordered layer stack and emits change signals."""

from __future__ import annotations

from collections.abc import Iterable

from PyQt6.QtCore import QObject, pyqtSignal

from layermint.config.constants import MAX_RARITY, MIN_RARITY
from layermint.core.layer import Layer
from layermint.core.variant import Variant


def _clamp_rarity(value: int) -> int:
    return max(MIN_RARITY, min(MAX_RARITY, int(value)))


class LayerManager(QObject):
    """Manages an ordered list of :class:`Layer` objects.

    Layers are indexed bottom-to-top: index 0 is drawn first. Every layer's
    ``z_order`` equals its index after any mutation.

    Signals
    -------
    layer_added(Layer)
    layer_removed(str)
        Emitted with the removed layer's id.
    layers_reordered()
    active_layer_changed(int)
        Emitted with the new active index.
    layer_changed(str)
        Emitted when a layer's name, enabled flag or layer rarity changes.
    variants_changed(str)
        Emitted when a layer's variants are added, removed or edited.
    stack_changed()
        Emitted after any of the above.
    """

    layer_added = pyqtSignal(object)
    layer_removed = pyqtSignal(str)
    layers_reordered = pyqtSignal()
    active_layer_changed = pyqtSignal(int)
    layer_changed = pyqtSignal(str)
    variants_changed = pyqtSignal(str)
    stack_changed = pyqtSignal()

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._layers: list[Layer] = []
        self._active_index: int = 0

    # --- queries ---

    @property
    def layers(self) -> list[Layer]:
        """Return the layer list (bottom-to-top)."""
        return list(self._layers)

    @property
    def count(self) -> int:
        return len(self._layers)

    @property
    def active_index(self) -> int:
        return self._active_index

    @property
    def active_layer(self) -> Layer | None:
        if 0 <= self._active_index < len(self._layers):
            return self._layers[self._active_index]
        return None

    def layer_by_id(self, layer_id: str) -> Layer | None:
        for layer in self._layers:
            if layer.layer_id == layer_id:
                return layer
        return None

    def index_of(self, layer_id: str) -> int:
        for i, layer in enumerate(self._layers):
            if layer.layer_id == layer_id:
                return i
        return -1

    # --- layer mutations ---

    def add_layer(self, name: str | None = None) -> Layer:
        """Append a new layer on top of the stack and make it active."""
        name = (name or "").strip() or f"Layer {self.count + 1}"
        layer = Layer(name=name, z_order=len(self._layers))
        self._layers.append(layer)
        self._recalc_z_order()
        self.layer_added.emit(layer)
        self._set_active_index(len(self._layers) - 1)
        self.stack_changed.emit()
        return layer

    def remove_layer(self, layer_id: str) -> Layer | None:
        """Remove a layer and all its variants. Returns the removed layer, or None."""
        idx = self.index_of(layer_id)
        if idx < 0:
            return None
        layer = self._layers.pop(idx)
        self._recalc_z_order()
        self.layer_removed.emit(layer_id)
        if self._active_index >= len(self._layers):
            self._set_active_index(max(0, len(self._layers) - 1))
        self.stack_changed.emit()
        return layer

    def move_layer(self, layer_id: str, new_index: int) -> None:
        """Move a layer to *new_index*; the active layer stays active."""
        old_idx = self.index_of(layer_id)
        if old_idx < 0:
            return
        new_index = max(0, min(new_index, len(self._layers) - 1))
        if old_idx == new_index:
            return
        active = self.active_layer
        layer = self._layers.pop(old_idx)
        self._layers.insert(new_index, layer)
        self._recalc_z_order()
        self.layers_reordered.emit()
        if active is not None:
            self._set_active_index(self._layers.index(active))
        self.stack_changed.emit()

    def move_layer_up(self, layer_id: str) -> None:
        """Swap a layer with the one below it (towards index 0)."""
        idx = self.index_of(layer_id)
        if idx > 0:
            self.move_layer(layer_id, idx - 1)

    def move_layer_down(self, layer_id: str) -> None:
        """Swap a layer with the one above it (towards the top of the stack)."""
        idx = self.index_of(layer_id)
        if 0 <= idx < len(self._layers) - 1:
            self.move_layer(layer_id, idx + 1)

    def set_active(self, index: int) -> None:
        """Make the layer at *index* the one currently viewed."""
        if 0 <= index < len(self._layers):
            self._set_active_index(index)

    def rename_layer(self, layer_id: str, name: str) -> None:
        layer = self.layer_by_id(layer_id)
        if layer is not None:
            layer.name = name
            self._layer_changed(layer_id)

    def set_enabled(self, layer_id: str, enabled: bool) -> None:
        layer = self.layer_by_id(layer_id)
        if layer is not None:
            layer.enabled = enabled
            self._layer_changed(layer_id)

    def toggle_enabled(self, layer_id: str) -> None:
        layer = self.layer_by_id(layer_id)
        if layer is not None:
            self.set_enabled(layer_id, not layer.enabled)

    def set_layer_rarity(self, layer_id: str, rarity: int) -> None:
        layer = self.layer_by_id(layer_id)
        if layer is not None:
            layer.layer_rarity = _clamp_rarity(rarity)
            self._layer_changed(layer_id)

    # --- variant mutations ---

    def add_variants(self, layer_id: str, variants: Iterable[Variant]) -> list[Variant]:
        """Append *variants* to a layer and reset the layer to an equal split."""
        layer = self.layer_by_id(layer_id)
        if layer is None:
            return []
        added = list(variants)
        if not added:
            return []
        layer.variants.extend(added)
        layer.equalize_rarity()
        self._variants_changed(layer_id)
        return added

    def remove_variant(self, layer_id: str, index: int) -> Variant | None:
        """Remove the variant at *index* and re-split the remaining weights."""
        layer = self.layer_by_id(layer_id)
        if layer is None or layer.variant_at(index) is None:
            return None
        variant = layer.variants.pop(index)
        layer.equalize_rarity()
        self._variants_changed(layer_id)
        return variant

    def rename_variant(self, layer_id: str, index: int, name: str) -> None:
        layer = self.layer_by_id(layer_id)
        variant = layer.variant_at(index) if layer is not None else None
        if variant is not None:
            variant.name = name
            self._variants_changed(layer_id)

    def set_variant_rarity(self, layer_id: str, index: int, rarity: int) -> None:
        """Manually set one variant's weight; kept until the next add/remove."""
        layer = self.layer_by_id(layer_id)
        variant = layer.variant_at(index) if layer is not None else None
        if variant is not None:
            variant.rarity = _clamp_rarity(rarity)
            self._variants_changed(layer_id)

    # --- internal ---

    def _set_active_index(self, index: int) -> None:
        if self._active_index != index:
            self._active_index = index
            self.active_layer_changed.emit(index)

    def _layer_changed(self, layer_id: str) -> None:
        self.layer_changed.emit(layer_id)
        self.stack_changed.emit()

    def _variants_changed(self, layer_id: str) -> None:
        self.variants_changed.emit(layer_id)
        self.stack_changed.emit()

    def _recalc_z_order(self) -> None:
        """Renumber z_order for each layer to match its stack position."""
        for i, layer in enumerate(self._layers):
            layer.z_order = i
