"""Combination counting and weighted unique sampling of trait assignments."""

from __future__ import annotations

import itertools
import logging
import math
import random
from collections.abc import Iterable, Iterator, Sequence

from layermint.config.constants import ENUMERATION_LIMIT, MAX_RARITY, SAMPLING_RETRY_BUDGET
from layermint.core.layer import Layer
from layermint.core.selection import GeneratedItem, LayerSelection, Skipped, Used, combination_key

log = logging.getLogger(__name__)


class GenerationError(ValueError):
    """A collection is not in a state that allows generation to start."""


class EmptyCollectionError(GenerationError):
    """No enabled layer has any variant."""


class BatchSizeError(GenerationError):
    """The requested batch size is below 1 or above the combination ceiling."""

    def __init__(self, requested: int, ceiling: int) -> None:
        self.requested = requested
        self.ceiling = ceiling
        if requested < 1:
            message = f"Batch size must be at least 1, got {requested}"
        else:
            message = (
                f"You've requested {requested} items but there are only "
                f"{ceiling} possible unique combinations"
            )
        super().__init__(message)


class UniquenessExhaustedError(RuntimeError):
    """Not enough distinct reachable combinations remain to fill the batch."""


def total_combinations(layers: Iterable[Layer]) -> int:
    """Product of variant counts over enabled, non-empty layers (1 if there are none)."""
    return math.prod(layer.variant_count for layer in layers if layer.participates)


def weighted_choice(weights: Sequence[int], rng: random.Random) -> int:
    """Pick an index with probability proportional to its weight.

    The first index whose cumulative weight reaches the draw wins. If every
    weight is zero the pick is uniform.
    """
    if not weights:
        raise ValueError("weighted_choice() needs at least one weight")
    total = sum(weights)
    if total <= 0:
        return rng.randrange(len(weights))
    draw = rng.random() * total
    cumulative = 0
    for i, weight in enumerate(weights):
        cumulative += weight
        if draw <= cumulative:
            return i
    return len(weights) - 1


def layer_is_included(layer: Layer, rng: random.Random) -> bool:
    if layer.always_used:
        return True
    return rng.random() * MAX_RARITY <= layer.layer_rarity


def sample_selections(layers: Sequence[Layer], rng: random.Random) -> tuple[LayerSelection, ...]:
    """Draw one selection per layer, in stack order."""
    selections: list[LayerSelection] = []
    for layer in layers:
        if not layer.participates or not layer_is_included(layer, rng):
            selections.append(Skipped(layer.layer_id))
            continue
        index = weighted_choice([v.rarity for v in layer.variants], rng)
        selections.append(Used(layer.layer_id, index))
    return tuple(selections)


def _reachable_options(layer: Layer) -> list[LayerSelection]:
    if not layer.participates:
        return [Skipped(layer.layer_id)]
    options: list[LayerSelection] = []
    if layer.layer_rarity > 0:
        indices = [i for i, v in enumerate(layer.variants) if v.rarity > 0]
        if not indices:
            indices = list(range(layer.variant_count))
        options.extend(Used(layer.layer_id, i) for i in indices)
    if not layer.always_used:
        options.append(Skipped(layer.layer_id))
    return options


def reachable_count(layers: Sequence[Layer]) -> int:
    """Number of distinct selection tuples the sampler can actually produce."""
    return math.prod(len(_reachable_options(layer)) for layer in layers)


def enumerate_selections(layers: Sequence[Layer]) -> Iterator[tuple[LayerSelection, ...]]:
    """Yield every reachable selection tuple in lexicographic order."""
    return itertools.product(*(_reachable_options(layer) for layer in layers))


class Sampler:
    """Samples batches of unique :class:`GeneratedItem` objects.

    Random draws are retried on key collisions. After ``retry_budget``
    consecutive collisions the sampler stops drawing and fills the rest of
    the batch from a shuffled enumeration of the unused combinations.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        retry_budget: int = SAMPLING_RETRY_BUDGET,
        enumeration_limit: int = ENUMERATION_LIMIT,
    ) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._retry_budget = max(1, retry_budget)
        self._enumeration_limit = enumeration_limit

    def validate(self, layers: Sequence[Layer], batch_size: int) -> int:
        """Raise a :class:`GenerationError` if the batch cannot start. Returns the ceiling."""
        if not any(layer.participates for layer in layers):
            raise EmptyCollectionError("Add at least one enabled layer with images first")
        ceiling = total_combinations(layers)
        if batch_size < 1 or batch_size > ceiling:
            raise BatchSizeError(batch_size, ceiling)
        return ceiling

    def sample_batch(self, layers: Sequence[Layer], batch_size: int) -> list[GeneratedItem]:
        layers = list(layers)
        self.validate(layers, batch_size)

        seen: set[str] = set()
        items: list[GeneratedItem] = []
        collisions = 0
        while len(items) < batch_size:
            selections = sample_selections(layers, self._rng)
            key = combination_key(selections)
            if key in seen:
                collisions += 1
                if collisions >= self._retry_budget:
                    log.info(
                        "Switching to enumeration after %d collisions (%d/%d items)",
                        collisions,
                        len(items),
                        batch_size,
                    )
                    items.extend(self._fill_from_enumeration(layers, seen, batch_size - len(items)))
                    break
                continue
            collisions = 0
            seen.add(key)
            items.append(GeneratedItem(selections=selections))
        return items

    def _fill_from_enumeration(
        self, layers: Sequence[Layer], seen: set[str], needed: int
    ) -> list[GeneratedItem]:
        space = reachable_count(layers)
        if space > self._enumeration_limit:
            raise UniquenessExhaustedError(
                f"Combination space of {space} is too large to enumerate"
            )
        remaining = [s for s in enumerate_selections(layers) if combination_key(s) not in seen]
        if len(remaining) < needed:
            raise UniquenessExhaustedError(
                f"Only {len(remaining)} unused reachable combinations left, {needed} needed"
            )
        self._rng.shuffle(remaining)
        return [GeneratedItem(selections=s) for s in remaining[:needed]]
