from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

import numpy as np

from .errors import ShapeMismatchError
from .oracle import hamming_distance
from .sweep import HashTable

DistanceFn = Callable[[Any, Any], int]


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


def _percent(count: np.ndarray, total: int) -> np.ndarray:
    if total <= 0:
        return np.full(count.shape, np.nan)
    return count / float(total) * 100.0


@dataclass(frozen=True)
class OriginalsStats:
    """
    Distances of every image to image 0, per configuration cell.

    distances[f, r, i] : distance of image i to image 0
    collisions[f, r]   : zero distances among images 1..n-1
    unexpected[f, r, i]: True where a distinct image collides with image 0
    """

    distances: np.ndarray
    collisions: np.ndarray
    unexpected: np.ndarray

    @property
    def image_count(self) -> int:
        return int(self.distances.shape[2])

    def collision_percentages(self) -> np.ndarray:
        """collisions / (image_count - 1) * 100; NaN when there is a single image."""
        return _percent(self.collisions, self.image_count - 1)


@dataclass(frozen=True)
class AttackedStats:
    """
    Distances of every attacked copy to its own original, per configuration cell.

    distances[f, r, i, a] : distance of image i under attack a to original i
    collisions[f, r, a]   : zero distances for attack a
    """

    distances: np.ndarray
    collisions: np.ndarray

    @property
    def image_count(self) -> int:
        return int(self.distances.shape[2])

    @property
    def attack_count(self) -> int:
        return int(self.distances.shape[3])

    def total_collisions(self) -> np.ndarray:
        return self.collisions.sum(axis=-1)

    def collision_percentages(self) -> np.ndarray:
        """Per cell: collisions over all (image x attack) comparisons, in percent."""
        return _percent(self.total_collisions(), self.image_count * self.attack_count)


class DistanceAggregator:
    """Turns frozen hash tables into distance and collision statistics."""

    def __init__(self, distance: Optional[DistanceFn] = None) -> None:
        self.distance = distance or hamming_distance

    def _measure(self, a: Any, b: Any) -> int:
        d = int(self.distance(a, b))
        if d < 0:
            raise ValueError(f"Distance function returned a negative value: {d}")
        return d

    def compare_originals(self, originals: HashTable) -> OriginalsStats:
        _check_table(originals, 3, "originals")
        distances = np.zeros(originals.shape, dtype=np.int64)
        for f, r, i in originals.coords():
            distances[f, r, i] = self._measure(originals[f, r, 0], originals[f, r, i])

        zero = distances == 0
        # image 0 is the reference row, its self-distance is not a collision
        zero[:, :, 0] = False
        collisions = np.count_nonzero(zero, axis=2)
        return OriginalsStats(
            distances=_readonly(distances),
            collisions=_readonly(collisions),
            unexpected=_readonly(zero),
        )

    def compare_attacked(self, originals: HashTable, attacked: HashTable) -> AttackedStats:
        _check_table(originals, 3, "originals")
        _check_table(attacked, 4, "attacked")
        if attacked.shape[:3] != originals.shape:
            raise ShapeMismatchError(
                f"Attacked table shape {attacked.shape} does not extend originals shape {originals.shape}"
            )
        distances = np.zeros(attacked.shape, dtype=np.int64)
        for f, r, i, a in attacked.coords():
            distances[f, r, i, a] = self._measure(attacked[f, r, i, a], originals[f, r, i])

        collisions = np.count_nonzero(distances == 0, axis=2)
        return AttackedStats(distances=_readonly(distances), collisions=_readonly(collisions))


def _check_table(table: HashTable, ndim: int, what: str) -> None:
    if not table.frozen:
        raise ShapeMismatchError(f"The {what} sweep has not completed")
    if len(table.shape) != ndim:
        raise ShapeMismatchError(f"Expected a {ndim}-d {what} table, got shape {table.shape}")
