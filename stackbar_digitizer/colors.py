from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class Category(str, Enum):
    BLUE = "blue"
    PURPLE = "purple"
    RED = "red"


# Predicates are written with & / abs so the same rule accepts plain ints
# or signed numpy arrays (one element per pixel).
def is_blue(r, g, b):
    return (b > 150) & (b > r + 30) & (b > g + 30)


def is_purple(r, g, b):
    return (r > 100) & (b > 100) & (g < 150) & (abs(r - b) < 80)


def is_red(r, g, b):
    return (r > 150) & (g < 100) & (b < 100)


Predicate = Callable[..., object]

DEFAULT_PREDICATES: Dict[Category, Predicate] = {
    Category.BLUE: is_blue,
    Category.PURPLE: is_purple,
    Category.RED: is_red,
}

# First match wins. Only Blue and Purple can both match (e.g. 120,50,180).
DEFAULT_PRIORITY: Tuple[Category, ...] = (Category.BLUE, Category.PURPLE, Category.RED)

# Label used in the vectorized output for "no category".
NO_CATEGORY = -1


class ColorClassifier:
    """
    Decides which category, if any, an RGB pixel belongs to.

    Every predicate is independent; when more than one holds, the category
    listed first in `priority` is returned.
    """

    def __init__(
        self,
        predicates: Optional[Dict[Category, Predicate]] = None,
        priority: Optional[Sequence[Category]] = None,
    ) -> None:
        self.predicates = dict(predicates if predicates is not None else DEFAULT_PREDICATES)
        self.priority: Tuple[Category, ...] = tuple(priority if priority is not None else DEFAULT_PRIORITY)
        missing = [c for c in self.priority if c not in self.predicates]
        if missing:
            raise ValueError(f"No predicate for categories: {', '.join(c.value for c in missing)}")
        if len(set(self.priority)) != len(self.priority):
            raise ValueError("Category priority must not repeat a category.")

    @property
    def categories(self) -> Tuple[Category, ...]:
        return self.priority

    def matches(self, r: int, g: int, b: int) -> Tuple[Category, ...]:
        """All categories whose predicate holds, in priority order."""
        r, g, b = int(r), int(g), int(b)
        return tuple(c for c in self.priority if bool(self.predicates[c](r, g, b)))

    def classify(self, r: int, g: int, b: int) -> Optional[Category]:
        r, g, b = int(r), int(g), int(b)
        for c in self.priority:
            if self.predicates[c](r, g, b):
                return c
        return None

    def classify_pixels(self, rgb: np.ndarray) -> np.ndarray:
        """
        Vectorized classify over an (...,3) RGB array.

        Returns an int array of shape rgb.shape[:-1] holding the index of the
        winning category in `self.priority`, or NO_CATEGORY.
        """
        if rgb.shape[-1] != 3:
            raise ValueError("rgb must have a trailing channel axis of size 3")

        # CRITICAL: signed type so r+30 / r-b cannot wrap around like uint8 does.
        arr = rgb.astype(np.int16, copy=False)
        r, g, b = arr[..., 0], arr[..., 1], arr[..., 2]

        labels = np.full(arr.shape[:-1], NO_CATEGORY, dtype=np.int8)
        unclaimed = np.ones(arr.shape[:-1], dtype=bool)
        for idx, c in enumerate(self.priority):
            hit = np.asarray(self.predicates[c](r, g, b), dtype=bool) & unclaimed
            labels[hit] = idx
            unclaimed &= ~hit
        return labels

    def count_overlaps(self, rgb: np.ndarray) -> int:
        """Number of pixels matched by more than one predicate."""
        arr = rgb.astype(np.int16, copy=False)
        r, g, b = arr[..., 0], arr[..., 1], arr[..., 2]
        hits = np.zeros(arr.shape[:-1], dtype=np.int16)
        for c in self.priority:
            hits += np.asarray(self.predicates[c](r, g, b), dtype=bool)
        return int(np.count_nonzero(hits > 1))


def default_classifier() -> ColorClassifier:
    return ColorClassifier()
