from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import numpy as np

from .colors import Category, ColorClassifier, NO_CATEGORY, default_classifier
from .errors import ColumnOutOfBounds
from .image import RasterImage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanResult:
    column: int
    # topmost row holding any classified pixel
    any_top: Optional[int] = None
    # topmost row per category; categories never seen are absent or None
    tops: Dict[Category, Optional[int]] = field(default_factory=dict)

    def row_for(self, category: Category) -> Optional[int]:
        return self.tops.get(category)

    def is_empty(self) -> bool:
        return self.any_top is None


def _first_index(mask: np.ndarray) -> Optional[int]:
    idx = np.flatnonzero(mask)
    return int(idx[0]) if idx.size else None


def scan_column(
    image: RasterImage,
    column: int,
    classifier: Optional[ColorClassifier] = None,
) -> ScanResult:
    """
    Walk one pixel column top to bottom and record the first row at which
    each category (and any category at all) appears. Later hits of an
    already recorded category are ignored.
    """
    if classifier is None:
        classifier = default_classifier()
    if not (0 <= column < image.width):
        raise ColumnOutOfBounds(column, image.width)

    col = image.column(column)
    labels = classifier.classify_pixels(col)

    any_top = _first_index(labels != NO_CATEGORY)
    tops: Dict[Category, Optional[int]] = {}
    for idx, c in enumerate(classifier.priority):
        tops[c] = _first_index(labels == idx)

    if logger.isEnabledFor(logging.DEBUG):
        overlaps = classifier.count_overlaps(col)
        logger.debug(
            "column %d: any=%s %s%s",
            column,
            any_top,
            " ".join(f"{c.value}={tops[c]}" for c in classifier.priority),
            f" ({overlaps} px matched several colors)" if overlaps else "",
        )

    return ScanResult(column=int(column), any_top=any_top, tops=tops)
