from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Sequence, Tuple

from .colors import Category
from .scan import ScanResult

logger = logging.getLogger(__name__)

# Innermost (sits on the axis) first.
DEFAULT_STACKING_ORDER: Tuple[Category, ...] = (Category.RED, Category.PURPLE, Category.BLUE)


@dataclass(frozen=True)
class SegmentValues:
    total: int = 0
    values: Dict[Category, int] = field(default_factory=dict)

    def value(self, category: Category) -> int:
        return self.values.get(category, 0)


def round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


def _quantity(v: float) -> int:
    # an inverted band (noisy boundary) reads as empty
    return max(0, round_half_up(v))


def reconstruct(
    scan: ScanResult,
    calibrate: Callable[[float], float],
    *,
    stacking_order: Sequence[Category] = DEFAULT_STACKING_ORDER,
    baseline: float = 0.0,
) -> SegmentValues:
    """
    Turn the top rows of one stacked bar into per-band magnitudes.

    A band's magnitude is the value at its own top minus the value at the
    top of the band stacked directly beneath it. The innermost band is
    measured from `baseline` (the value where bars start, normally the
    axis minimum). When the band beneath is missing from the column, the
    band is measured against itself and contributes nothing. The total is
    the value at the topmost colored pixel, or 0 for an empty column.

    Every quantity is rounded half-up to an integer and floored at zero.
    """
    values: Dict[Category, int] = {}
    below: Optional[Category] = None
    for i, c in enumerate(stacking_order):
        row = scan.row_for(c)
        if row is None:
            values[c] = 0
        else:
            top = calibrate(row)
            if i == 0:
                bottom = float(baseline)
            else:
                below_row = scan.row_for(below)
                bottom = calibrate(below_row if below_row is not None else row)
            values[c] = _quantity(top - bottom)
        below = c

    total = _quantity(calibrate(scan.any_top)) if scan.any_top is not None else 0
    logger.debug("column %d: total=%d %s", scan.column, total, values)
    return SegmentValues(total=total, values=values)
