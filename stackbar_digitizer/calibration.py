from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from .errors import CalibrationIncomplete, DegenerateCalibration, NonFiniteCalibration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalibrationPoints:
    # value anchors (editable by the operator)
    value_at_max: float = 2_000_000.0
    value_at_min: float = 0.0
    # pixel anchors (None until clicked); max sits higher on screen
    pixel_row_at_max: Optional[float] = None
    pixel_row_at_min: Optional[float] = None

    def is_complete(self) -> bool:
        return self.pixel_row_at_max is not None and self.pixel_row_at_min is not None


@dataclass(frozen=True)
class LinearCalibration:
    """
    Linear image-row -> data-value map.

    Rows grow downward while values grow upward, so the anchor at
    `p_max` (smaller row) carries `v_max`. No clamping: rows outside the
    anchors extrapolate.
    """
    p_max: float
    p_min: float
    v_max: float
    v_min: float

    def px_to_value(self, row: float) -> float:
        t = (row - self.p_max) / (self.p_min - self.p_max)
        # same as v_max - t*(v_max - v_min), but exact at both anchors
        return (1.0 - t) * self.v_max + t * self.v_min

    def value_to_px(self, value: float) -> float:
        if self.v_max == self.v_min:
            raise ValueError("Axis max and min values are equal; cannot invert calibration.")
        t = (value - self.v_max) / (self.v_min - self.v_max)
        return self.p_max + t * (self.p_min - self.p_max)

    @property
    def baseline(self) -> float:
        return self.v_min

    def __call__(self, row: float) -> float:
        return self.px_to_value(row)


def calibrate(points: CalibrationPoints) -> LinearCalibration:
    if points.pixel_row_at_max is None:
        raise CalibrationIncomplete("top (axis maximum)")
    if points.pixel_row_at_min is None:
        raise CalibrationIncomplete("bottom (axis minimum)")

    p_max = float(points.pixel_row_at_max)
    p_min = float(points.pixel_row_at_min)
    v_max = float(points.value_at_max)
    v_min = float(points.value_at_min)
    for name, v in (("top row", p_max), ("bottom row", p_min), ("maximum value", v_max), ("minimum value", v_min)):
        if not math.isfinite(v):
            raise NonFiniteCalibration(name, v)
    if p_max == p_min:
        raise DegenerateCalibration(p_max)
    if p_max > p_min:
        logger.warning(
            "Top reference row %s is below bottom reference row %s; values will run upside down.",
            p_max, p_min,
        )

    return LinearCalibration(
        p_max=p_max,
        p_min=p_min,
        v_max=v_max,
        v_min=v_min,
    )
