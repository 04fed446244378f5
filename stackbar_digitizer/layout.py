from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .colors import Category
from .errors import LayoutError
from .reconstruct import DEFAULT_STACKING_ORDER

logger = logging.getLogger(__name__)

USER_LAYOUT_PATH = Path.home() / ".stackbar_layout.json"


@dataclass(frozen=True)
class PositionSpec:
    label: str
    fraction: float


@dataclass(frozen=True)
class XPosition:
    label: str
    pixel_column: int


def _default_positions() -> Tuple[PositionSpec, ...]:
    fractions = [0.12, 0.20, 0.28, 0.36, 0.44, 0.52, 0.60, 0.68, 0.76, 0.84, 0.88, 0.92, 0.96]
    years = range(15, 40, 2)
    return tuple(PositionSpec(f"FY'{y:02d}", f) for y, f in zip(years, fractions))


def _default_names() -> Dict[Category, str]:
    return {Category.BLUE: "HDV", Category.PURPLE: "LCV", Category.RED: "MDV"}


@dataclass(frozen=True)
class ChartLayout:
    """
    Everything about one chart design that is not pixels: where the bars
    are, how the bands stack, what the bands are called and where actual
    data ends and projections start.
    """
    positions: Tuple[PositionSpec, ...] = field(default_factory=_default_positions)
    # innermost first
    stacking_order: Tuple[Category, ...] = DEFAULT_STACKING_ORDER
    # CSV / table column order
    column_order: Tuple[Category, ...] = (Category.BLUE, Category.PURPLE, Category.RED)
    series_names: Dict[Category, str] = field(default_factory=_default_names)
    actual_cutoff: Optional[str] = "FY'23"
    label_header: str = "Year"
    value_at_max: float = 2_000_000.0
    value_at_min: float = 0.0

    def __post_init__(self) -> None:
        labels = [p.label for p in self.positions]
        if len(set(labels)) != len(labels):
            raise LayoutError("Position labels must be unique.")
        for p in self.positions:
            if not (0.0 <= float(p.fraction) < 1.0):
                raise LayoutError(f"Position {p.label!r}: fraction {p.fraction} must be in [0, 1).")
        for name, seq in (("stacking_order", self.stacking_order), ("column_order", self.column_order)):
            if len(set(seq)) != len(seq):
                raise LayoutError(f"{name} repeats a category.")
        for name, v in (("value_at_max", self.value_at_max), ("value_at_min", self.value_at_min)):
            if not math.isfinite(float(v)):
                raise LayoutError(f"{name} must be a finite number, got {v}.")

    @property
    def labels(self) -> List[str]:
        return [p.label for p in self.positions]

    def series_name(self, category: Category) -> str:
        return self.series_names.get(category, category.value.upper())

    def x_positions(self, width: int) -> List[XPosition]:
        return [XPosition(p.label, int(math.floor(width * p.fraction))) for p in self.positions]

    def is_actual(self, label: str) -> bool:
        """
        True when `label` is at or before the cutoff. Labels known to the
        layout are ranked by their position; anything else falls back to
        plain string ordering (FY'15 < FY'23 < FY'39).
        """
        if self.actual_cutoff is None:
            return True
        labels = self.labels
        if self.actual_cutoff in labels and label in labels:
            return labels.index(label) <= labels.index(self.actual_cutoff)
        return label <= self.actual_cutoff

    def classification(self, label: str) -> str:
        return "Actual" if self.is_actual(label) else "Projected"


def _parse_category(raw, where: str) -> Category:
    try:
        return Category(str(raw).strip().lower())
    except ValueError:
        raise LayoutError(f"{where}: unknown category {raw!r}") from None


def layout_from_dict(data: dict) -> ChartLayout:
    if not isinstance(data, dict):
        raise LayoutError("Layout must be a JSON object.")
    kwargs = {}
    try:
        if "positions" in data:
            kwargs["positions"] = tuple(
                PositionSpec(str(p["label"]), float(p["fraction"])) for p in data["positions"]
            )
        if "stacking_order" in data:
            kwargs["stacking_order"] = tuple(_parse_category(c, "stacking_order") for c in data["stacking_order"])
        if "column_order" in data:
            kwargs["column_order"] = tuple(_parse_category(c, "column_order") for c in data["column_order"])
        if "series_names" in data:
            kwargs["series_names"] = {
                _parse_category(k, "series_names"): str(v) for k, v in dict(data["series_names"]).items()
            }
        if "actual_cutoff" in data:
            cutoff = data["actual_cutoff"]
            kwargs["actual_cutoff"] = None if cutoff is None else str(cutoff)
        if "label_header" in data:
            kwargs["label_header"] = str(data["label_header"])
        if "value_at_max" in data:
            kwargs["value_at_max"] = float(data["value_at_max"])
        if "value_at_min" in data:
            kwargs["value_at_min"] = float(data["value_at_min"])
    except LayoutError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise LayoutError(f"Invalid layout: {e}") from e
    return ChartLayout(**kwargs)


def layout_to_dict(layout: ChartLayout) -> dict:
    return {
        "positions": [{"label": p.label, "fraction": p.fraction} for p in layout.positions],
        "stacking_order": [c.value for c in layout.stacking_order],
        "column_order": [c.value for c in layout.column_order],
        "series_names": {c.value: n for c, n in layout.series_names.items()},
        "actual_cutoff": layout.actual_cutoff,
        "label_header": layout.label_header,
        "value_at_max": layout.value_at_max,
        "value_at_min": layout.value_at_min,
    }


def load_layout(path: Union[str, Path]) -> ChartLayout:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise LayoutError(f"{path}: not valid JSON ({e})") from e
    return layout_from_dict(data)


def save_layout(layout: ChartLayout, path: Union[str, Path]) -> None:
    Path(path).write_text(json.dumps(layout_to_dict(layout), indent=2), encoding="utf-8")


def load_user_layout(path: Path = USER_LAYOUT_PATH) -> ChartLayout:
    """
    Layout for the desktop window: the user's file if present, else the
    reference chart. A broken file must not stop the window from opening.
    """
    if not path.exists():
        return ChartLayout()
    try:
        return load_layout(path)
    except (OSError, LayoutError) as e:
        logger.warning("Ignoring layout file %s: %s", path, e)
        return ChartLayout()
