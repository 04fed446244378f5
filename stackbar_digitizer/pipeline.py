from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from .calibration import LinearCalibration
from .colors import Category, ColorClassifier, default_classifier
from .image import RasterImage
from .layout import ChartLayout, XPosition
from .reconstruct import reconstruct
from .scan import scan_column

logger = logging.getLogger(__name__)

ACTUAL = "Actual"
PROJECTED = "Projected"


@dataclass(frozen=True)
class OutputRow:
    label: str
    classification: str
    values: Dict[Category, int] = field(default_factory=dict)
    total: int = 0

    def value(self, category: Category) -> int:
        return self.values.get(category, 0)


def extract(
    image: RasterImage,
    x_positions: Sequence[XPosition],
    calibration: Callable[[float], float],
    classifier: Optional[ColorClassifier] = None,
    layout: Optional[ChartLayout] = None,
) -> List[OutputRow]:
    """
    One output row per x-position, in the order given.

    `calibration` maps an image row to a data value; a LinearCalibration
    also supplies the baseline the innermost band is measured from.
    Errors (bad column, bad calibration) propagate; a run either yields
    every row or none.
    """
    if classifier is None:
        classifier = default_classifier()
    if layout is None:
        layout = ChartLayout()

    if isinstance(calibration, LinearCalibration):
        baseline = calibration.baseline
    else:
        baseline = float(layout.value_at_min)

    rows: List[OutputRow] = []
    for pos in x_positions:
        scan = scan_column(image, pos.pixel_column, classifier)
        seg = reconstruct(scan, calibration, stacking_order=layout.stacking_order, baseline=baseline)
        row = OutputRow(
            label=pos.label,
            classification=layout.classification(pos.label),
            values=dict(seg.values),
            total=seg.total,
        )
        logger.debug("%s @x=%d: %s total=%d", row.label, pos.pixel_column, row.classification, row.total)
        rows.append(row)
    return rows


class ExtractionPipeline:
    """Binds a layout and classifier so a run only needs an image and a calibration."""

    def __init__(self, layout: Optional[ChartLayout] = None, classifier: Optional[ColorClassifier] = None) -> None:
        self.layout = layout if layout is not None else ChartLayout()
        self.classifier = classifier if classifier is not None else default_classifier()

    def positions_for(self, image: RasterImage) -> List[XPosition]:
        return self.layout.x_positions(image.width)

    def run(
        self,
        image: RasterImage,
        calibration: Callable[[float], float],
        x_positions: Optional[Sequence[XPosition]] = None,
    ) -> List[OutputRow]:
        if x_positions is None:
            x_positions = self.positions_for(image)
        rows = extract(image, x_positions, calibration, self.classifier, self.layout)
        logger.info("Extracted %d rows from %dx%d image", len(rows), image.width, image.height)
        return rows
