from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from .calibration import LinearCalibration
from .colors import Category, ColorClassifier, default_classifier
from .cv_utils import require_cv2, rgb_to_bgr
from .image import RasterImage
from .layout import XPosition
from .scan import scan_column

# BGR marker colors per category, picked to stand out against the band fill
MARKER_BGR: Dict[Category, Tuple[int, int, int]] = {
    Category.BLUE: (0, 215, 255),
    Category.PURPLE: (0, 255, 0),
    Category.RED: (255, 255, 0),
}
COLUMN_BGR = (90, 90, 90)
AXIS_BGR = (0, 140, 255)
ANY_TOP_BGR = (0, 0, 0)


def render_overlay(
    image: RasterImage,
    x_positions: Sequence[XPosition],
    calibration: Optional[LinearCalibration] = None,
    classifier: Optional[ColorClassifier] = None,
) -> np.ndarray:
    """
    Draw what the extractor reads onto a copy of the image (BGR, OpenCV
    convention): every sampling column, a tick at each band's detected top,
    and the two calibration reference rows.
    """
    require_cv2()
    import cv2

    if classifier is None:
        classifier = default_classifier()

    bgr = rgb_to_bgr(image.pixels)
    H, W = bgr.shape[:2]

    if calibration is not None:
        for row in (calibration.p_max, calibration.p_min):
            y = int(round(row))
            if 0 <= y < H:
                cv2.line(bgr, (0, y), (W - 1, y), AXIS_BGR, 1)

    for pos in x_positions:
        scan = scan_column(image, pos.pixel_column, classifier)
        x = int(pos.pixel_column)
        cv2.line(bgr, (x, 0), (x, H - 1), COLUMN_BGR, 1)
        for c in classifier.priority:
            y = scan.row_for(c)
            if y is None:
                continue
            cv2.line(bgr, (max(0, x - 4), y), (min(W - 1, x + 4), y), MARKER_BGR.get(c, (255, 255, 255)), 2)
        if scan.any_top is not None:
            cv2.circle(bgr, (x, scan.any_top), 3, ANY_TOP_BGR, -1)
            cv2.putText(
                bgr, pos.label, (max(0, x - 12), max(10, scan.any_top - 6)),
                cv2.FONT_HERSHEY_SIMPLEX, 0.35, ANY_TOP_BGR, 1, cv2.LINE_AA,
            )
    return bgr


def write_overlay(
    path: str,
    image: RasterImage,
    x_positions: Sequence[XPosition],
    calibration: Optional[LinearCalibration] = None,
    classifier: Optional[ColorClassifier] = None,
) -> None:
    require_cv2()
    import cv2

    bgr = render_overlay(image, x_positions, calibration, classifier)
    if not cv2.imwrite(str(path), bgr):
        raise RuntimeError(f"Could not write overlay image to {path}")
