from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from typing import List, Optional

from .calibration import CalibrationPoints, LinearCalibration, calibrate
from .errors import InvalidTransition
from .image import RasterImage
from .layout import ChartLayout
from .pipeline import ExtractionPipeline, OutputRow

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    AWAITING_IMAGE = "awaiting image"
    AWAITING_TOP_POINT = "awaiting top point"
    AWAITING_BOTTOM_POINT = "awaiting bottom point"
    CALIBRATED = "calibrated"
    EXTRACTED = "extracted"


PROMPTS = {
    SessionState.AWAITING_IMAGE: "Open a chart image.",
    SessionState.AWAITING_TOP_POINT: "Click the TOP of the Y axis (where it shows {vmax:,.0f}).",
    SessionState.AWAITING_BOTTOM_POINT: "Click the BOTTOM of the Y axis (where it shows {vmin:,.0f}).",
    SessionState.CALIBRATED: "Calibration complete. Adjust the axis range if needed, then extract.",
    SessionState.EXTRACTED: "Extraction complete. Export the table or adjust and extract again.",
}


class CalibrationSession:
    """
    Step machine for the calibrate-then-extract workflow:

        AWAITING_IMAGE -> AWAITING_TOP_POINT -> AWAITING_BOTTOM_POINT
                       -> CALIBRATED -> EXTRACTED

    Front ends call these methods and show `prompt`; a call that does not
    fit the current step raises InvalidTransition.
    """

    def __init__(self, layout: Optional[ChartLayout] = None, pipeline: Optional[ExtractionPipeline] = None) -> None:
        self.pipeline = pipeline if pipeline is not None else ExtractionPipeline(layout)
        lay = self.pipeline.layout
        self.state = SessionState.AWAITING_IMAGE
        self.image: Optional[RasterImage] = None
        self.points = CalibrationPoints(value_at_max=lay.value_at_max, value_at_min=lay.value_at_min)
        self.rows: List[OutputRow] = []

    @property
    def layout(self) -> ChartLayout:
        return self.pipeline.layout

    @property
    def prompt(self) -> str:
        return PROMPTS[self.state].format(vmax=self.points.value_at_max, vmin=self.points.value_at_min)

    def _require(self, action: str, *allowed: SessionState) -> None:
        if self.state not in allowed:
            raise InvalidTransition(action, self.state.value)

    def _go(self, state: SessionState) -> None:
        logger.debug("session: %s -> %s", self.state.value, state.value)
        self.state = state

    def load_image(self, image: RasterImage) -> None:
        self.image = image
        self.points = replace(self.points, pixel_row_at_max=None, pixel_row_at_min=None)
        self.rows = []
        self._go(SessionState.AWAITING_TOP_POINT)

    def recalibrate(self) -> None:
        if self.image is None:
            raise InvalidTransition("recalibrate", self.state.value)
        self.points = replace(self.points, pixel_row_at_max=None, pixel_row_at_min=None)
        self.rows = []
        self._go(SessionState.AWAITING_TOP_POINT)

    def set_top_point(self, row: float) -> None:
        self._require("set the top point", SessionState.AWAITING_TOP_POINT)
        self.points = replace(self.points, pixel_row_at_max=float(row))
        self._go(SessionState.AWAITING_BOTTOM_POINT)

    def set_bottom_point(self, row: float) -> None:
        self._require("set the bottom point", SessionState.AWAITING_BOTTOM_POINT)
        self.points = replace(self.points, pixel_row_at_min=float(row))
        self._go(SessionState.CALIBRATED)

    def click(self, row: float) -> bool:
        """Route a canvas click to the pending reference point. Returns False if none is pending."""
        if self.state == SessionState.AWAITING_TOP_POINT:
            self.set_top_point(row)
            return True
        if self.state == SessionState.AWAITING_BOTTOM_POINT:
            self.set_bottom_point(row)
            return True
        return False

    def set_range(self, value_at_max: float, value_at_min: float) -> None:
        self.points = replace(self.points, value_at_max=float(value_at_max), value_at_min=float(value_at_min))
        if self.state == SessionState.EXTRACTED:
            self.rows = []
            self._go(SessionState.CALIBRATED)

    def calibration(self) -> LinearCalibration:
        return calibrate(self.points)

    def extract(self) -> List[OutputRow]:
        self._require("extract", SessionState.CALIBRATED, SessionState.EXTRACTED)
        if self.image is None:
            raise InvalidTransition("extract", self.state.value)
        self.rows = self.pipeline.run(self.image, self.calibration())
        self._go(SessionState.EXTRACTED)
        return self.rows
