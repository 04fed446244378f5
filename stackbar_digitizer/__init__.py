"""Read the numbers back out of stacked-bar chart images."""

__version__ = "0.1.0"

from .calibration import CalibrationPoints, LinearCalibration, calibrate
from .colors import Category, ColorClassifier, default_classifier
from .errors import (
    CalibrationIncomplete,
    ChartDigitizerError,
    ColumnOutOfBounds,
    DegenerateCalibration,
    InvalidTransition,
    LayoutError,
    NonFiniteCalibration,
)
from .image import RasterImage
from .layout import ChartLayout, PositionSpec, XPosition, load_layout, save_layout
from .pipeline import ExtractionPipeline, OutputRow, extract
from .reconstruct import SegmentValues, reconstruct
from .scan import ScanResult, scan_column
from .session import CalibrationSession, SessionState

__all__ = [
    "CalibrationPoints",
    "LinearCalibration",
    "calibrate",
    "Category",
    "ColorClassifier",
    "default_classifier",
    "ChartDigitizerError",
    "CalibrationIncomplete",
    "DegenerateCalibration",
    "ColumnOutOfBounds",
    "InvalidTransition",
    "LayoutError",
    "NonFiniteCalibration",
    "RasterImage",
    "ChartLayout",
    "PositionSpec",
    "XPosition",
    "load_layout",
    "save_layout",
    "ExtractionPipeline",
    "OutputRow",
    "extract",
    "SegmentValues",
    "reconstruct",
    "ScanResult",
    "scan_column",
    "CalibrationSession",
    "SessionState",
    "__version__",
]
