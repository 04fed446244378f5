from __future__ import annotations


class ChartDigitizerError(Exception):
    """Base class for every error raised by the digitizer."""


class CalibrationIncomplete(ChartDigitizerError, ValueError):
    def __init__(self, missing: str) -> None:
        super().__init__(f"Calibration incomplete: {missing} reference row is not set.")
        self.missing = missing


class DegenerateCalibration(ChartDigitizerError, ValueError):
    def __init__(self, row: float) -> None:
        super().__init__(f"Top and bottom reference rows are both {row}; pick two different rows.")
        self.row = row


class ColumnOutOfBounds(ChartDigitizerError, IndexError):
    def __init__(self, column: int, width: int) -> None:
        super().__init__(f"Column {column} is outside the image (width {width}).")
        self.column = column
        self.width = width


class LayoutError(ChartDigitizerError, ValueError):
    pass


class InvalidTransition(ChartDigitizerError, RuntimeError):
    def __init__(self, action: str, state: str) -> None:
        super().__init__(f"Cannot {action} while {state}.")
        self.action = action
        self.state = state


class NonFiniteCalibration(ChartDigitizerError, ValueError):
    def __init__(self, name: str, value: float) -> None:
        super().__init__(f"Calibration {name} must be a finite number, got {value}.")
        self.name = name
        self.value = value
