"""Tests for the extraction pipeline and chart layout."""

import math
import unittest

import numpy as np

from stackbar_digitizer.calibration import CalibrationPoints, calibrate
from stackbar_digitizer.colors import Category
from stackbar_digitizer.errors import ColumnOutOfBounds
from stackbar_digitizer.image import RasterImage
from stackbar_digitizer.layout import ChartLayout, PositionSpec, XPosition
from stackbar_digitizer.pipeline import ExtractionPipeline, extract

RED = (200, 50, 50)
PURPLE = (150, 30, 140)
BLUE = (50, 50, 220)


def paint_bar(px, x, blue_top, purple_top, red_top):
    H = px.shape[0]
    px[blue_top:purple_top, x] = BLUE
    px[purple_top:red_top, x] = PURPLE
    px[red_top:H, x] = RED


class TestExtract(unittest.TestCase):

    def setUp(self):
        px = np.full((100, 10, 3), 255, dtype=np.uint8)
        paint_bar(px, 5, 0, 30, 60)
        paint_bar(px, 8, 50, 70, 90)
        self.image = RasterImage(px)
        self.cal = calibrate(CalibrationPoints(2_000_000, 0, 0, 99))

    def test_end_to_end(self):
        rows = extract(self.image, [XPosition("FY'15", 5)], self.cal)
        self.assertEqual(len(rows), 1)
        row = rows[0]
        cal = self.cal
        self.assertEqual(row.label, "FY'15")
        self.assertEqual(row.classification, "Actual")
        self.assertEqual(row.total, 2_000_000)
        self.assertAlmostEqual(row.value(Category.BLUE), cal(0) - cal(30), delta=1)
        self.assertAlmostEqual(row.value(Category.PURPLE), cal(30) - cal(60), delta=1)
        self.assertAlmostEqual(row.value(Category.RED), cal(60), delta=1)

    def test_preserves_input_order_and_length(self):
        positions = [XPosition("FY'39", 8), XPosition("FY'15", 5), XPosition("FY'21", 2), XPosition("FY'15b", 5)]
        rows = extract(self.image, positions, self.cal)
        self.assertEqual([r.label for r in rows], [p.label for p in positions])
        self.assertEqual(rows[2].total, 0)
        self.assertEqual(rows[0].classification, "Projected")
        self.assertEqual(rows[1].values, rows[3].values)

    def test_rerun_is_idempotent(self):
        positions = [XPosition("a", 5), XPosition("b", 8)]
        self.assertEqual(extract(self.image, positions, self.cal), extract(self.image, positions, self.cal))

    def test_bad_column_fails_whole_run(self):
        with self.assertRaises(ColumnOutOfBounds):
            extract(self.image, [XPosition("ok", 5), XPosition("bad", 10)], self.cal)

    def test_plain_callable_calibration_uses_layout_baseline(self):
        layout = ChartLayout(value_at_min=0.0)
        rows = extract(self.image, [XPosition("x", 5)], self.cal.px_to_value, layout=layout)
        self.assertEqual(rows[0].total, 2_000_000)


class TestExtractionPipeline(unittest.TestCase):

    def test_default_layout_positions(self):
        px = np.full((60, 1000, 3), 255, dtype=np.uint8)
        image = RasterImage(px)
        pipeline = ExtractionPipeline()
        positions = pipeline.positions_for(image)
        self.assertEqual(len(positions), 13)
        self.assertEqual(positions[0], XPosition("FY'15", 120))
        self.assertEqual(positions[-1].label, "FY'39")
        for spec, pos in zip(pipeline.layout.positions, positions):
            self.assertEqual(pos.pixel_column, int(math.floor(1000 * spec.fraction)))

        rows = pipeline.run(image, calibrate(CalibrationPoints(100, 0, 0, 59)))
        self.assertEqual([r.label for r in rows], pipeline.layout.labels)
        self.assertTrue(all(r.total == 0 for r in rows))


class TestLayoutCutoff(unittest.TestCase):

    def test_reference_cutoff(self):
        layout = ChartLayout()
        self.assertEqual(layout.classification("FY'15"), "Actual")
        self.assertEqual(layout.classification("FY'23"), "Actual")
        self.assertEqual(layout.classification("FY'25"), "Projected")
        self.assertEqual(layout.classification("FY'39"), "Projected")

    def test_ordinal_when_cutoff_is_a_layout_label(self):
        layout = ChartLayout(
            positions=(PositionSpec("Jan", 0.1), PositionSpec("Feb", 0.5), PositionSpec("Mar", 0.9)),
            actual_cutoff="Feb",
        )
        self.assertEqual(
            [layout.classification(l) for l in ("Jan", "Feb", "Mar")],
            ["Actual", "Actual", "Projected"],
        )

    def test_string_order_for_unknown_cutoff(self):
        layout = ChartLayout(actual_cutoff="FY'22")
        self.assertEqual(layout.classification("FY'21"), "Actual")
        self.assertEqual(layout.classification("FY'23"), "Projected")

    def test_no_cutoff_means_all_actual(self):
        layout = ChartLayout(actual_cutoff=None)
        self.assertTrue(all(layout.is_actual(l) for l in layout.labels))


if __name__ == "__main__":
    unittest.main()
