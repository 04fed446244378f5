"""Tests for layout persistence and CSV export."""

import csv
import json
import tempfile
import unittest
from pathlib import Path

from stackbar_digitizer.colors import Category
from stackbar_digitizer.errors import LayoutError
from stackbar_digitizer.export_csv import csv_string, header_row, write_csv
from stackbar_digitizer.layout import (
    ChartLayout,
    PositionSpec,
    layout_from_dict,
    layout_to_dict,
    load_layout,
    load_user_layout,
    save_layout,
)
from stackbar_digitizer.pipeline import OutputRow


class TestLayoutFiles(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_save_then_load(self):
        layout = ChartLayout(
            positions=(PositionSpec("2019", 0.1), PositionSpec("2020", 0.5)),
            stacking_order=(Category.BLUE, Category.RED),
            series_names={Category.BLUE: "Retail", Category.RED: "Fleet"},
            actual_cutoff="2019",
            label_header="Year",
            value_at_max=500.0,
        )
        path = self.tmp / "layout.json"
        save_layout(layout, path)
        self.assertEqual(load_layout(path), layout)

    def test_missing_keys_fall_back_to_defaults(self):
        layout = layout_from_dict({"actual_cutoff": "FY'25"})
        self.assertEqual(layout.actual_cutoff, "FY'25")
        self.assertEqual(layout.positions, ChartLayout().positions)
        self.assertEqual(layout.value_at_max, 2_000_000.0)

    def test_category_names_are_case_insensitive(self):
        layout = layout_from_dict({"stacking_order": ["Red", "PURPLE", " blue "]})
        self.assertEqual(layout.stacking_order, (Category.RED, Category.PURPLE, Category.BLUE))

    def test_invalid_layouts(self):
        bad = [
            [],
            {"stacking_order": ["red", "green"]},
            {"positions": [{"label": "a", "fraction": 1.0}]},
            {"positions": [{"label": "a", "fraction": -0.1}]},
            {"positions": [{"label": "a", "fraction": 0.1}, {"label": "a", "fraction": 0.2}]},
            {"positions": [{"label": "a"}]},
            {"value_at_max": "lots"},
            {"column_order": ["red", "red"]},
        ]
        for data in bad:
            with self.assertRaises(LayoutError, msg=repr(data)):
                layout_from_dict(data)

    def test_invalid_json(self):
        path = self.tmp / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with self.assertRaises(LayoutError):
            load_layout(path)

    def test_user_layout_falls_back_when_corrupt(self):
        path = self.tmp / "user.json"
        path.write_text(json.dumps({"positions": "nope"}), encoding="utf-8")
        with self.assertLogs("stackbar_digitizer.layout", level="WARNING"):
            layout = load_user_layout(path)
        self.assertEqual(layout, ChartLayout())

    def test_undecodable_file(self):
        path = self.tmp / "binary.json"
        path.write_bytes(b"\xff\xfe{\x00}\x00")
        with self.assertRaises(LayoutError):
            load_layout(path)
        with self.assertLogs("stackbar_digitizer.layout", level="WARNING"):
            self.assertEqual(load_user_layout(path), ChartLayout())

    def test_overflowing_range_value(self):
        path = self.tmp / "huge.json"
        path.write_text('{"value_at_max": 1e999}', encoding="utf-8")
        with self.assertRaises(LayoutError):
            load_layout(path)
        with self.assertRaises(LayoutError):
            layout_from_dict({"value_at_min": "nan"})

    def test_user_layout_missing_file(self):
        self.assertEqual(load_user_layout(self.tmp / "nothing.json"), ChartLayout())

    def test_dict_uses_plain_json_types(self):
        data = layout_to_dict(ChartLayout())
        self.assertEqual(data["stacking_order"], ["red", "purple", "blue"])
        self.assertEqual(data["series_names"]["blue"], "HDV")
        json.dumps(data)


class TestExportCsv(unittest.TestCase):

    def setUp(self):
        self.rows = [
            OutputRow("FY'15", "Actual", {Category.BLUE: 10, Category.PURPLE: 20, Category.RED: 30}, 60),
            OutputRow("FY'25", "Projected", {Category.RED: 5}, 5),
        ]

    def test_header_follows_column_order(self):
        self.assertEqual(header_row(ChartLayout()), ["Year", "Type", "HDV", "LCV", "MDV", "Total"])
        layout = ChartLayout(column_order=(Category.RED, Category.BLUE), label_header="Period")
        self.assertEqual(header_row(layout), ["Period", "Type", "MDV", "HDV", "Total"])

    def test_csv_string(self):
        text = csv_string(self.rows)
        self.assertEqual(
            text.splitlines(),
            [
                "Year,Type,HDV,LCV,MDV,Total",
                "FY'15,Actual,10,20,30,60",
                "FY'25,Projected,0,0,5,5",
            ],
        )

    def test_write_csv(self):
        with tempfile.TemporaryDirectory() as d:
            path = str(Path(d) / "out.csv")
            write_csv(path, self.rows, delimiter=";")
            with open(path, newline="", encoding="utf-8") as f:
                got = list(csv.reader(f, delimiter=";"))
        self.assertEqual(got[0], ["Year", "Type", "HDV", "LCV", "MDV", "Total"])
        self.assertEqual(got[2], ["FY'25", "Projected", "0", "0", "5", "5"])
        self.assertEqual(len(got), 3)


if __name__ == "__main__":
    unittest.main()
