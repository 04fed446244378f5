from __future__ import annotations

import csv
import io
from typing import List, Optional, Sequence

from .layout import ChartLayout
from .pipeline import OutputRow


def header_row(layout: ChartLayout) -> List[str]:
    return [layout.label_header, "Type"] + [layout.series_name(c) for c in layout.column_order] + ["Total"]


def rows_to_records(rows: Sequence[OutputRow], layout: ChartLayout) -> List[list]:
    records: List[list] = []
    for r in rows:
        records.append([r.label, r.classification] + [r.value(c) for c in layout.column_order] + [r.total])
    return records


def write_csv(path: str, rows: Sequence[OutputRow], layout: Optional[ChartLayout] = None, delimiter: str = ",") -> None:
    layout = layout if layout is not None else ChartLayout()
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f, delimiter=delimiter)
        w.writerow(header_row(layout))
        w.writerows(rows_to_records(rows, layout))


def csv_string(rows: Sequence[OutputRow], layout: Optional[ChartLayout] = None, delimiter: str = ",") -> str:
    layout = layout if layout is not None else ChartLayout()
    buf = io.StringIO()
    w = csv.writer(buf, delimiter=delimiter, lineterminator="\n")
    w.writerow(header_row(layout))
    w.writerows(rows_to_records(rows, layout))
    return buf.getvalue().rstrip()
