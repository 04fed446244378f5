import argparse
import logging
import sys
from pathlib import Path

from stackbar_digitizer import __version__
from stackbar_digitizer.calibration import CalibrationPoints, calibrate
from stackbar_digitizer.errors import ChartDigitizerError
from stackbar_digitizer.export_csv import csv_string, write_csv
from stackbar_digitizer.image import RasterImage
from stackbar_digitizer.layout import ChartLayout, load_layout, load_user_layout
from stackbar_digitizer.pipeline import ExtractionPipeline

logger = logging.getLogger("stackbar")


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stackbar",
        description="Extract the series of a stacked bar chart image into a CSV table",
        epilog="Example: stackbar chart.png --top-row 42 --bottom-row 518 -o data.csv",
    )
    parser.add_argument("image", nargs="?", help="Chart image (PNG, JPEG, ...)")
    parser.add_argument("--top-row", type=float, help="Image row of the Y axis maximum")
    parser.add_argument("--bottom-row", type=float, help="Image row of the Y axis minimum")
    parser.add_argument("--max", dest="vmax", type=float, help="Y axis value at the top row (default from layout)")
    parser.add_argument("--min", dest="vmin", type=float, help="Y axis value at the bottom row (default from layout)")
    parser.add_argument("--layout", help="Layout JSON (sampling positions, stacking order, names)")
    parser.add_argument("-o", "--output", help="CSV output path (default: stdout)")
    parser.add_argument("--overlay", help="Also write a PNG showing what was sampled")
    parser.add_argument("--gui", action="store_true", help="Open the desktop window")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="-v for info, -vv for debug")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def run_headless(args: argparse.Namespace, layout: ChartLayout) -> int:
    image = RasterImage.open(args.image)
    points = CalibrationPoints(
        value_at_max=layout.value_at_max if args.vmax is None else args.vmax,
        value_at_min=layout.value_at_min if args.vmin is None else args.vmin,
        pixel_row_at_max=args.top_row,
        pixel_row_at_min=args.bottom_row,
    )
    cal = calibrate(points)
    pipeline = ExtractionPipeline(layout)
    positions = pipeline.positions_for(image)
    rows = pipeline.run(image, cal, positions)

    if args.output:
        write_csv(args.output, rows, layout)
        logger.info("Wrote %d rows to %s", len(rows), args.output)
    else:
        sys.stdout.write(csv_string(rows, layout) + "\n")

    if args.overlay:
        from stackbar_digitizer.overlay import write_overlay
        write_overlay(args.overlay, image, positions, cal, pipeline.classifier)
        logger.info("Wrote overlay to %s", args.overlay)
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        layout = load_layout(args.layout) if args.layout else load_user_layout()
    except (OSError, ChartDigitizerError) as e:
        print(f"stackbar: {e}", file=sys.stderr)
        return 1

    headless = args.top_row is not None or args.bottom_row is not None
    if args.gui or not headless:
        from stackbar_digitizer.ui_window import run_window
        run_window(layout=layout, image_path=args.image)
        return 0

    if not args.image:
        parser.error("an image is required when --top-row/--bottom-row are given")
    if not Path(args.image).is_file():
        print(f"stackbar: no such image: {args.image}", file=sys.stderr)
        return 1

    try:
        return run_headless(args, layout)
    except (OSError, RuntimeError, ChartDigitizerError) as e:
        print(f"stackbar: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
