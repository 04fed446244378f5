from __future__ import annotations

import logging
import tkinter as tk
from tkinter import ttk, filedialog, messagebox
from typing import Optional

from PIL import Image, ImageTk

from .errors import ChartDigitizerError
from .export_csv import header_row, rows_to_records, write_csv
from .image import RasterImage
from .layout import ChartLayout
from .scan import scan_column
from .session import CalibrationSession, SessionState

logger = logging.getLogger(__name__)

# canvas colors per category marker (tk color names)
MARKER_COLORS = {"blue": "gold", "purple": "lime", "red": "cyan"}


class StackedBarWindow(tk.Tk):
    def __init__(self, *, layout: Optional[ChartLayout] = None, image_path: Optional[str] = None) -> None:
        super().__init__()
        self.title("Stacked bar chart -> CSV")
        self.geometry("1180x760")
        self.resizable(True, True)

        self.session = CalibrationSession(layout)
        self._photo: Optional[ImageTk.PhotoImage] = None

        lay = self.session.layout
        self.var_vmax = tk.StringVar(value=f"{lay.value_at_max:g}")
        self.var_vmin = tk.StringVar(value=f"{lay.value_at_min:g}")
        self.var_status = tk.StringVar(value=self.session.prompt)

        self._build_ui()
        self._refresh()

        if image_path:
            self._load_image(image_path)

    # ---------- UI ----------
    def _build_ui(self) -> None:
        root = ttk.Frame(self, padding=8)
        root.pack(fill="both", expand=True)

        bar = ttk.Frame(root)
        bar.pack(side="top", fill="x")
        ttk.Button(bar, text="Open image...", command=self._on_open).pack(side="left")
        self.btn_recal = ttk.Button(bar, text="Recalibrate", command=self._on_recalibrate)
        self.btn_recal.pack(side="left", padx=(8, 0))

        ttk.Label(bar, text="Y max:").pack(side="left", padx=(16, 0))
        ent_max = ttk.Entry(bar, textvariable=self.var_vmax, width=12)
        ent_max.pack(side="left", padx=(6, 0))
        ttk.Label(bar, text="Y min:").pack(side="left", padx=(8, 0))
        ent_min = ttk.Entry(bar, textvariable=self.var_vmin, width=12)
        ent_min.pack(side="left", padx=(6, 0))
        # Extract re-reads the entries, so FocusOut applies quietly
        for ent in (ent_max, ent_min):
            ent.bind("<Return>", lambda _e: self._apply_range())
            ent.bind("<FocusOut>", lambda _e: self._apply_range(quiet=True))

        self.btn_extract = ttk.Button(bar, text="Extract data", command=self._on_extract)
        self.btn_extract.pack(side="left", padx=(16, 0))
        self.btn_export = ttk.Button(bar, text="Export CSV...", command=self._on_export)
        self.btn_export.pack(side="left", padx=(8, 0))

        ttk.Label(root, textvariable=self.var_status).pack(side="top", anchor="w", pady=(6, 6))

        panes = ttk.PanedWindow(root, orient="vertical")
        panes.pack(fill="both", expand=True)

        cframe = ttk.Frame(panes)
        self.canvas = tk.Canvas(cframe, background="#ddd", cursor="crosshair", highlightthickness=0)
        xs = ttk.Scrollbar(cframe, orient="horizontal", command=self.canvas.xview)
        ys = ttk.Scrollbar(cframe, orient="vertical", command=self.canvas.yview)
        self.canvas.configure(xscrollcommand=xs.set, yscrollcommand=ys.set)
        self.canvas.grid(row=0, column=0, sticky="nsew")
        ys.grid(row=0, column=1, sticky="ns")
        xs.grid(row=1, column=0, sticky="ew")
        cframe.rowconfigure(0, weight=1)
        cframe.columnconfigure(0, weight=1)
        self.canvas.bind("<Button-1>", self._on_canvas_click)
        panes.add(cframe, weight=3)

        tframe = ttk.Frame(panes)
        cols = header_row(self.session.layout)
        self.tree = ttk.Treeview(tframe, columns=cols, show="headings", height=8)
        for i, c in enumerate(cols):
            self.tree.heading(c, text=c)
            self.tree.column(c, width=110, anchor=("w" if i < 2 else "e"))
        self.tree.tag_configure("projected", background="#e8f0fe")
        tys = ttk.Scrollbar(tframe, orient="vertical", command=self.tree.yview)
        self.tree.configure(yscrollcommand=tys.set)
        self.tree.pack(side="left", fill="both", expand=True)
        tys.pack(side="right", fill="y")
        panes.add(tframe, weight=1)

    def _refresh(self) -> None:
        st = self.session.state
        self.var_status.set(self.session.prompt)
        self.btn_recal.configure(state=("disabled" if st == SessionState.AWAITING_IMAGE else "normal"))
        self.btn_extract.configure(
            state=("normal" if st in (SessionState.CALIBRATED, SessionState.EXTRACTED) else "disabled")
        )
        self.btn_export.configure(state=("normal" if st == SessionState.EXTRACTED else "disabled"))
        self._redraw_overlay()
        self._fill_table()

    # ---------- Image ----------
    def _load_image(self, path: str) -> None:
        try:
            with Image.open(path) as img:
                pil = img.convert("RGB")
        except OSError as e:
            self._show_error("Could not open image", str(e))
            return
        self.session.load_image(RasterImage.from_pil(pil))
        self._photo = ImageTk.PhotoImage(pil)
        self.canvas.delete("all")
        self.canvas.create_image(0, 0, image=self._photo, anchor="nw", tags=("image",))
        self.canvas.configure(scrollregion=(0, 0, pil.width, pil.height))
        logger.info("Loaded %s (%dx%d)", path, pil.width, pil.height)
        self._refresh()

    def _on_open(self) -> None:
        path = filedialog.askopenfilename(
            parent=self,
            title="Open chart image",
            filetypes=[("Images", "*.png *.jpg *.jpeg *.bmp *.gif *.webp"), ("All files", "*.*")],
        )
        if path:
            self._load_image(path)

    def _on_recalibrate(self) -> None:
        try:
            self.session.recalibrate()
        except ChartDigitizerError as e:
            self._show_error("Recalibrate", str(e))
        self._refresh()

    # ---------- Calibration ----------
    def _on_canvas_click(self, e) -> None:
        if self.session.image is None:
            return
        row = self.canvas.canvasy(e.y)
        if not (0 <= row < self.session.image.height):
            return
        if self.session.click(row):
            self._refresh()

    def _apply_range(self, quiet: bool = False) -> bool:
        try:
            vmax = float(self.var_vmax.get().replace(",", ""))
            vmin = float(self.var_vmin.get().replace(",", ""))
        except ValueError:
            if not quiet:
                self._show_error("Invalid axis range", "Y max and Y min must be numbers.")
            return False
        if (vmax, vmin) != (self.session.points.value_at_max, self.session.points.value_at_min):
            self.session.set_range(vmax, vmin)
            self._refresh()
        return True

    # ---------- Extraction ----------
    def _on_extract(self) -> None:
        if not self._apply_range():
            return
        try:
            self.session.extract()
        except ChartDigitizerError as e:
            self._show_error("Extraction failed", str(e))
            return
        self._refresh()

    def _fill_table(self) -> None:
        self.tree.delete(*self.tree.get_children())
        lay = self.session.layout
        for rec in rows_to_records(self.session.rows, lay):
            shown = rec[:2] + [f"{v:,}" for v in rec[2:]]
            tags = ("projected",) if rec[1] == "Projected" else ()
            self.tree.insert("", "end", values=shown, tags=tags)

    def _redraw_overlay(self) -> None:
        self.canvas.delete("overlay")
        img = self.session.image
        if img is None:
            return
        pts = self.session.points
        for row, text in ((pts.pixel_row_at_max, "max"), (pts.pixel_row_at_min, "min")):
            if row is None:
                continue
            self.canvas.create_line(0, row, img.width, row, fill="orange", dash=(4, 2), tags=("overlay",))
            self.canvas.create_text(4, row - 2, text=text, anchor="sw", fill="orange", tags=("overlay",))

        if self.session.state != SessionState.EXTRACTED:
            return
        classifier = self.session.pipeline.classifier
        for pos in self.session.pipeline.positions_for(img):
            x = pos.pixel_column
            self.canvas.create_line(x, 0, x, img.height, fill="gray40", tags=("overlay",))
            scan = scan_column(img, x, classifier)
            for c in classifier.priority:
                y = scan.row_for(c)
                if y is None:
                    continue
                color = MARKER_COLORS.get(c.value, "white")
                self.canvas.create_line(x - 5, y, x + 6, y, fill=color, width=2, tags=("overlay",))

    # ---------- Export ----------
    def _on_export(self) -> None:
        path = filedialog.asksaveasfilename(
            parent=self,
            title="Export CSV",
            defaultextension=".csv",
            initialfile="extracted_chart_data.csv",
            filetypes=[("CSV", "*.csv")],
        )
        if not path:
            return
        try:
            write_csv(path, self.session.rows, self.session.layout)
        except OSError as e:
            self._show_error("Save failed", str(e))
            return
        self._show_info("Export CSV", f"Wrote {len(self.session.rows)} rows to {path}")

    def _show_info(self, title: str, message: str) -> None:
        messagebox.showinfo(title, message, parent=self)

    def _show_error(self, title: str, message: str) -> None:
        messagebox.showerror(title, message, parent=self)


def run_window(layout: Optional[ChartLayout] = None, image_path: Optional[str] = None) -> None:
    app = StackedBarWindow(layout=layout, image_path=image_path)
    app.mainloop()
