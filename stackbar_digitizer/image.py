from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union

import numpy as np
from PIL import Image

from .cv_utils import bgr_to_rgb, pil_to_rgb
from .errors import ColumnOutOfBounds


@dataclass(frozen=True)
class RasterImage:
    """
    Read-only RGB pixel grid, origin top-left, rows growing downward.

    `pixels` is a (H,W,3) uint8 array with its write flag cleared, so the
    same image can be handed to every scan of a run without copying.
    """
    pixels: np.ndarray

    def __post_init__(self) -> None:
        arr = np.asarray(self.pixels)
        if arr.ndim == 3 and arr.shape[2] == 4:
            arr = arr[:, :, :3]
        if arr.ndim != 3 or arr.shape[2] != 3:
            raise ValueError("pixels must be HxWx3 (RGB) or HxWx4 (RGBA)")
        arr = np.array(arr, dtype=np.uint8, copy=True)
        arr.setflags(write=False)
        object.__setattr__(self, "pixels", arr)

    @classmethod
    def from_pil(cls, pil_img: Image.Image) -> "RasterImage":
        return cls(pil_to_rgb(pil_img))

    @classmethod
    def from_bgr(cls, bgr: np.ndarray) -> "RasterImage":
        return cls(bgr_to_rgb(bgr))

    @classmethod
    def open(cls, path: Union[str, Path]) -> "RasterImage":
        with Image.open(path) as img:
            return cls.from_pil(img)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def column(self, x: int) -> np.ndarray:
        """Return the (H,3) RGB column at x, top to bottom."""
        if not (0 <= x < self.width):
            raise ColumnOutOfBounds(x, self.width)
        return self.pixels[:, x, :]

    def pixel(self, x: int, y: int) -> Tuple[int, int, int]:
        r, g, b = self.pixels[y, x]
        return int(r), int(g), int(b)

    def to_pil(self) -> Image.Image:
        return Image.fromarray(np.array(self.pixels))
