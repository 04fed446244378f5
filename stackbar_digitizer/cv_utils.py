from __future__ import annotations

import numpy as np


def require_cv2():
    try:
        import cv2  # noqa
    except Exception as e:
        raise RuntimeError(
            "OpenCV (cv2) is required for overlay rendering.\n"
            "Install with:\n"
            "  pip install opencv-python-headless"
        ) from e


def pil_to_rgb(pil_img) -> np.ndarray:
    """
    Convert any PIL image to an RGB uint8 ndarray (H,W,3).
    Alpha is dropped, palette/greyscale modes are expanded.
    """
    return np.array(pil_img.convert("RGB"), dtype=np.uint8)


def bgr_to_rgb(bgr: "np.ndarray") -> "np.ndarray":
    return bgr[:, :, ::-1]


def rgb_to_bgr(rgb: "np.ndarray") -> "np.ndarray":
    # OpenCV drawing wants a contiguous, writable buffer
    return np.ascontiguousarray(rgb[:, :, ::-1])
