"""Image statistics used to compare captures."""

from __future__ import annotations

import cv2
import numpy as np

from vision.pointcloud.projection import RasterImage

_TO_GRAY = {
    ("rgb", 3): cv2.COLOR_RGB2GRAY,
    ("bgr", 3): cv2.COLOR_BGR2GRAY,
    ("rgb", 4): cv2.COLOR_RGBA2GRAY,
    ("bgr", 4): cv2.COLOR_BGRA2GRAY,
}


def to_grayscale(img: RasterImage | np.ndarray, order: str = "rgb") -> np.ndarray:
    """
    Convert an image to 8-bit grayscale.

    ``RasterImage`` pixels are always RGBA. For arrays, ``order`` tells
    whether color channels are RGB(A) or OpenCV's BGR(A).
    """
    arr = img.pixels if isinstance(img, RasterImage) else np.asarray(img)
    if arr.ndim == 2:
        return arr.astype(np.uint8, copy=False)
    if arr.ndim != 3 or (order, arr.shape[2]) not in _TO_GRAY:
        raise ValueError(f"unsupported image shape {arr.shape} for order {order!r}")
    return cv2.cvtColor(arr.astype(np.uint8, copy=False), _TO_GRAY[(order, arr.shape[2])])


def compute_grayscale_average(img: RasterImage | np.ndarray, order: str = "rgb") -> float:
    """Mean luminance (0-255) over every pixel of ``img``."""
    gray = to_grayscale(img, order)
    if gray.size == 0:
        raise ValueError("image has no pixels")
    return float(gray.mean())

