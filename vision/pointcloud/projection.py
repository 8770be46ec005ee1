# vision/pointcloud/projection.py
"""Top-down orthographic rasterisation of a point cloud with a z-buffer."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from .cloud import PointCloud


@dataclass(frozen=True)
class Rect:
    """
    Integer rectangle. As raster bounds ``max`` is exclusive; region
    searches (``find_highest_in_region`` and friends) and detection boxes
    treat it as an inclusive corner.
    """

    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y

    def contains(self, x: int, y: int) -> bool:
        return self.min_x <= x < self.max_x and self.min_y <= y < self.max_y


class RasterImage:
    """RGBA image addressed in absolute pixel coordinates of ``bounds()``."""

    def __init__(self, rect: Rect) -> None:
        self.rect = rect
        self.pixels = np.zeros((rect.height, rect.width, 4), dtype=np.uint8)
        self.depth = np.full((rect.height, rect.width), -np.inf)

    @property
    def width(self) -> int:
        return self.rect.width

    @property
    def height(self) -> int:
        return self.rect.height

    def bounds(self) -> Rect:
        return self.rect

    def set_pixel(self, x: int, y: int, color: Sequence[int]) -> None:
        """Write ``color``; coordinates outside the bounds are ignored."""
        if not self.rect.contains(x, y):
            return
        c = np.asarray(color, dtype=np.uint8).reshape(-1)
        if c.size == 3:
            c = np.append(c, np.uint8(255))
        self.pixels[y - self.rect.min_y, x - self.rect.min_x] = c

    def get_pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        """RGBA at ``(x, y)``, transparent black outside the bounds."""
        if not self.rect.contains(x, y):
            return (0, 0, 0, 0)
        r, g, b, a = self.pixels[y - self.rect.min_y, x - self.rect.min_x]
        return (int(r), int(g), int(b), int(a))


def raster_rect(cloud: PointCloud) -> tuple[Rect, int, int]:
    """
    Image rectangle for ``cloud`` and the (x, y) offset that makes every
    rasterised coordinate non-negative. Never smaller than 1 x 1.
    """
    b = cloud.bounds()
    if b is None:
        return Rect(0, 0, 1, 1), 0, 0

    x0, y0 = math.floor(b.min_x), math.floor(b.min_y)
    # ceil(max), widened by one when max sits exactly on an integer so the
    # extreme points still land inside the image
    x1 = max(math.ceil(b.max_x), math.floor(b.max_x) + 1)
    y1 = max(math.ceil(b.max_y), math.floor(b.max_y) + 1)

    off_x = -x0 if x0 < 0 else 0
    off_y = -y0 if y0 < 0 else 0
    x0, x1 = x0 + off_x, x1 + off_x
    y0, y1 = y0 + off_y, y1 + off_y
    x1 = max(x1, x0 + 1)
    y1 = max(y1, y0 + 1)
    return Rect(x0, y0, x1, y1), off_x, off_y


def pc_to_image(cloud: PointCloud) -> RasterImage:
    """
    Project ``cloud`` onto the XY plane.

    Each pixel shows the point with the greatest Z; among equal Z the point
    seen first wins. The depth buffer starts at ``-inf`` so a legal Z of 0
    is never mistaken for an empty pixel.
    """
    rect, off_x, off_y = raster_rect(cloud)
    img = RasterImage(rect)
    if cloud.is_empty():
        return img

    pts, colors = cloud.points, cloud.colors
    cols = np.floor(pts[:, 0]).astype(np.int64) + off_x - rect.min_x
    rows = np.floor(pts[:, 1]).astype(np.int64) + off_y - rect.min_y
    flat = rows * rect.width + cols

    # sort by pixel, then descending z, then input order: the first entry of
    # each pixel run is the point a sequential z-test would have kept
    order = np.lexsort((np.arange(len(flat)), -pts[:, 2], flat))
    flat_sorted = flat[order]
    first = np.ones(len(order), dtype=bool)
    first[1:] = flat_sorted[1:] != flat_sorted[:-1]
    winners = order[first]

    img.depth.reshape(-1)[flat[winners]] = pts[winners, 2]
    img.pixels.reshape(-1, 4)[flat[winners]] = colors[winners]
    return img
