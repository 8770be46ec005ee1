# vision/pointcloud/crop.py
"""Position and color cropping of point clouds."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

import numpy as np

from .cloud import PointCloud
from .projection import Rect


@dataclass(frozen=True)
class ColorFilter:
    """Keep points whose RGB lies within ``distance`` of ``color``."""

    color: tuple[int, int, int]
    distance: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ColorFilter":
        rgb = data["color"]
        if isinstance(rgb, Mapping):
            rgb = (rgb.get("r", 0), rgb.get("g", 0), rgb.get("b", 0))
        r, g, b = (int(c) for c in list(rgb)[:3])
        return cls((r, g, b), float(data["distance"]))


def in_box(pt: Sequence[float], min_pt: Sequence[float], max_pt: Sequence[float]) -> bool:
    """True if ``pt`` lies in the inclusive box ``[min_pt, max_pt]``."""
    return all(min_pt[i] <= pt[i] <= max_pt[i] for i in range(3))


def euclidean_rgb(c1: Sequence[int], c2: Sequence[int]) -> float:
    """Distance between two colors over 8-bit R, G, B (alpha ignored)."""
    d = np.asarray(c1[:3], dtype=np.int64) - np.asarray(c2[:3], dtype=np.int64)
    return float(np.sqrt(np.sum(d * d)))


def box_mask(points: np.ndarray, min_pt, max_pt) -> np.ndarray:
    lo = np.asarray(min_pt, dtype=np.float64)
    hi = np.asarray(max_pt, dtype=np.float64)
    return np.all((points >= lo) & (points <= hi), axis=1)


def color_mask(colors: np.ndarray, color_filters: Iterable[ColorFilter]) -> np.ndarray:
    """Points satisfying every filter (AND); all True for no filters."""
    rgb = colors[:, :3].astype(np.int64)
    mask = np.ones(len(colors), dtype=bool)
    for cf in color_filters:
        diff = rgb - np.asarray(cf.color[:3], dtype=np.int64)
        mask &= np.sqrt(np.sum(diff * diff, axis=1)) <= cf.distance
    return mask


def crop(
    cloud: PointCloud,
    min_pt: Sequence[float],
    max_pt: Sequence[float],
    color_filters: Iterable[ColorFilter] = (),
) -> PointCloud:
    """
    Return the points of ``cloud`` inside the inclusive box ``[min_pt, max_pt]``
    whose color passes every filter in ``color_filters``.
    """
    if cloud.is_empty():
        return PointCloud()
    mask = box_mask(cloud.points, min_pt, max_pt)
    mask &= color_mask(cloud.colors, color_filters)
    return cloud.subset(mask)


def _region_mask(cloud: PointCloud, box: Rect) -> np.ndarray:
    pts = cloud.points
    return (
        (pts[:, 0] >= box.min_x)
        & (pts[:, 1] >= box.min_y)
        & (pts[:, 0] <= box.max_x)
        & (pts[:, 1] <= box.max_y)
    )


def find_highest_in_region(cloud: PointCloud, box: Rect) -> np.ndarray | None:
    """Highest-Z point whose X/Y lie inside ``box`` (edges inclusive)."""
    mask = _region_mask(cloud, box)
    if not mask.any():
        return None
    pts = cloud.points[mask]
    return pts[int(np.argmax(pts[:, 2]))].copy()


def find_lowest_in_region(cloud: PointCloud, box: Rect) -> np.ndarray | None:
    """Lowest-Z point whose X/Y lie inside ``box`` (edges inclusive)."""
    mask = _region_mask(cloud, box)
    if not mask.any():
        return None
    pts = cloud.points[mask]
    return pts[int(np.argmin(pts[:, 2]))].copy()
