# vision/pointcloud/cloud.py
"""Growable point cloud container with incrementally maintained bounds."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, Sequence, Tuple

import numpy as np
import open3d as o3d

Color = Tuple[int, int, int, int]
Visitor = Callable[[np.ndarray, np.ndarray], bool]

DEFAULT_COLOR: Color = (0, 0, 0, 255)
_MIN_CAPACITY = 16


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned bounding box of a non-empty cloud."""

    min_x: float
    max_x: float
    min_y: float
    max_y: float
    min_z: float
    max_z: float

    @property
    def min(self) -> np.ndarray:
        return np.array([self.min_x, self.min_y, self.min_z])

    @property
    def max(self) -> np.ndarray:
        return np.array([self.max_x, self.max_y, self.max_z])


@dataclass
class CloudMetadata:
    """
    Running min/max and count of a cloud.

    The empty state uses ``+inf`` minima and ``-inf`` maxima; it is not a
    box and :meth:`PointCloud.bounds` returns ``None`` for it.
    """

    min_x: float = np.inf
    max_x: float = -np.inf
    min_y: float = np.inf
    max_y: float = -np.inf
    min_z: float = np.inf
    max_z: float = -np.inf
    count: int = 0

    def merge(self, lo: np.ndarray, hi: np.ndarray, n: int) -> None:
        self.min_x = min(self.min_x, float(lo[0]))
        self.min_y = min(self.min_y, float(lo[1]))
        self.min_z = min(self.min_z, float(lo[2]))
        self.max_x = max(self.max_x, float(hi[0]))
        self.max_y = max(self.max_y, float(hi[1]))
        self.max_z = max(self.max_z, float(hi[2]))
        self.count += n


def _as_color(color: Sequence[int] | None) -> np.ndarray:
    if color is None:
        return np.array(DEFAULT_COLOR, dtype=np.uint8)
    arr = np.asarray(color, dtype=np.uint8).reshape(-1)
    if arr.size == 3:
        arr = np.append(arr, np.uint8(255))
    if arr.size != 4:
        raise ValueError(f"color must have 3 or 4 channels, got {arr.size}")
    return arr


class PointCloud:
    """
    Positions (float64, N x 3) each paired with an RGBA uint8 color.

    Clouds are append-only: producers fill them with :meth:`insert` or
    :meth:`extend` and readers treat them as immutable. Every geometry
    operation in :mod:`vision.pointcloud` returns a new cloud.
    """

    def __init__(self, capacity: int = 0) -> None:
        capacity = max(int(capacity), _MIN_CAPACITY)
        self._points = np.empty((capacity, 3), dtype=np.float64)
        self._colors = np.empty((capacity, 4), dtype=np.uint8)
        self._size = 0
        self.metadata = CloudMetadata()

    # ----------------------------------------------------------- construction

    @classmethod
    def from_arrays(
        cls, points: np.ndarray, colors: np.ndarray | None = None
    ) -> "PointCloud":
        """Build a cloud from an N x 3 array and optional N x 3/4 uint8 colors."""
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        pc = cls(len(points))
        pc.extend(points, colors)
        return pc

    @classmethod
    def from_open3d(cls, pcd: o3d.geometry.PointCloud) -> "PointCloud":
        """Convert an Open3D cloud; float colors in [0, 1] become uint8."""
        points = np.asarray(pcd.points)
        colors = None
        if pcd.has_colors():
            colors = np.clip(np.asarray(pcd.colors) * 255.0 + 0.5, 0, 255)
            colors = colors.astype(np.uint8)
        return cls.from_arrays(points, colors)

    def to_open3d(self) -> o3d.geometry.PointCloud:
        """Return an Open3D copy (alpha is dropped)."""
        pcd = o3d.geometry.PointCloud()
        pcd.points = o3d.utility.Vector3dVector(self.points.copy())
        pcd.colors = o3d.utility.Vector3dVector(
            self.colors[:, :3].astype(np.float64) / 255.0
        )
        return pcd

    # ---------------------------------------------------------------- writes

    def _reserve(self, extra: int) -> None:
        needed = self._size + extra
        capacity = len(self._points)
        if needed <= capacity:
            return
        while capacity < needed:
            capacity *= 2
        points = np.empty((capacity, 3), dtype=np.float64)
        colors = np.empty((capacity, 4), dtype=np.uint8)
        points[: self._size] = self._points[: self._size]
        colors[: self._size] = self._colors[: self._size]
        self._points, self._colors = points, colors

    def insert(self, position: Sequence[float], color: Sequence[int] | None = None) -> None:
        """Append one point and widen the metadata bounds."""
        p = np.asarray(position, dtype=np.float64).reshape(3)
        self._reserve(1)
        self._points[self._size] = p
        self._colors[self._size] = _as_color(color)
        self._size += 1
        self.metadata.merge(p, p, 1)

    def extend(self, points: np.ndarray, colors: np.ndarray | None = None) -> None:
        """Append many points at once."""
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        n = len(points)
        if n == 0:
            return
        if colors is None:
            rgba = np.tile(np.array(DEFAULT_COLOR, dtype=np.uint8), (n, 1))
        else:
            rgba = np.asarray(colors, dtype=np.uint8).reshape(n, -1)
            if rgba.shape[1] == 3:
                alpha = np.full((n, 1), 255, dtype=np.uint8)
                rgba = np.hstack([rgba, alpha])
        self._reserve(n)
        self._points[self._size : self._size + n] = points
        self._colors[self._size : self._size + n] = rgba
        self._size += n
        self.metadata.merge(points.min(axis=0), points.max(axis=0), n)

    # ----------------------------------------------------------------- reads

    @property
    def points(self) -> np.ndarray:
        """Read-only view of the positions."""
        view = self._points[: self._size]
        view.flags.writeable = False
        return view

    @property
    def colors(self) -> np.ndarray:
        """Read-only view of the RGBA colors."""
        view = self._colors[: self._size]
        view.flags.writeable = False
        return view

    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return self._size

    def is_empty(self) -> bool:
        return self._size == 0

    def bounds(self) -> Bounds | None:
        """Bounding box of the current points, ``None`` for an empty cloud."""
        md = self.metadata
        if md.count == 0:
            return None
        return Bounds(md.min_x, md.max_x, md.min_y, md.max_y, md.min_z, md.max_z)

    def iterate(self, visit: Visitor) -> None:
        """Call ``visit(position, color)`` per point until it returns False."""
        points, colors = self.points, self.colors
        for i in range(self._size):
            if not visit(points[i], colors[i]):
                return

    def __iter__(self) -> Iterator[Tuple[np.ndarray, np.ndarray]]:
        points, colors = self.points, self.colors
        for i in range(self._size):
            yield points[i], colors[i]

    def subset(self, mask: np.ndarray) -> "PointCloud":
        """New cloud holding the points selected by a boolean mask."""
        return PointCloud.from_arrays(self.points[mask], self.colors[mask])

    def copy(self) -> "PointCloud":
        return PointCloud.from_arrays(self.points, self.colors)

    def __repr__(self) -> str:
        return f"PointCloud(size={self._size})"
