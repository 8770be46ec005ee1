"""Pinhole intrinsics, lens distortion and pixel <-> point conversion."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Tuple

import numpy as np

from utils.errors import ConfigurationError
from utils.logger import Logger
from utils.settings import INTRINSICS_REALSENSE, CameraIntrinsicsCfg, undistort
from vision.pointcloud.cloud import PointCloud
from vision.pointcloud.projection import Rect

logger = Logger.get_logger("vision.intrinsics")


class Distortion(ABC):
    """Lens distortion model exposing only its forward transform."""

    @abstractmethod
    def transform(self, x: float, y: float) -> Tuple[float, float]:
        """Map undistorted ``(x, y)`` to distorted coordinates."""


@dataclass(frozen=True)
class BrownConrady(Distortion):
    """Radial (k1, k2, k3) plus tangential (p1, p2) distortion."""

    k1: float = 0.0
    k2: float = 0.0
    k3: float = 0.0
    p1: float = 0.0
    p2: float = 0.0

    def transform(self, x: float, y: float) -> Tuple[float, float]:
        r2 = x * x + y * y
        radial = 1.0 + self.k1 * r2 + self.k2 * r2 * r2 + self.k3 * r2 * r2 * r2
        tan_x = 2.0 * self.p1 * x * y + self.p2 * (r2 + 2.0 * x * x)
        tan_y = 2.0 * self.p2 * x * y + self.p1 * (r2 + 2.0 * y * y)
        return x * radial + tan_x, y * radial + tan_y


@dataclass(frozen=True)
class PinholeCameraIntrinsics:
    """
    Intrinsic camera parameters for the pinhole model.
    """

    width: int
    height: int
    fx: float  # focal length X
    fy: float  # focal length Y
    ppx: float  # principal point X (cx)
    ppy: float  # principal point Y (cy)

    @classmethod
    def from_cfg(cls, cfg: CameraIntrinsicsCfg) -> "PinholeCameraIntrinsics":
        return cls(cfg.width, cfg.height, cfg.fx, cfg.fy, cfg.ppx, cfg.ppy)

    def pixel_to_point(self, px: float, py: float, depth: float) -> Tuple[float, float, float]:
        """Back-project a pixel at ``depth`` (no distortion)."""
        x = (px - self.ppx) * depth / self.fx
        y = (py - self.ppy) * depth / self.fy
        return x, y, depth

    def point_to_pixel(self, x: float, y: float, z: float) -> Tuple[float, float]:
        """Project a camera-frame point onto the image plane."""
        return x * self.fx / z + self.ppx, y * self.fy / z + self.ppy

    def as_matrix(self) -> np.ndarray:
        """3x3 camera matrix K."""
        return np.array(
            [
                [self.fx, 0.0, self.ppx],
                [0.0, self.fy, self.ppy],
                [0.0, 0.0, 1.0],
            ]
        )


@dataclass(frozen=True)
class CameraProperties:
    """What a camera-like component reports about itself."""

    intrinsics: PinholeCameraIntrinsics | None = None
    distortion: Distortion | None = None
    supports_pcd: bool = True


REALSENSE_PROPERTIES = CameraProperties(
    intrinsics=PinholeCameraIntrinsics.from_cfg(INTRINSICS_REALSENSE),
    distortion=BrownConrady(*INTRINSICS_REALSENSE.coeffs),
)


def properties_from_dict(data: Mapping[str, Any]) -> CameraProperties:
    """
    Build properties from a config mapping with ``intrinsics`` and optional
    ``distortion`` (``k1``..``p2``) sections.
    """
    intr = data.get("intrinsics")
    if not intr:
        raise ConfigurationError("camera config has no intrinsics")
    try:
        intrinsics = PinholeCameraIntrinsics(
            width=int(intr["width"]),
            height=int(intr["height"]),
            fx=float(intr["fx"]),
            fy=float(intr["fy"]),
            ppx=float(intr["ppx"]),
            ppy=float(intr["ppy"]),
        )
    except KeyError as exc:
        raise ConfigurationError(f"intrinsics missing field {exc}") from exc
    dist = data.get("distortion")
    distortion = None
    if dist:
        distortion = BrownConrady(
            **{k: float(dist.get(k, 0.0)) for k in ("k1", "k2", "k3", "p1", "p2")}
        )
    return CameraProperties(intrinsics, distortion)


class IntrinsicModel:
    """
    Pixel/point conversions for one camera.

    Two back-projections are provided and they are deliberately not inverses
    of each other: :meth:`pixel_to_point` applies the *forward* distortion to
    the back-projected point, while :meth:`undistort_and_back_project` runs
    the iterative Brown-Conrady inverse on normalised coordinates. With zero
    distortion both agree.
    """

    def __init__(
        self,
        intrinsics: PinholeCameraIntrinsics | None,
        distortion: Distortion | None = None,
        iterations: int = undistort.iterations,
    ) -> None:
        if intrinsics is None:
            raise ConfigurationError("intrinsics cannot be None")
        self.intrinsics = intrinsics
        self.distortion = distortion
        self.iterations = iterations

    @classmethod
    def from_properties(cls, props: CameraProperties) -> "IntrinsicModel":
        return cls(props.intrinsics, props.distortion)

    def pixel_to_point(self, px: float, py: float, depth: float) -> Tuple[float, float, float]:
        """Pinhole back-projection followed by the forward distortion of (x, y)."""
        x, y, z = self.intrinsics.pixel_to_point(px, py, depth)
        if self.distortion is not None:
            x, y = self.distortion.transform(x, y)
        return x, y, z

    def undistort_and_back_project(
        self, px: float, py: float, depth: float
    ) -> Tuple[float, float, float]:
        """Undistort normalised pixel coordinates, then scale by ``depth``."""
        intr = self.intrinsics
        x0 = (px - intr.ppx) / intr.fx
        y0 = (py - intr.ppy) / intr.fy
        x, y = x0, y0

        dist = self.distortion
        if isinstance(dist, BrownConrady):
            for _ in range(self.iterations):
                r2 = x * x + y * y
                icdist = 1.0 / (1.0 + ((dist.p2 * r2 + dist.k2) * r2 + dist.k1) * r2)
                delta_x = 2.0 * dist.k3 * x * y + dist.p1 * (r2 + 2.0 * x * x)
                delta_y = 2.0 * dist.p1 * x * y + dist.k3 * (r2 + 2.0 * y * y)
                x = (x0 - delta_x) * icdist
                y = (y0 - delta_y) * icdist
        elif dist is not None:
            x, y = dist.transform(x, y)

        return depth * x, depth * y, depth

    def point_to_pixel(self, x: float, y: float, z: float) -> Tuple[float, float]:
        return self.intrinsics.point_to_pixel(x, y, z)


def detect_crop(
    cloud: PointCloud,
    boxes: Iterable[Rect],
    model: IntrinsicModel | None,
) -> PointCloud:
    """
    Keep the points whose projected pixel falls inside any of ``boxes``
    (detection bounding boxes, edges inclusive). Points at or behind the
    image plane (z <= 0) never match.
    """
    if model is None:
        raise ConfigurationError("intrinsics cannot be None")
    boxes = list(boxes)
    if cloud.is_empty() or not boxes:
        return PointCloud()

    pts = cloud.points
    intr = model.intrinsics
    front = pts[:, 2] > 0
    z = np.where(front, pts[:, 2], 1.0)
    u = np.trunc(pts[:, 0] * intr.fx / z + intr.ppx)
    v = np.trunc(pts[:, 1] * intr.fy / z + intr.ppy)

    mask = np.zeros(len(pts), dtype=bool)
    for b in boxes:
        mask |= (u >= b.min_x) & (u <= b.max_x) & (v >= b.min_y) & (v <= b.max_y)
    mask &= front
    logger.debug(f"detect_crop kept {int(mask.sum())} of {len(pts)} points")
    return cloud.subset(mask)
