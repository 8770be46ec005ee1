# vision/transform.py

from __future__ import annotations

import numpy as np
from utils.logger import Logger
from utils.math_utils import Pose
from vision.pointcloud.cloud import PointCloud


class TransformUtils:
    """
    Utilities for 3D rigid transformations between coordinate frames
    (camera frame, world frame, merged clouds).
    """

    def __init__(self, logger=None) -> None:
        self.logger = logger or Logger.get_logger("vision.transform")

    def transform_points(self, points: np.ndarray, T: np.ndarray) -> np.ndarray:
        """
        Apply 4x4 transform to Nx3 points.
        """
        self.logger.debug(f"Applying transform to {points.shape[0]} points.")
        points_h = np.hstack([points, np.ones((points.shape[0], 1))])
        return (T @ points_h.T).T[:, :3]

    def apply_offset(
        self, cloud: PointCloud, pose: Pose | None, dest: PointCloud
    ) -> None:
        """
        Append ``cloud`` to ``dest`` with every position moved by ``pose``.
        ``pose=None`` copies the points unchanged. Colors are carried over.
        """
        if cloud.is_empty():
            return
        if pose is None:
            dest.extend(cloud.points, cloud.colors)
            return
        dest.extend(self.transform_points(cloud.points, pose.as_matrix()), cloud.colors)


_default = None


def apply_offset(cloud: PointCloud, pose: Pose | None, dest: PointCloud) -> None:
    """Module-level shortcut for :meth:`TransformUtils.apply_offset`."""
    global _default
    if _default is None:
        _default = TransformUtils()
    _default.apply_offset(cloud, pose, dest)


def approach_point(
    point: np.ndarray, delta: float, direction: np.ndarray
) -> np.ndarray:
    """
    Back ``point`` off by ``delta`` along ``direction`` (e.g. the tool's
    orientation vector), giving a pre-contact waypoint.
    """
    d = np.asarray(direction, dtype=np.float64)
    norm = np.linalg.norm(d)
    if norm == 0:
        raise ValueError("direction must be non-zero")
    return np.asarray(point, dtype=np.float64) - d * (delta / norm)
