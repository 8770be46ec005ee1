# vision/pointcloud/segment.py
"""Seeded region growing over voxel buckets ("the object the camera looks at")."""

from __future__ import annotations

import numpy as np

from utils.errors import NoSeedFoundError
from utils.logger import Logger
from utils.settings import segment as SEGCFG

from .buckets import BucketMap, box_distance, bucket_key, build_buckets, point_box_distance
from .cloud import PointCloud

logger = Logger.get_logger("vision.segment")


def find_seed(cloud: PointCloud, min_height: float = SEGCFG.min_height) -> np.ndarray:
    """
    Point with ``z >= min_height`` closest to the vertical axis through the
    origin (smallest ``sqrt(x^2 + y^2)``). Ties go to the earliest point.
    """
    pts = cloud.points
    candidates = pts[pts[:, 2] >= min_height]
    if len(candidates) == 0:
        raise NoSeedFoundError(
            f"no point with z >= {min_height} among {cloud.size()} points"
        )
    radius = np.hypot(candidates[:, 0], candidates[:, 1])
    return candidates[int(np.argmin(radius))].copy()


def _absorb(
    good: PointCloud, bucket: PointCloud, voxel_size: float
) -> tuple[PointCloud, bool]:
    """
    Move points of ``bucket`` that lie within ``voxel_size`` of the good
    region's box into ``good``. The box widens after every absorbed point.
    Returns the residual bucket and whether anything moved.
    """
    md = good.metadata
    lo = [md.min_x, md.min_y, md.min_z]
    hi = [md.max_x, md.max_y, md.max_z]
    keep = np.ones(bucket.size(), dtype=bool)
    for i, p in enumerate(bucket.points.tolist()):
        if point_box_distance(p, lo, hi) < voxel_size:
            keep[i] = False
            for axis in range(3):
                lo[axis] = min(lo[axis], p[axis])
                hi[axis] = max(hi[axis], p[axis])
    if keep.all():
        return bucket, False
    taken = ~keep
    good.extend(bucket.points[taken], bucket.colors[taken])
    return bucket.subset(keep), True


def grow_region(good: PointCloud, buckets: BucketMap, voxel_size: float) -> PointCloud:
    """Absorb neighbouring bucket points into ``good`` until a pass adds nothing."""
    passes = 0
    while True:
        passes += 1
        added = False
        for key, bucket in buckets.items():
            if bucket.is_empty():
                continue
            if box_distance(good, bucket) > voxel_size * 2:
                continue
            residual, moved = _absorb(good, bucket, voxel_size)
            buckets[key] = residual
            added = added or moved
        if not added:
            break
    logger.debug(f"Region growing converged after {passes} passes")
    return good


def look_at_segment(
    cloud: PointCloud,
    voxel_size: float = SEGCFG.voxel_size,
    min_height: float = SEGCFG.min_height,
) -> PointCloud:
    """
    Segment the object nearest the camera axis.

    Points below ``min_height`` are treated as floor and take no part in
    bucketing or seeding. The region starts as the seed's bucket and grows
    by bounding-box proximity (not nearest-point distance), so concave gaps
    narrower than ``voxel_size`` may be bridged.

    Raises
    ------
    NoSeedFoundError
        If no point satisfies the height filter.
    """
    above = cloud.subset(cloud.points[:, 2] >= min_height)
    seed = find_seed(above, min_height)
    buckets = build_buckets(above, voxel_size)

    seed_key = bucket_key(seed, voxel_size)
    good = PointCloud(buckets[seed_key].size())
    good.extend(buckets[seed_key].points, buckets[seed_key].colors)
    buckets[seed_key] = PointCloud()

    grow_region(good, buckets, voxel_size)
    logger.debug(
        f"Segmented {good.size()} of {cloud.size()} points "
        f"(seed={np.round(seed, 2).tolist()}, buckets={len(buckets)})"
    )
    return good
