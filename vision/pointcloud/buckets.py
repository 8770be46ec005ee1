"""Spatial hash of a point cloud into fixed-size voxel buckets."""

from __future__ import annotations

import math
from typing import Dict, Tuple

import numpy as np

from .cloud import PointCloud

BucketKey = Tuple[int, int, int]
BucketMap = Dict[BucketKey, PointCloud]


def bucket_key(position, voxel_size: float) -> BucketKey:
    """Integer voxel coordinates ``floor(p / voxel_size)`` of one position."""
    return (
        math.floor(position[0] / voxel_size),
        math.floor(position[1] / voxel_size),
        math.floor(position[2] / voxel_size),
    )


def build_buckets(cloud: PointCloud, voxel_size: float) -> BucketMap:
    """
    Partition every point of ``cloud`` into voxel buckets.

    Each bucket is a new :class:`PointCloud` with its own running bounds; the
    bucket sizes always sum to ``cloud.size()``.
    """
    if voxel_size <= 0:
        raise ValueError(f"voxel_size must be positive, got {voxel_size}")
    buckets: BucketMap = {}
    if cloud.is_empty():
        return buckets

    points, colors = cloud.points, cloud.colors
    keys = np.floor(points / voxel_size).astype(np.int64)
    uniq, inverse = np.unique(keys, axis=0, return_inverse=True)
    inverse = inverse.reshape(-1)
    # stable sort keeps the input order of points inside each bucket
    order = np.argsort(inverse, kind="stable")
    splits = np.cumsum(np.bincount(inverse, minlength=len(uniq)))[:-1]
    for key, idx in zip(uniq, np.split(order, splits)):
        buckets[(int(key[0]), int(key[1]), int(key[2]))] = PointCloud.from_arrays(
            points[idx], colors[idx]
        )
    return buckets


def box_distance(a: PointCloud, b: PointCloud) -> float:
    """
    Lower bound of the distance between two clouds from their AABBs.
    Zero on every axis where the boxes overlap; ``inf`` if either is empty.
    """
    ab, bb = a.bounds(), b.bounds()
    if ab is None or bb is None:
        return math.inf
    dx = max(0.0, ab.min_x - bb.max_x, bb.min_x - ab.max_x)
    dy = max(0.0, ab.min_y - bb.max_y, bb.min_y - ab.max_y)
    dz = max(0.0, ab.min_z - bb.max_z, bb.min_z - ab.max_z)
    return math.sqrt(dx * dx + dy * dy + dz * dz)


def point_box_distance(p, lo, hi) -> float:
    """Euclidean distance from point ``p`` to the box ``[lo, hi]``."""
    dx = max(0.0, lo[0] - p[0], p[0] - hi[0])
    dy = max(0.0, lo[1] - p[1], p[1] - hi[1])
    dz = max(0.0, lo[2] - p[2], p[2] - hi[2])
    return math.sqrt(dx * dx + dy * dy + dz * dz)
