"""Point cloud container and pure geometry operations.

Every function here takes clouds as input and returns new clouds (or images);
nothing mutates its input, so calls are safe from any thread.
"""

from .cloud import Bounds, CloudMetadata, PointCloud
from .buckets import bucket_key, build_buckets, box_distance
from .segment import find_seed, look_at_segment
from .projection import RasterImage, Rect, pc_to_image
from .crop import (
    ColorFilter,
    crop,
    euclidean_rgb,
    find_highest_in_region,
    find_lowest_in_region,
    in_box,
)
from .aggregator import MultiViewAggregator, merge_point_clouds

__all__ = [
    "Bounds",
    "CloudMetadata",
    "PointCloud",
    "bucket_key",
    "build_buckets",
    "box_distance",
    "find_seed",
    "look_at_segment",
    "RasterImage",
    "Rect",
    "pc_to_image",
    "ColorFilter",
    "crop",
    "euclidean_rgb",
    "find_highest_in_region",
    "find_lowest_in_region",
    "in_box",
    "MultiViewAggregator",
    "merge_point_clouds",
]
