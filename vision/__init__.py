"""Point cloud geometry and camera composition.

The vision package holds the point cloud container with its pure geometry
operations (:mod:`vision.pointcloud`), rigid transforms
(:mod:`vision.transform`), and the camera wrappers that chain them into
capture pipelines (:mod:`vision.camera`). NumPy does the heavy lifting;
Open3D and OpenCV are used for interop and image statistics.
"""

from .pointcloud import PointCloud, RasterImage, Rect
from .transform import TransformUtils, apply_offset, approach_point
from .camera import (
    CropCamera,
    IntrinsicModel,
    LookAtCamera,
    MergeCamera,
    MultiPoseCamera,
)
from .image_utils import compute_grayscale_average


__all__ = [
    "PointCloud",
    "RasterImage",
    "Rect",
    "TransformUtils",
    "apply_offset",
    "approach_point",
    "CropCamera",
    "IntrinsicModel",
    "LookAtCamera",
    "MergeCamera",
    "MultiPoseCamera",
    "compute_grayscale_average",
]
