"""Shared helper modules used across the project.

The :mod:`utils` package contains lightweight helpers for logging,
configuration, the error taxonomy and rigid-transform math. These utilities
are used by the :mod:`vision` packages.
"""

from .logger import Logger, LoggerType, log_duration
from .settings import (
    WORLD_FRAME,
    POSITION_IDLE,
    POSITION_SAVE,
    POSITION_GO_TO,
    INTRINSICS_REALSENSE,
    CameraIntrinsicsCfg,
    paths,
    logging,
    coalescer,
    segment,
    timing,
    multi_pose,
    undistort,
)
from .errors import (
    TouchError,
    ConfigurationError,
    NoSeedFoundError,
    CaptureTimeoutError,
    CaptureCancelledError,
    UpstreamCaptureError,
    UnsupportedOperationError,
)
from .math_utils import (
    Pose,
    make_transform,
    decompose_transform,
)

__all__ = [
    "Logger",
    "LoggerType",
    "log_duration",
    "WORLD_FRAME",
    "POSITION_IDLE",
    "POSITION_SAVE",
    "POSITION_GO_TO",
    "INTRINSICS_REALSENSE",
    "CameraIntrinsicsCfg",
    "paths",
    "logging",
    "coalescer",
    "segment",
    "timing",
    "multi_pose",
    "undistort",
    "TouchError",
    "ConfigurationError",
    "NoSeedFoundError",
    "CaptureTimeoutError",
    "CaptureCancelledError",
    "UpstreamCaptureError",
    "UnsupportedOperationError",
    "Pose",
    "make_transform",
    "decompose_transform",
]
