"""Abstract interfaces of the collaborators the camera wrappers depend on."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Any

from utils.errors import CaptureCancelledError, UpstreamCaptureError
from utils.math_utils import Pose
from utils.settings import POSITION_GO_TO, POSITION_IDLE, POSITION_SAVE
from vision.pointcloud.cloud import PointCloud

from .intrinsics import CameraProperties

__all__ = [
    "CaptureSource",
    "capture_from",
    "FrameService",
    "PositionControl",
    "POSITION_IDLE",
    "POSITION_SAVE",
    "POSITION_GO_TO",
]


class CaptureSource(ABC):
    """Anything that can produce a point cloud on demand."""

    name: str
    # wrappers accept a ``cancel`` event as second argument
    supports_cancel: bool = False

    @abstractmethod
    def next_point_cloud(self, extra: dict[str, Any] | None = None) -> PointCloud:
        """Capture and return the next point cloud."""

    def properties(self) -> CameraProperties:
        return CameraProperties(supports_pcd=True)


class FrameService(ABC):
    """Pose lookup between named frames."""

    @abstractmethod
    def get_pose(self, frame: str, reference_frame: str) -> Pose:
        """Pose of ``frame`` expressed in ``reference_frame``."""


class PositionControl(ABC):
    """A switch-like component that can move to a saved configuration."""

    @abstractmethod
    def set_position(self, position: int, extra: dict[str, Any] | None = None) -> None:
        """Enter ``position`` (see ``POSITION_*``)."""


def capture_from(
    source: CaptureSource,
    extra: dict[str, Any] | None = None,
    cancel: threading.Event | None = None,
) -> PointCloud:
    """
    Pull a cloud from ``source``, forwarding ``cancel`` when the source can
    observe it. Failures are wrapped in :class:`UpstreamCaptureError` naming
    the source; cancellation and already wrapped errors pass through.
    """
    try:
        if source.supports_cancel:
            return source.next_point_cloud(extra, cancel)
        return source.next_point_cloud(extra)
    except (UpstreamCaptureError, CaptureCancelledError):
        raise
    except Exception as exc:
        raise UpstreamCaptureError(
            f"capture from {getattr(source, 'name', source)!r} failed: {exc}"
        ) from exc
