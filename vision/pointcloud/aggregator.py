#!/usr/bin/env python3
"""Point cloud aggregation over several arm positions."""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING, Any, Callable, Iterable, Sequence

from utils.errors import CaptureCancelledError
from utils.logger import Logger, LoggerType
from utils.settings import POSITION_GO_TO, WORLD_FRAME, multi_pose
from vision.transform import TransformUtils

from .cloud import PointCloud

if TYPE_CHECKING:
    from vision.camera.camera_base import CaptureSource, FrameService, PositionControl

# (source, extra, cancel) -> cloud
CaptureFn = Callable[..., PointCloud]


def direct_capture(
    source: "CaptureSource",
    extra: dict[str, Any] | None = None,
    cancel: threading.Event | None = None,
) -> PointCloud:
    """Call the source as-is, handing it ``cancel`` when it can observe it."""
    if getattr(source, "supports_cancel", False):
        return source.next_point_cloud(extra, cancel)
    return source.next_point_cloud(extra)


def merge_point_clouds(clouds: Iterable[PointCloud]) -> PointCloud:
    """Concatenate clouds as-is into one cloud sized to their total."""
    clouds = list(clouds)
    merged = PointCloud(sum(pc.size() for pc in clouds))
    for pc in clouds:
        merged.extend(pc.points, pc.colors)
    return merged


class MultiViewAggregator:
    """
    Visit each position, capture a cloud, move it into the world frame and
    concatenate the results. Any failure aborts the whole run.

    ``capture(source, extra, cancel)`` performs each capture; camera
    wrappers pass one that wraps source failures.
    """

    def __init__(
        self,
        source: "CaptureSource",
        positions: Sequence["PositionControl"],
        frame_service: "FrameService",
        settle_seconds: float | None = None,
        logger: LoggerType | None = None,
        capture: CaptureFn | None = None,
    ) -> None:
        self.source = source
        self.capture = capture or direct_capture
        self.positions = list(positions)
        self.frame_service = frame_service
        self.settle_seconds = self._settle_time(settle_seconds)
        self.logger = logger or Logger.get_logger("vision.aggregator")
        self.transformer = TransformUtils(self.logger)

    @staticmethod
    def _settle_time(seconds: float | None) -> float:
        if seconds is None or seconds <= 0:
            return multi_pose.settle_seconds
        return float(seconds)

    def _settle(self, cancel: threading.Event | None) -> None:
        # let vibrations die down after a move
        if cancel is None:
            time.sleep(self.settle_seconds)
        elif cancel.wait(self.settle_seconds):
            raise CaptureCancelledError("aggregation cancelled while settling")

    def aggregate(
        self,
        extra: dict[str, Any] | None = None,
        cancel: threading.Event | None = None,
    ) -> PointCloud:
        in_world: list[PointCloud] = []
        for idx, position in enumerate(
            Logger.progress(self.positions, desc="positions")
        ):
            position.set_position(POSITION_GO_TO, None)
            self._settle(cancel)

            pc = self.capture(self.source, extra, cancel)
            pose = self.frame_service.get_pose(self.source.name, WORLD_FRAME)
            moved = PointCloud(pc.size())
            self.transformer.apply_offset(pc, pose, moved)
            self.logger.info(f"Position {idx}: {moved.size()} points in world frame")
            in_world.append(moved)

        merged = merge_point_clouds(in_world)
        self.logger.info(
            f"Aggregated {merged.size()} points from {len(in_world)} positions"
        )
        return merged
