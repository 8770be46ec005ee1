"""
Composable point cloud cameras.

Each wrapper is itself a :class:`CaptureSource`, so they stack: a crop
camera can feed a look-at camera, several crop cameras can be merged, and so
on. Wrappers with an expensive pipeline share captures between concurrent
callers through :class:`CaptureCoalescer`.
"""

from __future__ import annotations

import threading
import time
from abc import abstractmethod
from typing import Any, Mapping, Sequence

from utils.errors import ConfigurationError, UnsupportedOperationError
from utils.logger import Logger, LoggerType, log_duration
from utils.settings import WORLD_FRAME, timing
from vision.pointcloud.aggregator import MultiViewAggregator, merge_point_clouds
from vision.pointcloud.cloud import PointCloud
from vision.pointcloud.crop import crop
from vision.pointcloud.projection import RasterImage, pc_to_image
from vision.pointcloud.segment import look_at_segment
from vision.transform import TransformUtils

from .camera_base import CaptureSource, FrameService, PositionControl, capture_from
from .coalescer import CaptureCoalescer
from .config import (
    CropCameraConfig,
    LookAtCameraConfig,
    MergeConfig,
    MultiplePosesConfig,
)
from .intrinsics import CameraProperties


def _lookup(deps: Mapping[str, Any], name: str, kind: str) -> Any:
    try:
        return deps[name]
    except KeyError:
        raise ConfigurationError(f"missing {kind} {name!r}") from None


class PointCloudCamera(CaptureSource):
    """Base of the wrappers: a capture source that can also render an image."""

    supports_cancel = True

    def __init__(self, name: str, logger: LoggerType | None = None) -> None:
        self.name = name
        self.logger = logger or Logger.get_logger(f"vision.camera.{name}")

    @abstractmethod
    def next_point_cloud(
        self,
        extra: dict[str, Any] | None = None,
        cancel: threading.Event | None = None,
    ) -> PointCloud:
        """Capture and return the next point cloud."""

    def image(
        self,
        extra: dict[str, Any] | None = None,
        cancel: threading.Event | None = None,
    ) -> RasterImage:
        """Top-down raster of the next point cloud."""
        pc = self.next_point_cloud(extra, cancel)
        with log_duration(self.logger, f"{self.name} projection", timing.projection):
            return pc_to_image(pc)

    def properties(self) -> CameraProperties:
        return CameraProperties(supports_pcd=True)


class CoalescingCamera(PointCloudCamera):
    """
    Wrapper whose pipeline runs at most once at a time. Concurrent callers
    receive the result of a pipeline run that finished after they asked.
    """

    def __init__(
        self,
        name: str,
        coalescer: CaptureCoalescer | None = None,
        logger: LoggerType | None = None,
    ) -> None:
        super().__init__(name, logger)
        self.coalescer = coalescer or CaptureCoalescer(logger=self.logger)

    @abstractmethod
    def _produce(
        self, extra: dict[str, Any] | None, cancel: threading.Event | None
    ) -> PointCloud:
        """Run the full pipeline once."""

    def next_point_cloud(
        self,
        extra: dict[str, Any] | None = None,
        cancel: threading.Event | None = None,
    ) -> PointCloud:
        return self.coalescer.capture(lambda: self._produce(extra, cancel), cancel)


class CropCamera(CoalescingCamera):
    """Move a source cloud into the world frame and keep a colored box of it."""

    def __init__(
        self,
        name: str,
        cfg: CropCameraConfig,
        source: CaptureSource,
        frame_service: FrameService,
        coalescer: CaptureCoalescer | None = None,
        logger: LoggerType | None = None,
    ) -> None:
        cfg.validate()
        super().__init__(name, coalescer, logger)
        self.cfg = cfg
        self.source = source
        self.frame_service = frame_service
        self.transformer = TransformUtils(self.logger)

    @classmethod
    def from_config(
        cls,
        name: str,
        cfg: CropCameraConfig,
        deps: Mapping[str, CaptureSource],
        frame_service: FrameService,
    ) -> "CropCamera":
        (src,) = cfg.validate()
        return cls(name, cfg, _lookup(deps, src, "camera"), frame_service)

    def _produce(self, extra, cancel):
        start = time.monotonic()
        pc = capture_from(self.source, extra, cancel)
        captured = time.monotonic()

        pose = self.frame_service.get_pose(self.cfg.frame, WORLD_FRAME)
        in_world = PointCloud(pc.size())
        self.transformer.apply_offset(pc, pose, in_world)
        moved = time.monotonic()

        out = crop(in_world, self.cfg.min, self.cfg.max, self.cfg.good_colors)
        total = time.monotonic() - start
        if total > timing.crop_pipeline:
            self.logger.info(
                f"{self.name}: capture {1000 * (captured - start):.1f} ms, "
                f"transform {1000 * (moved - captured):.1f} ms, "
                f"crop {1000 * (total - (moved - start)):.1f} ms, "
                f"{pc.size()} -> {out.size()} points"
            )
        return out


class LookAtCamera(CoalescingCamera):
    """Reduce a source cloud to the object closest to the z axis."""

    def __init__(
        self,
        name: str,
        cfg: LookAtCameraConfig,
        source: CaptureSource,
        coalescer: CaptureCoalescer | None = None,
        logger: LoggerType | None = None,
    ) -> None:
        cfg.validate()
        super().__init__(name, coalescer, logger)
        self.cfg = cfg
        self.source = source

    @classmethod
    def from_config(
        cls, name: str, cfg: LookAtCameraConfig, deps: Mapping[str, CaptureSource]
    ) -> "LookAtCamera":
        (src,) = cfg.validate()
        return cls(name, cfg, _lookup(deps, src, "camera"))

    def _produce(self, extra, cancel):
        pc = capture_from(self.source, extra, cancel)
        with log_duration(self.logger, f"{self.name} look_at_segment"):
            return look_at_segment(pc, self.cfg.voxel_size, self.cfg.min_height)


class MergeCamera(PointCloudCamera):
    """Concatenate the clouds of several sources, already in a common frame."""

    def __init__(
        self,
        name: str,
        sources: Sequence[CaptureSource],
        logger: LoggerType | None = None,
    ) -> None:
        if not sources:
            raise ConfigurationError("need cameras")
        super().__init__(name, logger)
        self.sources = list(sources)

    @classmethod
    def from_config(
        cls, name: str, cfg: MergeConfig, deps: Mapping[str, CaptureSource]
    ) -> "MergeCamera":
        return cls(name, [_lookup(deps, n, "camera") for n in cfg.validate()])

    def next_point_cloud(self, extra=None, cancel=None):
        clouds = [capture_from(src, extra, cancel) for src in self.sources]
        merged = merge_point_clouds(clouds)
        self.logger.debug(
            f"{self.name}: merged {merged.size()} points from {len(clouds)} cameras"
        )
        return merged


class MultiPoseCamera(PointCloudCamera):
    """Aggregate captures of one source taken from several arm positions."""

    def __init__(
        self,
        name: str,
        source: CaptureSource,
        positions: Sequence[PositionControl],
        frame_service: FrameService,
        settle_seconds: float | None = None,
        logger: LoggerType | None = None,
    ) -> None:
        if not positions:
            raise ConfigurationError("no positions")
        super().__init__(name, logger)
        self.aggregator = MultiViewAggregator(
            source,
            positions,
            frame_service,
            settle_seconds,
            self.logger,
            capture=capture_from,
        )

    @classmethod
    def from_config(
        cls,
        name: str,
        cfg: MultiplePosesConfig,
        cameras: Mapping[str, CaptureSource],
        positions: Mapping[str, PositionControl],
        frame_service: FrameService,
    ) -> "MultiPoseCamera":
        cfg.validate()
        return cls(
            name,
            _lookup(cameras, cfg.src, "camera"),
            [_lookup(positions, p, "position") for p in cfg.positions],
            frame_service,
            cfg.sleep_time(),
        )

    def next_point_cloud(self, extra=None, cancel=None):
        return self.aggregator.aggregate(extra, cancel)

    def image(self, extra=None, cancel=None) -> RasterImage:
        raise UnsupportedOperationError(f"{self.name}: image not supported")
