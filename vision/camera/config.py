"""Config records of the camera wrappers, loadable from ``conf/app.yaml``."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

import numpy as np

from utils.config import Config
from utils.errors import ConfigurationError
from utils.settings import multi_pose, segment
from vision.pointcloud.crop import ColorFilter

from .intrinsics import CameraProperties, properties_from_dict


def _vector(value: Any, key: str) -> tuple[float, float, float]:
    """Accept ``{x, y, z}`` mappings or 3-element sequences."""
    if isinstance(value, Mapping):
        value = [value.get("x", 0.0), value.get("y", 0.0), value.get("z", 0.0)]
    arr = np.asarray(value, dtype=np.float64).reshape(-1)
    if arr.size != 3:
        raise ConfigurationError(f"{key} must have 3 components, got {arr.size}")
    return float(arr[0]), float(arr[1]), float(arr[2])


@dataclass(frozen=True)
class CropCameraConfig:
    """
    Crop camera: capture ``src``, move it into the world frame using the
    pose of ``src_frame`` (defaults to ``src``), keep points in ``[min, max]``
    matching every entry of ``good_colors``.
    """

    src: str
    min: tuple[float, float, float]
    max: tuple[float, float, float]
    src_frame: str = ""
    good_colors: tuple[ColorFilter, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CropCameraConfig":
        return cls(
            src=str(data.get("src", "")),
            min=_vector(data.get("min", (0.0, 0.0, 0.0)), "min"),
            max=_vector(data.get("max", (0.0, 0.0, 0.0)), "max"),
            src_frame=str(data.get("src_frame", "") or ""),
            good_colors=tuple(
                ColorFilter.from_dict(c) for c in data.get("good_colors", None) or ()
            ),
        )

    @property
    def frame(self) -> str:
        return self.src_frame or self.src

    def validate(self) -> list[str]:
        """Return dependency names; raise on an incomplete config."""
        if not self.src:
            raise ConfigurationError("need a src camera")
        return [self.src]


@dataclass(frozen=True)
class LookAtCameraConfig:
    src: str
    voxel_size: float = segment.voxel_size
    min_height: float = segment.min_height

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LookAtCameraConfig":
        return cls(
            src=str(data.get("src", "")),
            voxel_size=float(data.get("voxel_size", segment.voxel_size)),
            min_height=float(data.get("min_height", segment.min_height)),
        )

    def validate(self) -> list[str]:
        if not self.src:
            raise ConfigurationError("need a src camera")
        if self.voxel_size <= 0:
            raise ConfigurationError("voxel_size must be positive")
        return [self.src]


@dataclass(frozen=True)
class MergeConfig:
    cameras: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MergeConfig":
        return cls(cameras=tuple(str(c) for c in data.get("cameras", None) or ()))

    def validate(self) -> list[str]:
        if not self.cameras:
            raise ConfigurationError("need cameras")
        return list(self.cameras)


@dataclass(frozen=True)
class MultiplePosesConfig:
    src: str
    positions: tuple[str, ...] = field(default_factory=tuple)
    sleep_seconds: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MultiplePosesConfig":
        return cls(
            src=str(data.get("src", "")),
            positions=tuple(str(p) for p in data.get("positions", None) or ()),
            sleep_seconds=float(data.get("sleep_seconds", 0.0) or 0.0),
        )

    def sleep_time(self) -> float:
        """Settle time after each move; non-positive means the default."""
        if self.sleep_seconds <= 0:
            return multi_pose.settle_seconds
        return self.sleep_seconds

    def validate(self) -> list[str]:
        if not self.src:
            raise ConfigurationError("need a src camera")
        if not self.positions:
            raise ConfigurationError("no positions")
        return [*self.positions, self.src]


_CONFIG_TYPES = {
    "crop": CropCameraConfig,
    "look_at": LookAtCameraConfig,
    "merge": MergeConfig,
    "multiple_poses": MultiplePosesConfig,
}


def load_camera_config(name: str) -> Any:
    """
    Read ``cameras.<name>`` from the app config and build the matching
    record from its ``type`` field. The record is validated before return.
    """
    data = Config.section(f"cameras.{name}")
    kind = data.get("type")
    if kind not in _CONFIG_TYPES:
        raise ConfigurationError(
            f"camera {name!r} has unknown type {kind!r}; expected one of "
            f"{sorted(_CONFIG_TYPES)}"
        )
    cfg = _CONFIG_TYPES[kind].from_dict(data)
    cfg.validate()
    return cfg


def load_camera_properties(name: str) -> CameraProperties:
    """Read ``camera_properties.<name>`` (intrinsics and distortion)."""
    return properties_from_dict(Config.section(f"camera_properties.{name}"))
