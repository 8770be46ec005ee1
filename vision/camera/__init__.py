"""Camera-level components.

Collaborator interfaces (:mod:`.camera_base`), intrinsics and distortion
(:mod:`.intrinsics`), capture coalescing (:mod:`.coalescer`) and the
stackable camera wrappers (:mod:`.wrappers`) configured from
:mod:`.config` records.
"""

from .intrinsics import (
    BrownConrady,
    CameraProperties,
    Distortion,
    IntrinsicModel,
    PinholeCameraIntrinsics,
    REALSENSE_PROPERTIES,
    detect_crop,
    properties_from_dict,
)
from .camera_base import (
    CaptureSource,
    FrameService,
    PositionControl,
    capture_from,
    POSITION_GO_TO,
    POSITION_IDLE,
    POSITION_SAVE,
)
from .coalescer import CaptureCoalescer, CaptureSlot
from .config import (
    CropCameraConfig,
    LookAtCameraConfig,
    MergeConfig,
    MultiplePosesConfig,
    load_camera_config,
    load_camera_properties,
)
from .wrappers import (
    CoalescingCamera,
    CropCamera,
    LookAtCamera,
    MergeCamera,
    MultiPoseCamera,
    PointCloudCamera,
)

__all__ = [
    "BrownConrady",
    "CameraProperties",
    "Distortion",
    "IntrinsicModel",
    "PinholeCameraIntrinsics",
    "REALSENSE_PROPERTIES",
    "detect_crop",
    "properties_from_dict",
    "CaptureSource",
    "FrameService",
    "PositionControl",
    "POSITION_GO_TO",
    "POSITION_IDLE",
    "POSITION_SAVE",
    "CaptureCoalescer",
    "CaptureSlot",
    "CropCameraConfig",
    "LookAtCameraConfig",
    "MergeConfig",
    "MultiplePosesConfig",
    "load_camera_config",
    "load_camera_properties",
    "CoalescingCamera",
    "CropCamera",
    "LookAtCamera",
    "MergeCamera",
    "MultiPoseCamera",
    "PointCloudCamera",
    "capture_from",
]
