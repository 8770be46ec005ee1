"""In-memory collaborators for camera and aggregator tests."""

import time

import numpy as np

from utils.math_utils import Pose
from vision.camera.camera_base import CaptureSource, FrameService, PositionControl
from vision.pointcloud import PointCloud


class FakeSource(CaptureSource):
    def __init__(self, name, cloud, delay=0.0, error=None):
        self.name = name
        self.cloud = cloud
        self.delay = delay
        self.error = error
        self.calls = 0

    def next_point_cloud(self, extra=None):
        self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.cloud


class FakeFrames(FrameService):
    def __init__(self, poses=None):
        self.poses = dict(poses or {})
        self.requests = []

    def get_pose(self, frame, reference_frame):
        self.requests.append((frame, reference_frame))
        return self.poses[frame]


class FakePosition(PositionControl):
    def __init__(self, log, name, frames=None, source=None, pose=None):
        self.log = log
        self.name = name
        self.frames = frames
        self.source = source
        self.pose = pose

    def set_position(self, position, extra=None):
        self.log.append((self.name, position))
        if self.frames is not None:
            self.frames.poses[self.source] = self.pose


def translation(x, y, z):
    return Pose(np.array([x, y, z], dtype=np.float64))


def colored(points, color):
    points = np.asarray(points, dtype=np.float64)
    return PointCloud.from_arrays(points, np.tile(np.array(color, dtype=np.uint8), (len(points), 1)))


class BrokenPosition(PositionControl):
    def __init__(self, error):
        self.error = error

    def set_position(self, position, extra=None):
        raise self.error
