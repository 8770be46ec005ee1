from __future__ import annotations
from dataclasses import dataclass, field
from typing import Tuple

import numpy as np
from scipy.spatial.transform import Rotation

__all__ = [
    "Pose",
    "make_transform",
    "decompose_transform",
]


def make_transform(R: np.ndarray, t: np.ndarray) -> np.ndarray:
    """Build a homogeneous transform from ``R`` and ``t``."""
    T = np.eye(4)
    T[:3, :3] = R
    T[:3, 3] = np.asarray(t, dtype=np.float64).flatten()
    return T


def decompose_transform(T: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Return rotation matrix and translation vector from a transform."""
    return T[:3, :3], T[:3, 3]


@dataclass(frozen=True)
class Pose:
    """Rigid pose of a frame: translation plus rotation."""

    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: Rotation = field(default_factory=Rotation.identity)

    @classmethod
    def from_euler(
        cls,
        x: float,
        y: float,
        z: float,
        rx: float,
        ry: float,
        rz: float,
        *,
        degrees: bool = True,
    ) -> "Pose":
        """Pose from position and ``xyz`` Euler angles."""
        rot = Rotation.from_euler("xyz", [rx, ry, rz], degrees=degrees)
        return cls(np.array([x, y, z], dtype=np.float64), rot)

    @classmethod
    def from_matrix(cls, T: np.ndarray) -> "Pose":
        R, t = decompose_transform(np.asarray(T, dtype=np.float64))
        return cls(np.array(t, dtype=np.float64), Rotation.from_matrix(R))

    def as_matrix(self) -> np.ndarray:
        """4x4 homogeneous transform of this pose."""
        return make_transform(self.rotation.as_matrix(), self.translation)
