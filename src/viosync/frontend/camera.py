"""Pinhole camera intrinsics."""

from dataclasses import dataclass

import numpy as np


@dataclass
class CameraIntrinsics:
    """Camera intrinsic parameters (pinhole model, rectified images)."""

    fx: float  # Focal length x (pixels)
    fy: float  # Focal length y (pixels)
    cx: float  # Principal point x (pixels)
    cy: float  # Principal point y (pixels)

    @classmethod
    def from_projection(cls, P: np.ndarray) -> "CameraIntrinsics":
        """Create intrinsics from a 3x4 rectified projection matrix."""
        P = np.asarray(P, dtype=np.float64).reshape(3, 4)
        return cls(fx=P[0, 0], fy=P[1, 1], cx=P[0, 2], cy=P[1, 2])

    def to_matrix(self) -> np.ndarray:
        """Return 3x3 camera intrinsic matrix K."""
        return np.array(
            [[self.fx, 0.0, self.cx], [0.0, self.fy, self.cy], [0.0, 0.0, 1.0]],
            dtype=np.float64,
        )
