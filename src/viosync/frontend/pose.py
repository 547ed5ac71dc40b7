"""SE(3) pose representation for relative camera motion."""

from __future__ import annotations

from dataclasses import dataclass

import cv2
import numpy as np


@dataclass
class SE3:
    """Rigid body transformation (rotation + translation) in SE(3).

    The time aligner only consumes the rotation part of the relative pose
    T_ref_cur returned by the tracker; the translation of a monocular
    estimate is known up to scale only.

    Attributes:
        rotation: 3x3 orthonormal rotation matrix (det = +1)
        translation: 3D translation vector
    """

    rotation: np.ndarray  # 3x3 rotation matrix
    translation: np.ndarray  # (3,) translation vector

    def __post_init__(self) -> None:
        """Validate and normalize inputs."""
        self.rotation = np.asarray(self.rotation, dtype=np.float64)
        self.translation = np.asarray(self.translation, dtype=np.float64).flatten()

        if self.rotation.shape != (3, 3):
            raise ValueError(f"Rotation must be 3x3, got {self.rotation.shape}")
        if self.translation.shape != (3,):
            raise ValueError(
                f"Translation must be (3,), got {self.translation.shape}"
            )

    @classmethod
    def identity(cls) -> SE3:
        """Create identity transformation (no rotation, no translation)."""
        return cls(rotation=np.eye(3), translation=np.zeros(3))

    @classmethod
    def from_Rt(cls, R: np.ndarray, t: np.ndarray) -> SE3:
        """Create SE3 from rotation matrix and translation vector."""
        return cls(rotation=R, translation=t)

    @classmethod
    def from_rvec_tvec(
        cls, rvec: np.ndarray, tvec: np.ndarray | None = None
    ) -> SE3:
        """Create SE3 from a Rodrigues vector (axis * angle) and translation.

        Args:
            rvec: 3D Rodrigues rotation vector
            tvec: 3D translation vector, zero if omitted

        Returns:
            SE3 transformation
        """
        R, _ = cv2.Rodrigues(np.asarray(rvec, dtype=np.float64).reshape(3, 1))
        t = np.zeros(3) if tvec is None else np.asarray(tvec).flatten()
        return cls(rotation=R, translation=t)

    def to_matrix(self) -> np.ndarray:
        """Convert to 4x4 homogeneous transformation matrix."""
        T = np.eye(4, dtype=np.float64)
        T[:3, :3] = self.rotation
        T[:3, 3] = self.translation
        return T

    @property
    def rotation_vector(self) -> np.ndarray:
        """Return the rotation as a Rodrigues vector (logarithm map of SO(3))."""
        rvec, _ = cv2.Rodrigues(self.rotation)
        return rvec.flatten()

    @property
    def rotation_angle(self) -> float:
        """Return the rotation angle in radians, in [0, pi]."""
        return float(np.linalg.norm(self.rotation_vector))

    def inverse(self) -> SE3:
        """Compute the inverse transformation [R^T, -R^T @ t]."""
        R_inv = self.rotation.T
        t_inv = -R_inv @ self.translation
        return SE3(rotation=R_inv, translation=t_inv)

    def compose(self, other: SE3) -> SE3:
        """Compose with another transformation: self @ other.

        Example:
            T_world_prev.compose(T_prev_curr) gives T_world_curr
        """
        R = self.rotation @ other.rotation
        t = self.rotation @ other.translation + self.translation
        return SE3(rotation=R, translation=t)

    def __repr__(self) -> str:
        """Return string representation."""
        rvec = self.rotation_vector
        return (
            f"SE3(rvec=[{rvec[0]:.4f}, {rvec[1]:.4f}, {rvec[2]:.4f}], "
            f"t=[{self.translation[0]:.3f}, {self.translation[1]:.3f}, "
            f"{self.translation[2]:.3f}])"
        )

    def __matmul__(self, other: SE3) -> SE3:
        """Matrix multiplication operator for composition."""
        return self.compose(other)
