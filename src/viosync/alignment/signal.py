"""Reduction of vision and IMU rotations to scalar correlation samples.

Each frame interval delivers one relative rotation from the tracker and a
batch of raw IMU samples. Both are reduced to scalar rotation angles so the
two streams can be cross-correlated:

- vision: the relative rotation T_ref_cur as a rotation vector, reduced to
  its norm (default) or to its signed component about a configured axis
- IMU: each gyroscope sample times the nominal tick period, reduced the
  same way

At IMU rate the vision angle is linearly interpolated across the ticks of
the interval; at frame rate the gyroscope ticks of the interval are
composed into a single rotation.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from scipy.spatial.transform import Rotation

from ..frontend.pose import SE3

# Rows of the (6, K) IMU sample matrix
ACCEL_ROWS = slice(0, 3)
GYRO_ROWS = slice(3, 6)


@dataclass(frozen=True)
class CorrelationSample:
    """One paired entry of the sliding window.

    Attributes:
        vision_angle: Vision-derived rotation angle (rad)
        imu_angle: IMU-derived rotation angle (rad)
        imu_ticks: Number of IMU ticks the IMU angle spans
    """

    vision_angle: float
    imu_angle: float
    imu_ticks: int = 1


@dataclass
class ImuBatch:
    """IMU samples bracketing one frame interval.

    Column 0 is the sample at the previous frame boundary; columns 1..N are
    the samples up to and including the current frame.

    Attributes:
        stamps: (K,) strictly increasing timestamps
        acc_gyr: (6, K) accelerometer (rows 0-2) and gyroscope (rows 3-5)
    """

    stamps: np.ndarray
    acc_gyr: np.ndarray

    @classmethod
    def from_arrays(cls, stamps: np.ndarray, acc_gyr: np.ndarray) -> ImuBatch:
        """Validate raw arrays and build a batch.

        Args:
            stamps: (1, K) row vector or (K,) vector of timestamps
            acc_gyr: (6, K) matrix of accelerometer and gyroscope samples

        Returns:
            ImuBatch with flattened stamps

        Raises:
            ValueError: If shapes disagree, values are not finite, or the
                timestamps are not strictly increasing
        """
        # Integer nanosecond stamps are kept exact; unsigned ones are made
        # signed so differences cannot wrap around
        stamps = np.asarray(stamps)
        if np.issubdtype(stamps.dtype, np.unsignedinteger):
            stamps = stamps.astype(np.int64)
        elif not np.issubdtype(stamps.dtype, np.integer):
            stamps = stamps.astype(np.float64)
        acc_gyr = np.asarray(acc_gyr, dtype=np.float64)

        if stamps.ndim == 2 and stamps.shape[0] == 1:
            stamps = stamps[0]
        if stamps.ndim != 1:
            raise ValueError(
                f"IMU stamps must be a (1, K) row or (K,) vector, got {stamps.shape}"
            )
        if acc_gyr.ndim != 2 or acc_gyr.shape[0] != 6:
            raise ValueError(f"IMU samples must be (6, K), got {acc_gyr.shape}")
        if acc_gyr.shape[1] != stamps.shape[0]:
            raise ValueError(
                f"IMU stamps ({stamps.shape[0]}) and samples "
                f"({acc_gyr.shape[1]}) disagree in length"
            )
        if not np.all(np.isfinite(stamps)) or not np.all(np.isfinite(acc_gyr)):
            raise ValueError("IMU stamps and samples must be finite")
        if np.any(stamps[1:] <= stamps[:-1]):
            raise ValueError("IMU stamps must be strictly increasing")

        return cls(stamps=stamps, acc_gyr=acc_gyr)

    @property
    def acc(self) -> np.ndarray:
        """Return (3, K) accelerometer samples in m/s²."""
        return self.acc_gyr[ACCEL_ROWS]

    @property
    def gyro(self) -> np.ndarray:
        """Return (3, K) gyroscope samples in rad/s."""
        return self.acc_gyr[GYRO_ROWS]

    @property
    def num_interior(self) -> int:
        """Number of ticks after the boundary sample."""
        return max(len(self.stamps) - 1, 0)

    def __len__(self) -> int:
        """Number of columns, boundary sample included."""
        return len(self.stamps)


def reduce_rotation_vector(
    rvec: np.ndarray, axis: int | None = None
) -> float | np.ndarray:
    """Reduce rotation vector(s) to scalar angles.

    Args:
        rvec: (3,) rotation vector or (3, K) columns of rotation vectors
        axis: Axis index for a signed angle, None for the magnitude

    Returns:
        Scalar angle, or (K,) array of angles for column input
    """
    rvec = np.asarray(rvec, dtype=np.float64)
    if axis is None:
        return np.linalg.norm(rvec, axis=0)
    return rvec[axis]


def vision_rotation_angle(relative_pose: SE3, axis: int | None = None) -> float:
    """Return the scalar rotation angle of a relative pose."""
    return float(reduce_rotation_vector(relative_pose.rotation_vector, axis))


def imu_rate_samples(
    vision_angle: float,
    previous_vision_angle: float,
    batch: ImuBatch,
    period_s: float,
    include_boundary: bool = False,
    axis: int | None = None,
) -> list[CorrelationSample]:
    """Build one sample per IMU tick of a frame interval.

    The vision angle is interpolated by column index from the previous
    vision angle (at the boundary column) to the current one (at the last
    column). A batch without interior ticks maps every column to the
    current vision angle.

    Args:
        vision_angle: Vision angle of the current interval
        previous_vision_angle: Vision angle of the previous interval
        batch: IMU samples of the interval
        period_s: Nominal IMU tick period
        include_boundary: Also emit a sample for column 0 (first interval
            of a session only; afterwards column 0 was already consumed)
        axis: Axis for signed angles, None for magnitudes

    Returns:
        Samples in tick order
    """
    first = 0 if include_boundary else 1
    if first >= len(batch):
        return []

    num_interior = batch.num_interior
    imu_angles = reduce_rotation_vector(batch.gyro[:, first:] * period_s, axis)

    samples = []
    for offset, imu_angle in enumerate(np.atleast_1d(imu_angles)):
        column = first + offset
        ratio = column / num_interior if num_interior > 0 else 1.0
        interp = previous_vision_angle + ratio * (vision_angle - previous_vision_angle)
        samples.append(CorrelationSample(float(interp), float(imu_angle), 1))
    return samples


def integrate_gyro(
    gyro: np.ndarray, period_s: float, axis: int | None = None
) -> float:
    """Compose gyroscope ticks into one rotation and reduce it to an angle.

    Args:
        gyro: (3, N) angular rates in rad/s, one column per tick
        period_s: Nominal IMU tick period
        axis: Axis for a signed angle, None for the magnitude

    Returns:
        Rotation angle over the N ticks (0 if N == 0)
    """
    gyro = np.asarray(gyro, dtype=np.float64)
    if gyro.shape[1] == 0:
        return 0.0

    rotation = Rotation.identity()
    for rvec in (gyro * period_s).T:
        rotation = rotation * Rotation.from_rotvec(rvec)
    return float(reduce_rotation_vector(rotation.as_rotvec(), axis))


def frame_rate_sample(
    vision_angle: float,
    batch: ImuBatch,
    period_s: float,
    axis: int | None = None,
) -> CorrelationSample:
    """Build the single sample of a frame interval at frame rate.

    The boundary column belongs to the previous interval and is skipped.
    """
    imu_angle = integrate_gyro(batch.gyro[:, 1:], period_s, axis)
    return CorrelationSample(float(vision_angle), imu_angle, batch.num_interior)
