"""Information check on the buffered IMU signal."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class VarianceCheck:
    """Outcome of a variance gate evaluation.

    Attributes:
        variance: Population variance of the IMU angles (rad²)
        threshold: Variance the signal had to reach (rad²)
        passed: True if the signal may be correlated
    """

    variance: float
    threshold: float
    passed: bool


class VarianceGate:
    """Rejects IMU windows whose variation is at the sensor noise level.

    White gyroscope noise of density sigma (rad/s/√Hz) integrated over one
    tick of length dt gives an angle variance of sigma² * dt. A window
    whose IMU angles vary less than that carries no usable information
    about the time offset.
    """

    def __init__(
        self,
        gyro_noise_density: float,
        nominal_sample_period_s: float,
        scaling: float = 1.0,
    ) -> None:
        """Initialize the gate.

        Args:
            gyro_noise_density: Gyroscope white noise (rad/s/√Hz)
            nominal_sample_period_s: IMU tick period in seconds
            scaling: Multiplier on the noise variance
        """
        self._threshold = scaling * gyro_noise_density**2 * nominal_sample_period_s
        self._noisy = gyro_noise_density > 0.0

    def check(self, imu_angles: np.ndarray) -> VarianceCheck:
        """Evaluate the gate on a window of IMU angles.

        A signal strictly below the threshold is rejected. A constant
        signal passes only when the gyroscope is noise-free, whatever the
        scaling.
        """
        imu_angles = np.asarray(imu_angles, dtype=np.float64)
        variance = float(np.var(imu_angles)) if imu_angles.size else 0.0
        passed = variance >= self._threshold
        if self._noisy and variance == 0.0:
            passed = False
        return VarianceCheck(
            variance=variance,
            threshold=self._threshold,
            passed=passed,
        )

    def passes(self, imu_angles: np.ndarray) -> bool:
        """Return True if the IMU angles carry enough variation."""
        return self.check(imu_angles).passed

    @property
    def threshold(self) -> float:
        """Variance threshold in rad²."""
        return self._threshold
