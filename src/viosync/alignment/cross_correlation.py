"""Time offset estimation by cross-correlating rotation signals."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from scipy.signal import correlate, correlation_lags

from .result import AlignmentResult


@dataclass(frozen=True)
class CorrelationPeak:
    """Best alignment found by the lag search.

    Attributes:
        lag: Winning lag in window samples; positive means the IMU signal
            leads the vision signal
        correlation: Correlation at the winning lag, normalised by the
            product of the signal norms (raw value if a signal is all zero)
        num_lags: Number of lag candidates searched
    """

    lag: int
    correlation: float
    num_lags: int


class CrossCorrelationEstimator:
    """Finds the lag maximising the correlation of two equal-length windows.

    For windows v (vision) and m (IMU) of length N, the correlation at lag
    k is sum_n v[n + k] * m[n] over the overlapping samples, for every k in
    [-(N - 1), N - 1]. The windows are not mean-centred; the lag maximising
    the raw correlation is the estimate.
    """

    def __init__(self, nominal_sample_period_s: float, imu_rate: bool = True) -> None:
        """Initialize the estimator.

        Args:
            nominal_sample_period_s: IMU tick period in seconds
            imu_rate: True if one window sample is one IMU tick, False if it
                is one frame interval
        """
        if nominal_sample_period_s <= 0.0:
            raise ValueError(
                f"Sample period must be positive, got {nominal_sample_period_s}"
            )
        self._period_s = nominal_sample_period_s
        self._imu_rate = imu_rate

    def correlate(
        self, vision_angles: np.ndarray, imu_angles: np.ndarray
    ) -> tuple[np.ndarray, np.ndarray]:
        """Compute the normalised cross-correlation over all lags.

        Args:
            vision_angles: (N,) vision signal
            imu_angles: (N,) IMU signal

        Returns:
            Tuple of (lags, correlation), both (2N - 1,)

        Raises:
            ValueError: If the signals are empty or differ in length
        """
        vision = np.asarray(vision_angles, dtype=np.float64)
        imu = np.asarray(imu_angles, dtype=np.float64)
        if vision.ndim != 1 or imu.ndim != 1:
            raise ValueError("Correlation signals must be 1D")
        if len(vision) == 0 or len(vision) != len(imu):
            raise ValueError(
                f"Correlation signals must be non-empty and of equal length, "
                f"got {len(vision)} and {len(imu)}"
            )

        correlation = correlate(vision, imu, mode="full", method="direct")
        lags = correlation_lags(len(vision), len(imu), mode="full")

        norm = np.linalg.norm(vision) * np.linalg.norm(imu)
        if norm > 0.0:
            correlation = correlation / norm
        return lags, correlation

    def estimate_peak(
        self, vision_angles: np.ndarray, imu_angles: np.ndarray
    ) -> CorrelationPeak:
        """Find the winning lag; ties go to the lag closest to zero."""
        lags, correlation = self.correlate(vision_angles, imu_angles)
        candidates = np.flatnonzero(correlation == correlation.max())
        best = candidates[np.argmin(np.abs(lags[candidates]))]
        return CorrelationPeak(
            lag=int(lags[best]),
            correlation=float(correlation[best]),
            num_lags=len(lags),
        )

    def ticks_per_sample(self, imu_ticks: np.ndarray | None = None) -> int:
        """Return the number of IMU ticks one window sample stands for.

        At frame rate this is the mean tick count per frame interval,
        rounded and at least 1.
        """
        if self._imu_rate or imu_ticks is None or len(imu_ticks) == 0:
            return 1
        return max(1, int(np.round(np.mean(imu_ticks))))

    def lag_to_seconds(self, lag: int, ticks_per_sample: int = 1) -> float:
        """Convert a lag in window samples to seconds."""
        return lag * ticks_per_sample * self._period_s

    def estimate(
        self,
        vision_angles: np.ndarray,
        imu_angles: np.ndarray,
        imu_ticks: np.ndarray | None = None,
    ) -> AlignmentResult:
        """Estimate the IMU time shift from two full windows.

        Args:
            vision_angles: (N,) vision signal
            imu_angles: (N,) IMU signal
            imu_ticks: (N,) IMU ticks per sample, used at frame rate

        Returns:
            Valid AlignmentResult with the shift in seconds
        """
        peak = self.estimate_peak(vision_angles, imu_angles)
        shift = self.lag_to_seconds(peak.lag, self.ticks_per_sample(imu_ticks))
        return AlignmentResult(valid=True, imu_time_shift=shift)

    @property
    def imu_rate(self) -> bool:
        """True if window samples are IMU ticks."""
        return self._imu_rate
