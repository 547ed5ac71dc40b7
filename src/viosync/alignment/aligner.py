"""Online camera-IMU time alignment.

The aligner is fed once per processed frame with the frame and the IMU
samples since the previous frame. It keeps a sliding window of paired
vision/IMU rotation angles and, once the window is full and the IMU signal
is informative enough, reports the IMU time shift found by
cross-correlation.

Example usage:
    aligner = TemporalAligner(AlignmentConfig(window_size=100))
    for packet in provider:
        result = aligner.estimate_time_alignment(
            tracker, packet.frame, packet.imu_stamps, packet.imu_acc_gyr
        )
        if result.valid:
            break
"""

from __future__ import annotations

import logging
from enum import Enum

import numpy as np

from ..config import AlignmentConfig
from ..frontend.frame import Frame
from ..frontend.tracking import Tracker, TrackingStatus
from .cross_correlation import CrossCorrelationEstimator
from .result import AlignmentResult
from .signal import (
    ImuBatch,
    frame_rate_sample,
    imu_rate_samples,
    vision_rotation_angle,
)
from .variance import VarianceGate
from .window import SlidingWindow

logger = logging.getLogger(__name__)


class AlignerState(Enum):
    """Lifecycle of a time alignment session."""

    AWAITING_REFERENCE = "AWAITING_REFERENCE"
    ACCUMULATING = "ACCUMULATING"
    CONVERGED = "CONVERGED"


class TemporalAligner:
    """Estimates the constant offset between the IMU and camera clocks.

    One instance serves one calibration session and is not thread-safe.

    State machine:
        AWAITING_REFERENCE -> ACCUMULATING -> CONVERGED (terminal)

    Degenerate tracking (any status other than VALID) and intervals without
    IMU samples report a trivial valid result with zero shift and leave the
    window and the state untouched.
    """

    def __init__(self, config: AlignmentConfig) -> None:
        """Initialize the aligner.

        Args:
            config: Time alignment parameters, fixed for the session
        """
        self._config = config
        self._window = SlidingWindow(config.window_size)
        self._gate = VarianceGate(
            config.gyro_noise_density,
            config.nominal_sample_period_s,
            scaling=config.variance_threshold_scaling,
        )
        self._estimator = CrossCorrelationEstimator(
            config.nominal_sample_period_s,
            imu_rate=config.use_imu_rate_window,
        )

        self._state = AlignerState.AWAITING_REFERENCE
        self._reference_frame: Frame | None = None
        self._last_imu_stamp: int | float | None = None
        self._last_vision_angle = 0.0
        self._result = AlignmentResult.pending()

    def estimate_time_alignment(
        self,
        tracker: Tracker,
        frame: Frame,
        imu_stamps: np.ndarray,
        imu_acc_gyr: np.ndarray,
    ) -> AlignmentResult:
        """Process one frame and attempt to estimate the IMU time shift.

        Args:
            tracker: Capability returning the relative rotation between the
                reference frame and `frame`
            frame: Current frame
            imu_stamps: (1, N+1) IMU timestamps since the previous frame,
                column 0 at the previous frame boundary
            imu_acc_gyr: (6, N+1) accelerometer and gyroscope samples

        Returns:
            AlignmentResult; `valid=False` while undetermined

        Raises:
            ValueError: If the IMU arrays are malformed, or the frame or the
                batch starts before the data of the previous call
        """
        batch = ImuBatch.from_arrays(imu_stamps, imu_acc_gyr)
        self._check_ordering(frame, batch)
        if len(batch) > 0:
            self._last_imu_stamp = batch.stamps[-1]

        if self._state == AlignerState.AWAITING_REFERENCE:
            logger.debug("Frame %d stored as time alignment reference", frame.frame_id)
            self._reference_frame = frame
            self._state = AlignerState.ACCUMULATING
            return AlignmentResult.pending()

        if self._state == AlignerState.CONVERGED:
            self._reference_frame = frame
            return self._result

        ransac = tracker.geometric_outlier_rejection_mono(self._reference_frame, frame)
        self._reference_frame = frame

        if ransac.status != TrackingStatus.VALID:
            logger.warning(
                "Time alignment skipped at frame %d: RANSAC status %s",
                frame.frame_id,
                ransac.status.value,
            )
            return AlignmentResult.trivial()

        if len(batch) == 0:
            logger.warning(
                "Time alignment skipped at frame %d: no IMU data between frames",
                frame.frame_id,
            )
            return AlignmentResult.trivial()

        self._add_samples(vision_rotation_angle(ransac.relative_pose, self._axis), batch)

        if not self._window.is_full():
            logger.debug(
                "Time alignment waiting for data: %d/%d samples",
                len(self._window),
                self._window.capacity,
            )
            return AlignmentResult.pending()

        variance = self._gate.check(self._window.imu_angles())
        if not variance.passed:
            logger.debug(
                "Time alignment waiting for motion: IMU variance %.3g (threshold %.3g)",
                variance.variance,
                variance.threshold,
            )
            return AlignmentResult.pending()

        self._result = self._estimator.estimate(
            self._window.vision_angles(),
            self._window.imu_angles(),
            self._window.imu_ticks(),
        )
        self._state = AlignerState.CONVERGED
        logger.info(
            "Time alignment converged: IMU time shift %.6f s",
            self._result.imu_time_shift,
        )
        return self._result

    def _check_ordering(self, frame: Frame, batch: ImuBatch) -> None:
        """Reject a frame or batch that goes back in time."""
        reference = self._reference_frame
        if reference is not None and frame.timestamp_ns < reference.timestamp_ns:
            raise ValueError(
                f"Frame {frame.frame_id} at {frame.timestamp_ns} precedes "
                f"reference frame {reference.frame_id} at {reference.timestamp_ns}"
            )
        if (
            len(batch) > 0
            and self._last_imu_stamp is not None
            and batch.stamps[0] < self._last_imu_stamp
        ):
            raise ValueError(
                f"IMU batch starts at {batch.stamps[0]}, before the previous "
                f"batch ended at {self._last_imu_stamp}"
            )

    def _add_samples(self, vision_angle: float, batch: ImuBatch) -> None:
        """Push the samples of one VALID interval into the window."""
        period_s = self._config.nominal_sample_period_s
        if self._config.use_imu_rate_window:
            samples = imu_rate_samples(
                vision_angle,
                self._last_vision_angle,
                batch,
                period_s,
                include_boundary=self._window.is_empty(),
                axis=self._axis,
            )
            self._window.extend(samples)
        else:
            self._window.push(
                frame_rate_sample(vision_angle, batch, period_s, axis=self._axis)
            )
        self._last_vision_angle = vision_angle

    def reset(self) -> None:
        """Start a new session: forget the reference frame and the window."""
        self._window.clear()
        self._state = AlignerState.AWAITING_REFERENCE
        self._reference_frame = None
        self._last_imu_stamp = None
        self._last_vision_angle = 0.0
        self._result = AlignmentResult.pending()

    @property
    def _axis(self) -> int | None:
        return self._config.rotation_axis

    @property
    def state(self) -> AlignerState:
        """Current lifecycle state."""
        return self._state

    @property
    def is_converged(self) -> bool:
        """Return True once a valid shift has been estimated."""
        return self._state == AlignerState.CONVERGED

    @property
    def result(self) -> AlignmentResult:
        """Converged result, or a pending one before convergence."""
        return self._result

    @property
    def window(self) -> SlidingWindow:
        """Sliding window of correlation samples (do not mutate)."""
        return self._window

    @property
    def config(self) -> AlignmentConfig:
        """Configuration of this session."""
        return self._config
